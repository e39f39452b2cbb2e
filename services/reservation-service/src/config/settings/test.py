"""
Test Settings

Django settings for running tests.
"""

from .base import *

# Test mode
DEBUG = False
TESTING = True

# File-backed SQLite so concurrent test threads share one database.
# IMMEDIATE transactions take the write lock at BEGIN, serializing writers.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'test_reservations.sqlite3',
        'OPTIONS': {
            'transaction_mode': 'IMMEDIATE',
            'timeout': 20,
        },
        'TEST': {
            'NAME': BASE_DIR / 'test_reservations.sqlite3',
        },
    }
}

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]


# Disable migrations for faster tests
class DisableMigrations:
    def __contains__(self, item):
        return True

    def __getitem__(self, item):
        return None


MIGRATION_MODULES = DisableMigrations()

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    },
}

# Email backend for testing
EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
DEFAULT_FROM_EMAIL = 'reservations@test.local'
RESERVATION_ADMIN_EMAILS = ['frontdesk@test.local']

# Run celery tasks inline
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = False
CELERY_BROKER_URL = 'memory://'

TIME_ZONE = 'UTC'

RESERVATION_POLICY = {
    'BUSINESS_HOURS_START': 9,
    'BUSINESS_HOURS_END': 21,
    'SLOT_INTERVAL_MINUTES': 30,
    'MIN_GAP_MINUTES': 60,
}

# JWT settings for testing
JWT_SECRET_KEY = 'test-secret-key-for-testing-only'
JWT_ALGORITHM = 'HS256'
JWT_ACCESS_TOKEN_LIFETIME = 300

# Logging - minimal output during tests
LOGGING = {
    'version': 1,
    'disable_existing_loggers': True,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'CRITICAL',
    },
    'loggers': {
        'django': {
            'handlers': ['null'],
            'level': 'CRITICAL',
            'propagate': False,
        },
        'apps': {
            'handlers': ['null'],
            'level': 'CRITICAL',
            'propagate': False,
        },
    },
}

# CORS - allow all for testing
CORS_ALLOW_ALL_ORIGINS = True
