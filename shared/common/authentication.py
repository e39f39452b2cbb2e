# shared/common/authentication.py
"""
JWT Authentication
"""

import jwt
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Tuple
from django.conf import settings
from rest_framework import authentication, exceptions
from rest_framework.request import Request

logger = logging.getLogger(__name__)


class PrincipalType:
    CUSTOMER = 'customer'
    PROVIDER = 'provider'
    ADMIN = 'admin'

    STAFF = (PROVIDER, ADMIN)
    ALL = (CUSTOMER, PROVIDER, ADMIN)


def _jwt_algorithm() -> str:
    return getattr(settings, 'JWT_ALGORITHM', 'HS256')


class JWTAuthentication(authentication.BaseAuthentication):
    """
    JWT Token Authentication for API requests.
    Uses a shared HS256 secret (``JWT_SECRET_KEY``).
    """

    keyword = 'Bearer'

    def authenticate(self, request: Request) -> Optional[Tuple[Any, Dict]]:
        auth_header = authentication.get_authorization_header(request)

        if not auth_header:
            return None

        try:
            auth_parts = auth_header.decode('utf-8').split()
        except UnicodeDecodeError:
            raise exceptions.AuthenticationFailed('Invalid token header encoding')

        if len(auth_parts) != 2:
            raise exceptions.AuthenticationFailed('Invalid token header format')

        if auth_parts[0].lower() != self.keyword.lower():
            return None

        token = auth_parts[1]
        return self.authenticate_token(token)

    def authenticate_token(self, token: str) -> Tuple[Any, Dict]:
        """Validate and decode JWT token"""
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[_jwt_algorithm()],
                options={'require': ['exp', 'sub']}
            )
        except jwt.ExpiredSignatureError:
            raise exceptions.AuthenticationFailed('Token has expired')
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid token: {e}")
            raise exceptions.AuthenticationFailed('Invalid token')

        if payload.get('type') not in PrincipalType.ALL:
            raise exceptions.AuthenticationFailed('Invalid token type')

        return (TokenUser(payload), payload)

    def authenticate_header(self, request: Request) -> str:
        return self.keyword


class TokenUser:
    """
    User object created from JWT token payload.
    The reservation service trusts this principal and does not look it up.
    """

    def __init__(self, payload: Dict):
        self.payload = payload
        self.id = payload.get('sub')
        self.type = payload.get('type')
        self.email = payload.get('email')
        self.is_active = True
        self.is_authenticated = True
        self.is_anonymous = False

    def __str__(self) -> str:
        return f"TokenUser({self.type}:{self.id})"

    @property
    def roles(self) -> list:
        return [self.type] if self.type else []

    @property
    def is_customer(self) -> bool:
        return self.type == PrincipalType.CUSTOMER

    @property
    def is_staff(self) -> bool:
        return self.type in PrincipalType.STAFF

    def has_role(self, role: str) -> bool:
        """Check if user has a specific role"""
        return role in self.roles


class JWTTokenGenerator:
    """
    Generate JWT tokens compatible with ``JWTAuthentication``.
    """

    @staticmethod
    def generate_access_token(
        user_id: str,
        user_type: str,
        email: str = None,
        lifetime: timedelta = None,
    ) -> str:
        now = datetime.now(timezone.utc)
        lifetime = lifetime or timedelta(
            seconds=getattr(settings, 'JWT_ACCESS_TOKEN_LIFETIME', 3600)
        )

        payload = {
            'sub': str(user_id),
            'type': user_type,
            'email': email,
            'iat': now,
            'exp': now + lifetime,
        }

        return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=_jwt_algorithm())
