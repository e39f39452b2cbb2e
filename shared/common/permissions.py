# shared/common/permissions.py
"""
Role-Based Permission Classes
"""

import uuid
from typing import List
from rest_framework import permissions
from rest_framework.request import Request
from rest_framework.views import APIView
import logging

from .authentication import PrincipalType

logger = logging.getLogger(__name__)


class BasePermission(permissions.BasePermission):
    """Base permission class with utility methods"""

    def get_user_roles(self, request: Request) -> List[str]:
        """Get roles from user object or JWT payload"""
        if hasattr(request.user, 'roles'):
            return request.user.roles
        if hasattr(request, 'auth') and isinstance(request.auth, dict):
            return [request.auth.get('type')]
        return []


class IsAuthenticated(BasePermission):
    """Verify that user is authenticated"""

    def has_permission(self, request: Request, view: APIView) -> bool:
        return bool(
            request.user and
            getattr(request.user, 'is_authenticated', False)
        )


class HasRole(IsAuthenticated):
    """Check if user has one of the required roles"""

    required_roles: List[str] = []

    def has_permission(self, request: Request, view: APIView) -> bool:
        if not super().has_permission(request, view):
            return False

        user_roles = self.get_user_roles(request)
        return bool(set(self.required_roles) & set(user_roles))


class IsStaff(HasRole):
    """Providers and administrators."""

    message = 'Staff access required.'
    required_roles = list(PrincipalType.STAFF)


class IsCustomer(HasRole):
    message = 'Customer access required.'
    required_roles = [PrincipalType.CUSTOMER]


class IsSelf(IsCustomer):
    """
    Customer may only access resources under their own id.

    The id is read from the ``user_id`` URL kwarg.
    """

    message = 'You can only access your own reservations.'
    url_kwarg = 'user_id'

    def has_permission(self, request: Request, view: APIView) -> bool:
        if not super().has_permission(request, view):
            return False

        target_id = view.kwargs.get(self.url_kwarg)
        allowed = _same_id(target_id, request.user.id)
        if not allowed:
            logger.warning(
                f"User {request.user.id} denied access to reservations of {target_id}"
            )
        return allowed


def _same_id(left, right) -> bool:
    """Compare two ids as UUIDs, so case and hyphenation do not matter."""
    try:
        return uuid.UUID(str(left)) == uuid.UUID(str(right))
    except (ValueError, TypeError):
        return False
