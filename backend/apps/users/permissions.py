"""
DRF permission classes shared by every data-bearing endpoint.

- NotSuspended: the suspension gate (403 + suspension fields)
- HasTokenScope: access token must carry a scope (403 when missing)
- require_scope(): same check for function views that answer 401
"""

from __future__ import annotations

import logging

from rest_framework import exceptions, status
from rest_framework.permissions import BasePermission

from apps.common.audit import SecurityAuditLogger
from apps.core.exceptions import UserSuspendedError

from .tokens import token_can

logger = logging.getLogger(__name__)


class MissingScope(exceptions.APIException):
    """Token lacks a scope. Answered with 401 like an invalid token."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "The access token does not grant this action."
    default_code = "missing_scope"


class NotSuspended(BasePermission):
    """
    Suspension gate.

    Lets anonymous requests through (IsAuthenticated decides those).
    A user whose suspended_to lies in the future gets 403 with the
    suspension fields in the body.
    """

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return True

        profile = getattr(user, "profile", None)
        if profile is not None and profile.is_suspended():
            SecurityAuditLogger.log_suspended_access(user, request)
            raise UserSuspendedError(profile)
        return True


class HasTokenScope(BasePermission):
    """
    Checks `view.required_scopes`, a dict of HTTP method -> scope.

    Methods missing from the dict need no scope.
    """
    message = "The access token does not grant this action."

    def has_permission(self, request, view):
        required = getattr(view, "required_scopes", {}).get(request.method)
        if not required:
            return True
        return token_can(request, required)


def require_scope(request, scope: str) -> None:
    """Raise 401 unless the access token grants `scope`."""
    if not token_can(request, scope):
        logger.info(
            "Missing token scope: user_id=%s scope=%s path=%s",
            getattr(request.user, "id", None), scope, request.path,
        )
        raise MissingScope()
