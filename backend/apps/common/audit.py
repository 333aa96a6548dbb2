"""
Security audit logging for TeamPay.

Provides centralized logging of security-related events for monitoring,
incident response, and compliance.
"""

import ipaddress
import logging

from django.conf import settings

logger = logging.getLogger('security')


def _is_ip_in_trusted_proxies(ip_str: str) -> bool:
    """
    Check if IP address is in trusted proxy list.

    Supports both individual IPs and CIDR ranges (e.g., 172.24.0.0/16).
    """
    try:
        client_ip = ipaddress.ip_address(ip_str)
    except ValueError:
        return False

    trusted_proxies = getattr(settings, "TRUSTED_PROXIES", [])

    for proxy_entry in trusted_proxies:
        proxy_entry = proxy_entry.strip()
        if not proxy_entry:
            continue

        try:
            if "/" in proxy_entry:
                if client_ip in ipaddress.ip_network(proxy_entry, strict=False):
                    return True
            elif client_ip == ipaddress.ip_address(proxy_entry):
                return True
        except ValueError:
            logger.warning("Invalid TRUSTED_PROXIES entry: %s", proxy_entry)
            continue

    return False


def get_client_ip(request) -> str:
    """
    Get real client IP address from request with XFF protection.

    Security model:
    - By default: NEVER trust X-Forwarded-For (prevents IP spoofing)
    - If TRUSTED_PROXIES_ENABLED=true: trust XFF ONLY from verified proxies
    - Always falls back to REMOTE_ADDR if XFF is not trusted

    Configuration (settings.py):
        TRUSTED_PROXIES_ENABLED = True/False
        TRUSTED_PROXIES = ["172.24.0.0/16", "10.0.0.1"]
    """
    if request is None:
        return 'unknown'

    remote_addr = request.META.get('REMOTE_ADDR', 'unknown')

    if not getattr(settings, "TRUSTED_PROXIES_ENABLED", False):
        return remote_addr

    # Request did NOT come from trusted proxy -> don't trust XFF
    if not _is_ip_in_trusted_proxies(remote_addr):
        return remote_addr

    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if not x_forwarded_for:
        return remote_addr

    # Format: "client_ip, proxy1_ip, proxy2_ip"
    xff_ips = [ip.strip() for ip in x_forwarded_for.split(',') if ip.strip()]
    if not xff_ips:
        return remote_addr

    return xff_ips[0]


def get_user_agent(request) -> str:
    """Get user agent string from request."""
    if request is None:
        return 'unknown'
    return request.META.get('HTTP_USER_AGENT', 'unknown')


def _describe_user(user) -> str:
    if user is None or not getattr(user, "is_authenticated", False):
        return "anonymous"
    return f"{user.email} (id={user.id})"


class SecurityAuditLogger:
    """
    Centralized security event logging.

    Logs all security-relevant events with consistent format including:
    - Event type
    - User identification
    - IP address
    - User agent
    - Additional context
    """

    @staticmethod
    def log_login_success(user, request, method: str = 'password'):
        logger.info(
            "LOGIN_SUCCESS: user=%s ip=%s method=%s user_agent=%s",
            _describe_user(user), get_client_ip(request), method, get_user_agent(request),
        )

    @staticmethod
    def log_login_failure(email: str, request, reason: str = 'invalid_credentials'):
        logger.warning(
            "LOGIN_FAILURE: email=%s ip=%s reason=%s user_agent=%s",
            email, get_client_ip(request), reason, get_user_agent(request),
        )

    @staticmethod
    def log_logout(user, request, revoked: int = 0):
        logger.info(
            "LOGOUT: user=%s ip=%s revoked_tokens=%s",
            _describe_user(user), get_client_ip(request), revoked,
        )

    @staticmethod
    def log_registration(user, request=None):
        logger.info(
            "REGISTRATION: user=%s ip=%s user_agent=%s",
            _describe_user(user), get_client_ip(request), get_user_agent(request),
        )

    @staticmethod
    def log_password_change(user, request, success: bool = True):
        status = "SUCCESS" if success else "FAILURE"
        log_func = logger.info if success else logger.warning
        log_func(
            "PASSWORD_CHANGE_%s: user=%s ip=%s",
            status, _describe_user(user), get_client_ip(request),
        )

    @staticmethod
    def log_suspended_access(user, request):
        """A suspended account hit a data-bearing endpoint."""
        profile = user.profile
        logger.warning(
            "SUSPENDED_ACCESS: user=%s ip=%s path=%s suspended_to=%s reason=%s",
            _describe_user(user), get_client_ip(request), request.path,
            profile.suspended_to, profile.suspended_reason,
        )

    @staticmethod
    def log_permission_denied(user, request, resource: str, action: str):
        logger.warning(
            "PERMISSION_DENIED: user=%s ip=%s resource=%s action=%s",
            _describe_user(user), get_client_ip(request), resource, action,
        )

    @staticmethod
    def log_team_change(team, action: str, user=None):
        logger.info(
            "TEAM_%s: team=%s (id=%s) by=%s",
            action.upper(), team.slug, team.id, _describe_user(user),
        )

    @staticmethod
    def log_subscription_change(team, action: str, plan: str = None, subscription_id=None):
        """
        Log subscription lifecycle change.

        Args:
            team: Team owning the subscription
            action: created / swapped / cancelled / resumed
            plan: Plan code after the change (if known)
            subscription_id: Local subscription id (if known)
        """
        logger.info(
            "SUBSCRIPTION_%s: team=%s (id=%s) plan=%s subscription_id=%s",
            action.upper(), team.slug, team.id, plan, subscription_id,
        )
