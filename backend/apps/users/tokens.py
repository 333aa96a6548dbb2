"""
Scoped access tokens.

Tokens are issued by rest_framework_simplejwt; we only add a "scopes" claim
and shape the response like an OAuth password grant:

    {
        "token_type": "Bearer",
        "expires_in": 3600,
        "access_token": "...",
        "refresh_token": "..."
    }

The claim is copied from the refresh token to every access token minted
from it, so scopes survive a refresh.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import RefreshToken

SCOPES_CLAIM = "scopes"
ALL_SCOPES = "*"

TOKEN_SCOPES: Dict[str, str] = {
    "view-teams": "View teams you belong to",
    "manage-teams": "Create, update and delete teams",
    "manage-subscriptions": "Subscribe, swap, cancel and resume team subscriptions",
    "view-invoices": "View team invoices",
}


def parse_scopes(raw) -> List[str]:
    """
    Normalize a requested scope value.

    Accepts a space separated string (OAuth style) or a list.
    Empty input means every scope.
    """
    if not raw:
        return [ALL_SCOPES]
    if isinstance(raw, str):
        raw = raw.split()
    scopes = [s.strip() for s in raw if s and s.strip()]
    return scopes or [ALL_SCOPES]


def unknown_scopes(scopes: Iterable[str]) -> List[str]:
    return [s for s in scopes if s != ALL_SCOPES and s not in TOKEN_SCOPES]


def issue_tokens(user, scopes: Iterable[str] = (ALL_SCOPES,)) -> Dict[str, object]:
    """Create a refresh/access pair carrying the given scopes."""
    refresh = RefreshToken.for_user(user)
    refresh[SCOPES_CLAIM] = list(scopes)
    return token_response(refresh)


def token_response(refresh: RefreshToken) -> Dict[str, object]:
    access = refresh.access_token
    return {
        "token_type": "Bearer",
        "expires_in": int(api_settings.ACCESS_TOKEN_LIFETIME.total_seconds()),
        "access_token": str(access),
        "refresh_token": str(refresh),
    }


def token_scopes(token) -> List[str]:
    """Scopes carried by a validated token (request.auth); [] for none."""
    if token is None:
        return []
    try:
        scopes = token.get(SCOPES_CLAIM, [])
    except AttributeError:
        return []
    return list(scopes or [])


def token_can(request, scope: str) -> bool:
    """Does the request's access token grant `scope`?"""
    scopes = token_scopes(getattr(request, "auth", None))
    return ALL_SCOPES in scopes or scope in scopes
