"""Cookie-backed Spotify session.

Tokens never live server-side: the access and refresh tokens travel in
httpOnly cookies, and a client-readable ``spotify_user`` cookie carries the
profile snapshot the frontend displays.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote, unquote

from flask import Request, Response

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "spotify_access_token"
REFRESH_TOKEN_COOKIE = "spotify_refresh_token"
USER_COOKIE = "spotify_user"
STATE_COOKIE = "spotify_auth_state"
VERIFIER_COOKIE = "spotify_code_verifier"

SESSION_COOKIES = (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, USER_COOKIE)

REFRESH_TOKEN_MAX_AGE = 30 * 24 * 60 * 60
PKCE_COOKIE_MAX_AGE = 10 * 60
DEFAULT_ACCESS_TOKEN_MAX_AGE = 3600


@dataclass
class SpotifySession:
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None

    @classmethod
    def from_request(cls, req: Request) -> "SpotifySession":
        user = None
        raw_user = req.cookies.get(USER_COOKIE)
        if raw_user:
            try:
                user = json.loads(unquote(raw_user))
            except ValueError:
                logger.debug("Ignoring malformed %s cookie", USER_COOKIE)
        return cls(
            access_token=req.cookies.get(ACCESS_TOKEN_COOKIE) or None,
            refresh_token=req.cookies.get(REFRESH_TOKEN_COOKIE) or None,
            user=user if isinstance(user, dict) else None,
        )

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    @property
    def can_refresh(self) -> bool:
        return bool(self.refresh_token)


def _expires_in(token_data: Dict[str, Any]) -> int:
    try:
        return max(1, int(token_data.get("expires_in") or DEFAULT_ACCESS_TOKEN_MAX_AGE))
    except (TypeError, ValueError):
        return DEFAULT_ACCESS_TOKEN_MAX_AGE


def apply_tokens(response: Response, token_data: Dict[str, Any], *, secure: bool = False) -> None:
    """Write the access token and, when present, the refresh token cookies."""
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        token_data["access_token"],
        max_age=_expires_in(token_data),
        httponly=True,
        secure=secure,
        samesite="Lax",
        path="/",
    )
    refresh_token = token_data.get("refresh_token")
    if refresh_token:
        response.set_cookie(
            REFRESH_TOKEN_COOKIE,
            refresh_token,
            max_age=REFRESH_TOKEN_MAX_AGE,
            httponly=True,
            secure=secure,
            samesite="Lax",
            path="/",
        )


def set_user(response: Response, profile: Dict[str, Any], max_age: int, *, secure: bool = False) -> None:
    """Store the profile snapshot as URI-encoded JSON the frontend can decode."""
    snapshot = {
        "id": profile.get("id"),
        "display_name": profile.get("display_name"),
        "email": profile.get("email"),
        "images": profile.get("images") or [],
    }
    response.set_cookie(
        USER_COOKIE,
        quote(json.dumps(snapshot, separators=(",", ":"))),
        max_age=max_age,
        httponly=False,
        secure=secure,
        samesite="Lax",
        path="/",
    )


def clear_session(response: Response) -> None:
    for name in SESSION_COOKIES:
        response.delete_cookie(name, path="/")


def set_pkce_cookies(response: Response, state: str, verifier: str, *, secure: bool = False) -> None:
    for name, value in ((STATE_COOKIE, state), (VERIFIER_COOKIE, verifier)):
        response.set_cookie(
            name,
            value,
            max_age=PKCE_COOKIE_MAX_AGE,
            httponly=True,
            secure=secure,
            samesite="Lax",
            path="/",
        )


def clear_pkce_cookies(response: Response) -> None:
    response.delete_cookie(STATE_COOKIE, path="/")
    response.delete_cookie(VERIFIER_COOKIE, path="/")


def access_token_max_age(token_data: Dict[str, Any]) -> int:
    return _expires_in(token_data)


__all__ = [
    "SpotifySession",
    "ACCESS_TOKEN_COOKIE",
    "REFRESH_TOKEN_COOKIE",
    "USER_COOKIE",
    "STATE_COOKIE",
    "VERIFIER_COOKIE",
    "apply_tokens",
    "set_user",
    "clear_session",
    "set_pkce_cookies",
    "clear_pkce_cookies",
    "access_token_max_age",
]
