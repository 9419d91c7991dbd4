#!/usr/bin/env python
"""Spotify session handling backed by cookies."""

from __future__ import annotations

from .session import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    STATE_COOKIE,
    USER_COOKIE,
    VERIFIER_COOKIE,
    SpotifySession,
    access_token_max_age,
    apply_tokens,
    clear_pkce_cookies,
    clear_session,
    set_pkce_cookies,
    set_user,
)

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
