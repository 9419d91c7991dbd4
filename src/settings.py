#!/usr/bin/env python
"""
Centralized configuration schema and runtime settings loader.

Merges defaults from config.Config with optional overrides and exposes a
typed, validated view the app factory uses to wire its services.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import Config


def _parse_scopes(value: Optional[object]) -> List[str]:
    """Normalize OAuth scope configuration into a unique ordered list."""
    if value is None:
        tokens: List[str] = []
    elif isinstance(value, str):
        tokens = [token.strip() for token in value.replace(",", " ").split()]
    elif isinstance(value, (list, tuple, set)):
        tokens = [str(token).strip() for token in value]
    else:
        tokens = [str(value).strip()]

    normalized: List[str] = []
    for token in tokens:
        if not token:
            continue
        key = token.lower()
        if key not in normalized:
            normalized.append(key)
    if not normalized:
        return ["playlist-modify-public"]
    return normalized


def _clamp_int(value: object, low: int, high: int, fallback: int) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback
    return max(low, min(number, high))


class AppSettings(BaseModel):
    """Application-wide settings for the outbound clients and playlist generation."""

    model_config = ConfigDict(extra="ignore")

    # Spotify credentials
    spotify_client_id: Optional[str] = None
    spotify_client_secret: Optional[str] = None
    spotify_redirect_uri: str = "http://localhost:5000/api/spotify-callback"
    spotify_scopes: List[str] = Field(default_factory=lambda: ["playlist-modify-public"])
    spotify_market: str = "US"

    # Google Books
    google_books_api_key: Optional[str] = None
    google_books_max_results: int = 5

    # LLM curator
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-3.5-turbo"

    # Playlist generation
    playlist_size: int = 20
    search_limit: int = 5
    max_search_workers: int = 6
    http_timeout: float = 10.0

    # Book search cache
    book_cache_ttl: int = 300
    book_cache_maxsize: int = 256

    # Cookies
    cookie_secure: bool = False

    @property
    def spotify_configured(self) -> bool:
        return bool(self.spotify_client_id and self.spotify_client_secret)

    @property
    def llm_enabled(self) -> bool:
        return bool(self.openai_api_key)

    @field_validator("spotify_scopes", mode="before")
    @classmethod
    def _normalize_scopes(cls, value: Optional[object]) -> List[str]:
        return _parse_scopes(value)

    @field_validator("playlist_size", mode="before")
    @classmethod
    def _coerce_playlist_size(cls, value: object) -> int:
        return _clamp_int(value, 1, 100, 20)

    @field_validator("search_limit", mode="before")
    @classmethod
    def _coerce_search_limit(cls, value: object) -> int:
        # Spotify search caps at 50 results per page
        return _clamp_int(value, 1, 50, 5)

    @field_validator("max_search_workers", mode="before")
    @classmethod
    def _coerce_workers(cls, value: object) -> int:
        return _clamp_int(value, 1, 16, 6)

    @field_validator("google_books_max_results", mode="before")
    @classmethod
    def _coerce_max_results(cls, value: object) -> int:
        # Google Books caps maxResults at 40
        return _clamp_int(value, 1, 40, 5)

    @field_validator("http_timeout", mode="before")
    @classmethod
    def _coerce_timeout(cls, value: object) -> float:
        try:
            timeout = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 10.0
        return timeout if timeout > 0 else 10.0

    @field_validator("cookie_secure", mode="before")
    @classmethod
    def _coerce_cookie_secure(cls, value: object) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}
        return bool(value)


def load_app_settings(overrides: Optional[Dict[str, Any]] = None) -> AppSettings:
    """Load settings merging config defaults with optional runtime overrides."""
    data: Dict[str, Any] = {
        "spotify_client_id": Config.SPOTIFY_CLIENT_ID,
        "spotify_client_secret": Config.SPOTIFY_CLIENT_SECRET,
        "spotify_redirect_uri": Config.SPOTIFY_REDIRECT_URI,
        "spotify_scopes": Config.SPOTIFY_SCOPES,
        "spotify_market": Config.SPOTIFY_MARKET,
        "google_books_api_key": Config.GOOGLE_BOOKS_API_KEY,
        "google_books_max_results": Config.GOOGLE_BOOKS_MAX_RESULTS,
        "openai_api_key": Config.OPENAI_API_KEY,
        "openai_model": Config.OPENAI_MODEL,
        "playlist_size": Config.PLAYLIST_SIZE,
        "search_limit": Config.SEARCH_RESULTS_PER_QUERY,
        "max_search_workers": Config.MAX_SEARCH_WORKERS,
        "http_timeout": Config.HTTP_TIMEOUT_SECONDS,
        "book_cache_ttl": Config.BOOK_CACHE_TTL_SECONDS,
        "book_cache_maxsize": Config.BOOK_CACHE_MAXSIZE,
        "cookie_secure": Config.COOKIE_SECURE,
    }
    if overrides:
        data.update(overrides)
    return AppSettings.model_validate(data)


__all__ = [
    "AppSettings",
    "load_app_settings",
]
