"""Error types raised by domain services and rendered at the HTTP boundary."""

from __future__ import annotations

from typing import Any, Dict, Optional


class BookifyError(Exception):
    """Base error carrying an HTTP status and optional extra JSON fields."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        if status_code is not None:
            self.status_code = status_code
        self.extra: Dict[str, Any] = dict(extra or {})

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        payload.update(self.extra)
        return payload


class MissingInputError(BookifyError):
    status_code = 400
    default_message = "Missing required input"


class AuthenticationRequired(BookifyError):
    status_code = 401
    default_message = "Not authenticated with Spotify"


class SpotifyAuthExpired(AuthenticationRequired):
    """The access token was rejected; a refresh-token grant may recover."""

    default_message = "Spotify token expired"

    def __init__(self, message: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.extra.setdefault("needsRefresh", True)


class ConfigurationError(BookifyError):
    status_code = 500
    default_message = "API key configuration error"


class UpstreamServiceError(BookifyError):
    """A remote API (Google Books, Spotify, OpenAI) failed or was unreachable."""

    status_code = 500
    default_message = "Upstream service error"

    def __init__(self, message: Optional[str] = None, *, service: str = "unknown", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.service = service


__all__ = [
    "BookifyError",
    "MissingInputError",
    "AuthenticationRequired",
    "SpotifyAuthExpired",
    "ConfigurationError",
    "UpstreamServiceError",
]
