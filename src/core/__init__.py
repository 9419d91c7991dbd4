"""Core primitives shared across backend layers."""

from .errors import (
    AuthenticationRequired,
    BookifyError,
    ConfigurationError,
    MissingInputError,
    SpotifyAuthExpired,
    UpstreamServiceError,
)

__all__ = [
    "AuthenticationRequired",
    "BookifyError",
    "ConfigurationError",
    "MissingInputError",
    "SpotifyAuthExpired",
    "UpstreamServiceError",
]
