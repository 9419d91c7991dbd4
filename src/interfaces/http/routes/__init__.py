"""Route blueprints exposed via Flask."""

from .books import books_bp
from .auth import auth_bp
from .playlist import playlist_bp
from .config import config_bp
from .health import health_bp

__all__ = [
    "books_bp",
    "auth_bp",
    "playlist_bp",
    "config_bp",
    "health_bp",
]
