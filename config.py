#!/usr/bin/env python
# config.py
import os
from typing import List

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_csv_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    source = raw if raw is not None else default
    return [token.strip() for token in source.split(",") if token and token.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'bookify-dev-secret'

    # Spotify API
    SPOTIFY_CLIENT_ID = os.environ.get('SPOTIFY_CLIENT_ID')
    SPOTIFY_CLIENT_SECRET = os.environ.get('SPOTIFY_CLIENT_SECRET')
    SPOTIFY_REDIRECT_URI = os.getenv('SPOTIFY_REDIRECT_URI', 'http://localhost:5000/api/spotify-callback')
    SPOTIFY_SCOPES = _get_csv_list(
        'SPOTIFY_SCOPES',
        'user-read-private,user-read-email,playlist-modify-public,playlist-modify-private',
    )
    SPOTIFY_MARKET = os.getenv('SPOTIFY_MARKET', 'US')

    # Google Books API
    GOOGLE_BOOKS_API_KEY = os.getenv('GOOGLE_BOOKS_API_KEY')
    GOOGLE_BOOKS_MAX_RESULTS = _get_int('GOOGLE_BOOKS_MAX_RESULTS', 5)

    # Optional LLM curator (descriptions + song ideas)
    OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
    OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-3.5-turbo')

    # Playlist generation
    PLAYLIST_SIZE = _get_int('PLAYLIST_SIZE', 20)
    SEARCH_RESULTS_PER_QUERY = _get_int('SEARCH_RESULTS_PER_QUERY', 5)
    # Upper bound on concurrent Spotify searches per request
    MAX_SEARCH_WORKERS = _get_int('MAX_SEARCH_WORKERS', 6)
    HTTP_TIMEOUT_SECONDS = _get_float('HTTP_TIMEOUT_SECONDS', 10.0)

    # Book search caching (Google Books lookups)
    BOOK_CACHE_TTL_SECONDS = _get_int('BOOK_CACHE_TTL_SECONDS', 300)
    BOOK_CACHE_MAXSIZE = max(1, _get_int('BOOK_CACHE_MAXSIZE', 256))

    # Session cookies
    COOKIE_SECURE = _get_bool('COOKIE_SECURE', False)
    # Where the browser lands after the server-side OAuth callback
    POST_LOGIN_REDIRECT = os.getenv('POST_LOGIN_REDIRECT', '/')

    # HTTP surface
    CORS_ALLOWED_ORIGINS = _get_csv_list('CORS_ALLOWED_ORIGINS', 'http://localhost:3000')
    ENABLE_RATE_LIMITING = _get_bool('ENABLE_RATE_LIMITING', False)
    RATE_LIMIT_REQUESTS = _get_int('RATE_LIMIT_REQUESTS', 60)
    RATE_LIMIT_WINDOW_SECONDS = _get_int('RATE_LIMIT_WINDOW_SECONDS', 60)

    # Observability
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
    OTEL_EXPORTER_OTLP_HEADERS = os.getenv('OTEL_EXPORTER_OTLP_HEADERS')
    OTEL_EXPORTER_OTLP_INSECURE = _get_bool('OTEL_EXPORTER_OTLP_INSECURE', True)
    OTEL_SERVICE_NAME = os.getenv('OTEL_SERVICE_NAME', 'bookify')
    OTEL_TRACES_SAMPLE_RATIO = _get_float('OTEL_TRACES_SAMPLE_RATIO', 1.0)

    # Runtime behavior
    # Turn Flask debug on/off from env; default off to avoid noisy console
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
