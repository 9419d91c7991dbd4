import os
import logging
import threading
import time
from collections import defaultdict, deque
from datetime import datetime
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Flask specific imports ---
from flask import Flask, request, jsonify, g
from flask_cors import CORS
from werkzeug.exceptions import InternalServerError

from config import Config
from src.core.errors import BookifyError
from src.domain.playlists import PlaylistGenerator
from src.infrastructure import (
    BookCurator,
    GoogleBooksClient,
    SpotifyAuthClient,
    default_client_factory,
)
from src.interfaces.http.routes import (
    auth_bp,
    books_bp,
    config_bp,
    health_bp,
    playlist_bp,
)
from src.observability import configure_structured_logging, metrics_blueprint, init_tracing
from src.settings import load_app_settings
from src.utils.cache import TTLCache


logger = logging.getLogger(__name__)


def configure_logging(log_dir: str) -> str:
    """
    Configure root logging with:
      - FileHandler (INFO+) to a new file per run: log-YYYY-MM-DD-HH-MM-SS
      - StreamHandler (WARNING+) to console when ENABLE_CONSOLE_LOGS is set
      - Werkzeug/Flask loggers routed to root

    Returns the path to the created log file.
    """
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_filename = f"log-{timestamp}"
    log_path = os.path.join(log_dir, log_filename)

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # Preserve structured handlers; remove existing FileHandlers to avoid duplicates
    root.handlers = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    # Read at call time so a reloaded config module is honoured
    from config import Config as _Cfg
    if _Cfg.ENABLE_CONSOLE_LOGS:
        if not any(h.get_name() == 'bookify-console' for h in root.handlers):
            console_handler = logging.StreamHandler()
            console_handler.set_name('bookify-console')
            # If console logging is enabled, keep it concise: warnings and above
            console_handler.setLevel(logging.WARNING)
            console_handler.setFormatter(formatter)
            root.addHandler(console_handler)

    # Quiet Flask/Werkzeug own console handlers; let them propagate to root
    for name in ("werkzeug", "flask.app"):
        _l = logging.getLogger(name)
        _l.setLevel(logging.INFO)
        _l.handlers = []
        _l.propagate = True

    return log_path


def _register_rate_limit(app: Flask) -> None:
    rate_limit_state = {
        'lock': threading.RLock(),
        'buckets': defaultdict(deque),
    }
    app.extensions['rate_limiter'] = rate_limit_state

    @app.before_request
    def _apply_rate_limit():
        # Skip rate limiting for CORS preflight and operational probes
        if request.method == "OPTIONS" or not request.path.startswith('/api/'):
            return None
        limit = app.config['RATE_LIMIT_REQUESTS']
        window = app.config['RATE_LIMIT_WINDOW_SECONDS']
        identifier = (
            request.headers.get('X-Forwarded-For', '')
            or request.remote_addr
            or 'unknown'
        ).split(',')[0].strip()
        now = time.time()
        with rate_limit_state['lock']:
            buckets = rate_limit_state['buckets']
            threshold = now - window
            for key in [k for k, b in buckets.items() if not b or b[-1] <= threshold]:
                # every timestamp is outside the window
                del buckets[key]
            bucket = buckets[identifier]
            while bucket and bucket[0] <= threshold:
                bucket.popleft()
            if len(bucket) >= limit:
                logger.warning(
                    "Rate limit exceeded",
                    extra={"policy": "rate_limit", "ip": identifier},
                )
                return jsonify(
                    {
                        "error": "Too many requests. Please slow down.",
                        "policy": "rate_limit",
                    }
                ), 429
            bucket.append(now)


def _build_services(app: Flask, settings) -> None:
    """Wire outbound clients and the playlist generator into app.extensions."""
    book_cache = TTLCache(maxsize=settings.book_cache_maxsize, ttl=settings.book_cache_ttl)
    app.extensions['google_books'] = GoogleBooksClient(
        settings.google_books_api_key,
        timeout=settings.http_timeout,
        cache=book_cache,
    )
    app.extensions['spotify_auth'] = SpotifyAuthClient(
        settings.spotify_client_id,
        settings.spotify_client_secret,
        settings.spotify_redirect_uri,
        settings.spotify_scopes,
        timeout=settings.http_timeout,
    )
    client_factory = default_client_factory(market=settings.spotify_market, timeout=settings.http_timeout)
    app.extensions['spotify_client_factory'] = client_factory

    curator = BookCurator(settings.openai_api_key, model=settings.openai_model)
    app.extensions['curator'] = curator
    if curator.enabled:
        logger.info("OpenAI curator enabled with model %s", settings.openai_model)

    app.extensions['playlist_generator'] = PlaylistGenerator(
        settings,
        # resolved per call so tests can swap the factory on app.extensions
        lambda token: app.extensions['spotify_client_factory'](token),
        curator=curator,
    )


def create_app(settings_overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    settings = load_app_settings(settings_overrides)
    app.extensions['settings'] = settings

    configure_structured_logging(app)
    init_tracing(app)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    allowed_origins = sorted({
        origin.strip()
        for origin in app.config['CORS_ALLOWED_ORIGINS']
        if origin and origin.strip() and origin.strip() != "*"
    })
    CORS(
        app,
        resources={r"/api/*": {"origins": allowed_origins}},
        supports_credentials=True,
    )

    if (
        app.config['ENABLE_RATE_LIMITING']
        and app.config['RATE_LIMIT_REQUESTS'] > 0
        and app.config['RATE_LIMIT_WINDOW_SECONDS'] > 0
    ):
        _register_rate_limit(app)

    @app.errorhandler(BookifyError)
    def _handle_bookify_error(exc: BookifyError):
        if exc.status_code >= 500:
            logger.error("%s: %s", type(exc).__name__, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(InternalServerError)
    def _handle_unexpected(exc: InternalServerError):
        original = getattr(exc, 'original_exception', None)
        if original is not None:
            logger.error("Unhandled error on %s: %s", request.path, original, exc_info=original)
        return jsonify({"error": "Internal server error"}), 500

    _build_services(app, settings)

    if not settings.spotify_configured:
        logger.warning("Spotify client ID or secret not set; login and playlist creation are disabled.")
    if not settings.google_books_api_key:
        logger.warning("GOOGLE_BOOKS_API_KEY not set; book search will fail.")

    # --- Register Blueprints ---
    app.register_blueprint(books_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(playlist_bp)
    app.register_blueprint(config_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(metrics_blueprint)

    return app


if __name__ == '__main__':
    # Configure logging:
    # - In debug with reloader: only in the child process to avoid duplicate files
    # - In non-debug: always configure here
    debug_mode = bool(Config.DEBUG)
    log_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src', 'log')
    if not debug_mode or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
        log_file_path = configure_logging(log_dir)
        logger.info("File logging initialized at %s", log_file_path)

    app = create_app()
    # Route app.logger through root handlers, keep levels consistent
    app.logger.handlers = []
    app.logger.setLevel(logging.INFO)
    app.logger.propagate = True
    logger.info("Starting Flask application...")
    app.run(debug=Config.DEBUG, host='0.0.0.0', port=5000, threaded=True)
