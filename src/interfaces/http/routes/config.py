import logging
from flask import Blueprint, current_app, jsonify
from config import Config

logger = logging.getLogger(__name__)

config_bp = Blueprint('config_bp', __name__, url_prefix='/api')


@config_bp.route('/config/public-config', methods=['GET'])
def get_public_config():
    """Expose deployment feature flags for frontend gating."""
    settings = current_app.extensions['settings']
    rate_limiting_enabled = bool(
        current_app.config.get('ENABLE_RATE_LIMITING')
        and current_app.config.get('RATE_LIMIT_REQUESTS', 0) > 0
        and current_app.config.get('RATE_LIMIT_WINDOW_SECONDS', 0) > 0
    )
    payload = {
        'spotifyConfigured': settings.spotify_configured,
        'bookSearchConfigured': bool(settings.google_books_api_key),
        'aiCuratorEnabled': settings.llm_enabled,
        'playlistSize': settings.playlist_size,
        'spotifyScopes': list(settings.spotify_scopes),
        'features': {
            'rateLimiting': {
                'enabled': rate_limiting_enabled,
                'requests': current_app.config.get('RATE_LIMIT_REQUESTS', Config.RATE_LIMIT_REQUESTS),
                'windowSeconds': current_app.config.get(
                    'RATE_LIMIT_WINDOW_SECONDS', Config.RATE_LIMIT_WINDOW_SECONDS
                ),
            },
        },
    }
    return jsonify(payload), 200
