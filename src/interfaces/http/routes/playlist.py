"""Playlist generation, creation and follow-up endpoints."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from flask import Blueprint, current_app, jsonify, make_response, request

from src.auth import SpotifySession, apply_tokens, clear_session
from src.core.errors import (
    AuthenticationRequired,
    BookifyError,
    SpotifyAuthExpired,
    UpstreamServiceError,
)
from src.domain.books import book_from_payload
from src.observability.metrics import record_token_refresh

logger = logging.getLogger(__name__)

playlist_bp = Blueprint('playlist_bp', __name__, url_prefix='/api')


def _with_refresh(
    session: SpotifySession,
    action: Callable[[str], Any],
) -> Tuple[Any, Optional[Dict[str, Any]]]:
    """Run ``action(access_token)``, refreshing and retrying once on a 401.

    Returns the result plus the new token payload when a refresh happened so
    the caller can write fresh cookies. Raises SpotifyAuthExpired when there
    is no refresh token, AuthenticationRequired when the refresh grant fails.
    An error from the retried action carries the new payload as
    ``refreshed_tokens``.
    """
    try:
        return action(session.access_token), None
    except SpotifyAuthExpired:
        if not session.can_refresh:
            raise
        logger.info("Access token rejected; attempting refresh")

    auth_client = current_app.extensions['spotify_auth']
    try:
        token_data = auth_client.refresh(session.refresh_token)
    except UpstreamServiceError as exc:
        record_token_refresh(False)
        raise AuthenticationRequired("Spotify session expired; please log in again") from exc
    record_token_refresh(True)
    try:
        return action(token_data['access_token']), token_data
    except BookifyError as exc:
        exc.refreshed_tokens = token_data
        raise


def _refreshed_tokens(exc: BookifyError) -> Optional[Dict[str, Any]]:
    return getattr(exc, 'refreshed_tokens', None)


def _respond(payload: Dict[str, Any], token_data: Optional[Dict[str, Any]], status: int = 200):
    response = make_response(jsonify(payload), status)
    if token_data:
        apply_tokens(response, token_data, secure=current_app.extensions['settings'].cookie_secure)
    return response


def _auth_failure(exc: AuthenticationRequired):
    response = make_response(jsonify(exc.to_dict()), exc.status_code)
    if not isinstance(exc, SpotifyAuthExpired) or _refreshed_tokens(exc):
        # refresh failed or the refreshed token was rejected too; the stored tokens are dead
        clear_session(response)
    return response


def _upstream_failure(exc: UpstreamServiceError):
    """Render a Spotify API failure, keeping any tokens refreshed on the way."""
    if exc.status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc.message)
    return _respond(exc.to_dict(), _refreshed_tokens(exc), exc.status_code)


@playlist_bp.route('/playlist', methods=['POST'])
def generate_playlist():
    """Create in Spotify when logged in, otherwise return a display-only suggestion."""
    book = book_from_payload(request.get_json(silent=True))
    generator = current_app.extensions['playlist_generator']
    session = SpotifySession.from_request(request)

    if not session.is_authenticated:
        return jsonify(generator.generate(book).to_response()), 200

    try:
        playlist, token_data = _with_refresh(
            session, lambda token: generator.generate(book, token, create=True)
        )
    except AuthenticationRequired:
        logger.info("Spotify session unusable; returning suggestion for %r", book.title)
        response = make_response(jsonify(generator.generate(book).to_response()), 200)
        clear_session(response)
        return response
    except UpstreamServiceError as exc:
        logger.warning(
            "Spotify failed while creating playlist for %r (%s); returning suggestion",
            book.title,
            exc.message,
        )
        return _respond(generator.generate(book).to_response(), _refreshed_tokens(exc))
    return _respond(playlist.to_response(), token_data)


@playlist_bp.route('/create-playlist', methods=['POST'])
def create_playlist():
    book = book_from_payload(request.get_json(silent=True))
    session = SpotifySession.from_request(request)
    if not session.is_authenticated and not session.can_refresh:
        return jsonify({'error': 'Not authenticated with Spotify'}), 401
    if not session.is_authenticated:
        return jsonify({'error': 'Spotify token expired', 'needsRefresh': True}), 401

    generator = current_app.extensions['playlist_generator']
    try:
        playlist, token_data = _with_refresh(
            session, lambda token: generator.generate(book, token, create=True)
        )
    except AuthenticationRequired as exc:
        return _auth_failure(exc)
    except UpstreamServiceError as exc:
        return _upstream_failure(exc)
    return _respond(playlist.to_response(), token_data)


@playlist_bp.route('/suggest-tracks', methods=['POST'])
def suggest_tracks():
    book = book_from_payload(request.get_json(silent=True))
    generator = current_app.extensions['playlist_generator']
    return jsonify(generator.suggest(book).to_response()), 200


@playlist_bp.route('/verify-playlist', methods=['GET'])
def verify_playlist():
    playlist_id = (request.args.get('id') or '').strip()
    if not playlist_id:
        return jsonify({'exists': False, 'error': 'No playlist ID provided'}), 400

    session = SpotifySession.from_request(request)
    if not session.is_authenticated:
        return jsonify({'exists': False, 'error': 'Not authenticated'}), 401

    factory = current_app.extensions['spotify_client_factory']
    try:
        exists, token_data = _with_refresh(
            session, lambda token: factory(token).playlist_exists(playlist_id)
        )
    except AuthenticationRequired as exc:
        return _auth_failure(exc)
    except UpstreamServiceError as exc:
        return _upstream_failure(exc)
    return _respond({'exists': bool(exists)}, token_data)


@playlist_bp.route('/save-playlist', methods=['POST'])
def save_playlist():
    data = request.get_json(silent=True) or {}
    playlist_id = data.get('playlistId')
    if not isinstance(playlist_id, str) or not playlist_id.strip():
        return jsonify({'error': 'Playlist ID is required'}), 400

    session = SpotifySession.from_request(request)
    if not session.is_authenticated:
        return jsonify({'error': 'Not authenticated with Spotify'}), 401

    factory = current_app.extensions['spotify_client_factory']
    try:
        _, token_data = _with_refresh(
            session, lambda token: factory(token).follow_playlist(playlist_id.strip())
        )
    except AuthenticationRequired as exc:
        return _auth_failure(exc)
    except UpstreamServiceError as exc:
        return _upstream_failure(exc)
    logger.info("Saved playlist %s to the user's library", playlist_id)
    return _respond({'success': True}, token_data)
