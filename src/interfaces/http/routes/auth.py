#!/usr/bin/env python
"""Spotify OAuth (authorization code + PKCE) endpoints backed by cookies."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from flask import Blueprint, current_app, jsonify, make_response, redirect, request

from src.auth import (
    STATE_COOKIE,
    VERIFIER_COOKIE,
    SpotifySession,
    access_token_max_age,
    apply_tokens,
    clear_pkce_cookies,
    clear_session,
    set_pkce_cookies,
    set_user,
)
from src.core.errors import (
    AuthenticationRequired,
    BookifyError,
    ConfigurationError,
    SpotifyAuthExpired,
    UpstreamServiceError,
)
from src.infrastructure.spotify_auth import make_code_challenge, make_code_verifier, make_state
from src.observability.metrics import record_token_refresh

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api")


def _cookie_secure() -> bool:
    return bool(current_app.extensions["settings"].cookie_secure)


def _start_authorization():
    """Return (authorize_url, state, verifier) for a fresh PKCE attempt."""
    auth_client = current_app.extensions["spotify_auth"]
    state = make_state()
    verifier = make_code_verifier()
    url = auth_client.build_authorize_url(state, make_code_challenge(verifier))
    return url, state, verifier


def _complete_login(code: str, verifier: str, redirect_uri: Optional[str], response) -> Dict[str, Any]:
    """Exchange the code, fetch the profile and write session cookies onto ``response``."""
    auth_client = current_app.extensions["spotify_auth"]
    token_data = auth_client.exchange_code(code, verifier, redirect_uri)

    client = current_app.extensions["spotify_client_factory"](token_data["access_token"])
    try:
        profile = client.current_user()
    except SpotifyAuthExpired as exc:
        raise UpstreamServiceError("Failed to fetch user profile", service="spotify", status_code=401) from exc
    except UpstreamServiceError as exc:
        raise UpstreamServiceError(
            "Failed to fetch user profile", service="spotify", status_code=exc.status_code
        ) from exc

    secure = _cookie_secure()
    apply_tokens(response, token_data, secure=secure)
    set_user(response, profile, access_token_max_age(token_data), secure=secure)
    clear_pkce_cookies(response)
    logger.info("Spotify login completed for user %s", profile.get("id"))
    return profile


@auth_bp.route("/spotify-auth-url", methods=["GET"])
def spotify_auth_url():
    try:
        url, state, verifier = _start_authorization()
    except ConfigurationError as exc:
        logger.error("Cannot build Spotify authorization URL: %s", exc.message)
        return jsonify({"error": "Failed to generate Spotify authorization URL"}), 500

    response = make_response(jsonify({"authUrl": url}))
    set_pkce_cookies(response, state, verifier, secure=_cookie_secure())
    return response


@auth_bp.route("/spotify-login", methods=["GET"])
def spotify_login():
    try:
        url, state, verifier = _start_authorization()
    except ConfigurationError as exc:
        logger.error("Cannot build Spotify authorization URL: %s", exc.message)
        return jsonify({"error": "Failed to generate Spotify authorization URL"}), 500

    response = redirect(url, code=302)
    set_pkce_cookies(response, state, verifier, secure=_cookie_secure())
    return response


@auth_bp.route("/spotify-callback", methods=["GET"])
def spotify_callback_redirect():
    target = current_app.config.get("POST_LOGIN_REDIRECT") or "/"

    def _fail(reason: str):
        separator = "&" if "?" in target else "?"
        response = redirect(f"{target}{separator}{urlencode({'error': reason})}", code=302)
        clear_pkce_cookies(response)
        return response

    error = request.args.get("error")
    if error:
        logger.warning("Spotify authorization denied: %s", error)
        return _fail(error)

    code = request.args.get("code")
    state = request.args.get("state")
    saved_state = request.cookies.get(STATE_COOKIE)
    verifier = request.cookies.get(VERIFIER_COOKIE)
    if not code or not state or state != saved_state or not verifier:
        logger.warning("Rejected Spotify callback: missing code or state mismatch")
        return _fail("state_mismatch")

    response = redirect(target, code=302)
    try:
        _complete_login(code, verifier, None, response)
    except BookifyError as exc:
        logger.error("Spotify login failed: %s", exc.message)
        return _fail("login_failed")
    return response


@auth_bp.route("/spotify-callback", methods=["POST"])
def spotify_callback():
    data = request.get_json(silent=True) or {}
    code = data.get("code")
    verifier = data.get("codeVerifier") or request.cookies.get(VERIFIER_COOKIE)
    if not code or not verifier:
        return jsonify({"error": "Missing required parameters"}), 400

    state = data.get("state")
    saved_state = request.cookies.get(STATE_COOKIE)
    if state and saved_state and state != saved_state:
        return jsonify({"error": "State mismatch"}), 400

    response = make_response(jsonify({"success": True}))
    _complete_login(code, verifier, data.get("redirectUri"), response)
    return response


@auth_bp.route("/refresh-token", methods=["POST"])
def refresh_token():
    session = SpotifySession.from_request(request)
    if not session.can_refresh:
        return jsonify({"error": "No refresh token available"}), 401

    auth_client = current_app.extensions["spotify_auth"]
    try:
        token_data = auth_client.refresh(session.refresh_token)
    except UpstreamServiceError as exc:
        record_token_refresh(False)
        logger.warning("Token refresh failed with status %s", exc.status_code)
        response = make_response(jsonify(exc.to_dict()), exc.status_code)
        clear_session(response)
        return response

    record_token_refresh(True)
    response = make_response(jsonify({"success": True}))
    apply_tokens(response, token_data, secure=_cookie_secure())
    return response


@auth_bp.route("/refresh-token", methods=["GET"])
def refresh_token_wrong_method():
    return jsonify({"error": "Please use POST method for token refresh"}), 405


@auth_bp.route("/logout", methods=["POST"])
def logout():
    response = make_response(jsonify({"success": True}))
    clear_session(response)
    return response


@auth_bp.route("/check-auth", methods=["GET"])
def check_auth():
    session = SpotifySession.from_request(request)
    if not session.is_authenticated:
        if session.can_refresh:
            return jsonify({"isAuthenticated": False, "needsRefresh": True})
        return jsonify({"isAuthenticated": False})

    client = current_app.extensions["spotify_client_factory"](session.access_token)
    try:
        client.current_user()
    except AuthenticationRequired:
        if session.can_refresh:
            return jsonify({"isAuthenticated": False, "needsRefresh": True})
        return jsonify({"isAuthenticated": False})
    except UpstreamServiceError as exc:
        logger.error("Error checking authentication: %s", exc.message)
        return jsonify({"isAuthenticated": False, "error": "Failed to verify authentication"})
    return jsonify({"isAuthenticated": True, "user": session.user})
