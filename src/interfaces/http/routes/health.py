from __future__ import annotations

from flask import Blueprint, current_app, jsonify

health_bp = Blueprint("health_bp", __name__)

_REQUIRED_SERVICES = ("google_books", "spotify_auth", "playlist_generator")


@health_bp.route("/healthz")
def healthz():
    settings = current_app.extensions.get("settings")
    checks = {
        "google_books": "configured" if settings and settings.google_books_api_key else "missing_api_key",
        "spotify": "configured" if settings and settings.spotify_configured else "missing_credentials",
        "openai": "enabled" if settings and settings.llm_enabled else "disabled",
    }
    return jsonify({"status": "ok", "checks": checks}), 200


@health_bp.route("/readyz")
def readyz():
    missing = [name for name in _REQUIRED_SERVICES if current_app.extensions.get(name) is None]
    settings = current_app.extensions.get("settings")
    if settings is None or not settings.google_books_api_key:
        missing.append("google_books_api_key")
    ready = not missing
    payload = {
        "status": "ready" if ready else "blocked",
        "missing": missing,
    }
    return jsonify(payload), 200 if ready else 503
