from __future__ import annotations

from typing import Optional

from flask import Blueprint, Response
from prometheus_client import Counter, Histogram, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

PLAYLISTS_GENERATED = Counter(
    "bookify_playlists_generated_total",
    "Total number of playlists produced, labelled by track source.",
    ["source"],
)
PLAYLISTS_CREATED = Counter(
    "bookify_playlists_created_total",
    "Total number of playlists created in a Spotify account.",
)
FALLBACK_USED = Counter(
    "bookify_fallback_tracks_used_total",
    "Number of times the hardcoded fallback track list was served.",
)
UPSTREAM_ERRORS = Counter(
    "bookify_upstream_errors_total",
    "Failed calls to remote APIs.",
    ["service"],
)
TOKEN_REFRESHES = Counter(
    "bookify_token_refreshes_total",
    "Spotify refresh-token grants, labelled by outcome.",
    ["outcome"],
)
PLAYLIST_GENERATION_TIME = Histogram(
    "bookify_playlist_generation_seconds",
    "Wall-clock time spent generating one playlist.",
    buckets=(0.25, 0.5, 1, 2, 5, 10, 20, float("inf")),
)


def record_playlist_generated(source: str, duration_seconds: Optional[float] = None) -> None:
    PLAYLISTS_GENERATED.labels(source=source).inc()
    if source == "fallback":
        FALLBACK_USED.inc()
    if duration_seconds is not None:
        PLAYLIST_GENERATION_TIME.observe(duration_seconds)


def record_playlist_created() -> None:
    PLAYLISTS_CREATED.inc()


def record_upstream_error(service: str) -> None:
    UPSTREAM_ERRORS.labels(service=service).inc()


def record_token_refresh(success: bool) -> None:
    TOKEN_REFRESHES.labels(outcome="success" if success else "failure").inc()


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
