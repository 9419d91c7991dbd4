"""Mood domain: genre targets, track scoring, search queries, fallback tracks."""

from .genre_targets import GENRE_TARGETS, lookup_genre_target, resolve_genre_key
from .scoring import feature_score, rank_tracks, score_track, score_tracks, target_from_values
from .queries import generate_search_queries
from .fallback import FALLBACK_TRACKS, pick_fallback_tracks

__all__ = [
    "GENRE_TARGETS",
    "lookup_genre_target",
    "resolve_genre_key",
    "feature_score",
    "rank_tracks",
    "score_track",
    "score_tracks",
    "target_from_values",
    "generate_search_queries",
    "FALLBACK_TRACKS",
    "pick_fallback_tracks",
]
