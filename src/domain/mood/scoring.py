"""
Mood matching between a book's genre profile and candidate tracks.

Each audio feature named by the target profile yields a score in [0, 1]; the
per-feature scores are multiplied, so a track must fit every dimension to rank
well. Tracks without measured features get a neutral score instead of being
dropped.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from src.models.dto import AudioFeatures, FeatureRange, GenreTarget, Track
from .genre_targets import lookup_genre_target

NEUTRAL_SCORE = 0.5
MAX_SCORE = 1.0
DEFAULT_PLAYLIST_SIZE = 20


def feature_score(value: float, bounds: FeatureRange) -> float:
    """Score one measured feature against its desired range."""
    if bounds.target is not None:
        return max(0.0, 1.0 - abs(value - bounds.target))
    if bounds.min is not None and value < bounds.min:
        if bounds.min <= 0:
            return MAX_SCORE
        return max(0.0, value / bounds.min)
    if bounds.max is not None and value > bounds.max:
        if bounds.max >= 1:
            return MAX_SCORE
        return max(0.0, 1.0 - (value - bounds.max) / (1.0 - bounds.max))
    return MAX_SCORE


def score_track(features: Optional[AudioFeatures], target: GenreTarget) -> float:
    if features is None:
        return NEUTRAL_SCORE

    score = MAX_SCORE
    measured_any = False
    for name, bounds in target.features.items():
        value = getattr(features, name, None)
        if value is None:
            continue
        measured_any = True
        score *= feature_score(float(value), bounds)
    return score if measured_any else NEUTRAL_SCORE


def _resolve_target(genre_or_target: Union[str, GenreTarget, None]) -> GenreTarget:
    if isinstance(genre_or_target, GenreTarget):
        return genre_or_target
    return lookup_genre_target(genre_or_target)


def score_tracks(
    tracks: Iterable[Track],
    features_by_id: Mapping[str, AudioFeatures],
    genre_or_target: Union[str, GenreTarget, None],
) -> List[Tuple[Track, float]]:
    """Pair each track with its mood score, best first.

    Ties are broken on track id (then URI) so the order does not depend on
    the order candidates arrived from the concurrent searches.
    """
    target = _resolve_target(genre_or_target)
    scored = [
        (track, score_track(features_by_id.get(track.id or ""), target))
        for track in tracks
    ]
    scored.sort(key=lambda pair: (-pair[1], pair[0].id or "", pair[0].uri))
    return scored


def rank_tracks(
    tracks: Sequence[Track],
    features_by_id: Mapping[str, AudioFeatures],
    genre_or_target: Union[str, GenreTarget, None],
    limit: int = DEFAULT_PLAYLIST_SIZE,
) -> List[Track]:
    """Return the ``limit`` best-matching tracks for the genre profile."""
    if limit <= 0:
        return []
    return [track for track, _ in score_tracks(tracks, features_by_id, genre_or_target)[:limit]]


def target_from_values(values: Mapping[str, float], genre: str = "custom") -> GenreTarget:
    """Build a target-only profile, e.g. from curator-suggested feature values."""
    features: Dict[str, FeatureRange] = {}
    for name, value in values.items():
        try:
            number = float(value)
        except (TypeError, ValueError):
            continue
        if 0.0 <= number <= 1.0:
            features[name] = FeatureRange(target=number)
    return GenreTarget(genre=genre, features=features)


__all__ = [
    "NEUTRAL_SCORE",
    "MAX_SCORE",
    "DEFAULT_PLAYLIST_SIZE",
    "feature_score",
    "score_track",
    "score_tracks",
    "rank_tracks",
    "target_from_values",
]
