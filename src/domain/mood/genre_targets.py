"""Static genre -> audio-feature target table and lookup."""

from __future__ import annotations

import re
from typing import Dict, Optional

from src.models.dto import FeatureRange, GenreTarget

DEFAULT_GENRE = "default"


def _target(genre: str, **features: Dict[str, float]) -> GenreTarget:
    return GenreTarget(
        genre=genre,
        features={name: FeatureRange(**bounds) for name, bounds in features.items()},
    )


# Order matters for substring lookup: the last contained key wins.
GENRE_TARGETS: Dict[str, GenreTarget] = {
    "romance": _target("romance", valence={"min": 0.5, "target": 0.7}, energy={"min": 0.4, "target": 0.6}),
    "thriller": _target("thriller", valence={"max": 0.5, "target": 0.3}, energy={"min": 0.6, "target": 0.8}),
    "horror": _target("horror", valence={"max": 0.4, "target": 0.2}, energy={"min": 0.5, "target": 0.7}),
    "mystery": _target("mystery", valence={"max": 0.5, "target": 0.4}, energy={"min": 0.5, "target": 0.6}),
    "fantasy": _target("fantasy", valence={"min": 0.4, "target": 0.6}, energy={"min": 0.6, "target": 0.7}),
    "sci-fi": _target("sci-fi", valence={"min": 0.3, "target": 0.5}, energy={"min": 0.5, "target": 0.7}),
    "adventure": _target("adventure", valence={"min": 0.5, "target": 0.7}, energy={"min": 0.7, "target": 0.8}),
    "historical": _target("historical", valence={"target": 0.5}, energy={"target": 0.5}),
    "biography": _target("biography", valence={"target": 0.5}, energy={"target": 0.4}),
    "children": _target("children", valence={"min": 0.6, "target": 0.8}, energy={"min": 0.5, "target": 0.7}),
    DEFAULT_GENRE: _target(DEFAULT_GENRE, valence={"target": 0.5}, energy={"target": 0.5}),
}

# Spellings seen in Google Books categories and user input
GENRE_ALIASES: Dict[str, str] = {
    "science fiction": "sci-fi",
    "science-fiction": "sci-fi",
    "scifi": "sci-fi",
    "sf": "sci-fi",
    "juvenile fiction": "children",
    "history": "historical",
    "biography & autobiography": "biography",
    "autobiography": "biography",
    "memoir": "biography",
    "suspense": "thriller",
    "crime": "mystery",
    "detective": "mystery",
}

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_genre(genre: Optional[str]) -> str:
    """Lowercase, trim and collapse whitespace; resolve exact aliases."""
    if not genre:
        return ""
    value = _WHITESPACE_RE.sub(" ", str(genre).strip().lower())
    return GENRE_ALIASES.get(value, value)


def resolve_genre_key(genre: Optional[str]) -> str:
    """Map a free-form genre string to a key of GENRE_TARGETS."""
    normalized = normalize_genre(genre)
    if not normalized:
        return DEFAULT_GENRE
    if normalized in GENRE_TARGETS:
        return normalized
    matches = [key for key in GENRE_TARGETS if key != DEFAULT_GENRE and key in normalized]
    if matches:
        return matches[-1]
    for alias, key in GENRE_ALIASES.items():
        if len(alias) > 3 and alias in normalized:
            return key
    return DEFAULT_GENRE


def lookup_genre_target(genre: Optional[str]) -> GenreTarget:
    """Return the target profile for ``genre``, or the default entry."""
    return GENRE_TARGETS[resolve_genre_key(genre)]


__all__ = [
    "DEFAULT_GENRE",
    "GENRE_TARGETS",
    "GENRE_ALIASES",
    "normalize_genre",
    "resolve_genre_key",
    "lookup_genre_target",
]
