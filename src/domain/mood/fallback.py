"""Hardcoded generic tracks used when live search yields nothing usable."""

from __future__ import annotations

import random
from typing import Iterable, List, Optional

from src.models.dto import Track
from .genre_targets import resolve_genre_key, DEFAULT_GENRE

_IMAGE_BASE = "https://i.scdn.co/image/"

FALLBACK_TRACKS: List[Track] = [
    Track(name="Dreamscape", artist="Ambient Collective", album="Ethereal Journeys",
          image=_IMAGE_BASE + "ab67616d0000b273b52a0f7a26cf2a4c45c15bea", uri="spotify:track:1",
          tags=["ambient", "instrumental", "biography", "historical"]),
    Track(name="Midnight Reflection", artist="Luna Waves", album="Silent Hours",
          image=_IMAGE_BASE + "ab67616d0000b273a91c10fe9472d9bd89802e5a", uri="spotify:track:2",
          tags=["mystery", "dark", "romance"]),
    Track(name="Epic Journey", artist="Orchestral Adventures", album="Heroes & Legends",
          image=_IMAGE_BASE + "ab67616d0000b273b1c4b76e23414c9f20242268", uri="spotify:track:3",
          tags=["epic", "fantasy", "adventure", "soundtrack"]),
    Track(name="Suspense", artist="Thriller Sounds", album="Edge of Your Seat",
          image=_IMAGE_BASE + "ab67616d0000b2735eb139846beb6b08c8752f0c", uri="spotify:track:4",
          tags=["suspense", "thriller", "mystery", "tension"]),
    Track(name="Love Theme", artist="Romantic Strings", album="Eternal Love",
          image=_IMAGE_BASE + "ab67616d0000b273d5e5ac9fca861307a2e00f64", uri="spotify:track:5",
          tags=["love", "romance", "romantic"]),
    Track(name="Space Odyssey", artist="Cosmic Synth", album="Interstellar Dreams",
          image=_IMAGE_BASE + "ab67616d0000b273d8f5ab5cbdaef3c6f1f5c456", uri="spotify:track:6",
          tags=["space", "sci-fi", "electronic", "futuristic"]),
    Track(name="Medieval Fantasy", artist="Ancient Lore", album="Kingdoms of Old",
          image=_IMAGE_BASE + "ab67616d0000b273e2e352d89826aef6dbd5ff8f", uri="spotify:track:7",
          tags=["fantasy", "magical", "historical", "children"]),
    Track(name="Cyberpunk Streets", artist="Digital Noise", album="Neon Future",
          image=_IMAGE_BASE + "ab67616d0000b2738a3f0a3ca7929dea23cd274c", uri="spotify:track:8",
          tags=["sci-fi", "electronic", "futuristic", "thriller"]),
    Track(name="Western Frontier", artist="Dusty Roads", album="Outlaws & Legends",
          image=_IMAGE_BASE + "ab67616d0000b273c559a84d5a843f4c596f254a", uri="spotify:track:9",
          tags=["adventure", "historical", "western"]),
    Track(name="Haunted Mansion", artist="Ghostly Echoes", album="Supernatural",
          image=_IMAGE_BASE + "ab67616d0000b273b6d4566db0d12894a1a3b7a2", uri="spotify:track:10",
          tags=["horror", "dark", "supernatural"]),
]


def _matches_query(track: Track, query: str) -> bool:
    lower = query.lower()
    haystack = f"{track.name} {track.artist} {track.album}".lower()
    if lower in haystack:
        return True
    words = set(lower.split())
    return any(tag in words or tag == lower for tag in track.tags)


def pick_fallback_tracks(
    queries: Iterable[str] = (),
    genre: Optional[str] = None,
    limit: int = 20,
    rng: Optional[random.Random] = None,
) -> List[Track]:
    """Select fallback tracks, genre matches first, then query matches.

    The result is deterministic unless ``rng`` is given, in which case the
    unmatched remainder is shuffled with it. Never empty for ``limit >= 1``.
    """
    limit = max(1, limit)
    genre_key = resolve_genre_key(genre)
    selected: List[Track] = []

    def _take(track: Track) -> None:
        if track not in selected and len(selected) < limit:
            selected.append(track)

    if genre_key != DEFAULT_GENRE:
        for track in FALLBACK_TRACKS:
            if genre_key in track.tags:
                _take(track)

    for query in queries:
        for track in FALLBACK_TRACKS:
            if track not in selected and _matches_query(track, query):
                _take(track)
                break

    remainder = [track for track in FALLBACK_TRACKS if track not in selected]
    if rng is not None:
        rng.shuffle(remainder)
    for track in remainder:
        _take(track)

    return [track.model_copy() for track in selected]


__all__ = ["FALLBACK_TRACKS", "pick_fallback_tracks"]
