#!/usr/bin/env python
"""
Pydantic DTOs for the request-scoped entities Bookify passes around.

Nothing here is persisted: books come from Google Books per query, tracks and
audio features from Spotify per request, and playlists are either created in
the user's Spotify account or returned as a display-only list.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Book(BaseModel):
    """A Google Books volume reduced to the fields the UI and mood logic need."""

    id: Optional[str] = None
    title: str
    author: str = "Unknown"
    description: str = ""
    categories: List[str] = Field(default_factory=list)
    thumbnail: str = ""
    genre: Optional[str] = None

    @property
    def primary_genre(self) -> Optional[str]:
        if self.genre:
            return self.genre
        return self.categories[0] if self.categories else None

    @property
    def known_author(self) -> Optional[str]:
        author = (self.author or "").strip()
        return author if author and author != "Unknown" else None


class Track(BaseModel):
    """Display-ready track; ``id`` is absent for fallback tracks."""

    id: Optional[str] = None
    name: str
    artist: str
    album: str = ""
    image: Optional[str] = None
    uri: str
    tags: List[str] = Field(default_factory=list, exclude=True)

    @property
    def is_spotify_track(self) -> bool:
        return self.uri.startswith("spotify:track:") and bool(self.id)


class AudioFeatures(BaseModel):
    id: str
    valence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    energy: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    danceability: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class FeatureRange(BaseModel):
    """Desired band for one audio feature; ``target`` wins over the bounds."""

    model_config = ConfigDict(frozen=True)

    min: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    max: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    target: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class GenreTarget(BaseModel):
    model_config = ConfigDict(frozen=True)

    genre: str
    features: Dict[str, FeatureRange]


class Playlist(BaseModel):
    """Playlist payload returned to the frontend."""

    model_config = ConfigDict(populate_by_name=True)

    playlist_id: Optional[str] = Field(default=None, alias="playlistId")
    name: str
    description: str = ""
    external_url: Optional[str] = None
    uri: Optional[str] = None
    tracks: List[Track] = Field(default_factory=list)
    source: str = "fallback"  # 'spotify' | 'search' | 'fallback'

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True)


class SongRecommendation(BaseModel):
    title: str
    artist: str
    reason: str = ""


class CuratorSuggestion(BaseModel):
    """Song ideas and mood targets proposed by the optional LLM curator."""

    songs: List[SongRecommendation] = Field(default_factory=list)
    audio_targets: Dict[str, float] = Field(default_factory=dict)
    themes: List[str] = Field(default_factory=list)
    mood_description: str = "Balanced and neutral"


__all__ = [
    "Book",
    "Track",
    "AudioFeatures",
    "FeatureRange",
    "GenreTarget",
    "Playlist",
    "SongRecommendation",
    "CuratorSuggestion",
]
