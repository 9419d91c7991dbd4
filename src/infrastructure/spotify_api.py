"""User-scoped Spotify Web API access on top of spotipy."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

import requests
import spotipy
from spotipy.exceptions import SpotifyException

from src.core.errors import SpotifyAuthExpired, UpstreamServiceError
from src.models.dto import AudioFeatures, Track
from src.observability.metrics import record_upstream_error

logger = logging.getLogger(__name__)

AUDIO_FEATURES_CHUNK = 100
PLAYLIST_ADD_CHUNK = 100


def _chunks(items: List[str], size: int) -> Iterable[List[str]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def track_from_item(item: Dict[str, Any]) -> Track:
    album = item.get("album") or {}
    images = album.get("images") or []
    artists = item.get("artists") or []
    return Track(
        id=item.get("id"),
        name=item.get("name") or "",
        artist=(artists[0].get("name") if artists else None) or "Unknown",
        album=album.get("name") or "",
        image=images[0].get("url") if images else None,
        uri=item.get("uri") or "",
    )


class SpotifyUserClient:
    """Wraps a spotipy client authenticated with one user's access token."""

    def __init__(self, sp: spotipy.Spotify, *, market: str = "US") -> None:
        self.sp = sp
        self.market = market

    @classmethod
    def from_token(cls, access_token: str, *, market: str = "US", timeout: float = 10.0) -> "SpotifyUserClient":
        sp = spotipy.Spotify(auth=access_token, requests_timeout=timeout, retries=0)
        return cls(sp, market=market)

    def _call(self, action: str, call: Callable[[], Any]) -> Any:
        try:
            return call()
        except SpotifyException as exc:
            if exc.http_status == 401:
                logger.info("Spotify rejected the access token during %s", action)
                raise SpotifyAuthExpired() from exc
            logger.error("Spotify API call failed during %s: %s", action, exc)
            record_upstream_error("spotify")
            status = exc.http_status if exc.http_status and exc.http_status >= 400 else None
            raise UpstreamServiceError(
                f"Spotify API error during {action}",
                service="spotify",
                status_code=status,
            ) from exc
        except requests.RequestException as exc:
            logger.error("Spotify request failed during %s: %s", action, exc)
            record_upstream_error("spotify")
            raise UpstreamServiceError(
                f"Spotify API error during {action}", service="spotify"
            ) from exc

    def current_user(self) -> Dict[str, Any]:
        return self._call("profile lookup", self.sp.me) or {}

    def search_tracks(self, query: str, limit: int = 5) -> List[Track]:
        result = self._call(
            "track search",
            lambda: self.sp.search(q=query, limit=limit, type="track", market=self.market),
        ) or {}
        items = (result.get("tracks") or {}).get("items") or []
        return [
            track_from_item(item)
            for item in items
            if item and item.get("type", "track") == "track" and item.get("id")
        ]

    def audio_features(self, track_ids: List[str]) -> Dict[str, AudioFeatures]:
        """Fetch features in chunks; unavailable features are simply absent.

        Apps created after Spotify's late-2024 API change get 403 here, so any
        non-auth failure degrades to an empty mapping rather than an error.
        """
        features: Dict[str, AudioFeatures] = {}
        ids = list(dict.fromkeys(tid for tid in track_ids if tid))
        for chunk in _chunks(ids, AUDIO_FEATURES_CHUNK):
            try:
                rows = self._call("audio features", lambda chunk=chunk: self.sp.audio_features(chunk)) or []
            except UpstreamServiceError as exc:
                logger.warning("Audio features unavailable, scoring neutrally: %s", exc.message)
                return features
            for row in rows:
                if not row or not row.get("id"):
                    continue
                features[row["id"]] = AudioFeatures(
                    id=row["id"],
                    valence=row.get("valence"),
                    energy=row.get("energy"),
                    danceability=row.get("danceability"),
                )
        return features

    def create_playlist(self, user_id: str, name: str, description: str, public: bool = True) -> Dict[str, Any]:
        return self._call(
            "playlist creation",
            lambda: self.sp.user_playlist_create(
                user_id, name, public=public, description=description
            ),
        ) or {}

    def add_tracks(self, playlist_id: str, uris: List[str]) -> None:
        for chunk in _chunks(list(uris), PLAYLIST_ADD_CHUNK):
            self._call("adding tracks", lambda chunk=chunk: self.sp.playlist_add_items(playlist_id, chunk))

    def playlist_exists(self, playlist_id: str) -> bool:
        try:
            self.sp.playlist(playlist_id, fields="id")
        except SpotifyException as exc:
            if exc.http_status == 401:
                raise SpotifyAuthExpired() from exc
            if exc.http_status in (400, 404):
                return False
            logger.error("Failed to verify playlist %s: %s", playlist_id, exc)
            record_upstream_error("spotify")
            raise UpstreamServiceError(
                "Failed to verify playlist", service="spotify", status_code=exc.http_status
            ) from exc
        return True

    def follow_playlist(self, playlist_id: str) -> None:
        self._call("following playlist", lambda: self.sp.current_user_follow_playlist(playlist_id))


def default_client_factory(market: str = "US", timeout: float = 10.0) -> Callable[[str], SpotifyUserClient]:
    """Return a callable building a user client from an access token."""

    def _factory(access_token: str) -> SpotifyUserClient:
        return SpotifyUserClient.from_token(access_token, market=market, timeout=timeout)

    return _factory


__all__ = [
    "SpotifyUserClient",
    "default_client_factory",
    "track_from_item",
    "AUDIO_FEATURES_CHUNK",
]
