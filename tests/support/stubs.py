"""Shared test stubs for Spotify, Google Books and OpenAI interfaces."""

import json
import types
from typing import Dict, Iterable, List, Optional

from spotipy.exceptions import SpotifyException

from src.core.errors import SpotifyAuthExpired, UpstreamServiceError
from src.models.dto import AudioFeatures, Track


def make_track(track_id: str, name: Optional[str] = None, artist: str = "Artist") -> Track:
    return Track(
        id=track_id,
        name=name or f"Song {track_id}",
        artist=artist,
        album="Album",
        image=f"https://img.example/{track_id}.jpg",
        uri=f"spotify:track:{track_id}",
    )


def spotify_item(track_id: str, name: Optional[str] = None) -> dict:
    """Raw search item as returned by the Spotify Web API."""
    return {
        "id": track_id,
        "type": "track",
        "name": name or f"Song {track_id}",
        "uri": f"spotify:track:{track_id}",
        "artists": [{"name": "Artist"}],
        "album": {"name": "Album", "images": [{"url": f"https://img.example/{track_id}.jpg"}]},
    }


def spotify_error(status: int, msg: str = "error") -> SpotifyException:
    return SpotifyException(status, -1, msg)


class FakeSpotifyClient:
    """In-memory stand-in for SpotifyUserClient used by generator and route tests."""

    def __init__(
        self,
        tracks_by_query: Optional[Dict[str, List[Track]]] = None,
        features: Optional[Dict[str, AudioFeatures]] = None,
        user: Optional[dict] = None,
        expired: bool = False,
        failing_queries: Iterable[str] = (),
        existing_playlists: Iterable[str] = (),
        create_error: Optional[Exception] = None,
    ):
        self.tracks_by_query = tracks_by_query or {}
        self.features = features or {}
        self.user = user if user is not None else {"id": "user-1", "display_name": "Reader"}
        self.expired = expired
        self.failing_queries = set(failing_queries)
        self.existing_playlists = set(existing_playlists)
        self.create_error = create_error
        self.searched: List[str] = []
        self.created: List[dict] = []
        self.added: List[tuple] = []
        self.followed: List[str] = []

    def _check(self):
        if self.expired:
            raise SpotifyAuthExpired()

    def current_user(self):
        self._check()
        return dict(self.user)

    def search_tracks(self, query: str, limit: int = 5):
        self._check()
        self.searched.append(query)
        if query in self.failing_queries:
            raise UpstreamServiceError("search failed", service="spotify")
        return [t.model_copy() for t in self.tracks_by_query.get(query, [])][:limit]

    def audio_features(self, track_ids):
        self._check()
        return {tid: self.features[tid] for tid in track_ids if tid in self.features}

    def create_playlist(self, user_id, name, description, public=True):
        self._check()
        if self.create_error:
            raise self.create_error
        self.created.append({"user_id": user_id, "name": name, "description": description, "public": public})
        return {
            "id": "pl-1",
            "uri": "spotify:playlist:pl-1",
            "external_urls": {"spotify": "https://open.spotify.com/playlist/pl-1"},
        }

    def add_tracks(self, playlist_id, uris):
        self._check()
        self.added.append((playlist_id, list(uris)))

    def playlist_exists(self, playlist_id):
        self._check()
        return playlist_id in self.existing_playlists

    def follow_playlist(self, playlist_id):
        self._check()
        self.followed.append(playlist_id)


class FakeSpotipy:
    """Minimal spotipy.Spotify stand-in recording calls."""

    def __init__(self, search_items=None, features=None, error: Optional[Exception] = None,
                 features_error: Optional[Exception] = None, playlist_error: Optional[Exception] = None):
        self.search_items = search_items or []
        self.features = features or {}
        self.error = error
        self.features_error = features_error
        self.playlist_error = playlist_error
        self.calls: List[tuple] = []

    def _maybe_raise(self):
        if self.error:
            raise self.error

    def me(self):
        self._maybe_raise()
        return {"id": "user-1", "display_name": "Reader", "email": "r@example.com", "images": []}

    def search(self, q, limit=10, type="track", market=None):
        self._maybe_raise()
        self.calls.append(("search", q, limit, type, market))
        return {"tracks": {"items": list(self.search_items)}}

    def audio_features(self, tracks):
        self.calls.append(("audio_features", list(tracks)))
        if self.features_error:
            raise self.features_error
        return [self.features.get(tid) for tid in tracks]

    def user_playlist_create(self, user, name, public=True, collaborative=False, description=""):
        self._maybe_raise()
        self.calls.append(("create", user, name, public, description))
        return {"id": "pl-1", "uri": "spotify:playlist:pl-1"}

    def playlist_add_items(self, playlist_id, items, position=None):
        self.calls.append(("add", playlist_id, list(items)))
        return {"snapshot_id": "snap"}

    def playlist(self, playlist_id, fields=None, market=None, additional_types=("track",)):
        self.calls.append(("playlist", playlist_id, fields))
        if self.playlist_error:
            raise self.playlist_error
        return {"id": playlist_id}

    def current_user_follow_playlist(self, playlist_id, public=True):
        self._maybe_raise()
        self.calls.append(("follow", playlist_id))


class FakeAuthClient:
    """SpotifyAuthClient stand-in returning canned token payloads."""

    def __init__(self, token_data: Optional[dict] = None, error: Optional[Exception] = None):
        self.token_data = token_data or {
            "access_token": "new-access",
            "refresh_token": "new-refresh",
            "expires_in": 3600,
        }
        self.error = error
        self.exchanged: List[tuple] = []
        self.refreshed: List[str] = []

    def build_authorize_url(self, state, code_challenge, redirect_uri=None):
        return f"https://accounts.spotify.com/authorize?state={state}&code_challenge={code_challenge}"

    def exchange_code(self, code, code_verifier, redirect_uri=None):
        self.exchanged.append((code, code_verifier, redirect_uri))
        if self.error:
            raise self.error
        return dict(self.token_data)

    def refresh(self, refresh_token):
        self.refreshed.append(refresh_token)
        if self.error:
            raise self.error
        return dict(self.token_data)


class FakeResponse:
    """requests.Response stand-in."""

    def __init__(self, status_code: int = 200, payload=None, text: Optional[str] = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeOpenAI:
    """Object shaped like openai.OpenAI exposing chat.completions.create."""

    def __init__(self, content: str = "", error: Optional[Exception] = None):
        self.content = content
        self.error = error
        self.requests: List[dict] = []
        self.chat = types.SimpleNamespace(completions=types.SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        message = types.SimpleNamespace(content=self.content)
        return types.SimpleNamespace(choices=[types.SimpleNamespace(message=message)])
