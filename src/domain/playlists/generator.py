"""
Book-to-playlist orchestration.

Searches Spotify with queries derived from the book, scores the candidates
against the genre's audio-feature profile and optionally writes the result
into the user's account. Without a usable Spotify session, or when nothing
usable comes back, the hardcoded fallback tracks are served instead.
"""

from __future__ import annotations

import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Tuple

from src.core.errors import UpstreamServiceError
from src.domain.mood import (
    generate_search_queries,
    lookup_genre_target,
    pick_fallback_tracks,
    rank_tracks,
    target_from_values,
)
from src.infrastructure.llm import BookCurator
from src.infrastructure.spotify_api import SpotifyUserClient
from src.models.dto import Book, GenreTarget, Playlist, Track
from src.observability.metrics import record_playlist_created, record_playlist_generated
from src.observability.tracing import span
from src.settings import AppSettings

logger = logging.getLogger(__name__)

MAX_CURATOR_QUERIES = 10


def playlist_name(book: Book) -> str:
    return f"Bookify: {book.title}"


def playlist_description(book: Book) -> str:
    author = book.known_author
    return f'A playlist inspired by "{book.title}"' + (f" by {author}" if author else "")


class PlaylistGenerator:
    def __init__(
        self,
        settings: AppSettings,
        client_factory: Callable[[str], SpotifyUserClient],
        curator: Optional[BookCurator] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.settings = settings
        self.client_factory = client_factory
        self.curator = curator
        self.rng = rng

    def queries_for(self, book: Book) -> List[str]:
        return generate_search_queries(
            book.title,
            book.known_author,
            book.primary_genre,
            book.description or None,
        )

    def _curated_plan(self, book: Book, queries: List[str]) -> Tuple[List[str], GenreTarget]:
        """Merge curator song ideas into the queries and pick the mood target."""
        target = lookup_genre_target(book.primary_genre)
        if self.curator is None or not self.curator.enabled:
            return queries, target

        suggestion = self.curator.suggest_songs(book)
        if not suggestion.songs:
            return queries, target

        song_queries = [
            f"{song.title} {song.artist}".strip()
            for song in suggestion.songs[:MAX_CURATOR_QUERIES]
        ]
        logger.info(
            "Curator proposed %d songs for %r (%s)",
            len(song_queries), book.title, suggestion.mood_description,
        )
        merged = list(dict.fromkeys(song_queries + queries))
        curated_target = target_from_values(suggestion.audio_targets, genre="curated")
        return merged, curated_target if curated_target.features else target

    def fallback_playlist(self, book: Book, queries: Optional[List[str]] = None) -> Playlist:
        """Display-only playlist built from the hardcoded tracks."""
        if queries is None:
            queries = self.queries_for(book)
        tracks = pick_fallback_tracks(
            queries,
            genre=book.primary_genre,
            limit=self.settings.playlist_size,
            rng=self.rng,
        )
        return Playlist(
            playlist_id=None,
            name=playlist_name(book),
            description=playlist_description(book),
            tracks=tracks,
            source="fallback",
        )

    def suggest(self, book: Book) -> Playlist:
        playlist = self.fallback_playlist(book)
        record_playlist_generated(playlist.source)
        return playlist

    def _search_one(self, client: SpotifyUserClient, query: str) -> List[Track]:
        try:
            return client.search_tracks(query, limit=self.settings.search_limit)
        except UpstreamServiceError as exc:
            # one failed query must not sink the whole playlist
            logger.warning("Search for %r failed: %s", query, exc.message)
            return []

    def search_candidates(self, client: SpotifyUserClient, queries: List[str]) -> List[Track]:
        """Run one search per query concurrently; results are deduplicated by id.

        Results are consumed in query order, so the candidate list does not
        depend on which search finished first. SpotifyAuthExpired propagates.
        """
        if not queries:
            return []
        workers = max(1, min(self.settings.max_search_workers, len(queries)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="spotify-search") as pool:
            results = list(pool.map(lambda q: self._search_one(client, q), queries))

        seen: Dict[str, Track] = {}
        for tracks in results:
            for track in tracks:
                if track.id and track.id not in seen:
                    seen[track.id] = track
        logger.info("Found %d unique candidate tracks from %d queries", len(seen), len(queries))
        return list(seen.values())

    def generate(
        self,
        book: Book,
        access_token: Optional[str] = None,
        *,
        create: bool = False,
    ) -> Playlist:
        """Produce a playlist for ``book``.

        With ``access_token`` the tracks come from Spotify search; with
        ``create`` the playlist is also written to the user's account.
        """
        started = time.perf_counter()
        queries = self.queries_for(book)
        logger.info("Generating playlist for %r with %d queries", book.title, len(queries))

        if not access_token:
            playlist = self.fallback_playlist(book, queries)
            record_playlist_generated(playlist.source, time.perf_counter() - started)
            return playlist

        client = self.client_factory(access_token)
        user_id = None
        if create:
            user_id = (client.current_user() or {}).get("id")
            if not user_id:
                raise UpstreamServiceError("Failed to get user profile", service="spotify")

        queries, target = self._curated_plan(book, queries)
        with span("playlist.search", queries=len(queries)):
            candidates = self.search_candidates(client, queries)
        with span("playlist.audio_features", tracks=len(candidates)):
            features = client.audio_features([track.id for track in candidates if track.id]) if candidates else {}
        ranked = rank_tracks(candidates, features, target, limit=self.settings.playlist_size)

        if not ranked:
            logger.warning("No usable Spotify tracks for %r; serving fallback tracks", book.title)
            playlist = self.fallback_playlist(book, queries)
            record_playlist_generated(playlist.source, time.perf_counter() - started)
            return playlist

        playlist = Playlist(
            name=playlist_name(book),
            description=playlist_description(book),
            tracks=ranked,
            source="search",
        )
        if create and user_id:
            with span("playlist.create", tracks=len(ranked)):
                playlist = self._create_in_account(client, user_id, playlist)

        record_playlist_generated(playlist.source, time.perf_counter() - started)
        return playlist

    def _create_in_account(self, client: SpotifyUserClient, user_id: str, playlist: Playlist) -> Playlist:
        uris = [track.uri for track in playlist.tracks if track.is_spotify_track]
        created = client.create_playlist(user_id, playlist.name, playlist.description, public=True)
        playlist_id = created.get("id")
        if not playlist_id:
            raise UpstreamServiceError("Failed to create playlist", service="spotify")
        if uris:
            client.add_tracks(playlist_id, uris)
        record_playlist_created()
        logger.info("Created playlist %s with %d tracks", playlist_id, len(uris))
        return playlist.model_copy(
            update={
                "playlist_id": playlist_id,
                "external_url": (created.get("external_urls") or {}).get("spotify"),
                "uri": created.get("uri"),
                "source": "spotify",
            }
        )


__all__ = ["PlaylistGenerator", "playlist_name", "playlist_description"]
