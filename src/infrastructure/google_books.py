"""Google Books volume search client."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from src.core.errors import ConfigurationError, UpstreamServiceError
from src.models.dto import Book
from src.observability.metrics import record_upstream_error
from src.observability.tracing import span
from src.utils.cache import TTLCache

logger = logging.getLogger(__name__)

GOOGLE_BOOKS_VOLUMES_URL = "https://www.googleapis.com/books/v1/volumes"


def _book_from_volume(item: Dict[str, Any]) -> Book:
    info = item.get("volumeInfo") or {}
    authors = info.get("authors") or []
    image_links = info.get("imageLinks") or {}
    return Book(
        id=item.get("id"),
        title=info.get("title") or "Untitled",
        author=authors[0] if authors else "Unknown",
        description=info.get("description") or "",
        categories=list(info.get("categories") or []),
        thumbnail=image_links.get("thumbnail") or "",
    )


class GoogleBooksClient:
    def __init__(
        self,
        api_key: Optional[str],
        *,
        timeout: float = 10.0,
        cache: Optional[TTLCache] = None,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._cache = cache

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def search(self, query: str, max_results: int = 5) -> List[Book]:
        """Search volumes; returns an empty list when nothing matches."""
        if not self._api_key:
            logger.error("Google Books API key is missing")
            raise ConfigurationError("API key configuration error")

        if self._cache is None:
            return self._fetch(query, max_results)
        books = self._cache.get_or_load(
            ("volumes", query, max_results),
            lambda: self._fetch(query, max_results),
        )
        return [book.model_copy() for book in books]

    def _fetch(self, query: str, max_results: int) -> List[Book]:
        params = {"q": query, "maxResults": max_results, "key": self._api_key}
        try:
            with span("google_books.search", max_results=max_results):
                response = requests.get(GOOGLE_BOOKS_VOLUMES_URL, params=params, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.error("Google Books request failed for %r: %s", query, exc)
            record_upstream_error("google_books")
            raise UpstreamServiceError(
                "Failed to fetch book information", service="google_books"
            ) from exc

        if response.status_code >= 400:
            logger.error(
                "Google Books API error %s for %r: %s",
                response.status_code, query, response.text[:500],
            )
            record_upstream_error("google_books")
            raise UpstreamServiceError(
                "Failed to fetch book information",
                service="google_books",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            record_upstream_error("google_books")
            raise UpstreamServiceError(
                "Invalid response from Google Books", service="google_books"
            ) from exc

        items = payload.get("items") or []
        if not items:
            logger.info("No books found for query: %s", query)
        return [_book_from_volume(item) for item in items]


__all__ = ["GoogleBooksClient", "GOOGLE_BOOKS_VOLUMES_URL"]
