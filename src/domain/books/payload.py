"""Parse book details out of loosely-shaped JSON request bodies."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from src.core.errors import MissingInputError
from src.models.dto import Book


def _first_text(payload: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _categories(value: Any) -> List[str]:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [str(part).strip() for part in value if str(part).strip()]
    return []


def book_from_payload(payload: Optional[Mapping[str, Any]]) -> Book:
    """Accept both ``bookTitle``-style and Book-object field names.

    Raises MissingInputError when no title is present.
    """
    payload = payload or {}
    title = _first_text(payload, "bookTitle", "title")
    if not title:
        raise MissingInputError("Book title is required")
    return Book(
        id=_first_text(payload, "id"),
        title=title,
        author=_first_text(payload, "bookAuthor", "author") or "Unknown",
        description=_first_text(payload, "bookDescription", "description") or "",
        categories=_categories(payload.get("categories")),
        thumbnail=_first_text(payload, "thumbnail") or "",
        genre=_first_text(payload, "bookGenre", "genre"),
    )


__all__ = ["book_from_payload"]
