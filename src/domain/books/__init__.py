"""Book-side domain helpers."""

from .payload import book_from_payload
from .recommendations import RELATED_BOOKS, related_books

__all__ = ["RELATED_BOOKS", "book_from_payload", "related_books"]
