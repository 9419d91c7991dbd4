"""Turn book metadata into Spotify track-search queries."""

from __future__ import annotations

import re
from typing import List, Optional

_PUNCTUATION_RE = re.compile(r"[^\w\s]")
_STOP_WORDS = frozenset({"about", "which", "there", "their", "other", "another"})
MAX_DESCRIPTION_WORDS = 3
MIN_WORD_LENGTH = 5


def _genre_queries(genre: str) -> List[str]:
    lower = genre.lower()
    if "romance" in lower:
        return ["love songs", "romantic", f"{genre} music"]
    if "thriller" in lower or "mystery" in lower:
        return ["suspense", "tension", "dark", f"{genre} soundtrack"]
    if "fantasy" in lower:
        return ["epic", "magical", "fantasy soundtrack", f"{genre} theme"]
    if "sci-fi" in lower or "science fiction" in lower:
        return ["electronic", "futuristic", "space", f"{genre} soundtrack"]
    return [genre]


def significant_words(description: str, limit: int = MAX_DESCRIPTION_WORDS) -> List[str]:
    """First ``limit`` distinct long, non-stop words of the description."""
    words = _PUNCTUATION_RE.sub("", description.lower()).split()
    seen: List[str] = []
    for word in words:
        if len(word) < MIN_WORD_LENGTH or word in _STOP_WORDS or word in seen:
            continue
        seen.append(word)
        if len(seen) >= limit:
            break
    return seen


def generate_search_queries(
    title: str,
    author: Optional[str] = None,
    genre: Optional[str] = None,
    description: Optional[str] = None,
) -> List[str]:
    queries: List[str] = []

    if author:
        queries.append(f"{title} {author}")

    if genre:
        queries.extend(_genre_queries(genre))

    if description:
        words = significant_words(description)
        if words:
            queries.append(" ".join(words))

    queries.extend([f"{title} soundtrack", f"{title} theme", "instrumental"])

    # dict preserves first-seen order
    return list(dict.fromkeys(q for q in queries if q and q.strip()))


__all__ = ["generate_search_queries", "significant_words"]
