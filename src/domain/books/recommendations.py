"""Related-book suggestions keyed on broad genre buckets."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

# Checked in order; the first bucket whose keyword appears in the genre wins.
_GENRE_BUCKETS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("fantasy",), "fantasy"),
    (("sci-fi", "science fiction"), "sci-fi"),
    (("mystery", "thriller"), "mystery"),
    (("romance",), "romance"),
)

RELATED_BOOKS: Dict[str, List[str]] = {
    "fantasy": [
        "The Name of the Wind by Patrick Rothfuss",
        "A Game of Thrones by George R.R. Martin",
        "The Way of Kings by Brandon Sanderson",
        "The Fifth Season by N.K. Jemisin",
        "Mistborn by Brandon Sanderson",
    ],
    "sci-fi": [
        "Dune by Frank Herbert",
        "The Three-Body Problem by Liu Cixin",
        "Project Hail Mary by Andy Weir",
        "Neuromancer by William Gibson",
        "The Left Hand of Darkness by Ursula K. Le Guin",
    ],
    "mystery": [
        "Gone Girl by Gillian Flynn",
        "The Silent Patient by Alex Michaelides",
        "The Girl with the Dragon Tattoo by Stieg Larsson",
        "And Then There Were None by Agatha Christie",
        "The Thursday Murder Club by Richard Osman",
    ],
    "romance": [
        "Pride and Prejudice by Jane Austen",
        "The Hating Game by Sally Thorne",
        "Red, White & Royal Blue by Casey McQuiston",
        "Beach Read by Emily Henry",
        "The Kiss Quotient by Helen Hoang",
    ],
    "default": [
        "The Midnight Library by Matt Haig",
        "Where the Crawdads Sing by Delia Owens",
        "The Seven Husbands of Evelyn Hugo by Taylor Jenkins Reid",
        "Educated by Tara Westover",
        "Circe by Madeline Miller",
    ],
}


def related_books(title: str, author: Optional[str] = None, genre: Optional[str] = None) -> List[str]:
    """Five "<Title> by <Author>" suggestions, excluding the book itself."""
    lower = (genre or "").lower()
    bucket = "default"
    for keywords, name in _GENRE_BUCKETS:
        if any(keyword in lower for keyword in keywords):
            bucket = name
            break
    own_title = title.strip().lower()
    picks = [
        entry for entry in RELATED_BOOKS[bucket]
        if entry.lower().split(" by ")[0] != own_title
    ]
    if len(picks) < len(RELATED_BOOKS[bucket]):
        # Top up from the general list so the answer stays five long
        for entry in RELATED_BOOKS["default"]:
            if entry not in picks and entry.lower().split(" by ")[0] != own_title:
                picks.append(entry)
                break
    return picks[:5]


__all__ = ["RELATED_BOOKS", "related_books"]
