"""Optional OpenAI-backed book curator.

Used for two things: writing a short book description, and proposing songs plus
audio-feature targets that seed the Spotify search. Every failure degrades to
a neutral answer so playlist generation never depends on the model.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import openai
from pydantic import ValidationError

from src.models.dto import Book, CuratorSuggestion, SongRecommendation
from src.observability.metrics import record_upstream_error

logger = logging.getLogger(__name__)

NEUTRAL_TARGETS = {"valence": 0.5, "energy": 0.5, "danceability": 0.5}

_CURATOR_SYSTEM_PROMPT = (
    "You are a music curator who provides song recommendations and audio feature "
    "targets in valid JSON format. Always use double quotes for all keys and string "
    "values. Use numbers without quotes for numeric values."
)
_DESCRIPTION_SYSTEM_PROMPT = (
    "You write short, spoiler-free book descriptions for readers choosing what to read next."
)


def neutral_suggestion() -> CuratorSuggestion:
    return CuratorSuggestion(audio_targets=dict(NEUTRAL_TARGETS))


def template_description(
    title: str,
    author: Optional[str] = None,
    genre: Optional[str] = None,
    additional_info: Optional[str] = None,
) -> str:
    """Deterministic description used when no model is configured."""
    author_text = f" by {author}" if author else ""
    genre_text = f" in the {genre} genre" if genre else ""
    parts = [
        f'"{title}"{author_text} is a captivating work{genre_text} that takes readers '
        "on an unforgettable journey.",
        "The story unfolds with rich character development and immersive world-building "
        "that keeps readers engaged from the first page to the last. The narrative "
        "explores themes of identity, connection, and transformation.",
    ]
    if additional_info:
        parts.append(f"Additional context: {additional_info}")
    parts.append(
        "This book is perfect for readers who enjoy thoughtful storytelling with "
        "emotional depth and memorable characters."
    )
    return "\n\n".join(parts)


def _curator_prompt(book: Book) -> str:
    return (
        "You are an expert music curator who specializes in creating playlists that "
        "match the mood, themes, and style of books.\n\n"
        "For the following book, recommend 10-15 specific songs that would make an "
        "excellent accompanying playlist, and suggest target audio feature values "
        "(from 0.0 to 1.0) that best match the book's mood.\n\n"
        f"Book Title: {book.title}\n"
        f"Author: {book.author}\n"
        f"Genre: {book.primary_genre or 'Unknown'}\n"
        f"Description: {book.description}\n\n"
        "Format the response as a JSON object with:\n"
        '1. A "songRecommendations" array of objects with "title", "artist" and "reason"\n'
        '2. An "audioFeatureTargets" object with "valence", "energy" and "danceability" '
        "between 0.0 and 1.0\n"
        '3. A "themes" array with the key themes that informed the selection\n'
        '4. A "moodDescription" string capturing the overall mood'
    )


def _clamp_targets(raw: Any) -> Dict[str, float]:
    targets = dict(NEUTRAL_TARGETS)
    if not isinstance(raw, dict):
        return targets
    for key in NEUTRAL_TARGETS:
        try:
            value = float(raw.get(key))
        except (TypeError, ValueError):
            continue
        targets[key] = max(0.0, min(1.0, value))
    return targets


def parse_suggestion(content: str) -> CuratorSuggestion:
    """Parse the model's JSON reply; raises ValueError on malformed content."""
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError("curator reply is not a JSON object")
    songs = []
    for entry in data.get("songRecommendations") or []:
        if not isinstance(entry, dict):
            continue
        try:
            songs.append(SongRecommendation.model_validate(entry))
        except ValidationError:
            logger.debug("Skipping malformed song recommendation: %s", entry)
    return CuratorSuggestion(
        songs=songs,
        audio_targets=_clamp_targets(data.get("audioFeatureTargets")),
        themes=[str(theme) for theme in data.get("themes") or []],
        mood_description=str(data.get("moodDescription") or "Balanced and neutral"),
    )


class BookCurator:
    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = "gpt-3.5-turbo",
        timeout: float = 30.0,
        client: Optional[Any] = None,
    ) -> None:
        self.model = model
        self._client = client
        if self._client is None and api_key:
            self._client = openai.OpenAI(api_key=api_key, timeout=timeout)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def generate_description(
        self,
        title: str,
        author: Optional[str] = None,
        genre: Optional[str] = None,
        additional_info: Optional[str] = None,
    ) -> str:
        fallback = template_description(title, author, genre, additional_info)
        if not self.enabled:
            return fallback

        details = [f"Title: {title}"]
        if author:
            details.append(f"Author: {author}")
        if genre:
            details.append(f"Genre: {genre}")
        if additional_info:
            details.append(f"Additional context: {additional_info}")
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": _DESCRIPTION_SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": "Write a three-paragraph description of this book.\n"
                        + "\n".join(details),
                    },
                ],
                temperature=0.7,
            )
            content = (response.choices[0].message.content or "").strip()
        except openai.OpenAIError as exc:
            logger.error("OpenAI description request failed: %s", exc)
            record_upstream_error("openai")
            return fallback
        return content or fallback

    def suggest_songs(self, book: Book) -> CuratorSuggestion:
        if not self.enabled:
            return neutral_suggestion()
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": _CURATOR_SYSTEM_PROMPT},
                    {"role": "user", "content": _curator_prompt(book)},
                ],
                response_format={"type": "json_object"},
                temperature=0.5,
            )
            content = response.choices[0].message.content or ""
        except openai.OpenAIError as exc:
            logger.error("OpenAI curator request failed for %r: %s", book.title, exc)
            record_upstream_error("openai")
            return neutral_suggestion()

        try:
            return parse_suggestion(content)
        except ValueError as exc:
            # json.JSONDecodeError is a ValueError
            logger.error("Could not parse curator reply: %s; raw: %s", exc, content[:500])
            return neutral_suggestion()


__all__ = [
    "BookCurator",
    "NEUTRAL_TARGETS",
    "neutral_suggestion",
    "parse_suggestion",
    "template_description",
]
