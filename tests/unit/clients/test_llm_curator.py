import json

import openai
import pytest

from src.infrastructure.llm import BookCurator, NEUTRAL_TARGETS, parse_suggestion, template_description
from src.models.dto import Book
from tests.support.stubs import FakeOpenAI

REPLY = {
    "songRecommendations": [
        {"title": "Arrakis", "artist": "Hans Zimmer", "reason": "desert"},
        {"title": "no artist"},
    ],
    "audioFeatureTargets": {"valence": 0.3, "energy": 1.7, "danceability": "x"},
    "themes": ["survival"],
    "moodDescription": "Vast and ominous",
}


@pytest.mark.unit
def test_parse_suggestion_clamps_and_skips_malformed_songs():
    suggestion = parse_suggestion(json.dumps(REPLY))
    assert [s.title for s in suggestion.songs] == ["Arrakis"]
    assert suggestion.audio_targets == {"valence": 0.3, "energy": 1.0, "danceability": 0.5}
    assert suggestion.themes == ["survival"]
    assert suggestion.mood_description == "Vast and ominous"


@pytest.mark.unit
def test_parse_suggestion_rejects_non_json():
    with pytest.raises(ValueError):
        parse_suggestion("not json")


@pytest.mark.unit
def test_suggest_songs_uses_json_response_format():
    fake = FakeOpenAI(content=json.dumps(REPLY))
    curator = BookCurator(None, model="gpt-test", client=fake)

    suggestion = curator.suggest_songs(Book(title="Dune", author="Frank Herbert", genre="sci-fi"))

    assert suggestion.songs[0].artist == "Hans Zimmer"
    request = fake.requests[0]
    assert request["model"] == "gpt-test"
    assert request["response_format"] == {"type": "json_object"}
    assert "Dune" in request["messages"][1]["content"]


@pytest.mark.unit
@pytest.mark.parametrize(
    "fake",
    [FakeOpenAI(content="{broken"), FakeOpenAI(error=openai.OpenAIError("quota"))],
)
def test_failures_return_neutral_suggestion(fake):
    suggestion = BookCurator(None, client=fake).suggest_songs(Book(title="Dune"))
    assert suggestion.songs == []
    assert suggestion.audio_targets == NEUTRAL_TARGETS
    assert suggestion.mood_description == "Balanced and neutral"


@pytest.mark.unit
def test_disabled_curator_uses_template():
    curator = BookCurator(None)
    assert curator.enabled is False
    assert curator.generate_description("Dune") == template_description("Dune")
    assert curator.suggest_songs(Book(title="Dune")).audio_targets == NEUTRAL_TARGETS


@pytest.mark.unit
def test_generate_description_falls_back_on_error():
    fake = FakeOpenAI(error=openai.OpenAIError("down"))
    text = BookCurator(None, client=fake).generate_description("Dune", "Frank Herbert")
    assert text.startswith('"Dune" by Frank Herbert is a captivating work')


@pytest.mark.unit
def test_generate_description_returns_model_text():
    fake = FakeOpenAI(content="  A sweeping desert saga.  ")
    assert BookCurator(None, client=fake).generate_description("Dune") == "A sweeping desert saga."


@pytest.mark.unit
def test_template_mentions_genre_and_context():
    text = template_description("Dune", "Frank Herbert", "sci-fi", "Read for book club")
    assert '"Dune" by Frank Herbert is a captivating work in the sci-fi genre' in text
    assert "Additional context: Read for book club" in text
    assert "Additional context" not in template_description("Dune")
