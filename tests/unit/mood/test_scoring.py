import pytest
from hypothesis import given, strategies as st

from src.domain.mood import GENRE_TARGETS, feature_score, rank_tracks, score_track, score_tracks
from src.domain.mood.scoring import NEUTRAL_SCORE, target_from_values
from src.models.dto import AudioFeatures, FeatureRange
from tests.support.stubs import make_track

unit_interval = st.floats(min_value=0.0, max_value=1.0, allow_nan=False)


@pytest.mark.unit
def test_target_distance_scores():
    assert feature_score(0.6, FeatureRange(target=0.6)) == pytest.approx(1.0)
    assert feature_score(0.9, FeatureRange(target=0.3, max=0.5)) == pytest.approx(0.4)


@pytest.mark.unit
def test_min_and_max_bounds_without_target():
    assert feature_score(0.25, FeatureRange(min=0.5)) == pytest.approx(0.5)
    assert feature_score(0.75, FeatureRange(max=0.5)) == pytest.approx(0.5)
    assert feature_score(0.4, FeatureRange(min=0.2, max=0.6)) == pytest.approx(1.0)
    assert feature_score(0.4, FeatureRange()) == pytest.approx(1.0)


@pytest.mark.unit
def test_exact_target_values_score_at_maximum():
    fantasy = GENRE_TARGETS["fantasy"]
    features = AudioFeatures(id="t1", valence=0.6, energy=0.7)
    assert score_track(features, fantasy) == pytest.approx(1.0)


@pytest.mark.unit
def test_per_feature_scores_are_multiplied():
    fantasy = GENRE_TARGETS["fantasy"]
    features = AudioFeatures(id="t1", valence=0.1, energy=0.2)
    # (1 - 0.5) * (1 - 0.5)
    assert score_track(features, fantasy) == pytest.approx(0.25)


@pytest.mark.unit
def test_missing_features_score_neutral():
    target = GENRE_TARGETS["thriller"]
    assert score_track(None, target) == NEUTRAL_SCORE
    assert score_track(AudioFeatures(id="t1"), target) == NEUTRAL_SCORE


@pytest.mark.unit
def test_partial_features_only_score_measured_dimensions():
    target = GENRE_TARGETS["default"]
    assert score_track(AudioFeatures(id="t1", valence=0.5), target) == pytest.approx(1.0)


@pytest.mark.unit
def test_rank_orders_by_score_and_truncates():
    tracks = [make_track("a"), make_track("b"), make_track("c")]
    features = {
        "a": AudioFeatures(id="a", valence=0.9, energy=0.1),
        "b": AudioFeatures(id="b", valence=0.5, energy=0.7),
    }
    ranked = rank_tracks(tracks, features, "sci-fi", limit=2)
    assert [t.id for t in ranked] == ["b", "c"]


@pytest.mark.unit
def test_rank_is_stable_under_input_reordering():
    tracks = [make_track(tid) for tid in ("d", "a", "c", "b")]
    first = rank_tracks(tracks, {}, "mystery")
    second = rank_tracks(list(reversed(tracks)), {}, "mystery")
    assert [t.id for t in first] == [t.id for t in second] == ["a", "b", "c", "d"]


@pytest.mark.unit
def test_rank_with_zero_limit_is_empty():
    assert rank_tracks([make_track("a")], {}, "fantasy", limit=0) == []


@pytest.mark.unit
def test_score_tracks_accepts_a_custom_target():
    target = target_from_values({"valence": 0.2, "energy": "bad", "danceability": 1.5})
    assert set(target.features) == {"valence"}
    scored = score_tracks(
        [make_track("x")],
        {"x": AudioFeatures(id="x", valence=0.2, energy=0.9)},
        target,
    )
    assert scored[0][1] == pytest.approx(1.0)


@pytest.mark.unit
@given(valence=unit_interval, energy=unit_interval, genre=st.sampled_from(sorted(GENRE_TARGETS)))
def test_scores_stay_within_unit_interval(valence, energy, genre):
    features = AudioFeatures(id="t", valence=valence, energy=energy)
    score = score_track(features, GENRE_TARGETS[genre])
    assert 0.0 <= score <= 1.0


@pytest.mark.unit
@given(genre=st.sampled_from(sorted(GENRE_TARGETS)))
def test_matching_every_target_is_never_beaten(genre):
    target = GENRE_TARGETS[genre]
    ideal = AudioFeatures(id="t", **{name: bounds.target for name, bounds in target.features.items()})
    assert score_track(ideal, target) == pytest.approx(1.0)
