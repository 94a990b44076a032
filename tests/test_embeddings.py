import math

import pytest

from services.embeddings import (
    EMBEDDING_DIMENSION,
    _summary,
    dense_features,
    generate_embedding,
    generate_game_embedding,
    generate_questionnaire_embedding,
    generate_health_embedding,
    cosine_similarity,
    compute_average_embedding,
    performance_band,
    risk_level,
    string_hash,
)


def test_embedding_is_unit_vector_of_fixed_dimension():
    vector = generate_embedding("The quick brown fox jumps over the lazy dog")
    assert len(vector) == EMBEDDING_DIMENSION == 384
    assert math.isclose(sum(v * v for v in vector), 1.0, rel_tol=1e-9)


def test_embedding_is_deterministic():
    assert generate_embedding("digit span accuracy 0.5") == generate_embedding("digit span accuracy 0.5")
    assert generate_embedding("digit span") != generate_embedding("stroop test")


def test_empty_text_still_embeds():
    vector = generate_embedding("")
    assert len(vector) == EMBEDDING_DIMENSION
    assert math.isclose(sum(v * v for v in vector), 1.0, rel_tol=1e-9)


def test_string_hash_matches_31_multiplier():
    assert string_hash("") == 0
    assert string_hash("a") == 97
    assert string_hash("ab") == 97 * 31 + 98


def test_string_hash_wraps_to_int32():
    long_text = "x" * 500
    assert 0 <= string_hash(long_text) <= 2 ** 31


def test_performance_band():
    assert performance_band(None) == "unknown"
    assert performance_band(0) == "unknown"
    assert performance_band(0.3) == "poor"
    assert performance_band(0.5) == "moderate"
    assert performance_band(0.8) == "good"


def test_risk_level():
    assert risk_level(0.8, 0.1) == "high"
    assert risk_level(0.1, 0.5) == "medium"
    assert risk_level(0.1, 0.2) == "low"


def test_summary_embeddings_have_full_dimension():
    game = generate_game_embedding("attention_digitspan", 1, 1200, [])
    questionnaire = generate_questionnaire_embedding(
        "How are you?", "Tired",
        video_analysis={"overall": {"top_emotions": [{"label": "sad"}], "stress_score": 0.4}},
        keystroke_analysis={"stress_score": 0.7, "stress_label": "high"},
    )
    health = generate_health_embedding(
        {"daily_sleep_hours": 6}, {"heart_disease_risk": 0.2, "diabetes_risk": 0.8}, "x" * 500,
    )
    for vector in (game, questionnaire, health):
        assert len(vector) == EMBEDDING_DIMENSION


def test_cosine_similarity_edge_cases():
    assert cosine_similarity([], [1.0]) == 0.0
    assert cosine_similarity([1.0, 0.0], [1.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
    assert math.isclose(cosine_similarity([1.0, 0.0], [2.0, 0.0]), 1.0)
    assert math.isclose(cosine_similarity([1.0, 0.0], [0.0, 3.0]), 0.0)


def test_average_embedding():
    assert compute_average_embedding([]) == [0.0] * EMBEDDING_DIMENSION
    avg = compute_average_embedding([[1.0, 0.0], [0.0, 1.0]])
    assert math.isclose(avg[0], avg[1])
    assert math.isclose(avg[0] ** 2 + avg[1] ** 2, 1.0)


def test_dense_feature_values():
    features = dense_features("A b a B")
    assert len(features) == 132
    assert features[:4] == pytest.approx([0.007, 0.04, 0.007, 1.75])
    # character frequencies: a and b each make up half the non-space characters
    assert features[4:68] == pytest.approx([0.5, 0.5] + [0.0] * 62)
    # bigrams "a b" x2, "b a" x1; trigrams "a b a", "b a b"
    assert features[68:72] == pytest.approx([2 / 30, 1 / 30, 0.05, 0.05])
    assert features[72:] == [0.0] * 60


def test_dense_features_lead_the_embedding():
    text = "word list recall went well"
    dense = dense_features(text)
    vector = generate_embedding(text)
    scale = vector[0] / dense[0]
    assert [v / scale for v in vector[:132]] == pytest.approx(dense)


def test_summary_matches_json_stringify():
    assert _summary({"accuracy": 1.0, "reactionTime": 1.5, "answer": "café", "errors": None}) == \
        '{"accuracy":1,"reactionTime":1.5,"answer":"café"}'
