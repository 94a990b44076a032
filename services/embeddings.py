"""
Local text embeddings for stored results.

Vectors are built from length, character-frequency and word n-gram features
followed by hash-derived filler dimensions, then L2-normalised. No external
model is involved, so the same text always maps to the same vector.
"""
import json
import math
import re
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

import numpy as np

EMBEDDING_DIMENSION = 384

_CHAR_FEATURES = 64
_NGRAM_FEATURES = 32
_DENSE_FEATURES = 132


def _int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _code_units(text: str) -> List[int]:
    data = text.encode("utf-16-le")
    return [int.from_bytes(data[i:i + 2], "little") for i in range(0, len(data), 2)]


def _hash_units(units: List[int]) -> int:
    h = 0
    for unit in units:
        h = _int32(_int32(h << 5) - h + unit)
    return abs(h)


def string_hash(text: str) -> int:
    """31-multiplier string hash over UTF-16 code units, wrapped to int32."""
    return _hash_units(_code_units(text))


def _char_frequencies(text: str) -> List[float]:
    chars = re.sub(r"\s", "", text.lower())
    total = len(chars) or 1
    counts = Counter(chars)
    ranked = sorted(counts.items(), key=lambda item: -item[1])[:_CHAR_FEATURES]
    result = [0.0] * _CHAR_FEATURES
    for idx, (_, count) in enumerate(ranked):
        result[idx] = count / total
    return result


def _word_ngrams(words: List[str], n: int) -> List[float]:
    counts = Counter(" ".join(words[i:i + n]) for i in range(len(words) - n + 1))
    total = max(len(words) - n + 1, 1)
    ranked = sorted(counts.values(), reverse=True)[:_NGRAM_FEATURES]
    return [count / total for count in ranked]


def dense_features(text: str) -> List[float]:
    """Length, character-frequency and n-gram features, zero padded to 132 values."""
    normalized = text.lower().strip()
    words = [w for w in normalized.split() if w]
    n_chars = len(normalized)

    features: List[float] = [
        min(n_chars / 1000, 1),
        min(len(words) / 100, 1),
        min(n_chars / 1000, 1),
        n_chars / len(words) if words else 0,
    ]
    features.extend(_char_frequencies(normalized))

    for n in (2, 3):
        features.extend(min(v / 10, 1) for v in _word_ngrams(words, n))
    features.extend([0.0] * (_DENSE_FEATURES - len(features)))
    return features


def generate_embedding(text: str) -> List[float]:
    """
    Compute a 384-dimensional unit vector for ``text``.

    Args:
        text: Any string, usually a compact JSON summary of a stored result.

    Returns:
        List of floats of length EMBEDDING_DIMENSION.
    """
    features = dense_features(text)

    units = _code_units(text)
    h1 = _hash_units(units)
    h2 = _hash_units(units[::-1])
    start = len(features)
    features.extend(
        math.sin((h1 + h2 + i) * 0.1) * 0.5 + 0.5
        for i in range(EMBEDDING_DIMENSION - start)
    )

    vector = np.asarray(features, dtype=float)
    magnitude = np.linalg.norm(vector)
    if magnitude > 0:
        vector = vector / magnitude
    return vector.tolist()


def _js_number(value):
    # whole floats are written as integers (1.0 -> 1)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _summary(fields: Dict[str, Any]) -> str:
    # keys with no value are left out of the summary entirely
    compact = {k: _js_number(v) for k, v in fields.items() if v is not None}
    return json.dumps(compact, separators=(",", ":"), ensure_ascii=False, default=str)


def _iso(timestamp: Optional[datetime]) -> Optional[str]:
    return timestamp.isoformat() if timestamp else None


def performance_band(accuracy) -> str:
    if not accuracy:
        return "unknown"
    if accuracy >= 0.8:
        return "good"
    if accuracy >= 0.5:
        return "moderate"
    return "poor"


def generate_game_embedding(game_type: str, accuracy=None, reaction_time=None,
                            errors=None, timestamp: datetime = None) -> List[float]:
    return generate_embedding(_summary({
        "gameType": game_type,
        "accuracy": accuracy,
        "reactionTime": reaction_time,
        "errors": errors,
        "performance": performance_band(accuracy),
        "timestamp": _iso(timestamp),
    }))


def generate_questionnaire_embedding(question_text: str, answer: str, video_analysis=None,
                                     keystroke_analysis=None,
                                     timestamp: datetime = None) -> List[float]:
    keystroke = keystroke_analysis if isinstance(keystroke_analysis, dict) else {}
    video = video_analysis if isinstance(video_analysis, dict) else {}
    overall = video.get("overall") or {}
    top_emotions = overall.get("top_emotions") or []
    emotion = "unknown"
    if top_emotions and isinstance(top_emotions[0], dict):
        emotion = top_emotions[0].get("label") or "unknown"

    return generate_embedding(_summary({
        "question": question_text,
        "answer": answer,
        "stressScore": keystroke.get("stress_score") or 0,
        "stressLabel": keystroke.get("stress_label") or "unknown",
        "emotion": emotion,
        "emotionScore": overall.get("stress_score") or 0,
        "timestamp": _iso(timestamp),
    }))


def risk_level(heart_risk, diabetes_risk) -> str:
    heart = heart_risk or 0
    diabetes = diabetes_risk or 0
    if heart > 0.7 or diabetes > 0.7:
        return "high"
    if heart > 0.4 or diabetes > 0.4:
        return "medium"
    return "low"


def generate_health_embedding(input_data: Dict, ml_output: Dict, grok_insights: str = "",
                              timestamp: datetime = None) -> List[float]:
    input_data = input_data or {}
    ml_output = ml_output or {}
    heart = ml_output.get("heart_disease_risk")
    diabetes = ml_output.get("diabetes_risk")
    return generate_embedding(_summary({
        "heartRisk": heart,
        "diabetesRisk": diabetes,
        "riskLevel": risk_level(heart, diabetes),
        "sleepHours": input_data.get("daily_sleep_hours"),
        "steps": input_data.get("daily_steps"),
        "exercise": input_data.get("daily_exercise_minutes"),
        "stress": input_data.get("daily_stress_score"),
        "insights": (grok_insights or "")[:200],
        "timestamp": _iso(timestamp),
    }))


def cosine_similarity(a: List[float], b: List[float]) -> float:
    if not a or not b or len(a) != len(b):
        return 0.0
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    denominator = np.linalg.norm(va) * np.linalg.norm(vb)
    if denominator == 0:
        return 0.0
    return float(np.dot(va, vb) / denominator)


def compute_average_embedding(embeddings: List[List[float]]) -> List[float]:
    """Element-wise mean of ``embeddings``, normalised; a zero vector when empty."""
    if not embeddings:
        return [0.0] * EMBEDDING_DIMENSION
    mean = np.mean(np.asarray(embeddings, dtype=float), axis=0)
    magnitude = np.linalg.norm(mean)
    if magnitude > 0:
        mean = mean / magnitude
    return mean.tolist()
