from datetime import datetime, timedelta

import pytest

import config
from db import GAME_RESULTS, VISUOSPATIAL_RESULTS
from models.results import DIGIT_SPAN, new_game_result
from services.embeddings import EMBEDDING_DIMENSION
from services.games import memory, visuospatial
from services.games.visuospatial import FALLBACK_INSTRUCTION
from utils.gemini_client import GeminiError


def test_games_require_auth(client):
    assert client.get("/api/games/attention/digitspan").status_code == 401


def test_digit_span_question(client, auth_headers):
    body = client.get("/api/games/attention/digitspan", headers=auth_headers).get_json()
    assert body["question"].startswith("Memorize the digits")
    assert len(body["data"]["digits"]) == 6
    assert all(0 <= d <= 9 for d in body["data"]["digits"])


@pytest.mark.parametrize("direction,user_digits,accuracy", [
    ("forward", [1, 2, 3], 1),
    ("forward", [3, 2, 1], 0),
    ("backward", [3, 2, 1], 1),
])
def test_digit_span_scoring(client, auth_headers, db, user_id, direction, user_digits, accuracy):
    resp = client.post("/api/games/attention/digitspan", headers=auth_headers, json={
        "shownDigits": [1, 2, 3], "userDigits": user_digits, "direction": direction, "reactionTime": 900,
    })
    assert resp.status_code == 200
    result = resp.get_json()["result"]
    assert result["accuracy"] == accuracy
    assert result["errors"] == ([] if accuracy else ["wrong_order"])

    stored = db[GAME_RESULTS].find_one({"userId": user_id})
    assert stored["diseaseType"] == "alzheimers"
    assert len(stored["embedding"]) == EMBEDDING_DIMENSION


def test_stroop_question_set(client, auth_headers):
    questions = client.get("/api/games/executive/stroop", headers=auth_headers).get_json()["questions"]
    assert [q["id"] for q in questions] == [1, 2, 3]
    for q in questions:
        assert q["data"]["word"] in ("red", "blue", "green", "yellow")
        assert q["meta"] == {"rule": "choose ink color", "interference": True}


def test_stroop_answer(client, auth_headers, db):
    resp = client.post("/api/games/executive/stroop", headers=auth_headers, json={
        "questionId": 1, "word": "red", "inkColor": "blue", "userAnswer": "red",
    })
    result = resp.get_json()["result"]
    assert result["accuracy"] == 0
    assert result["errors"] == ["interference_error"]
    assert result["diseaseType"] == "dementia"


def test_stroop_missing_fields(client, auth_headers):
    resp = client.post("/api/games/executive/stroop", headers=auth_headers, json={"word": "red"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Missing required Stroop fields"


def test_word_list_question(client, auth_headers, monkeypatch):
    words = ["apple", "chair", "river", "cloud", "lamp", "horse", "book", "stone"]
    monkeypatch.setattr(memory, "generate_with_gemini", lambda prompt: {"words": words})
    body = client.get("/api/games/memory/wordlist", headers=auth_headers).get_json()
    assert body["data"]["words"] == words


def test_word_list_gemini_failure(client, auth_headers, monkeypatch):
    def boom(prompt):
        raise GeminiError("Gemini request failed")
    monkeypatch.setattr(memory, "generate_with_gemini", boom)
    assert client.get("/api/games/memory/wordlist", headers=auth_headers).status_code == 502


def test_word_recall_scoring(client, auth_headers):
    resp = client.post("/api/games/memory/wordlist", headers=auth_headers, json={
        "shownWords": ["apple", "chair", "river", "cloud"],
        "recalledWords": ["apple", "river", "banana"],
    })
    result = resp.get_json()["result"]
    assert result["accuracy"] == 0.5
    assert result["errors"] == ["chair", "cloud"]


def test_word_recall_rejects_empty_list(client, auth_headers):
    resp = client.post("/api/games/memory/wordlist", headers=auth_headers, json={
        "shownWords": [], "recalledWords": ["apple"],
    })
    assert resp.status_code == 400


def test_results_by_day(client, auth_headers, db, user_id):
    day = datetime(2024, 6, 10, 15, 0)
    for ts in (day, day - timedelta(days=1), day - timedelta(days=3)):
        db[GAME_RESULTS].insert_one(new_game_result(user_id, DIGIT_SPAN, {}, {}, 1, timestamp=ts))

    resp = client.post("/api/games/results", headers=auth_headers, json={"date": "2024-06-10"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert len(body["today"]) == 1
    assert len(body["yesterday"]) == 1


def test_results_date_validation(client, auth_headers):
    assert client.post("/api/games/results", headers=auth_headers, json={}).get_json()["message"] == "Date is required"
    resp = client.post("/api/games/results", headers=auth_headers, json={"date": "not a date"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid date format"


def test_visuospatial_session_falls_back(client, auth_headers, monkeypatch):
    def boom(prompt):
        raise GeminiError("Gemini request failed")
    monkeypatch.setattr(visuospatial, "generate_with_gemini", boom)

    questions = client.get("/api/games/visuospatial/mental-rotation", headers=auth_headers).get_json()["questions"]
    assert len(questions) == 3
    assert len({q["data"]["imageUrl"] for q in questions}) == 3
    assert all(q["question"] == FALLBACK_INSTRUCTION for q in questions)


def test_visuospatial_uses_model_instruction(client, auth_headers, monkeypatch):
    monkeypatch.setattr(visuospatial, "generate_with_gemini", lambda prompt: '"Describe everything you see."')
    resp = client.get("/api/games/visuospatial/mental-rotation/abc", headers=auth_headers)
    assert resp.get_json()["questions"][0]["question"] == "Describe everything you see."


def test_visuospatial_save(client, auth_headers, db, user_id):
    resp = client.post("/api/games/visuospatial/mental-rotation", headers=auth_headers, json={
        "questionId": 1, "imageUrl": "/visuospatial/base/park.jpg", "userDescription": "Two dogs on grass",
    })
    assert resp.status_code == 200
    stored = db[VISUOSPATIAL_RESULTS].find_one({"userId": user_id})
    assert stored["userAnswer"] == stored["userDescription"] == "Two dogs on grass"
    assert stored["diseaseType"] == "dementia"
    assert len(stored["embedding"]) == EMBEDDING_DIMENSION


def test_visuospatial_rate_limited(client, auth_headers, monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT", 1)
    monkeypatch.setattr(visuospatial, "generate_with_gemini", lambda prompt: "Describe it.")
    headers = dict(auth_headers, **{"X-Forwarded-For": "10.0.0.9"})

    assert client.get("/api/games/visuospatial/mental-rotation", headers=headers).status_code == 200
    resp = client.get("/api/games/visuospatial/mental-rotation", headers=headers)
    assert resp.status_code == 429
    body = resp.get_json()
    assert body["message"] == "Too many requests. Try again later."
    assert body["retryAfter"] > 0
