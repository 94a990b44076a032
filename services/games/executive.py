import random
from typing import Any, Dict

from models.results import STROOP, new_game_result
from repositories.game_results_repository import GameResultRepository
from services.embeddings import generate_game_embedding

COLORS = ["red", "blue", "green", "yellow"]
STROOP_QUESTION = "Select the COLOR of the text, not the word itself."


def _stroop_pair() -> Dict[str, str]:
    return {"word": random.choice(COLORS), "inkColor": random.choice(COLORS)}


def generate_stroop_stimulus() -> Dict[str, Any]:
    questions = [
        {
            "id": n,
            "question": STROOP_QUESTION,
            "data": _stroop_pair(),
            "meta": {"rule": "choose ink color", "interference": True},
        }
        for n in (1, 2, 3)
    ]
    return {"questions": questions}


def save_stroop_result(db, user_id, data: Dict[str, Any]) -> Dict[str, Any]:
    ink_color = data.get("inkColor")
    reaction_time = data.get("reactionTime")

    correct = data.get("userAnswer") == ink_color
    accuracy = 1 if correct else 0
    errors = [] if correct else ["interference_error"]

    doc = new_game_result(
        user_id, STROOP,
        input_data={"questionId": data.get("questionId"), "word": data.get("word"), "inkColor": ink_color},
        user_response={"userAnswer": data.get("userAnswer")},
        accuracy=accuracy,
        reaction_time=reaction_time,
        errors=errors,
        embedding=generate_game_embedding(STROOP, accuracy, reaction_time, errors),
    )
    return GameResultRepository(db).save_result(doc)
