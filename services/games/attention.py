import random
from typing import Any, Dict

from models.results import DIGIT_SPAN, new_game_result
from repositories.game_results_repository import GameResultRepository
from services.embeddings import generate_game_embedding

DIGIT_SPAN_QUESTION = "Memorize the digits shown in order. You must repeat them in the same order."


def generate_digit_span(length: int = 6) -> Dict[str, Any]:
    digits = [random.randint(0, 9) for _ in range(length)]
    return {"question": DIGIT_SPAN_QUESTION, "data": {"digits": digits}}


def is_digit_span_correct(shown, user_digits, direction: str = "forward") -> bool:
    expected = list(shown) if direction == "forward" else list(reversed(shown))
    return expected == list(user_digits)


def save_digit_span_result(db, user_id, data: Dict[str, Any]) -> Dict[str, Any]:
    shown = data.get("shownDigits") or []
    user_digits = data.get("userDigits") or []
    direction = data.get("direction") or "forward"
    reaction_time = data.get("reactionTime")

    correct = is_digit_span_correct(shown, user_digits, direction)
    accuracy = 1 if correct else 0
    errors = [] if correct else ["wrong_order"]

    doc = new_game_result(
        user_id, DIGIT_SPAN,
        input_data={"shownDigits": shown, "direction": direction},
        user_response={"userDigits": user_digits},
        accuracy=accuracy,
        reaction_time=reaction_time,
        errors=errors,
        embedding=generate_game_embedding(DIGIT_SPAN, accuracy, reaction_time, errors),
    )
    return GameResultRepository(db).save_result(doc)
