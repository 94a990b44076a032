import logging
from typing import Any, Dict, List

from models.results import WORD_LIST, new_game_result
from repositories.game_results_repository import GameResultRepository
from services.embeddings import generate_game_embedding
from utils.gemini_client import generate_with_gemini, GeminiError

logger = logging.getLogger(__name__)

WORD_COUNT = 8
WORD_LIST_QUESTION = "Remember the following words. You will be asked to recall them later."

WORD_LIST_PROMPT = """
Generate exactly 8 simple English nouns.

Return ONLY this JSON:
{
  "words": ["word1", "word2", "word3", "word4", "word5", "word6", "word7", "word8"]
}
"""


def generate_word_list() -> Dict[str, Any]:
    """
    Ask Gemini for a fresh list of nouns to memorise.

    Raises:
        GeminiError: when the model is unreachable or returns no word list.
    """
    result = generate_with_gemini(WORD_LIST_PROMPT)
    words = result.get("words") if isinstance(result, dict) else None
    if not isinstance(words, list) or not words:
        logger.error(f"Unexpected word list reply from Gemini: {result!r}")
        raise GeminiError("Gemini returned no word list")
    return {"question": WORD_LIST_QUESTION, "data": {"words": words[:WORD_COUNT]}}


def score_recall(shown: List[str], recalled: List[str]):
    correct = sum(1 for word in recalled if word in shown)
    accuracy = correct / len(shown) if shown else 0
    missed = [word for word in shown if word not in recalled]
    return accuracy, missed


def save_word_recall_result(db, user_id, data: Dict[str, Any]) -> Dict[str, Any]:
    shown = data.get("shownWords") or []
    recalled = data.get("recalledWords") or []
    reaction_time = data.get("reactionTime")

    accuracy, missed = score_recall(shown, recalled)

    doc = new_game_result(
        user_id, WORD_LIST,
        input_data={"shownWords": shown},
        user_response={"recalledWords": recalled},
        accuracy=accuracy,
        reaction_time=reaction_time,
        errors=missed,
        embedding=generate_game_embedding(WORD_LIST, accuracy, reaction_time, missed),
    )
    return GameResultRepository(db).save_result(doc)
