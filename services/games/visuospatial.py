import logging
import random
import re
from typing import Any, Dict

from data.visuospatial_images import VISUOSPATIAL_IMAGES
from models.results import MENTAL_ROTATION, new_visuospatial_result, utcnow
from repositories.game_results_repository import VisuospatialResultRepository
from services.embeddings import generate_game_embedding
from utils.gemini_client import generate_with_gemini, GeminiError

logger = logging.getLogger(__name__)

QUESTIONS_PER_SESSION = 3

FALLBACK_INSTRUCTION = (
    "Look at this image carefully and describe in detail what you see. Be specific about "
    "objects, people, colors, and any other details you notice."
)

INSTRUCTION_PROMPT = """
You are a clinical neuropsychologist conducting a visual perception test.
Write a clear, one-sentence instruction (max 30 words) asking a patient to describe what they see in an image.
The instruction should encourage detailed observation and help detect visual hallucinations.
Return ONLY the instruction text, no JSON, no markdown, just the instruction.
"""


def _instruction_from(result) -> str:
    if isinstance(result, str):
        cleaned = re.sub(r"```(?:json)?\n?", "", result).replace('"', "")
        return cleaned.strip()
    if isinstance(result, dict):
        for key in ("text", "instruction", "content", "message"):
            value = result.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return ""


def get_clinician_instruction() -> str:
    try:
        instruction = _instruction_from(generate_with_gemini(INSTRUCTION_PROMPT))
    except GeminiError as e:
        logger.warning(f"Using fallback visuospatial instruction: {e}")
        return FALLBACK_INSTRUCTION
    return instruction or FALLBACK_INSTRUCTION


def generate_visuospatial_session() -> Dict[str, Any]:
    count = min(QUESTIONS_PER_SESSION, len(VISUOSPATIAL_IMAGES))
    images = random.sample(VISUOSPATIAL_IMAGES, count)
    instruction = get_clinician_instruction()
    questions = [
        {"id": idx, "question": instruction, "data": {"imageUrl": image_url}}
        for idx, image_url in enumerate(images, start=1)
    ]
    return {"questions": questions}


def save_visuospatial_result(db, user_id, data: Dict[str, Any]) -> Dict[str, Any]:
    reaction_time = data.get("reactionTime")
    now = utcnow()
    # descriptions have no right answer, so they are embedded as fully accurate
    embedding = generate_game_embedding(MENTAL_ROTATION, 1, reaction_time, [], timestamp=now)
    doc = new_visuospatial_result(
        user_id,
        data.get("questionId"),
        data.get("imageUrl"),
        data.get("userDescription"),
        reaction_time=reaction_time,
        embedding=embedding,
        timestamp=now,
    )
    return VisuospatialResultRepository(db).save_result(doc)
