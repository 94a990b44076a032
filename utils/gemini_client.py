import json
import logging
import re

import google.generativeai as genai

import config

logger = logging.getLogger(__name__)

JSON_PREAMBLE = """
You must return ONLY valid JSON.
Do not wrap output in markdown or code blocks.
Do not add explanations.
Do not include extra keys.

"""


class GeminiError(Exception):
    pass


def _clean(raw: str) -> str:
    cleaned = re.sub(r"```json\n?", "", raw)
    cleaned = re.sub(r"```\n?", "", cleaned)
    # trailing commas before a closing bracket
    cleaned = re.sub(r",(?=\s*[}\]])", "", cleaned)
    return cleaned.replace("\n", " ").strip()


def parse_model_output(raw):
    """Parse a model reply as JSON; hand back the raw text when it isn't."""
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(_clean(raw))
    except ValueError as e:
        logger.warning(f"Failed to parse Gemini response: {e}")
        return raw


def generate_with_gemini(prompt: str, api_key: str = None, model: str = None):
    api_key = api_key or config.GEMINI_API_KEY
    if not api_key:
        raise GeminiError("Missing Gemini API Key")

    try:
        genai.configure(api_key=api_key.strip())
        model_obj = genai.GenerativeModel(model_name=model or config.GEMINI_MODEL)
        response = model_obj.generate_content(
            JSON_PREAMBLE + prompt,
            generation_config=genai.types.GenerationConfig(
                temperature=0.2,
                top_p=0.9,
                top_k=40,
            ),
        )
        raw = response.text
    except Exception as e:
        logger.error(f"Gemini API Error: {e}")
        raise GeminiError("Gemini request failed") from e

    return parse_model_output(raw)
