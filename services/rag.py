import logging
import re
from typing import Any, Dict, List, Optional

from models.results import DIGIT_SPAN, WORD_LIST, STROOP, MENTAL_ROTATION
from utils.groq_client import get_groq_client

logger = logging.getLogger(__name__)

# ─── Prompts ────────────────────────────────────────────────────────────────

BASE_PROMPT = (
    "You are HealthAI Guardian, an AI health assistant specializing in cognitive health, "
    "mental wellness, and chronic disease management. You analyze user data from cognitive "
    "games, questionnaires, and health metrics to provide personalized insights and recommendations."
)

DISEASE_PROMPTS = {
    "alzheimers": (
        "Focus on attention and memory patterns. Alzheimer's disease affects memory, attention, "
        "and cognitive function. Look for declining patterns in digit span and word list recall games."
    ),
    "dementia": (
        "Focus on executive function and visuospatial abilities. Dementia affects planning, "
        "problem-solving, and spatial awareness. Analyze Stroop test and mental rotation game performance."
    ),
    "stress": (
        "Focus on stress indicators from questionnaires, keystroke dynamics, and facial emotion "
        "analysis. Look for patterns of elevated stress scores and emotional responses."
    ),
    "depression": (
        "Focus on mood indicators, questionnaire responses, and emotional patterns. Analyze "
        "sentiment in answers and emotional detection from video analysis."
    ),
    "diabetes": (
        "Focus on diabetes risk factors, glucose levels, lifestyle factors, and daily habits. "
        "Provide recommendations for diet, exercise, and monitoring."
    ),
    "heart": (
        "Focus on heart disease risk factors, blood pressure, cholesterol, and cardiovascular "
        "health metrics. Provide lifestyle recommendations for heart health."
    ),
}

CARE_REMINDER = (
    "Always provide evidence-based recommendations and encourage users to consult "
    "healthcare professionals for serious concerns."
)

REPORT_QUERY = (
    "Generate a comprehensive health report analyzing the user's cognitive performance, "
    "stress levels, and health metrics. Compare current performance with historical data "
    "and provide actionable recommendations."
)

SUGGESTIONS_QUERY = """Based on the user's risk profile ({risk_text}) and historical performance data, suggest which cognitive games and modules would be most beneficial. Consider:
- Attention & Memory games for Alzheimer's risk
- Executive Function & Visuospatial games for Dementia risk
- Questionnaires for Stress & Depression assessment
- Health monitoring for Diabetes and Heart disease

Provide specific game recommendations with reasoning."""

QUESTIONS_QUERY = (
    "Based on the user's previous responses and performance patterns, generate {count} "
    "personalized questions that would help assess their current mental health, stress levels, "
    "and cognitive function. Make questions specific to their patterns and concerns."
)

FALLBACK_QUESTIONS = [
    "How has your sleep quality been in the past week?",
    "What activities have you found most challenging recently?",
    "How would you describe your current energy levels?",
]

# keyword found in the model's answer -> module it points at
GAME_KEYWORDS = [
    ("digit span", DIGIT_SPAN),
    ("word list", WORD_LIST),
    ("memory", WORD_LIST),
    ("stroop", STROOP),
    ("executive", STROOP),
    ("visuospatial", MENTAL_ROTATION),
    ("mental rotation", MENTAL_ROTATION),
    ("questionnaire", "questionnaire"),
]

_QUESTION_MARKER = re.compile(r"^(?:[-•]|\d+[.)])\s*")


def get_system_prompt(disease_type: Optional[str] = None) -> str:
    disease_prompt = DISEASE_PROMPTS.get(disease_type, "") if disease_type else ""
    return f"{BASE_PROMPT}\n\n{disease_prompt}\n\n{CARE_REMINDER}"


def _format_date(timestamp) -> str:
    if not timestamp or not hasattr(timestamp, "month"):
        return "Unknown date"
    return f"{timestamp.month}/{timestamp.day}/{timestamp.year}"


def format_retrieved_docs(docs: List[Dict[str, Any]]) -> str:
    if not docs:
        return "No previous data available."

    lines = []
    for idx, doc in enumerate(docs, start=1):
        date = _format_date(doc.get("timestamp"))
        if doc.get("gameType"):
            lines.append(f"[{idx}] Game: {doc['gameType']}, Accuracy: {doc.get('accuracy') or 'N/A'}, Date: {date}")
        elif doc.get("questionText"):
            answer = str(doc.get("answer") or "")[:100] or "N/A"
            lines.append(f"[{idx}] Question: {doc['questionText']}, Answer: {answer}, Date: {date}")
        elif doc.get("ml_output"):
            ml = doc["ml_output"]
            lines.append(
                f"[{idx}] Health: Heart Risk {ml.get('heart_disease_risk')}, "
                f"Diabetes Risk {ml.get('diabetes_risk')}, Date: {date}"
            )
        else:
            lines.append(f"[{idx}] Data from {date}")
    return "\n".join(lines)


# ─── Generation ─────────────────────────────────────────────────────────────

def generate_rag_response(query: str, docs: List[Dict[str, Any]], disease_type: Optional[str] = None,
                          client=None) -> str:
    """
    Ask Groq to answer ``query`` grounded in the user's stored documents.

    Raises:
        GroqAPIError: when the key is missing or the API call fails.
    """
    client = client or get_groq_client()
    context_text = format_retrieved_docs(docs)
    messages = [
        {"role": "system", "content": get_system_prompt(disease_type)},
        {"role": "user", "content": f"{query}\n\nContext from previous sessions:\n{context_text}"},
    ]
    return client.chat(messages, temperature=0.7, max_tokens=2000)


def generate_health_report(user_id, docs: List[Dict[str, Any]], disease_type: Optional[str] = None,
                           client=None) -> str:
    logger.info(f"Generating health report for user {user_id} from {len(docs)} documents")
    return generate_rag_response(REPORT_QUERY, docs, disease_type, client=client)


def extract_suggested_games(text: str) -> List[str]:
    lowered = text.lower()
    games: List[str] = []
    for keyword, game in GAME_KEYWORDS:
        if keyword in lowered and game not in games:
            games.append(game)
    return games


def priority_for(risk_profile: Dict[str, Optional[float]]) -> str:
    values = [v for v in risk_profile.values() if v is not None]
    max_risk = max(values) if values else 0
    if max_risk >= 0.7:
        return "high"
    if max_risk >= 0.4:
        return "medium"
    return "low"


def generate_game_suggestions(user_id, docs: List[Dict[str, Any]], risk_profile: Dict[str, float],
                              client=None) -> Dict[str, Any]:
    risk_text = ", ".join(f"{key}: {value * 100:.1f}%" for key, value in risk_profile.items())
    response = generate_rag_response(SUGGESTIONS_QUERY.format(risk_text=risk_text), docs, client=client)
    suggested = extract_suggested_games(response)
    return {
        "suggestedGames": suggested or [DIGIT_SPAN],
        "reasoning": response,
        "priority": priority_for(risk_profile),
    }


def parse_questions(text: str) -> List[str]:
    """Pull question lines (bulleted, numbered or ending in '?') out of a model reply."""
    questions = []
    for line in text.split("\n"):
        trimmed = line.strip()
        if not trimmed:
            continue
        if trimmed.startswith(("-", "•")) or re.match(r"^\d+[.)]", trimmed) or trimmed.endswith("?"):
            question = _QUESTION_MARKER.sub("", trimmed).strip()
            if question.endswith("?"):
                questions.append(question)
    return questions


def generate_dynamic_questions(user_id, docs: List[Dict[str, Any]], count: int = 3, client=None) -> List[str]:
    response = generate_rag_response(QUESTIONS_QUERY.format(count=count), docs, client=client)
    questions = parse_questions(response)
    if not questions:
        logger.warning(f"No questions parsed from model reply for user {user_id}, using fallback set")
        return list(FALLBACK_QUESTIONS)
    return questions[:count]
