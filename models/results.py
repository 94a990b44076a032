"""
Document shapes for the result collections.

Builders fill the same defaults the collections are expected to hold so the
retrieval filters (diseaseType, timestamp, embedding) always find the fields.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

DIGIT_SPAN = "attention_digitspan"
STROOP = "executive_stroop"
WORD_LIST = "memory_wordlist"
MENTAL_ROTATION = "visuospatial_mentalrotation"

GAME_TYPES = [DIGIT_SPAN, STROOP, WORD_LIST, MENTAL_ROTATION]

ALZHEIMERS_GAMES = [DIGIT_SPAN, WORD_LIST]
DEMENTIA_GAMES = [STROOP, MENTAL_ROTATION]

DISEASE_TYPES = ["alzheimers", "dementia", "stress", "depression", "diabetes", "heart"]

GAME_DISEASE = {
    DIGIT_SPAN: "alzheimers",
    WORD_LIST: "alzheimers",
    STROOP: "dementia",
    MENTAL_ROTATION: "dementia",
}

HEART_FIELDS = [
    "age", "sex", "cp", "trestbps", "chol", "fbs", "restecg", "thalach",
    "exang", "oldpeak", "slope", "ca", "thal",
]
DIABETES_FIELDS = [
    "Pregnancies", "Glucose", "BloodPressure", "SkinThickness", "Insulin",
    "BMI", "DiabetesPedigreeFunction", "Age_diabetes",
]
LIFESTYLE_FIELDS = [
    "daily_sleep_hours", "daily_steps", "daily_exercise_minutes",
    "daily_stress_score", "water_intake_liters", "calories_consumed",
]
HEALTH_REQUIRED_FIELDS = HEART_FIELDS + DIABETES_FIELDS


def utcnow() -> datetime:
    # naive UTC, which is what pymongo hands back from the server
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _stamped(doc: Dict[str, Any], timestamp: Optional[datetime]) -> Dict[str, Any]:
    now = utcnow()
    doc["timestamp"] = timestamp or now
    doc["createdAt"] = now
    doc["updatedAt"] = now
    return doc


def new_game_result(user_id, game_type: str, input_data: Dict, user_response: Dict,
                    accuracy: float, reaction_time=None, errors: List[str] = None,
                    embedding: List[float] = None, disease_type: Optional[str] = None,
                    timestamp: datetime = None) -> Dict[str, Any]:
    doc = {
        "userId": user_id,
        "gameType": game_type,
        "inputData": input_data,
        "userResponse": user_response,
        "accuracy": accuracy,
        "reactionTime": reaction_time,
        "errors": errors or [],
        "diseaseType": disease_type if disease_type is not None else GAME_DISEASE.get(game_type),
    }
    if embedding:
        doc["embedding"] = embedding
    return _stamped(doc, timestamp)


def new_visuospatial_result(user_id, question_id, image_url: str, description: str,
                            reaction_time=None, embedding: List[float] = None,
                            timestamp: datetime = None) -> Dict[str, Any]:
    doc = {
        "userId": user_id,
        "questionId": question_id,
        "baseImageUrl": image_url,
        "userAnswer": description,
        "userDescription": description,
        "isCorrect": None,
        "reactionTime": reaction_time,
        "mistakes": [],
        "diseaseType": "dementia",
    }
    if embedding:
        doc["embedding"] = embedding
    return _stamped(doc, timestamp)


def new_questionnaire_result(user_id, session_id: str, question_id, question_text: str, answer: str,
                             video_analysis=None, keystroke_analysis=None,
                             embedding: List[float] = None, timestamp: datetime = None) -> Dict[str, Any]:
    doc = {
        "userId": user_id,
        "sessionId": session_id,
        "questionId": question_id,
        "questionText": question_text,
        "answer": answer,
        "videoAnalysis": video_analysis,
        "keystrokeAnalysis": keystroke_analysis,
        "diseaseType": ["stress", "depression"],
    }
    if embedding:
        doc["embedding"] = embedding
    return _stamped(doc, timestamp)


def new_health_prediction(user_id, input_data: Dict, ml_output: Dict, grok_insights: str = "",
                          embedding: List[float] = None, timestamp: datetime = None) -> Dict[str, Any]:
    doc = {
        "userId": user_id,
        "input": input_data,
        "ml_output": ml_output,
        "grok_insights": grok_insights or "",
        "diseaseType": ["diabetes", "heart"],
    }
    if embedding:
        doc["embedding"] = embedding
    return _stamped(doc, timestamp)
