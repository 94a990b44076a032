import logging

from flask import Blueprint, request, g

from api.ml_service import get_ml_client, MLServiceError
from db import get_db
from middlewares.auth import require_auth
from models.results import new_questionnaire_result, utcnow
from repositories.assessment_repository import QuestionnaireRepository
from services.embeddings import generate_questionnaire_embedding
from utils.api_response import success, failure, respond

logger = logging.getLogger(__name__)

questionnaire_bp = Blueprint("questionnaire", __name__, url_prefix="/api/questionnaire")

SAVE_REQUIRED = ["sessionId", "questionId", "questionText", "answer"]


@questionnaire_bp.route("/start", methods=["POST"])
@require_auth
def start_session():
    body = request.get_json(silent=True) or {}
    try:
        data = get_ml_client().start_session(g.user["id"], body)
    except MLServiceError as e:
        return respond(failure(e.message, e.status_code))
    return respond(success(data))


@questionnaire_bp.route("/submit", methods=["POST"])
@require_auth
def submit_question():
    form = request.form.to_dict()
    files = {
        name: (upload.filename, upload.stream, upload.mimetype)
        for name, upload in request.files.items()
    }
    try:
        data = get_ml_client().submit_question(form, files)
    except MLServiceError as e:
        return respond(failure(e.message, e.status_code))
    return respond(success(data))


@questionnaire_bp.route("/session/<session_id>", methods=["GET"])
@require_auth
def get_session(session_id):
    try:
        data = get_ml_client().get_session(session_id)
    except MLServiceError as e:
        return respond(failure(e.message, e.status_code))
    return respond(success(data))


@questionnaire_bp.route("/save", methods=["POST"])
@require_auth
def save_answer():
    body = request.get_json(silent=True) or {}
    if any(not body.get(field) for field in SAVE_REQUIRED):
        return respond(failure(f"Missing required fields: {', '.join(SAVE_REQUIRED)}", 400))
    if not isinstance(body["questionText"], str) or not isinstance(body["answer"], str):
        return respond(failure("questionText and answer must be strings", 400))

    now = utcnow()
    embedding = generate_questionnaire_embedding(
        body["questionText"], body["answer"],
        video_analysis=body.get("videoAnalysis"),
        keystroke_analysis=body.get("keystrokeAnalysis"),
        timestamp=now,
    )
    doc = new_questionnaire_result(
        g.user["id"], body["sessionId"], body["questionId"], body["questionText"], body["answer"],
        video_analysis=body.get("videoAnalysis"),
        keystroke_analysis=body.get("keystrokeAnalysis"),
        embedding=embedding,
        timestamp=now,
    )
    try:
        result = QuestionnaireRepository(get_db()).save_result(doc)
    except Exception as e:
        logger.error(f"Save questionnaire error: {str(e)}")
        return respond(failure("Failed to save questionnaire result", 500))
    return respond(success({"result": result}))
