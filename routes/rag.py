import logging
from datetime import timedelta

from flask import Blueprint, request, g

from db import get_db
from middlewares.auth import require_auth
from models.results import DISEASE_TYPES, utcnow
from services import rag
from services.retrieval import RetrievalService
from utils.api_response import success, failure, respond
from utils.groq_client import GroqAPIError

logger = logging.getLogger(__name__)

rag_bp = Blueprint("rag", __name__, url_prefix="/api/rag")


@rag_bp.route("/report", methods=["GET"])
@require_auth
def report():
    disease_type = request.args.get("diseaseType") or None
    if disease_type and disease_type not in DISEASE_TYPES:
        return respond(failure(f"Unknown diseaseType: {disease_type}", 400))
    days = request.args.get("days", 30, type=int)

    user_id = g.user["id"]
    end = utcnow()
    retrieval = RetrievalService(get_db())

    try:
        docs = retrieval.retrieve_documents(
            user_id, disease_type=disease_type, time_range=(end - timedelta(days=days), end), limit=20,
        )
        risk_profile = retrieval.get_user_risk_profile(user_id)
        report_text = rag.generate_health_report(user_id, docs, disease_type)
        suggestions = rag.generate_game_suggestions(user_id, docs, risk_profile)
    except GroqAPIError as e:
        logger.error(f"RAG report error: {str(e)}")
        return respond(failure(str(e), 500))

    return respond(success({
        "report": report_text,
        "riskProfile": risk_profile,
        "suggestions": suggestions,
        "retrievedDocsCount": len(docs),
    }))


@rag_bp.route("/questions", methods=["GET"])
@require_auth
def questions():
    count = request.args.get("count", 3, type=int)
    user_id = g.user["id"]
    end = utcnow()

    try:
        docs = RetrievalService(get_db()).retrieve_documents(
            user_id, time_range=(end - timedelta(days=30), end), limit=10,
        )
        generated = rag.generate_dynamic_questions(user_id, docs, count)
    except GroqAPIError as e:
        logger.error(f"Dynamic questions error: {str(e)}")
        return respond(failure(str(e), 500))

    return respond(success({"questions": generated}))
