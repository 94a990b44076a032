import logging

from flask import Blueprint, request, jsonify, g

from api.ml_service import get_ml_client, MLServiceError
from db import get_db
from middlewares.auth import require_auth
from models.results import HEALTH_REQUIRED_FIELDS, new_health_prediction, utcnow
from repositories.assessment_repository import HealthPredictionRepository
from services.embeddings import generate_health_embedding
from utils.api_response import success, respond, serialize

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/health")


def _store_prediction(user_id, input_data, data):
    """Persist a successful prediction; failures are logged and ignored."""
    try:
        now = utcnow()
        insights = data.get("grok_insights") or ""
        embedding = generate_health_embedding(input_data, data["ml_output"], insights, timestamp=now)
        doc = new_health_prediction(user_id, input_data, data["ml_output"], insights,
                                    embedding=embedding, timestamp=now)
        HealthPredictionRepository(get_db()).save_prediction(doc)
    except Exception as e:
        logger.error(f"Failed to save health prediction: {str(e)}")


@health_bp.route("/predict", methods=["POST"])
@require_auth
def predict():
    body = request.get_json(silent=True) or {}
    input_data = body.get("input") or body
    missing = [field for field in HEALTH_REQUIRED_FIELDS if field not in input_data]
    if missing:
        return jsonify({"success": False, "message": f"Missing required fields: {', '.join(missing)}"}), 400

    try:
        data = get_ml_client().predict_health(input_data)
    except MLServiceError as e:
        return jsonify({"success": False, "message": e.message}), e.status_code

    if data.get("ok") and data.get("ml_output"):
        _store_prediction(g.user["id"], data.get("input") or input_data, data)

    return jsonify({"success": True, "data": serialize(data)})


@health_bp.route("/predictions", methods=["GET"])
@require_auth
def list_predictions():
    limit = request.args.get("limit", 10, type=int)
    newest_first = request.args.get("sort", "desc") == "desc"
    predictions = HealthPredictionRepository(get_db()).list_for_user(g.user["id"], limit, newest_first)
    return respond(success({"predictions": predictions, "count": len(predictions)}))
