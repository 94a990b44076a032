import logging
from datetime import datetime, timezone

from flask import Blueprint, request, jsonify, g

from db import get_db
from middlewares.auth import require_auth
from middlewares.rate_limit import require_rate_limit
from services.games.attention import generate_digit_span, save_digit_span_result
from services.games.executive import generate_stroop_stimulus, save_stroop_result
from services.games.memory import generate_word_list, save_word_recall_result
from services.games.results import get_results_for_day
from services.games.visuospatial import generate_visuospatial_session, save_visuospatial_result
from utils.api_response import serialize
from utils.gemini_client import GeminiError

logger = logging.getLogger(__name__)

games_bp = Blueprint("games", __name__, url_prefix="/api/games")


def _body():
    return request.get_json(silent=True) or {}


def _missing(body, fields):
    return [f for f in fields if body.get(f) in (None, "")]


def _parse_date(value) -> datetime:
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).replace(tzinfo=None)
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    # stored timestamps are naive UTC
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


# ─── Attention ──────────────────────────────────────────────────────────────

@games_bp.route("/attention/digitspan", methods=["GET"])
@require_auth
def digit_span_question():
    return jsonify(generate_digit_span())


@games_bp.route("/attention/digitspan", methods=["POST"])
@require_auth
def digit_span_answer():
    body = _body()
    if not isinstance(body.get("shownDigits"), list) or not isinstance(body.get("userDigits"), list):
        return jsonify({"message": "shownDigits and userDigits are required"}), 400
    result = save_digit_span_result(get_db(), g.user["id"], body)
    return jsonify({"result": serialize(result)})


# ─── Executive ──────────────────────────────────────────────────────────────

@games_bp.route("/executive/stroop", methods=["GET"])
@require_auth
def stroop_question():
    return jsonify(generate_stroop_stimulus())


@games_bp.route("/executive/stroop", methods=["POST"])
@require_auth
def stroop_answer():
    body = _body()
    if _missing(body, ["word", "inkColor", "userAnswer"]):
        return jsonify({"message": "Missing required Stroop fields"}), 400
    result = save_stroop_result(get_db(), g.user["id"], body)
    return jsonify({"result": serialize(result)})


# ─── Memory ─────────────────────────────────────────────────────────────────

@games_bp.route("/memory/wordlist", methods=["GET"])
@require_auth
def word_list_question():
    try:
        return jsonify(generate_word_list())
    except GeminiError as e:
        logger.error(f"Word list generation failed: {e}")
        return jsonify({"message": "Failed to generate word list"}), 502


@games_bp.route("/memory/wordlist", methods=["POST"])
@require_auth
def word_list_answer():
    body = _body()
    shown = body.get("shownWords")
    recalled = body.get("recalledWords")
    if not isinstance(shown, list) or not shown or not isinstance(recalled, list):
        return jsonify({"message": "shownWords and recalledWords are required"}), 400
    result = save_word_recall_result(get_db(), g.user["id"], body)
    return jsonify({"result": serialize(result)})


# ─── Results ────────────────────────────────────────────────────────────────

@games_bp.route("/results", methods=["POST"])
@require_auth
def results_by_day():
    date = _body().get("date")
    if not date:
        return jsonify({"message": "Date is required"}), 400
    try:
        day = _parse_date(date)
    except (TypeError, ValueError, OverflowError, OSError):
        return jsonify({"message": "Invalid date format"}), 400

    try:
        results = get_results_for_day(get_db(), g.user["id"], day)
    except Exception as e:
        logger.error(f"Failed to fetch results: {str(e)}")
        return jsonify({"message": "Failed to fetch results"}), 500
    return jsonify(serialize(results))


# ─── Visuospatial ───────────────────────────────────────────────────────────

@games_bp.route("/visuospatial/mental-rotation", methods=["GET"])
@require_rate_limit
@require_auth
def visuospatial_session():
    return jsonify(generate_visuospatial_session())


@games_bp.route("/visuospatial/mental-rotation/<item_id>", methods=["GET"])
@require_rate_limit
@require_auth
def visuospatial_item(item_id):
    logger.debug(f"Visuospatial session requested for item {item_id}")
    return jsonify(generate_visuospatial_session())


@games_bp.route("/visuospatial/mental-rotation", methods=["POST"])
@require_rate_limit
@require_auth
def visuospatial_answer():
    body = _body()
    if _missing(body, ["imageUrl", "userDescription"]):
        return jsonify({"message": "imageUrl and userDescription are required"}), 400
    result = save_visuospatial_result(get_db(), g.user["id"], body)
    return jsonify({"result": serialize(result)})
