from datetime import datetime, date
from bson import ObjectId
from flask import jsonify


def serialize(value):
    """Make Mongo documents JSON friendly (ObjectId -> str, datetime -> ISO)."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(v) for v in value]
    return value


def _error_message(error) -> str:
    if isinstance(error, str):
        return error or "Something went wrong"
    if isinstance(error, dict):
        return error.get("message") or "Something went wrong"
    return str(error) or "Something went wrong"


def _error_detail(error):
    if isinstance(error, (str, dict, list)):
        return serialize(error)
    if hasattr(error, "errors") and callable(error.errors):
        # pydantic.ValidationError
        return serialize(error.errors(include_url=False, include_context=False))
    return {"type": type(error).__name__}


def success(data, status: int = 200):
    return {
        "success": True,
        "status": status,
        "data": serialize(data),
    }


def failure(error, status: int = 400):
    return {
        "success": False,
        "status": status,
        "message": _error_message(error),
        "error": _error_detail(error),
    }


def respond(envelope):
    return jsonify(envelope), envelope["status"]
