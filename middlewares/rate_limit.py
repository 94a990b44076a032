from functools import wraps

from flask import request, jsonify

from utils.rate_limiter import rate_limit


def client_identifier() -> str:
    return (
        request.headers.get("X-Forwarded-For")
        or request.headers.get("X-Real-IP")
        or request.remote_addr
        or "unknown"
    )


def require_rate_limit(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        result = rate_limit(client_identifier())
        if not result["success"]:
            return jsonify({
                "message": "Too many requests. Try again later.",
                "retryAfter": result["retryAfter"],
            }), 429
        return view(*args, **kwargs)
    return wrapper
