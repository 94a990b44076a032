from functools import wraps

import jwt
from flask import request, jsonify, g

from utils.auth import verify_access_token


def get_request_token():
    """Bearer token from the Authorization header, else the ``token`` cookie."""
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[7:].strip() or None
    return request.cookies.get("token")


def require_auth(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        token = get_request_token()
        if not token:
            return jsonify({"message": "Authentication token missing"}), 401
        try:
            g.user = verify_access_token(token)
        except jwt.PyJWTError:
            return jsonify({"message": "Invalid or expired token"}), 401
        return view(*args, **kwargs)
    return wrapper
