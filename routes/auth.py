import logging

from flask import Blueprint, request, jsonify, g

import config
from db import get_db
from middlewares.auth import require_auth
from models.user import RegisterRequest, LoginRequest, RefreshRequest, ProfileUpdate, public_user
from repositories.user_repository import UserRepository
from services.auth_service import AuthService, AuthError
from utils.api_response import success, failure, respond

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.route("/register", methods=["POST"])
def register():
    data = RegisterRequest.model_validate(request.get_json(silent=True) or {})
    try:
        result = AuthService(get_db()).register(data)
    except AuthError as e:
        return respond(failure(e.message, e.status_code))
    return respond(success(result, 201))


@auth_bp.route("/login", methods=["POST"])
def login():
    data = LoginRequest.model_validate(request.get_json(silent=True) or {})
    try:
        result = AuthService(get_db()).login(data.email, data.password)
    except AuthError as e:
        return respond(failure(e.message, e.status_code))

    response, status = respond(success(result))
    response.set_cookie(
        "token",
        result["tokens"]["accessToken"],
        max_age=config.parse_duration(config.JWT_EXPIRES_IN),
        httponly=True,
        samesite="Lax",
    )
    return response, status


@auth_bp.route("/refresh", methods=["POST"])
def refresh():
    data = RefreshRequest.model_validate(request.get_json(silent=True) or {})
    try:
        result = AuthService(get_db()).refresh(data.refreshToken)
    except AuthError as e:
        return respond(failure(e.message, e.status_code))
    return respond(success(result))


@auth_bp.route("/logout", methods=["POST"])
def logout():
    response = jsonify(success({"message": "Logged out"}))
    response.delete_cookie("token")
    return response, 200


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me():
    return respond(success({"user": g.user}))


@auth_bp.route("/profile", methods=["GET"])
@require_auth
def get_profile():
    user = UserRepository(get_db()).find_by_id(g.user.get("id"))
    if not user:
        return respond(failure({"message": "User not found"}, 404))
    return respond(success({"user": public_user(user)}))


@auth_bp.route("/profile", methods=["PUT"])
@require_auth
def update_profile():
    changes = ProfileUpdate.model_validate(request.get_json(silent=True) or {}).changes()
    user = UserRepository(get_db()).update_profile(g.user.get("id"), changes)
    if not user:
        return respond(failure({"message": "User not found"}, 404))
    logger.info(f"Updated profile fields {sorted(changes)} for user {user['_id']}")
    return respond(success({"user": public_user(user)}))
