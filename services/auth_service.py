import logging
from typing import Any, Dict

import jwt
from pymongo.errors import DuplicateKeyError

from models.user import RegisterRequest
from repositories.user_repository import UserRepository
from utils.auth import (
    hash_password,
    compare_password,
    generate_access_token,
    generate_refresh_token,
    verify_refresh_token,
)

logger = logging.getLogger(__name__)


class AuthError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthService:
    def __init__(self, db):
        self.users = UserRepository(db)

    def register(self, data: RegisterRequest) -> Dict[str, Any]:
        """
        Create a user account.

        Args:
            data: Validated registration payload; nested profile sections
                already carry their defaults.

        Returns:
            {"id", "email", "name"} of the new user.
        """
        if self.users.find_by_email(data.email):
            raise AuthError("User already exists")

        doc = data.model_dump()
        doc["password"] = hash_password(data.password)

        try:
            user = self.users.create_user(doc)
        except DuplicateKeyError:
            raise AuthError("User already exists")

        logger.info(f"Registered user {user['_id']}")
        return {"id": str(user["_id"]), "email": user["email"], "name": user["name"]}

    def login(self, email: str, password: str) -> Dict[str, Any]:
        user = self.users.find_by_email(email)
        if not user or not compare_password(password, user.get("password") or ""):
            raise AuthError("Invalid credentials", 401)

        user_id = str(user["_id"])
        return {
            "user": {"id": user_id, "name": user.get("name"), "email": user["email"]},
            "tokens": {
                "accessToken": generate_access_token({"id": user_id, "email": user["email"]}),
                "refreshToken": generate_refresh_token({"id": user_id}),
            },
        }

    def refresh(self, refresh_token: str) -> Dict[str, Any]:
        try:
            payload = verify_refresh_token(refresh_token)
        except jwt.PyJWTError:
            raise AuthError("Invalid or expired refresh token", 401)

        user = self.users.find_by_id(payload.get("id"))
        if not user:
            raise AuthError("User not found", 401)

        user_id = str(user["_id"])
        return {"accessToken": generate_access_token({"id": user_id, "email": user["email"]})}
