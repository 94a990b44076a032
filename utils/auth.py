from datetime import datetime, timedelta, timezone
from typing import Dict, Any

import jwt
from werkzeug.security import generate_password_hash, check_password_hash

import config

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def compare_password(password: str, hashed: str) -> bool:
    return check_password_hash(hashed, password)


def _sign(payload: Dict[str, Any], secret: str, expires_in) -> str:
    if not secret:
        raise RuntimeError("Token secret is not configured")
    claims = dict(payload)
    claims["exp"] = datetime.now(timezone.utc) + timedelta(seconds=config.parse_duration(expires_in))
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def generate_access_token(payload: Dict[str, Any]) -> str:
    return _sign(payload, config.JWT_SECRET, config.JWT_EXPIRES_IN)


def generate_refresh_token(payload: Dict[str, Any]) -> str:
    return _sign(payload, config.REFRESH_TOKEN_SECRET, config.REFRESH_TOKEN_EXPIRES_IN)


def verify_access_token(token: str) -> Dict[str, Any]:
    """Raises jwt.PyJWTError when the token is invalid or expired."""
    return jwt.decode(token, config.JWT_SECRET, algorithms=[ALGORITHM])


def verify_refresh_token(token: str) -> Dict[str, Any]:
    return jwt.decode(token, config.REFRESH_TOKEN_SECRET, algorithms=[ALGORITHM])
