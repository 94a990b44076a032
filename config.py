import os
import re
from dotenv import load_dotenv

# Load variables from .env file
load_dotenv()

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/healthai")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "healthai_guardian")

JWT_SECRET = os.getenv("JWT_SECRET")
JWT_EXPIRES_IN = os.getenv("JWT_EXPIRES_IN", "15m")
REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET")
REFRESH_TOKEN_EXPIRES_IN = os.getenv("REFRESH_TOKEN_EXPIRES_IN", "7d")

GROQ_API_KEY = os.getenv("GROQ_API_KEY")
GROQ_API_URL = os.getenv("GROQ_API_URL", "https://api.groq.com/openai/v1")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-70b-versatile")

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

FASTAPI_URL = os.getenv("FASTAPI_URL", "http://localhost:8000")
ML_SERVICE_TIMEOUT = float(os.getenv("ML_SERVICE_TIMEOUT", "60"))

RATE_LIMIT = int(os.getenv("RATE_LIMIT", "10"))
RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

_DURATION_UNITS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value) -> int:
    """Convert '15m', '7d', '3600' or 3600 into seconds."""
    if isinstance(value, (int, float)):
        return int(value)
    match = re.fullmatch(r"\s*(\d+)\s*([smhd]?)\s*", str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS.get(unit or "s")


def validate_api_keys():
    """Validate that all required API keys are properly configured."""
    errors = []

    if not JWT_SECRET:
        errors.append("JWT secret is missing. Please set JWT_SECRET in your .env file.")
    if not REFRESH_TOKEN_SECRET:
        errors.append("Refresh token secret is missing. Please set REFRESH_TOKEN_SECRET in your .env file.")
    if not GROQ_API_KEY:
        errors.append("Groq API key is missing. Reports and suggestions will fail until GROQ_API_KEY is set.")
    if not GEMINI_API_KEY:
        errors.append("Gemini API key is missing. Word lists will fail until GEMINI_API_KEY is set.")

    return errors
