import logging
import requests
from typing import Optional, List, Dict

import config

logger = logging.getLogger(__name__)


class GroqAPIError(Exception):
    pass


class GroqClient:
    """Minimal client for Groq's OpenAI-compatible chat completions endpoint."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, api_url: Optional[str] = None,
                 timeout: float = 60):
        self.api_key = api_key or config.GROQ_API_KEY
        self.api_url = api_url or config.GROQ_API_URL
        self.model = model or config.GROQ_MODEL
        self.timeout = timeout

        if not self.api_key:
            raise GroqAPIError("GROQ_API_KEY is not set")

        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def _make_url(self, path: str) -> str:
        return f"{self.api_url.rstrip('/')}/{path.lstrip('/')}"

    def chat(self, messages: List[Dict[str, str]], temperature: float = 0.7, max_tokens: int = 2000) -> str:
        """Send a chat completion request and return the first choice's text."""
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        try:
            resp = self.session.post(self._make_url("chat/completions"), json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Groq request failed: {e}")
            raise GroqAPIError(f"Groq API error: {e}") from e

        if not resp.ok:
            try:
                error = resp.json()
            except ValueError:
                error = {"error": "Unknown error"}
            detail = error.get("error") if isinstance(error, dict) else None
            message = detail.get("message") if isinstance(detail, dict) else None
            logger.error(f"Groq API returned HTTP {resp.status_code}: {error}")
            raise GroqAPIError(f"Groq API error: {message or error}")

        data = resp.json()
        choices = data.get("choices") or []
        content = None
        if choices:
            content = (choices[0].get("message") or {}).get("content")
        return content or "No response generated"


def get_groq_client(api_key: Optional[str] = None, model: Optional[str] = None, api_url: Optional[str] = None) -> GroqClient:
    return GroqClient(api_key=api_key, model=model, api_url=api_url)
