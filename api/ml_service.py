"""
HTTP client for the FastAPI ML service.

The service scores questionnaire answers (video emotions, keystroke stress)
and predicts heart / diabetes risk from clinical inputs.
"""
import json
import logging
from typing import Any, Dict, Optional

import requests

import config
from utils.keystroke_features import extract_keystroke_features, valid_events

logger = logging.getLogger(__name__)


class MLServiceError(Exception):
    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def with_keystroke_features(form: Dict[str, Any]) -> Dict[str, Any]:
    """Fill ``keystroke_features`` from raw ``keystroke_events`` when only the events were sent."""
    form = dict(form)
    raw_events = form.get("keystroke_events")
    if not raw_events or form.get("keystroke_features"):
        return form

    try:
        events = json.loads(raw_events) if isinstance(raw_events, str) else raw_events
    except ValueError:
        logger.warning("Ignoring malformed keystroke_events payload")
        return form
    if not valid_events(events):
        logger.warning("Ignoring keystroke_events with missing or non-numeric fields")
        return form

    start = form.get("window_start_ts")
    try:
        start = float(start) if start not in (None, "") else None
    except (TypeError, ValueError):
        start = None

    form["keystroke_features"] = json.dumps(extract_keystroke_features(events, start_time=start))
    form.pop("keystroke_events")
    return form


class MLServiceClient:
    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or config.FASTAPI_URL).rstrip("/")
        self.timeout = timeout or config.ML_SERVICE_TIMEOUT
        self.session = requests.Session()

    def _request(self, method: str, path: str, default_error: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"ML service request to {path} failed: {e}")
            raise MLServiceError(f"ML service unavailable: {e}", 502) from e

        if not resp.ok:
            try:
                error = resp.json()
            except ValueError:
                error = {"error": "Unknown error"}
            message = error.get("error") if isinstance(error, dict) else None
            logger.error(f"ML service {path} returned HTTP {resp.status_code}: {error}")
            raise MLServiceError(message or default_error, resp.status_code)

        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            logger.error(f"ML service {path} returned a non-object body")
            raise MLServiceError("Invalid ML service response", 502)
        return data

    def start_session(self, user_id, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = {"user_id": user_id}
        payload.update(body or {})
        return self._request("POST", "/start-session", "Failed to start session", json=payload)

    def submit_question(self, form: Dict[str, Any], files: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Forward a multipart questionnaire answer.

        Args:
            form: Text fields (session_id, question_id, question_text, answer_text,
                keystroke_features or keystroke_events, window_start_ts, ...).
            files: ``{field: (filename, stream, mimetype)}``, usually the answer video.
        """
        return self._request(
            "POST", "/submit-question", "Failed to submit question",
            data=with_keystroke_features(form), files=files or None,
        )

    def get_session(self, session_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/get-session/{session_id}", "Failed to get session")

    def predict_health(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/predict-health", "Health prediction failed", json={"input": input_data})


def get_ml_client() -> MLServiceClient:
    return MLServiceClient()
