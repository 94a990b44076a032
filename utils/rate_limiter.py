import math
import threading
import time

import config

# client -> {"count": int, "start_time": float}
_clients = {}
_lock = threading.Lock()


def rate_limit(identifier: str, limit: int = None, window: int = None, now: float = None) -> dict:
    """
    Fixed-window counter per client.
    Returns {"success": True} or {"success": False, "retryAfter": seconds}.
    """
    limit = config.RATE_LIMIT if limit is None else limit
    window = config.RATE_LIMIT_WINDOW_SECONDS if window is None else window
    now = time.time() if now is None else now

    with _lock:
        record = _clients.get(identifier)

        if record is None or now - record["start_time"] > window:
            _clients[identifier] = {"count": 1, "start_time": now}
            return {"success": True}

        record["count"] += 1

        if record["count"] > limit:
            return {
                "success": False,
                "retryAfter": math.ceil(window - (now - record["start_time"])),
            }

    return {"success": True}


def reset():
    with _lock:
        _clients.clear()
