"""
Keystroke dynamics features for stress detection.

Turns raw {key, timestamp, type} events captured while a user types an answer
into the feature vector the ML service's keystroke model expects.
"""
from typing import Dict, List, Any, Optional

import numpy as np

MAX_INTERVAL_MS = 5000

FEATURE_NAMES = [
    "duration_ms", "n_keydowns", "n_keyups", "chars_per_sec",
    "dwell_mean_ms", "dwell_std_ms", "dwell_median_ms", "dwell_p10_ms", "dwell_p90_ms",
    "dd_mean_ms", "dd_std_ms", "dd_median_ms",
    "pauses_gt_200", "pauses_gt_500", "pauses_gt_1000", "longest_pause_ms",
    "backspace_count", "cv_dwell", "cv_dd",
    "hist_bin_0", "hist_bin_1", "hist_bin_2", "hist_bin_3", "hist_bin_4", "hist_bin_5",
    "inter_entropy",
]


def empty_features() -> Dict[str, float]:
    return {name: 0 for name in FEATURE_NAMES}


def _mean(values: np.ndarray) -> float:
    return float(values.mean()) if values.size else 0.0


def _std(values: np.ndarray) -> float:
    # population std
    return float(values.std()) if values.size else 0.0


def _median(values: np.ndarray) -> float:
    return float(np.median(values)) if values.size else 0.0


def _percentile(values: np.ndarray, p: float) -> float:
    # nearest-rank on the sorted values, no interpolation
    if not values.size:
        return 0.0
    ordered = np.sort(values)
    index = min(int(np.floor(p / 100 * ordered.size)), ordered.size - 1)
    return float(ordered[index])


def _histogram(values: np.ndarray, bins: int, low: float, high: float) -> List[int]:
    counts = [0] * bins
    bin_size = (high - low) / bins
    for v in values:
        if low <= v < high:
            counts[min(int((v - low) // bin_size), bins - 1)] += 1
    return counts


def _entropy(values: np.ndarray) -> float:
    if not values.size:
        return 0.0
    low, high = float(values.min()), float(values.max())
    if high == low:
        return 0.0
    hist = np.array(_histogram(values, 10, low, high), dtype=float)
    total = hist.sum()
    if total == 0:
        return 0.0
    probs = hist[hist > 0] / total
    return float(-(probs * np.log2(probs)).sum())


def valid_events(events: Any) -> bool:
    """True when every event is a dict with ``key``, ``type`` and a numeric ``timestamp``."""
    if not isinstance(events, list):
        return False
    for event in events:
        if not isinstance(event, dict) or "key" not in event or "type" not in event:
            return False
        timestamp = event.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            return False
    return True


def extract_keystroke_features(events: List[Dict[str, Any]], start_time: Optional[float] = None) -> Dict[str, float]:
    """
    Args:
        events: ordered events, each {"key": str, "timestamp": ms, "type": "keydown"|"keyup"}
        start_time: ms timestamp tracking started at; defaults to the first event
    """
    if not events:
        return empty_features()

    if start_time is None:
        start_time = events[0]["timestamp"]
    duration_ms = events[-1]["timestamp"] - start_time

    keydowns = [e for e in events if e.get("type") == "keydown"]
    keyups = [e for e in events if e.get("type") == "keyup"]
    n_keydowns = len(keydowns)
    chars_per_sec = (n_keydowns / duration_ms) * 1000 if duration_ms > 0 else 0

    # Dwell: keydown -> keyup of the same key
    dwells = []
    pressed = {}
    for event in events:
        if event.get("type") == "keydown":
            pressed[event["key"]] = event["timestamp"]
        elif event.get("type") == "keyup" and event["key"] in pressed:
            dwell = event["timestamp"] - pressed.pop(event["key"])
            if 0 < dwell < MAX_INTERVAL_MS:
                dwells.append(dwell)

    # Digraph: keyup -> next keydown
    digraphs = []
    for current, nxt in zip(events, events[1:]):
        if current.get("type") == "keyup" and nxt.get("type") == "keydown":
            gap = nxt["timestamp"] - current["timestamp"]
            if 0 < gap < MAX_INTERVAL_MS:
                digraphs.append(gap)

    dwell_arr = np.array(dwells, dtype=float)
    dd_arr = np.array(digraphs, dtype=float)

    dwell_mean = _mean(dwell_arr)
    dwell_std = _std(dwell_arr)
    dd_mean = _mean(dd_arr)
    dd_std = _std(dd_arr)
    hist = _histogram(dwell_arr, 6, 0, 1000)

    features = {
        "duration_ms": duration_ms,
        "n_keydowns": n_keydowns,
        "n_keyups": len(keyups),
        "chars_per_sec": chars_per_sec,
        "dwell_mean_ms": dwell_mean,
        "dwell_std_ms": dwell_std,
        "dwell_median_ms": _median(dwell_arr),
        "dwell_p10_ms": _percentile(dwell_arr, 10),
        "dwell_p90_ms": _percentile(dwell_arr, 90),
        "dd_mean_ms": dd_mean,
        "dd_std_ms": dd_std,
        "dd_median_ms": _median(dd_arr),
        "pauses_gt_200": int((dd_arr > 200).sum()),
        "pauses_gt_500": int((dd_arr > 500).sum()),
        "pauses_gt_1000": int((dd_arr > 1000).sum()),
        "longest_pause_ms": float(dd_arr.max()) if dd_arr.size else 0,
        "backspace_count": sum(1 for e in keydowns if e.get("key") == "Backspace"),
        "cv_dwell": dwell_std / dwell_mean if dwell_mean > 0 else 0,
        "cv_dd": dd_std / dd_mean if dd_mean > 0 else 0,
        "inter_entropy": _entropy(dd_arr),
    }
    for i, count in enumerate(hist):
        features[f"hist_bin_{i}"] = count
    return features
