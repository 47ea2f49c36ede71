# FILE: image_broker/services/telemetry.py
"""
Telemetry and metrics collection (rotated JSONL)

- Stores summary-only events to disk (append-only JSONL, one file per UTC day).
- Keeps a small in-memory tail and per-event counters for /metrics.
- Never raises into the request path.
"""
from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict, deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Deque, Dict

from image_broker.config import get_settings

logger = logging.getLogger(__name__)

_MAX_IN_MEMORY_EVENTS = 200
_recent_events: Deque[Dict[str, Any]] = deque(maxlen=_MAX_IN_MEMORY_EVENTS)
_counters: Dict[str, int] = defaultdict(int)
_lock = threading.Lock()


def _telemetry_dir() -> Path:
    d = Path(get_settings().logs_dir) / "telemetry"
    d.mkdir(parents=True, exist_ok=True)
    return d


def init_telemetry() -> None:
    """Create the telemetry directory when enabled"""
    settings = get_settings()
    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled")
        return
    logger.info("Telemetry initialized (dir=%s)", str(_telemetry_dir()))


def record_event(event: str, **fields: Any) -> None:
    """Record telemetry event (summary-only, no prompts or image data)"""
    settings = get_settings()
    if not settings.telemetry_enabled:
        return

    now_utc = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {"ts": now_utc.isoformat(), "event": event, **fields}

    with _lock:
        _recent_events.append(payload)
        _counters[event] += 1

    try:
        path = _telemetry_dir() / f"events-{now_utc.date().isoformat()}.jsonl"
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False) + "\n")
    except OSError as e:
        logger.warning("Failed to write telemetry event: %s", e)


def get_telemetry_summary() -> Dict[str, Any]:
    """Lightweight summary from memory (does not scan JSONL files)"""
    with _lock:
        return {
            "enabled": get_settings().telemetry_enabled,
            "total_events_in_memory": len(_recent_events),
            "counters_in_memory": dict(_counters),
            "recent_events": list(_recent_events)[-10:],
        }


def reset_telemetry() -> None:
    """Clear in-memory state (tests)"""
    with _lock:
        _recent_events.clear()
        _counters.clear()
