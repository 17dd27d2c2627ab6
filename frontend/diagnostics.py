# frontend/diagnostics.py
# Side-channel diagnostics for the search page: redacted event timeline + console lines

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, MutableMapping, Optional

try:
    from frontend.config import ENABLE_VERBOSE_LOGGING
except ModuleNotFoundError:
    from config import ENABLE_VERBOSE_LOGGING

# Sensitive keys that must be redacted
SENSITIVE_KEYS = {
    "auth_token",
    "refresh_token",
    "password",
    "session_id",
    "jwt",
    "token",
    "secret",
    "api_key",
}

EVENTS_KEY = "_search_events"
MAX_EVENTS = 100


def redact_value(key: str, value: Any) -> Any:
    """
    Redact sensitive values.
    - If key is sensitive: return "[REDACTED]"
    - If key is an id: return last 4 chars (e.g., "…a9f2")
    - Otherwise: return actual value
    """
    key_lower = key.lower()

    if any(sensitive in key_lower for sensitive in SENSITIVE_KEYS):
        return "[REDACTED]"

    if key_lower.endswith("id") and isinstance(value, str) and len(value) > 4:
        return f"…{value[-4:]}"

    return value


def now_iso() -> str:
    """Return current timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def log_line(tag: str, message: str) -> None:
    """Print a tagged diagnostic line when verbose logging is enabled."""
    if ENABLE_VERBOSE_LOGGING:
        print(f"[{tag}] {message}")


def track_event(
    session_state: MutableMapping[str, Any],
    event_name: str,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Append an event to the session event timeline.

    Args:
        session_state: Session state mapping (st.session_state or a dict)
        event_name: Short descriptive name (e.g., "search_failed", "autocomplete_stale")
        details: Optional dict of additional context (will be redacted)
    """
    if EVENTS_KEY not in session_state:
        session_state[EVENTS_KEY] = []

    event: Dict[str, Any] = {
        "ts": now_iso(),
        "name": event_name,
    }

    if details:
        event["details"] = {k: redact_value(k, v) for k, v in details.items()}

    events = session_state[EVENTS_KEY]
    events.append(event)

    # Keep only the last MAX_EVENTS events
    if len(events) > MAX_EVENTS:
        session_state[EVENTS_KEY] = events[-MAX_EVENTS:]


def get_recent_events(
    session_state: MutableMapping[str, Any],
    limit: int = 30,
    name: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Get the most recent events from the timeline (most recent first).

    Args:
        session_state: Session state mapping
        limit: Maximum number of events to return
        name: Only return events with this name
    """
    events = session_state.get(EVENTS_KEY, [])
    if name is not None:
        events = [e for e in events if e["name"] == name]
    return list(reversed(events[-limit:]))
