"""CDP wire format: one JSON object per WebSocket message.

Outbound command:  {"id": 1, "method": "Page.navigate", "params": {...}, "sessionId": "..."}
Inbound response:  {"id": 1, "result": {...}} or {"id": 1, "error": {...}}
Inbound event:     {"method": "Page.loadEventFired", "params": {...}}
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Command:
    """Outbound request, immutable once built."""

    id: int
    method: str
    params: Dict[str, Any] = field(default_factory=dict)
    session_id: Optional[str] = None

    def to_json(self) -> str:
        message: Dict[str, Any] = {
            "id": self.id,
            "method": self.method,
            "params": self.params,
        }
        if self.session_id:
            message["sessionId"] = self.session_id
        return json.dumps(message)


def parse_message(raw: str) -> Optional[dict]:
    """Decode an inbound message.

    Returns:
        The decoded dict, or None when the text is not a JSON object
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(data, dict):
        return None
    return data


def is_event(message: dict) -> bool:
    return "id" not in message and "method" in message


def is_valid_method(method: str) -> bool:
    """Check the Domain.method shape, e.g. "Runtime.evaluate"."""
    domain, dot, name = method.partition(".")
    return bool(domain and dot and name)
