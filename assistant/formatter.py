from __future__ import annotations

import json
from typing import Any, Dict, List

from assistant.core.logs import get_logger
from assistant.core.prompt import FORMAT_PROMPT


logger = get_logger("gemini")

EMPTY_FALLBACK = "I found some results."


def format_plain_list(data: Dict[str, List[Dict[str, Any]]]) -> str:
    """Deterministic rendering used whenever the model cannot phrase the answer."""
    lines: List[str] = []

    places = data.get("places") or []
    if places:
        lines.append("Places:")
        for place in places:
            address = place.get("address")
            lines.append(f"- {place.get('name')}" + (f" ({address})" if address else ""))

    events = data.get("events") or []
    if events:
        lines.append("Events:")
        for event in events:
            when = event.get("date")
            lines.append(f"- {event.get('name')}" + (f" on {when}" if when else ""))

    return "\n".join(lines) or EMPTY_FALLBACK


class ResponseFormatter:
    def __init__(self, llm, city: str = "Tel Aviv"):
        self.llm = llm
        self.city = city

    def format_response(self, data: Dict[str, List[Dict[str, Any]]], user_query: str) -> str:
        messages = FORMAT_PROMPT.format_messages(
            city=self.city,
            query=user_query,
            data=json.dumps(data, indent=2, ensure_ascii=False),
        )
        try:
            text = self.llm.generate(messages)
        except Exception as exc:
            logger.warning("Response formatting failed, using plain list: %s", exc)
            return format_plain_list(data)
        return text.strip() or format_plain_list(data)
