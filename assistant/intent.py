from __future__ import annotations

import json
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from assistant.core.logs import get_logger
from assistant.core.models import ConversationContext, IntentResult
from assistant.core.prompt import (
    ALLOWED_INTENTS,
    CLARIFICATION_PROMPT,
    INTENT_PROMPT,
    MISSING_DATA_PROMPT,
)
from assistant.tools.dataset import TIMES_OF_DAY


logger = get_logger("gemini")

UNKNOWN = "unknown"

CLARIFICATION_QUESTIONS = {
    "category": "what kind of place or event you're looking for",
    "timeOfDay": "whether you'd like to go in the morning, afternoon, or evening",
    "date": "which date you have in mind",
}


def _strip_code_fences(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped[3:]
        if stripped.startswith("json"):
            stripped = stripped[len("json"):].lstrip()
        stripped = stripped.rstrip()
        if stripped.endswith("```"):
            stripped = stripped[:-3]
    return stripped.strip()


def _extract_json_segment(text: str) -> Optional[str]:
    start = text.find("{")
    if start == -1:
        return None
    stack = 0
    in_string = False
    escaped = False
    for idx in range(start, len(text)):
        ch = text[idx]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            stack += 1
        elif ch == "}":
            stack -= 1
            if stack == 0:
                return text[start: idx + 1]
    return None


def parse_json_object(text: str) -> Dict[str, Any]:
    """Decode the model's JSON reply, tolerating code fences and surrounding prose."""
    cleaned = _strip_code_fences(text)
    try:
        decoded = json.loads(cleaned)
    except json.JSONDecodeError:
        segment = _extract_json_segment(cleaned)
        if not segment:
            raise ValueError(f"No JSON object in model reply: {text[:200]!r}")
        decoded = json.loads(segment)
    if not isinstance(decoded, dict):
        raise ValueError("Model reply is not a JSON object")
    return decoded


def normalize_time_of_day(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    lowered = value.strip().lower()
    if lowered == "night":
        return "evening"
    return lowered if lowered in TIMES_OF_DAY else None


def clean_extracted_data(raw: Any) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        return {}
    data: Dict[str, Any] = {}
    for key, value in raw.items():
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        if key == "timeOfDay":
            value = normalize_time_of_day(value)
            if value is None:
                continue
        elif isinstance(value, str):
            value = value.strip()
        data[key] = value
    return data


def _coerce_confidence(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.5
    return min(1.0, max(0.0, float(value)))


def describe_location(context: ConversationContext, default_city: str) -> str:
    location = context.location
    if location is None:
        return "unknown"
    described = location.city or default_city
    if location.radius:
        described += f", within {location.radius} km"
    return described


def unknown_intent() -> IntentResult:
    return IntentResult(intent=UNKNOWN, missing_fields=[], confidence=0.0, extracted_data={})


def fallback_clarification(missing_fields: List[str]) -> str:
    asks = [CLARIFICATION_QUESTIONS.get(f, f) for f in missing_fields] or ["a bit more detail"]
    if len(asks) == 1:
        joined = asks[0]
    else:
        joined = ", ".join(asks[:-1]) + " and " + asks[-1]
    return f"Could you tell me {joined}?"


class IntentClassifier:
    """Turns free text into an IntentResult using the language model."""

    def __init__(self, llm, city: str = "Tel Aviv", today: Optional[Callable[[], date]] = None):
        self.llm = llm
        self.city = city
        self._today = today or date.today

    def extract_intent(self, text: str, context: ConversationContext) -> IntentResult:
        messages = INTENT_PROMPT.format_messages(
            city=self.city,
            allowed_intents=", ".join(ALLOWED_INTENTS),
            today=self._today().isoformat(),
            user_name=context.user_name or "unknown",
            user_location=describe_location(context, self.city),
            message=text,
        )
        try:
            raw = self.llm.generate(messages)
            parsed = parse_json_object(raw)
        except Exception as exc:
            logger.error("Intent extraction failed: %s", exc)
            return unknown_intent()

        intent = parsed.get("intent")
        if intent not in ALLOWED_INTENTS:
            if intent is not None:
                logger.warning("Model returned unsupported intent %r", intent)
            intent = UNKNOWN

        missing = parsed.get("missingFields")
        missing_fields = [f for f in missing if isinstance(f, str)] if isinstance(missing, list) else []

        return IntentResult(
            intent=intent,
            missing_fields=missing_fields,
            confidence=_coerce_confidence(parsed.get("confidence")),
            extracted_data=clean_extracted_data(parsed.get("extractedData")),
        )

    def extract_missing_data(self, text: str, missing_fields: List[str]) -> Dict[str, Any]:
        messages = MISSING_DATA_PROMPT.format_messages(
            missing_fields=", ".join(missing_fields),
            message=text,
        )
        try:
            parsed = parse_json_object(self.llm.generate(messages))
        except Exception as exc:
            logger.error("Missing data extraction failed: %s", exc)
            return {}
        data = clean_extracted_data(parsed)
        return {k: v for k, v in data.items() if k in missing_fields}

    def generate_clarification(self, intent: str, missing_fields: List[str]) -> str:
        messages = CLARIFICATION_PROMPT.format_messages(
            intent=intent,
            missing_fields=", ".join(missing_fields),
        )
        try:
            question = self.llm.generate(messages).strip().strip('"')
        except Exception as exc:
            logger.error("Clarification generation failed: %s", exc)
            question = ""
        return question or fallback_clarification(missing_fields)
