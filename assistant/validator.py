from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from assistant.core.logs import get_logger
from assistant.core.memory import ConversationStore, extract_location_from_text
from assistant.core.models import IntentResult, ValidatedQuery
from assistant.intent import IntentClassifier


logger = get_logger("validator")

DATA_INTENTS = {"find_places", "find_events", "recommend"}

# The only fields we ever ask the user to clarify.
CLARIFIABLE_FIELDS = ("category", "timeOfDay")


def resolve_missing_fields(intent: str, reported: List[str], extracted: Dict[str, Any]) -> List[str]:
    if intent not in DATA_INTENTS:
        return []
    missing = []
    for field in reported:
        if field in CLARIFIABLE_FIELDS and field not in missing and not extracted.get(field):
            missing.append(field)
    return missing


class QueryValidator:
    """Merges classifier output with the user's conversation state."""

    def __init__(self, store: ConversationStore, classifier: IntentClassifier):
        self.store = store
        self.classifier = classifier

    def _resume_clarification(self, text: str, user_id: str) -> Optional[Tuple[IntentResult, str]]:
        """Answer a pending clarification; returns the merged result and the original query."""
        context = self.store.get_context(user_id)
        pending = context.waiting_for_clarification
        if pending is None:
            return None

        supplied = self.classifier.extract_missing_data(text, pending.missing_fields)
        if not supplied:
            logger.info("Reply did not answer pending clarification; treating as a new query")
            self.store.clear_waiting_for_clarification(user_id)
            return None

        logger.info("Clarification supplied %s for %r", sorted(supplied), pending.original_query)
        result = self.classifier.extract_intent(pending.original_query, context)
        merged = dict(result.extracted_data)
        merged.update(supplied)
        still_missing = [f for f in pending.missing_fields if not merged.get(f)]
        resumed = IntentResult(
            intent=result.intent,
            missing_fields=still_missing,
            confidence=result.confidence,
            extracted_data=merged,
        )
        return resumed, pending.original_query

    def validate_and_prepare(self, query: str, user_id: str) -> ValidatedQuery:
        trimmed = query.strip()

        resumed = self._resume_clarification(trimmed, user_id)
        if resumed is not None:
            result, original_query = resumed
        else:
            original_query = trimmed
            location = extract_location_from_text(trimmed)
            if location is not None and location.radius is not None:
                self.store.set_location(user_id, location)
            result = self.classifier.extract_intent(trimmed, self.store.get_context(user_id))

        name = result.extracted_data.get("name")
        if result.intent == "user_identification" and name:
            self.store.set_user_name(user_id, str(name))

        missing_fields = resolve_missing_fields(
            result.intent, result.missing_fields, result.extracted_data
        )
        validated = ValidatedQuery(
            original_query=original_query,
            intent=result.intent,
            confidence=result.confidence,
            missing_fields=missing_fields,
            extracted_data=result.extracted_data,
            is_complete=not missing_fields,
        )

        logger.info(
            "Validated intent=%s, confidence=%s, missing=%s",
            validated.intent,
            validated.confidence,
            validated.missing_fields,
        )
        return validated
