from __future__ import annotations

from typing import List, Optional

from assistant.core.logs import get_logger
from assistant.core.memory import ConversationStore
from assistant.core.models import CommandResult
from assistant.formatter import ResponseFormatter
from assistant.intent import IntentClassifier
from assistant.llm import GeminiClient
from assistant.router import IntentRouter
from assistant.tools import DatasetReader
from assistant.validator import QueryValidator
from config.settings import Settings, get_settings


logger = get_logger("command")


def to_lines(text: str) -> List[str]:
    return [line.rstrip() for line in text.splitlines() if line.strip()]


class CityAssistant:
    """Validate a user message, route it, and shape the reply as console lines."""

    def __init__(
        self,
        store: ConversationStore,
        validator: QueryValidator,
        classifier: IntentClassifier,
        router: IntentRouter,
    ):
        self.store = store
        self.validator = validator
        self.classifier = classifier
        self.router = router

    def execute_query(self, raw: str, user_id: str) -> CommandResult:
        trimmed = raw.strip()
        if not trimmed:
            return CommandResult(type="none")

        validated = self.validator.validate_and_prepare(trimmed, user_id)
        self.store.add_query_to_history(user_id, trimmed, validated.intent)

        if not validated.is_complete:
            self.store.set_waiting_for_clarification(
                user_id, validated.missing_fields, validated.original_query
            )
            question = self.classifier.generate_clarification(
                validated.intent, validated.missing_fields
            )
            logger.info("Asking for clarification: %s", validated.missing_fields)
            return CommandResult(type="output", lines=to_lines(question))

        self.store.clear_waiting_for_clarification(user_id)
        user_name = self.store.get_context(user_id).user_name
        reply = self.router.route(validated, user_name)
        return CommandResult(type="output", lines=to_lines(reply))


def build_assistant(settings: Optional[Settings] = None, llm=None) -> CityAssistant:
    settings = settings or get_settings()
    llm = llm or GeminiClient(settings)

    store = ConversationStore(
        ttl_seconds=settings.conversation_ttl_seconds,
        history_limit=settings.history_limit,
    )
    classifier = IntentClassifier(llm, city=settings.city_name)
    router = IntentRouter(
        DatasetReader(settings.data_dir),
        ResponseFormatter(llm, city=settings.city_name),
        city=settings.city_name,
    )
    return CityAssistant(
        store=store,
        validator=QueryValidator(store, classifier),
        classifier=classifier,
        router=router,
    )
