"""Server-side conversation memory.

One context per user id, kept in process memory only. A context that sees
no activity for ``ttl_seconds`` is discarded on the next access, and a
restart forgets everything.
"""

from __future__ import annotations

import re
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from assistant.core.logs import get_logger
from assistant.core.models import (
    ConversationContext,
    Location,
    PendingClarification,
    QueryRecord,
)


logger = get_logger("conversation")

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversationStore:
    def __init__(
        self,
        ttl_seconds: float = 3600,
        history_limit: int = 50,
        clock: Optional[Clock] = None,
    ):
        self.ttl_seconds = ttl_seconds
        self.history_limit = history_limit
        self._clock = clock or _utcnow
        self._contexts: Dict[str, ConversationContext] = {}
        self._lock = threading.RLock()

    def _is_expired(self, context: ConversationContext, now: datetime) -> bool:
        return (now - context.last_active_at).total_seconds() > self.ttl_seconds

    def _sweep(self, now: datetime) -> None:
        expired = [uid for uid, ctx in self._contexts.items() if self._is_expired(ctx, now)]
        for uid in expired:
            del self._contexts[uid]
        if expired:
            logger.info("Expired %s conversation(s)", len(expired))

    def _touch(self, user_id: str) -> ConversationContext:
        """Get-or-create the live record and mark it active. Caller holds the lock."""
        now = self._clock()
        self._sweep(now)
        context = self._contexts.get(user_id)
        if context is None:
            context = ConversationContext(user_id=user_id, created_at=now, last_active_at=now)
            self._contexts[user_id] = context
            logger.info("Started conversation for user %s", user_id)
        else:
            context.last_active_at = now
        return context

    def get_context(self, user_id: str) -> ConversationContext:
        with self._lock:
            return self._touch(user_id).model_copy(deep=True)

    def update_context(self, user_id: str, **updates: Any) -> ConversationContext:
        with self._lock:
            context = self._touch(user_id)
            merged = context.model_dump()
            merged.update(updates)
            merged["user_id"] = user_id
            updated = ConversationContext.model_validate(merged)
            self._contexts[user_id] = updated
            return updated.model_copy(deep=True)

    def add_query_to_history(self, user_id: str, query: str, intent: Optional[str] = None) -> None:
        with self._lock:
            context = self._touch(user_id)
            context.previous_queries.append(
                QueryRecord(query=query, timestamp=self._clock(), intent=intent)
            )
            if len(context.previous_queries) > self.history_limit:
                context.previous_queries = context.previous_queries[-self.history_limit:]

    def set_user_name(self, user_id: str, name: str) -> None:
        with self._lock:
            self._touch(user_id).user_name = name

    def set_location(self, user_id: str, location: Optional[Location]) -> None:
        with self._lock:
            self._touch(user_id).location = location

    def set_waiting_for_clarification(
        self, user_id: str, missing_fields: List[str], original_query: str
    ) -> None:
        with self._lock:
            self._touch(user_id).waiting_for_clarification = PendingClarification(
                missing_fields=list(missing_fields),
                original_query=original_query,
            )

    def clear_waiting_for_clarification(self, user_id: str) -> None:
        with self._lock:
            self._touch(user_id).waiting_for_clarification = None

    def reset(self, user_id: str) -> None:
        with self._lock:
            self._contexts.pop(user_id, None)

    def __len__(self) -> int:
        with self._lock:
            self._sweep(self._clock())
            return len(self._contexts)


_CITY_PATTERN = re.compile(
    r"\bI'?m\s+(?:in|at)\s+([A-Z][a-zA-Z\s]+?)(?:\s*,\s*|\s+within|\s*$)",
    re.IGNORECASE,
)
_RADIUS_PATTERN = re.compile(r"(?:within\s+)?(\d+)\s*km", re.IGNORECASE)


def extract_location_from_text(text: str) -> Optional[Location]:
    """Pull a city and a radius in km out of phrases like "I'm in Jaffa within 5 km".

    A city is only taken after "I'm in" or "I'm at".
    """
    city_match = _CITY_PATTERN.search(text)
    city = city_match.group(1).strip() if city_match else None

    radius_match = _RADIUS_PATTERN.search(text)
    radius = int(radius_match.group(1)) if radius_match else None

    if city or radius is not None:
        return Location(city=city or None, radius=radius)
    return None
