from __future__ import annotations

import json
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import List, Union

import pytest

from assistant.core.memory import ConversationStore
from assistant.formatter import ResponseFormatter
from assistant.intent import IntentClassifier
from assistant.router import IntentRouter
from assistant.tools.dataset import DatasetReader
from assistant.validator import QueryValidator
from assistant.assistant import CityAssistant


PLACES = [
    {"name": "Cafe Xoho", "address": "17 Gordon St", "rating": 4.6, "category": "cafe",
     "types": ["cafe", "breakfast"], "timesOfDay": ["morning", "afternoon"]},
    {"name": "Port Said", "address": "5 Har Sinai St", "rating": 4.4, "category": "restaurant",
     "types": ["restaurant", "bar"], "timesOfDay": ["evening"]},
    {"name": "Benedict", "address": "171 Ben Yehuda St", "rating": 4.3, "category": "restaurant",
     "types": ["restaurant"], "timesOfDay": ["morning", "afternoon", "evening"]},
    {"name": "Gordon Beach", "address": "Gordon Beach", "rating": 4.5, "category": "beach", "types": ["beach"]},
]

EVENTS = [
    {"name": "Jazz on the Promenade", "date": "2026-10-17", "time": "20:00", "location": "Port", "category": "concert"},
    {"name": "Flea Market Tour", "date": "2026-10-17", "time": "10:00", "location": "Jaffa", "category": "tour"},
    {"name": "Gallery Opening", "date": "2026-10-21", "location": "Florentin", "category": "exhibition"},
]

Reply = Union[str, Exception]


class FakeLLM:
    """Scripted stand-in for GeminiClient: pops one reply per generate() call."""

    def __init__(self, replies: List[Reply] = None):
        self.replies = list(replies or [])
        self.calls = []

    def queue(self, *replies: Reply) -> "FakeLLM":
        self.replies.extend(replies)
        return self

    def generate(self, messages) -> str:
        self.calls.append(messages)
        if not self.replies:
            raise RuntimeError("FakeLLM has no scripted reply")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeClock:
    def __init__(self, start: datetime = None):
        self.now = start or datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def intent_json(intent: str, missing=None, confidence=0.9, **data) -> str:
    return json.dumps(
        {
            "intent": intent,
            "missingFields": missing or [],
            "confidence": confidence,
            "extractedData": data,
        }
    )


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    (tmp_path / "places.json").write_text(json.dumps(PLACES), encoding="utf-8")
    (tmp_path / "events.json").write_text(json.dumps(EVENTS), encoding="utf-8")
    return tmp_path


@pytest.fixture
def dataset(data_dir: Path) -> DatasetReader:
    return DatasetReader(data_dir)


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> ConversationStore:
    return ConversationStore(ttl_seconds=3600, history_limit=50, clock=clock)


@pytest.fixture
def classifier(llm: FakeLLM) -> IntentClassifier:
    return IntentClassifier(llm, city="Tel Aviv", today=lambda: date(2026, 10, 17))


@pytest.fixture
def assistant(store, classifier, dataset, llm) -> CityAssistant:
    router = IntentRouter(dataset, ResponseFormatter(llm, city="Tel Aviv"), city="Tel Aviv")
    return CityAssistant(
        store=store,
        validator=QueryValidator(store, classifier),
        classifier=classifier,
        router=router,
    )
