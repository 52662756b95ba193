from __future__ import annotations

from typing import Callable, Dict, List, Optional

from assistant.core.logs import get_logger
from assistant.core.models import ValidatedQuery
from assistant.formatter import ResponseFormatter
from assistant.tools.dataset import DatasetReader, PlaceRecord, to_payload


logger = get_logger("command")

RECOMMEND_LIMIT = 5

Handler = Callable[[ValidatedQuery, Optional[str]], str]


def _describe(noun: str, data: Dict) -> str:
    parts = []
    if data.get("category"):
        parts.append(str(data["category"]))
    parts.append(noun)
    if data.get("timeOfDay"):
        parts.append(f"for the {data['timeOfDay']}")
    if data.get("date"):
        parts.append(f"on {data['date']}")
    return " ".join(parts)


def _by_rating(places: List[PlaceRecord]) -> List[PlaceRecord]:
    return sorted(places, key=lambda p: p.rating if p.rating is not None else -1.0, reverse=True)


class IntentRouter:
    """Maps a validated intent to its handler and returns the reply text."""

    def __init__(self, dataset: DatasetReader, formatter: ResponseFormatter, city: str = "Tel Aviv"):
        self.dataset = dataset
        self.formatter = formatter
        self.city = city
        self.handlers: Dict[str, Handler] = {
            "find_places": self.find_places,
            "find_events": self.find_events,
            "recommend": self.recommend,
            "greeting": self.greeting,
            "introduction": self.introduction,
            "user_identification": self.user_identification,
            "smalltalk": self.smalltalk,
            "gratitude": self.gratitude,
            "unknown": self.unknown,
        }

    def route(self, query: ValidatedQuery, user_name: Optional[str] = None) -> str:
        handler = self.handlers.get(query.intent, self.unknown)
        logger.info("Routing intent %s", query.intent)
        return handler(query, user_name)

    def find_places(self, query: ValidatedQuery, user_name: Optional[str] = None) -> str:
        data = query.extracted_data
        places = self.dataset.search_places(
            category=data.get("category"),
            time_of_day=data.get("timeOfDay"),
        )
        if not places:
            return f"I couldn't find any {_describe('places', data)} in {self.city}."
        return self.formatter.format_response({"places": to_payload(places)}, query.original_query)

    def find_events(self, query: ValidatedQuery, user_name: Optional[str] = None) -> str:
        data = query.extracted_data
        events = self.dataset.search_events(
            date=data.get("date"),
            category=data.get("category"),
            time_of_day=data.get("timeOfDay"),
        )
        if not events:
            return f"I couldn't find any {_describe('events', data)} in {self.city}."
        return self.formatter.format_response({"events": to_payload(events)}, query.original_query)

    def recommend(self, query: ValidatedQuery, user_name: Optional[str] = None) -> str:
        data = query.extracted_data
        places = _by_rating(
            self.dataset.search_places(
                category=data.get("category"),
                time_of_day=data.get("timeOfDay"),
            )
        )[:RECOMMEND_LIMIT]
        events = []
        if data.get("date"):
            events = self.dataset.search_events(date=data["date"], time_of_day=data.get("timeOfDay"))

        if not places and not events:
            return f"I don't have any {_describe('recommendations', data)} in {self.city} right now."

        payload = {}
        if places:
            payload["places"] = to_payload(places)
        if events:
            payload["events"] = to_payload(events)
        return self.formatter.format_response(payload, query.original_query)

    def greeting(self, query: ValidatedQuery, user_name: Optional[str] = None) -> str:
        hello = f"Hello, {user_name}!" if user_name else "Hello!"
        return f"{hello} I can help you find places and events in {self.city}. What are you looking for?"

    def introduction(self, query: ValidatedQuery, user_name: Optional[str] = None) -> str:
        return (
            f"I'm your virtual tourist assistant for {self.city}.\n"
            "Ask me about places to visit, where to eat, or events happening in the city."
        )

    def user_identification(self, query: ValidatedQuery, user_name: Optional[str] = None) -> str:
        name = query.extracted_data.get("name") or user_name
        greeting = f"Nice to meet you, {name}!" if name else "Nice to meet you!"
        return f"{greeting} What would you like to explore in {self.city}?"

    def smalltalk(self, query: ValidatedQuery, user_name: Optional[str] = None) -> str:
        return (
            f"I'm here to help you discover {self.city}. "
            "Looking for a place to go or an event to catch?"
        )

    def gratitude(self, query: ValidatedQuery, user_name: Optional[str] = None) -> str:
        welcome = f"You're welcome, {user_name}!" if user_name else "You're welcome!"
        return f"{welcome} Let me know if you need anything else."

    def unknown(self, query: ValidatedQuery, user_name: Optional[str] = None) -> str:
        return (
            "Sorry, I didn't quite understand that.\n"
            f'Try asking about places or events in {self.city}, for example "Find cafes in the morning".'
        )
