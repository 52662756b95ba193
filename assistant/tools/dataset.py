from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from assistant.core.logs import get_logger
from assistant.errors import DatasetError


logger = get_logger("dataset")

PLACES_FILE = "places.json"
EVENTS_FILE = "events.json"

TIMES_OF_DAY = ("morning", "afternoon", "evening")


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class PlaceRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    name: str
    address: str = ""
    rating: Optional[float] = None
    category: Optional[str] = None
    types: List[str] = Field(default_factory=list)
    times_of_day: List[str] = Field(default_factory=list, alias="timesOfDay")
    location: Optional[Coordinates] = None


class EventRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    name: str
    date: str
    location: str = ""
    time: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None


RecordT = TypeVar("RecordT", bound=BaseModel)


def _singular(word: str) -> str:
    if word.endswith("ies") and len(word) > 4:
        return word[:-3] + "y"
    if word.endswith("es") and word[:-2].endswith(("s", "x", "ch", "sh")):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def _normalize(term: str) -> str:
    return _singular(" ".join(term.lower().split()))


def category_matches(wanted: str, candidates: List[str]) -> bool:
    target = _normalize(wanted)
    if not target:
        return True
    return any(_normalize(c) == target for c in candidates if c)


def time_of_day_for(clock: str) -> Optional[str]:
    """Bucket an ``HH:MM`` time: before 12 morning, before 17 afternoon, else evening."""
    try:
        hour = int(clock.split(":", 1)[0])
    except (AttributeError, ValueError):
        return None
    if not 0 <= hour <= 23:
        return None
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    return "evening"


class DatasetReader:
    """Reads the static places/events JSON arrays from disk on every call."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def _load(self, filename: str, model: Type[RecordT]) -> List[RecordT]:
        path = self.data_dir / filename
        if not path.exists():
            logger.warning("Dataset file %s not found; treating as empty", path)
            return []
        try:
            with path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise DatasetError(f"{path} is not valid JSON: {exc}") from exc
        except OSError as exc:
            raise DatasetError(f"Could not read {path}: {exc}") from exc

        if not isinstance(raw, list):
            raise DatasetError(f"{path} must contain a JSON array")

        records: List[RecordT] = []
        for idx, item in enumerate(raw):
            try:
                records.append(model.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping malformed record %s in %s: %s", idx, filename, exc.errors()[0]["msg"])
        return records

    def load_places(self) -> List[PlaceRecord]:
        return self._load(PLACES_FILE, PlaceRecord)

    def load_events(self) -> List[EventRecord]:
        return self._load(EVENTS_FILE, EventRecord)

    def search_places(
        self,
        category: Optional[str] = None,
        time_of_day: Optional[str] = None,
    ) -> List[PlaceRecord]:
        places = self.load_places()
        results = []
        for place in places:
            if category and not category_matches(category, [place.category or "", *place.types]):
                continue
            if time_of_day and place.times_of_day and time_of_day not in place.times_of_day:
                continue
            results.append(place)
        logger.info(
            "Searching places: category=%s time_of_day=%s -> %s of %s",
            category or "any",
            time_of_day or "any",
            len(results),
            len(places),
        )
        return results

    def search_events(
        self,
        date: Optional[str] = None,
        category: Optional[str] = None,
        time_of_day: Optional[str] = None,
    ) -> List[EventRecord]:
        events = self.load_events()
        results = []
        for event in events:
            if date and event.date != date:
                continue
            if category and not category_matches(category, [event.category or ""]):
                continue
            if time_of_day and event.time:
                bucket = time_of_day_for(event.time)
                if bucket and bucket != time_of_day:
                    continue
            results.append(event)
        logger.info(
            "Searching events: date=%s category=%s time_of_day=%s -> %s of %s",
            date or "any",
            category or "any",
            time_of_day or "any",
            len(results),
            len(events),
        )
        return results


def to_payload(records: List[BaseModel]) -> List[Dict[str, Any]]:
    """Records as plain JSON-ready dicts, using the dataset's own key names."""
    return [r.model_dump(by_alias=True, exclude_none=True) for r in records]
