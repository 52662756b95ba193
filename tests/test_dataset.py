import json

import pytest

from assistant.errors import DatasetError
from assistant.tools.dataset import DatasetReader, category_matches, time_of_day_for, to_payload


def names(records):
    return [r.name for r in records]


def test_search_places_by_category_matches_plurals(dataset):
    assert names(dataset.search_places(category="Restaurants")) == ["Port Said", "Benedict"]


def test_search_places_matches_types(dataset):
    assert names(dataset.search_places(category="bar")) == ["Port Said"]


def test_search_places_by_time_of_day(dataset):
    # Gordon Beach has no hours, so it is open at any time of day.
    assert names(dataset.search_places(time_of_day="morning")) == ["Cafe Xoho", "Benedict", "Gordon Beach"]


def test_search_places_combines_filters(dataset):
    assert names(dataset.search_places(category="restaurant", time_of_day="evening")) == ["Port Said", "Benedict"]
    assert names(dataset.search_places(category="cafe", time_of_day="evening")) == []


def test_search_events_by_date_and_time_of_day(dataset):
    assert names(dataset.search_events(date="2026-10-17")) == ["Jazz on the Promenade", "Flea Market Tour"]
    assert names(dataset.search_events(date="2026-10-17", time_of_day="evening")) == ["Jazz on the Promenade"]


def test_event_without_time_matches_any_time_of_day(dataset):
    assert names(dataset.search_events(category="exhibition", time_of_day="morning")) == ["Gallery Opening"]


def test_dataset_is_read_on_every_call(data_dir, dataset):
    assert len(dataset.load_places()) == 4
    (data_dir / "places.json").write_text(json.dumps([{"name": "New Spot"}]), encoding="utf-8")

    assert names(dataset.load_places()) == ["New Spot"]


def test_missing_file_is_empty(tmp_path):
    assert DatasetReader(tmp_path).load_events() == []


def test_invalid_json_raises(tmp_path):
    (tmp_path / "places.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(DatasetError):
        DatasetReader(tmp_path).load_places()


def test_non_array_raises(tmp_path):
    (tmp_path / "events.json").write_text('{"name": "x"}', encoding="utf-8")

    with pytest.raises(DatasetError):
        DatasetReader(tmp_path).load_events()


def test_malformed_records_are_skipped(tmp_path):
    (tmp_path / "events.json").write_text(
        json.dumps([{"name": "No date"}, {"name": "Ok", "date": "2026-10-18"}]), encoding="utf-8"
    )

    assert names(DatasetReader(tmp_path).load_events()) == ["Ok"]


def test_payload_keeps_dataset_keys(tmp_path):
    (tmp_path / "places.json").write_text(
        json.dumps([{"name": "Cafe", "timesOfDay": ["morning"], "wifi": True}]), encoding="utf-8"
    )

    payload = to_payload(DatasetReader(tmp_path).load_places())

    assert payload == [{"name": "Cafe", "address": "", "types": [], "timesOfDay": ["morning"], "wifi": True}]


@pytest.mark.parametrize(
    "hhmm, bucket",
    [("08:30", "morning"), ("11:59", "morning"), ("12:00", "afternoon"), ("16:59", "afternoon"), ("17:00", "evening"), ("bad", None)],
)
def test_time_of_day_buckets(hhmm, bucket):
    assert time_of_day_for(hhmm) == bucket


def test_category_matches_is_case_and_plural_insensitive():
    assert category_matches("Museums", ["museum"])
    assert category_matches("galleries", ["Gallery"])
    assert not category_matches("museum", ["cafe", ""])


def test_address_and_location_are_optional(tmp_path):
    (tmp_path / "places.json").write_text(json.dumps([{"name": "Hidden Garden"}]), encoding="utf-8")
    (tmp_path / "events.json").write_text(json.dumps([{"name": "Pop-up", "date": "2026-10-18"}]), encoding="utf-8")
    reader = DatasetReader(tmp_path)

    place, = reader.load_places()
    event, = reader.load_events()

    assert place.address == ""
    assert event.location == ""
