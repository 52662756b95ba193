import logging

import pytest

from assistant.core.logs import LogBuffer, LogEntry, RingBufferHandler, source_for


def entry(message, level="info"):
    return LogEntry(timestamp="2026-10-17T12:00:00+00:00", level=level, message=message, source="server")


def test_oldest_entries_are_evicted():
    buffer = LogBuffer(capacity=3)
    for i in range(5):
        buffer.append(entry(f"m{i}"))

    assert [e.message for e in buffer.entries()] == ["m2", "m3", "m4"]


def test_entries_is_a_snapshot():
    buffer = LogBuffer(capacity=2)
    buffer.append(entry("a"))
    snapshot = buffer.entries()
    snapshot.clear()

    assert len(buffer) == 1


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        LogBuffer(capacity=0)


def test_handler_maps_records():
    buffer = LogBuffer(capacity=10)
    logger = logging.getLogger("citybot.validator.test")
    logger.propagate = False
    handler = RingBufferHandler(buffer)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        logger.warning("careful %s", "now")
        logger.error("broken")
    finally:
        logger.removeHandler(handler)

    first, second = buffer.entries()
    assert (first.level, first.message, first.source) == ("warn", "careful now", "validator.test")
    assert second.level == "error"
    assert first.timestamp.endswith("+00:00")


def test_source_for_foreign_logger():
    assert source_for("uvicorn.error") == "server"
    assert source_for("citybot.gemini") == "gemini"
