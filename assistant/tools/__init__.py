from assistant.tools.dataset import DatasetReader, EventRecord, PlaceRecord

__all__ = ["DatasetReader", "EventRecord", "PlaceRecord"]
