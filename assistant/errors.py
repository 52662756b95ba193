from __future__ import annotations


class CityAssistantError(Exception):
    """Base error for the city assistant."""


class DatasetError(CityAssistantError):
    """A dataset file exists but cannot be read as a JSON array."""


class LLMUnavailableError(CityAssistantError):
    """No Gemini model could serve the request."""
