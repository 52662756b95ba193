from __future__ import annotations

import re
from typing import Any, Dict, Optional, Sequence

from langchain_core.messages import BaseMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from assistant.core.logs import get_logger
from assistant.errors import LLMUnavailableError
from config.settings import Settings, get_settings


logger = get_logger("gemini")

_RATE_LIMIT_TEXT = re.compile(r"\b429\b|RESOURCE_EXHAUSTED")


def is_rate_limited(exc: BaseException) -> bool:
    for attr in ("code", "status_code", "status"):
        value = getattr(exc, attr, None)
        if value == 429 or getattr(value, "value", None) == 429:
            return True
    text = str(exc)
    return bool(_RATE_LIMIT_TEXT.search(text)) or "ResourceExhausted" in type(exc).__name__


def message_text(content: Any) -> str:
    """Flatten chat model content, which may be a string or a list of parts."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and isinstance(part.get("text"), str):
                parts.append(part["text"])
        return "".join(parts)
    return str(content or "")


class GeminiClient:
    """Gemini chat models tried in order; a rate-limited model falls through to the next."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._models: Dict[str, ChatGoogleGenerativeAI] = {}

    @property
    def available(self) -> bool:
        return bool(self.settings.google_api_key and self.settings.gemini_models)

    def _model(self, name: str) -> ChatGoogleGenerativeAI:
        if name not in self._models:
            self._models[name] = ChatGoogleGenerativeAI(
                model=name,
                google_api_key=self.settings.google_api_key,
                temperature=self.settings.temperature,
                top_p=self.settings.top_p,
                max_retries=self.settings.max_retries,
            )
        return self._models[name]

    def generate(self, messages: Sequence[BaseMessage]) -> str:
        if not self.available:
            raise LLMUnavailableError("Gemini not initialized: GOOGLE_AI_API_KEY is missing")

        for name in self.settings.gemini_models:
            try:
                response = self._model(name).invoke(list(messages))
            except Exception as exc:
                if is_rate_limited(exc):
                    logger.warning("Model %s rate limited, trying next", name)
                    continue
                raise
            return message_text(response.content).strip()

        raise LLMUnavailableError("All Gemini models unavailable")

