from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_MODELS = (
    "gemini-2.0-flash-lite,gemini-2.5-flash-lite,gemini-2.0-flash,gemini-2.5-flash"
)


def _split_models(raw: str) -> List[str]:
    return [name.strip() for name in raw.split(",") if name.strip()]


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here.
    """

    def __init__(self) -> None:
        self.app_env: str = os.getenv("APP_ENV", "development")
        self.google_api_key: Optional[str] = (
            os.getenv("GOOGLE_AI_API_KEY") or os.getenv("GOOGLE_API_KEY") or None
        )
        self.gemini_models: List[str] = _split_models(
            os.getenv("GEMINI_MODELS", DEFAULT_MODELS)
        )
        self.temperature: float = float(os.getenv("MODEL_TEMPERATURE", "0.3"))
        self.top_p: float = float(os.getenv("MODEL_TOP_P", "0.9"))
        self.max_retries: int = int(os.getenv("MODEL_MAX_RETRIES", "1"))
        self.city_name: str = os.getenv("CITY_NAME", "Tel Aviv")
        self.data_dir: Path = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
        self.conversation_ttl_seconds: float = float(
            os.getenv("CONVERSATION_TTL_SECONDS", "3600")
        )
        self.history_limit: int = int(os.getenv("HISTORY_LIMIT", "50"))
        self.log_buffer_size: int = int(os.getenv("LOG_BUFFER_SIZE", "1000"))
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.port: int = int(os.getenv("PORT", "3000"))

    @property
    def is_dev(self) -> bool:
        return self.app_env.lower() in {"dev", "development", "local"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
