"""Application configuration helpers.

Settings come from the environment (optionally via a `.env` file) and are
loaded once; the validation service and the history store receive the values
they need at construction time instead of reading them globally.
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://atlas.microsoft.com/"


class ConfigError(RuntimeError):
    """Raised when configuration is missing or malformed."""


@dataclass(frozen=True)
class Settings:
    azure_maps_api_key: str
    azure_maps_endpoint: str = DEFAULT_ENDPOINT
    result_limit: int = 5
    confidence_threshold: float = 0.8
    history_file_path: str = "data/validation-history.json"
    history_sample_path: Optional[str] = None
    max_history_size: int = 20
    port: int = 8080


def _parse_number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    api_key = os.getenv("AZURE_MAPS_API_KEY", "")
    endpoint = os.getenv("AZURE_MAPS_ENDPOINT") or DEFAULT_ENDPOINT
    if not endpoint.endswith("/"):
        endpoint += "/"
    result_limit = _parse_number("AZURE_MAPS_RESULT_LIMIT", "5", int)
    confidence_threshold = _parse_number("CONFIDENCE_THRESHOLD", "0.8", float)
    history_file_path = os.getenv("HISTORY_FILE_PATH") or "data/validation-history.json"
    history_sample_path = os.getenv("HISTORY_SAMPLE_PATH") or None
    max_history_size = _parse_number("MAX_HISTORY_SIZE", "20", int)
    port = _parse_number("PORT", "8080", int)

    if not api_key:
        logger.warning("AZURE_MAPS_API_KEY is not configured; address searches will fail.")

    return Settings(
        azure_maps_api_key=api_key,
        azure_maps_endpoint=endpoint,
        result_limit=result_limit,
        confidence_threshold=confidence_threshold,
        history_file_path=history_file_path,
        history_sample_path=history_sample_path,
        max_history_size=max_history_size,
        port=port,
    )


def require_api_key(settings: Settings) -> str:
    if not settings.azure_maps_api_key:
        raise ConfigError("AZURE_MAPS_API_KEY must be set in the environment to validate addresses.")
    return settings.azure_maps_api_key
