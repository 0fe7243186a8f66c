"""
Application settings.

Loaded once from `CHESS_*` environment variables and validated by pydantic. Every field has a default,
so the engine runs without any setup.
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import PositiveInt, field_validator
from pydantic_settings import BaseSettings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Settings read from the environment (CHESS_DATABASE_URL, CHESS_CLOCK_MINUTES, CHESS_LOG_LEVEL)"""

    database_url: str = "sqlite:///chess_games.db"
    clock_minutes: PositiveInt = 10
    log_level: str = "WARNING"

    model_config = {"env_prefix": "CHESS_", "env_ignore_empty": True}

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level {value!r}")
        return level

    @property
    def clock_seconds(self) -> float:
        return float(self.clock_minutes * 60)


@lru_cache()
def get_settings() -> Settings:
    """Cached: call `get_settings.cache_clear()` after changing the environment."""
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a stream handler to the root logger. Level defaults to the configured one."""
    logging.basicConfig(level=level or get_settings().log_level, format=LOG_FORMAT)
