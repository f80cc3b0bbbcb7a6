"""
Settings and logging setup.

Settings are read from ``RECFUN_*`` environment variables or a ``.env`` file.
"""

import logging
import sys
from enum import Enum
from functools import lru_cache

import structlog
from pydantic_settings import BaseSettings, SettingsConfigDict


class OverflowPolicy(str, Enum):
    """What the successor does at the top of the natural range."""
    FAIL = "fail"
    WRAP = "wrap"
    SATURATE = "saturate"


class LogFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


class Settings(BaseSettings):
    LOG_LEVEL: str = "WARNING"
    LOG_FORMAT: LogFormat = LogFormat.CONSOLE
    OVERFLOW_POLICY: OverflowPolicy = OverflowPolicy.FAIL

    model_config = SettingsConfigDict(env_prefix="RECFUN_", env_file=".env", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings = None) -> None:
    """Route structlog output to stderr at the configured level."""
    settings = settings or get_settings()
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {settings.LOG_LEVEL!r}")

    if settings.LOG_FORMAT == LogFormat.JSON:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
