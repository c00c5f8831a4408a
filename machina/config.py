"""
machina Configuration.

Settings that change how machines are built, read from the environment.

Environment:
    MACHINA_STRICT_EXITS        Reject handlers for undeclared exits (default false)
    MACHINA_MIN_LIKENESS_SCORE  Score a guessed context must exceed (default unset:
                                the best candidate always wins)
    MACHINA_LOG_LEVEL           Level used by configure_logging() (default WARNING)
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


class MachineSettings(BaseModel):
    """
    Settings applied to every Machine unless overridden per instance.

    Attributes:
        strict_exits: Raise UndeclaredExit for handlers of exits the
            definition does not declare; when False a warning is signalled
        min_likeness_score: Exclusive lower bound for a guessed context;
            None accepts the best candidate whatever it scores
        log_level: Level name for configure_logging()
    """

    strict_exits: bool = Field(False, description="Validate exit names strictly")
    min_likeness_score: float | None = Field(
        None, ge=0, description="Opt-in guess acceptance threshold"
    )
    log_level: str = Field("WARNING", description="Logging level name")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level


def _optional_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    return float(value)


@lru_cache()
def get_settings() -> MachineSettings:
    """
    Get settings from environment.

    Uses lru_cache for singleton pattern; call ``get_settings.cache_clear()``
    after changing the environment.
    """
    return MachineSettings(
        strict_exits=os.getenv("MACHINA_STRICT_EXITS", "false").lower() == "true",
        min_likeness_score=_optional_float(os.getenv("MACHINA_MIN_LIKENESS_SCORE")),
        log_level=os.getenv("MACHINA_LOG_LEVEL", "WARNING"),
    )


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for scripts embedding machina."""
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
