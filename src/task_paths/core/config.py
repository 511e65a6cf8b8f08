"""Runtime settings read from ``TASK_PATHS_*`` environment variables."""

from __future__ import annotations

import os
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

ENV_PROJECT_ROOT = "TASK_PATHS_PROJECT_ROOT"
ENV_LOG_LEVEL = "TASK_PATHS_LOG_LEVEL"
ENV_LOG_FORMAT = "TASK_PATHS_LOG_FORMAT"

_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseModel):
    project_root: Optional[str] = None
    log_level: str = "WARNING"
    log_format: Literal["json", "text"] = "json"

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LEVELS:
            raise ValueError(f"unknown log level: {value!r}")
        return level


def load_settings() -> Settings:
    """Build settings from the process environment.

    Blank values count as unset.
    """
    values: dict[str, str] = {}

    project_root = os.environ.get(ENV_PROJECT_ROOT, "").strip()
    if project_root:
        values["project_root"] = project_root

    log_level = os.environ.get(ENV_LOG_LEVEL, "").strip()
    if log_level:
        values["log_level"] = log_level

    log_format = os.environ.get(ENV_LOG_FORMAT, "").strip().lower()
    if log_format:
        values["log_format"] = log_format

    return Settings(**values)
