"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from task_paths.core.config import load_settings


def test_defaults_when_env_unset() -> None:
    settings = load_settings()

    assert settings.project_root is None
    assert settings.log_level == "WARNING"
    assert settings.log_format == "json"


def test_env_values_are_read(monkeypatch) -> None:
    monkeypatch.setenv("TASK_PATHS_PROJECT_ROOT", " /srv/project ")
    monkeypatch.setenv("TASK_PATHS_LOG_LEVEL", "debug")
    monkeypatch.setenv("TASK_PATHS_LOG_FORMAT", "TEXT")

    settings = load_settings()

    assert settings.project_root == "/srv/project"
    assert settings.log_level == "DEBUG"
    assert settings.log_format == "text"


def test_blank_env_values_count_as_unset(monkeypatch) -> None:
    monkeypatch.setenv("TASK_PATHS_PROJECT_ROOT", "   ")
    monkeypatch.setenv("TASK_PATHS_LOG_LEVEL", "")

    settings = load_settings()

    assert settings.project_root is None
    assert settings.log_level == "WARNING"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("TASK_PATHS_LOG_LEVEL", "chatty"),
        ("TASK_PATHS_LOG_FORMAT", "xml"),
    ],
)
def test_invalid_env_values_rejected(monkeypatch, name, value) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        load_settings()
