"""Shared fixtures: isolate the process-wide resolver, logging and env."""

from __future__ import annotations

import logging

import pytest

from task_paths.core.resolver import PathResolver, default_resolver


class RecordingLog:
    """Log collaborator that keeps every message for assertions."""

    def __init__(self) -> None:
        self.infos: list[str] = []
        self.warnings: list[str] = []

    def info(self, msg: str) -> None:
        self.infos.append(msg)

    def warning(self, msg: str) -> None:
        self.warnings.append(msg)


@pytest.fixture(autouse=True)
def _isolate(monkeypatch):
    for name in ("TASK_PATHS_PROJECT_ROOT", "TASK_PATHS_LOG_LEVEL", "TASK_PATHS_LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    default_resolver.forget_root()

    pkg_logger = logging.getLogger("task_paths")
    handlers = list(pkg_logger.handlers)
    level, propagate = pkg_logger.level, pkg_logger.propagate
    yield
    pkg_logger.handlers[:] = handlers
    pkg_logger.setLevel(level)
    pkg_logger.propagate = propagate
    default_resolver.forget_root()


@pytest.fixture
def log() -> RecordingLog:
    return RecordingLog()


@pytest.fixture
def resolver(log: RecordingLog) -> PathResolver:
    return PathResolver(log)
