"""Structured errors raised by path resolution."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Optional

TASKS_FILE_NOT_FOUND = "TASKS_FILE_NOT_FOUND"


class TasksFileNotFoundError(FileNotFoundError):
    """No tasks file at any checked location.

    Callers enrich the error through :meth:`add_context` instead of building
    a new exception, so ``code`` and identity survive re-raising. The
    presentation layer decides how ``diagnostics`` are shown.
    """

    code = TASKS_FILE_NOT_FOUND

    def __init__(
        self,
        message: str,
        checked_paths: Iterable[Path] = (),
        start_dir: Optional[Path] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.detail = message
        self.checked_paths: tuple[Path, ...] = tuple(checked_paths)
        self.start_dir = start_dir
        self.diagnostics: dict[str, Any] = {}

    def add_context(self, summary: Optional[str] = None, **fields: Any) -> "TasksFileNotFoundError":
        """Replace the headline message and merge diagnostic fields.

        ``detail`` keeps the message of the innermost failure.
        """
        if summary:
            self.message = summary
            self.args = (summary,)
        self.diagnostics.update(fields)
        return self

    def describe(self) -> str:
        """Plain-text rendering: message followed by diagnostics as JSON."""
        if not self.diagnostics:
            return self.message
        payload = json.dumps(self.diagnostics, indent=2, default=str)
        return f"{self.message}\nDebug Info: {payload}"

    def __str__(self) -> str:
        return self.message
