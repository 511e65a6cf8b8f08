"""Pydantic models for resolution requests and results."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel


class ResolutionRequest(BaseModel):
    """Hints supplied by the caller for one resolution."""

    project_root: Optional[str] = None
    file: Optional[str] = None  # tasks file, relative to the project root
    input: Optional[str] = None  # requirements document (PRD)
    output: Optional[str] = None


class ResolvedPaths(BaseModel):
    """Absolute paths for one project."""

    project_root: Path
    tasks_file: Path
    prd_doc: Optional[Path] = None
    output_path: Path

    def as_lines(self) -> list[str]:
        return [
            f"project_root: {self.project_root}",
            f"tasks_file:   {self.tasks_file}",
            f"prd_doc:      {self.prd_doc or '-'}",
            f"output_path:  {self.output_path}",
        ]
