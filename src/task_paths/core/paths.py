"""Path helpers: Windows path normalization, project markers, package location."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

# Files/directories whose presence hints that a directory is a project root.
# Only used for diagnostics while walking up the tree.
PROJECT_MARKERS: tuple[str, ...] = (
    # task files
    "tasks.json",
    "tasks/tasks.json",
    # version control
    ".git",
    ".svn",
    # package manifests
    "package.json",
    "pyproject.toml",
    "Gemfile",
    "go.mod",
    "Cargo.toml",
    # editor folders
    ".cursor",
    ".vscode",
    ".idea",
    # dependency directories
    "node_modules",
    "venv",
    ".venv",
    # config files
    ".env",
    ".eslintrc",
    "tsconfig.json",
    "babel.config.js",
    "jest.config.js",
    "webpack.config.js",
    # CI
    ".github/workflows",
    ".gitlab-ci.yml",
    ".circleci/config.yml",
)

# e.g. "/d%3A/project" as produced by file-URI to path conversion on Windows
_ENCODED_DRIVE_RE = re.compile(r"^/([a-zA-Z])%3[aA]/")


def normalize_windows_path(input_path: Optional[str]) -> Optional[str]:
    """Normalize a possibly URL-encoded Windows path.

    ``/d%3A/project`` becomes ``d:/project``, then separators are converted
    to the host convention. Empty input is returned unchanged.
    """
    if not input_path:
        return input_path

    normalized = _ENCODED_DRIVE_RE.sub(r"\1:/", str(input_path))
    return os.path.normpath(normalized)


def find_project_markers(dir_path: Path) -> list[str]:
    """Return the markers from PROJECT_MARKERS present in *dir_path*."""
    return [marker for marker in PROJECT_MARKERS if (Path(dir_path) / marker).exists()]


def get_package_path() -> Path:
    """Absolute path of the installed ``task_paths`` package directory."""
    # src/task_paths/core/paths.py -> package dir is parents[1]
    return Path(__file__).resolve().parents[1]
