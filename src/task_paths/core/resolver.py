"""Locate a project's tasks file, requirements document and output path.

Resolution order for the tasks file:

1. Explicitly provided project root (no upward search, never falls through)
2. Last project root that produced a hit on this resolver
3. Upward search from the current working directory
"""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from pathlib import Path
from typing import Optional, Protocol, Union

from task_paths.core.errors import TasksFileNotFoundError
from task_paths.core.models import ResolutionRequest, ResolvedPaths
from task_paths.core.paths import find_project_markers, normalize_windows_path

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

TASKS_FILE_CANDIDATES: tuple[tuple[str, ...], ...] = (
    ("tasks.json",),
    ("tasks", "tasks.json"),
)

PRD_DEFAULT_LOCATIONS: tuple[tuple[str, ...], ...] = (
    ("scripts", "prd.txt"),
    ("scripts", "prd.md"),
    ("docs", "prd.txt"),
    ("docs", "prd.md"),
    ("prd.txt",),
    ("prd.md",),
)

DEFAULT_OUTPUT = ("tasks", "tasks.json")

HOME_FALLBACK_DIR = ".task-master"

REMEDIATION_HINTS = (
    "Run the command from your project directory containing tasks.json",
    "Use --project-root=/path/to/project to specify the project location",
    "Ensure the project root is correctly passed from the calling client",
)


class ResolverLog(Protocol):
    """Anything with ``info`` and ``warning``; ``logging.Logger`` qualifies."""

    def info(self, msg: str) -> None: ...

    def warning(self, msg: str) -> None: ...


def _absolute(base: Path, candidate: PathLike) -> Path:
    """Resolve *candidate* against *base* unless it is already absolute."""
    return Path(os.path.abspath(os.path.join(base, candidate)))


class PathResolver:
    """Tasks-file resolver carrying its own last-found-root cache."""

    def __init__(self, log: Optional[ResolverLog] = None) -> None:
        self.log: ResolverLog = log or logger
        self._lock = threading.Lock()
        self._last_found_root: Optional[Path] = None

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    @property
    def last_found_root(self) -> Optional[Path]:
        with self._lock:
            return self._last_found_root

    def remember_root(self, root: PathLike) -> None:
        with self._lock:
            self._last_found_root = Path(root)

    def forget_root(self) -> None:
        with self._lock:
            self._last_found_root = None

    # ------------------------------------------------------------------
    # Tasks file
    # ------------------------------------------------------------------

    def find_in_directory(
        self,
        dir_path: PathLike,
        explicit_file: Optional[str] = None,
        log: Optional[ResolverLog] = None,
    ) -> Path:
        """Return the first existing tasks file candidate inside *dir_path*.

        Candidates: ``explicit_file`` (relative to *dir_path*),
        ``tasks.json``, ``tasks/tasks.json``. A hit is remembered as the last
        found root.

        Raises:
            TasksFileNotFoundError: none of the candidates exist.
        """
        log = log or self.log
        directory = Path(os.path.abspath(dir_path))

        candidates: list[Path] = []
        if explicit_file:
            candidates.append(_absolute(directory, explicit_file))
        candidates.extend(directory.joinpath(*parts) for parts in TASKS_FILE_CANDIDATES)

        log.info(f"Checking potential task file paths: {', '.join(map(str, candidates))}")

        for candidate in candidates:
            exists = candidate.exists()
            log.info(f"Path {candidate} exists: {exists}")
            if exists:
                log.info(f"Found tasks file at: {candidate}")
                self.remember_root(directory)
                return candidate

        raise TasksFileNotFoundError(
            "Tasks file not found in any of the expected locations relative to "
            f"{directory}: {', '.join(map(str, candidates))}",
            checked_paths=candidates,
        )

    def find_with_parent_search(
        self,
        start_dir: PathLike,
        explicit_file: Optional[str] = None,
        log: Optional[ResolverLog] = None,
    ) -> Path:
        """Walk from *start_dir* towards the filesystem root looking for a tasks file.

        The walk stops before checking the path anchor of *start_dir*
        (``/`` or ``C:\\``), and also when a directory is its own parent.
        """
        log = log or self.log
        start = Path(os.path.abspath(start_dir))
        current = start
        root_dir = Path(start.anchor)
        checked: list[Path] = []

        while current != root_dir:
            try:
                return self.find_in_directory(current, explicit_file, log)
            except TasksFileNotFoundError as exc:
                checked.extend(exc.checked_paths)
                markers = find_project_markers(current)
                if markers:
                    log.info(
                        f"Found project markers in {current} ({', '.join(markers)}), but no tasks.json"
                    )

                parent = current.parent
                if parent == current:
                    break

                log.info(f"Tasks file not found in {current}, searching in parent directory: {parent}")
                current = parent

        raise TasksFileNotFoundError(
            f"Tasks file not found in {start} or any parent directory.",
            checked_paths=checked,
            start_dir=start,
        )

    def find_tasks_json_path(
        self,
        request: Optional[ResolutionRequest] = None,
        log: Optional[ResolverLog] = None,
    ) -> Path:
        """Resolve the tasks file for *request*.

        Raises:
            TasksFileNotFoundError: enriched with diagnostics from the step
                that failed last (explicit root, or the working-directory
                search).
        """
        log = log or self.log
        request = request or ResolutionRequest()

        if request.project_root:
            project_root = normalize_windows_path(request.project_root)
            log.info(f"Using explicitly provided project root (normalized): {project_root}")
            try:
                return self.find_in_directory(project_root, request.file, log)
            except TasksFileNotFoundError as exc:
                server_dir = Path(os.path.abspath(os.path.dirname(sys.argv[0] or ".")))
                raise exc.add_context(
                    "Tasks file not found in any of the expected locations relative to "
                    f'project root "{project_root}".',
                    original_project_root=request.project_root,
                    normalized_project_root=project_root,
                    current_dir=str(Path.cwd()),
                    server_dir=str(server_dir),
                    possible_project_root=str(_absolute(server_dir, os.path.join("..", ".."))),
                    last_found_project_root=_str_or_none(self.last_found_root),
                    searched_paths=exc.detail,
                )

        cached_root = self.last_found_root
        if cached_root is not None:
            log.info(f"Trying last known project root: {cached_root}")
            try:
                return self.find_in_directory(cached_root, request.file, log)
            except TasksFileNotFoundError:
                log.info("Task file not found in last known project root, continuing search.")

        start_dir = Path.cwd()
        log.info(f"Searching for tasks.json starting from current directory: {start_dir}")
        try:
            return self.find_with_parent_search(start_dir, request.file, log)
        except TasksFileNotFoundError as exc:
            raise exc.add_context(
                hints=list(REMEDIATION_HINTS),
                current_dir=str(start_dir),
                last_found_project_root=_str_or_none(self.last_found_root),
                project_root_from_args=request.project_root,
            )

    def find_with_fallbacks(
        self,
        start_dir: PathLike,
        explicit_file: Optional[str] = None,
        log: Optional[ResolverLog] = None,
    ) -> Path:
        """Upward search from *start_dir*, then from the executable's directory,
        then ``~/.task-master``. Re-raises the first failure if all miss."""
        log = log or self.log
        try:
            return self.find_with_parent_search(start_dir, explicit_file, log)
        except TasksFileNotFoundError as first_error:
            exec_dir = Path(os.path.abspath(os.path.dirname(sys.argv[0] or ".")))
            log.info(f"Looking for tasks file relative to executable at: {exec_dir}")
            try:
                return self.find_with_parent_search(exec_dir, explicit_file, log)
            except TasksFileNotFoundError:
                pass

            home_dir = Path.home() / HOME_FALLBACK_DIR
            log.info(f"Looking for tasks file in home directory: {home_dir}")
            try:
                return self.find_in_directory(home_dir, explicit_file, log)
            except TasksFileNotFoundError:
                raise first_error from None

    # ------------------------------------------------------------------
    # Requirements document and output path
    # ------------------------------------------------------------------

    def find_prd_document_path(
        self,
        project_root: PathLike,
        explicit_path: Optional[str] = None,
        log: Optional[ResolverLog] = None,
    ) -> Optional[Path]:
        """Return the PRD path, or ``None`` when nothing exists.

        A missing explicit path is only a warning; default locations are
        probed afterwards.
        """
        log = log or self.log
        root = Path(os.path.abspath(normalize_windows_path(str(project_root))))
        log.info(f"Finding PRD document in normalized root: {root}")

        if explicit_path:
            absolute = _absolute(root, explicit_path)
            if absolute.exists():
                log.info(f"Using explicit PRD path: {absolute}")
                return absolute
            log.warning(f"Explicit PRD path not found: {absolute}")

        for parts in PRD_DEFAULT_LOCATIONS:
            candidate = root.joinpath(*parts)
            if candidate.exists():
                log.info(f"Found PRD at: {candidate}")
                return candidate

        log.warning("No PRD document found in default locations")
        return None

    def resolve_tasks_output_path(
        self,
        project_root: PathLike,
        explicit_path: Optional[str] = None,
        log: Optional[ResolverLog] = None,
    ) -> Path:
        """Return the tasks output path, creating its parent directory if needed."""
        log = log or self.log
        root = Path(os.path.abspath(normalize_windows_path(str(project_root))))
        log.info(f"Resolving tasks output path from normalized root: {root}")

        if explicit_path:
            output = _absolute(root, explicit_path)
            label = "explicit"
        else:
            output = _absolute(root, os.path.join(*DEFAULT_OUTPUT))
            label = "default"

        parent = output.parent
        if not parent.exists():
            log.info(f"Creating {label} output directory: {parent}")
            parent.mkdir(parents=True, exist_ok=True)

        log.info(f"Using {label} output path: {output}")
        return output

    def resolve_project_paths(
        self,
        project_root: PathLike,
        request: Optional[ResolutionRequest] = None,
        log: Optional[ResolverLog] = None,
    ) -> ResolvedPaths:
        log = log or self.log
        request = request or ResolutionRequest()
        root = normalize_windows_path(str(project_root))
        log.info(f"Resolving project paths from normalized root: {root}")

        tasks_request = ResolutionRequest(project_root=root, file=request.file)
        paths = ResolvedPaths(
            project_root=_absolute(Path.cwd(), root),
            tasks_file=self.find_tasks_json_path(tasks_request, log),
            prd_doc=self.find_prd_document_path(root, request.input, log),
            output_path=self.resolve_tasks_output_path(root, request.output, log),
        )

        log.info(f"Resolved project paths: {json.dumps(paths.model_dump(mode='json'), indent=2)}")
        return paths


def _str_or_none(path: Optional[Path]) -> Optional[str]:
    return str(path) if path is not None else None


# ---------------------------------------------------------------------------
# Process-wide default resolver
# ---------------------------------------------------------------------------

default_resolver = PathResolver()


def find_tasks_json_path(
    request: Optional[ResolutionRequest] = None,
    log: Optional[ResolverLog] = None,
) -> Path:
    return default_resolver.find_tasks_json_path(request, log)


def find_prd_document_path(
    project_root: PathLike,
    explicit_path: Optional[str] = None,
    log: Optional[ResolverLog] = None,
) -> Optional[Path]:
    return default_resolver.find_prd_document_path(project_root, explicit_path, log)


def resolve_tasks_output_path(
    project_root: PathLike,
    explicit_path: Optional[str] = None,
    log: Optional[ResolverLog] = None,
) -> Path:
    return default_resolver.resolve_tasks_output_path(project_root, explicit_path, log)


def resolve_project_paths(
    project_root: PathLike,
    request: Optional[ResolutionRequest] = None,
    log: Optional[ResolverLog] = None,
) -> ResolvedPaths:
    return default_resolver.resolve_project_paths(project_root, request, log)
