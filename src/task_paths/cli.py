"""CLI entrypoint – ``task-paths tasks [--project-root DIR]``."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from task_paths.core.config import Settings, load_settings
from task_paths.core.errors import TasksFileNotFoundError
from task_paths.core.models import ResolutionRequest
from task_paths.core.paths import get_package_path
from task_paths.core.resolver import default_resolver

logger = logging.getLogger("task_paths.cli")

err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        obj = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(obj)


_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _setup_logging(settings: Settings, verbose: bool = False) -> None:
    handler = logging.StreamHandler(sys.stderr)
    if settings.log_format == "text":
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    else:
        handler.setFormatter(_JsonFormatter())

    root = logging.getLogger("task_paths")
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else settings.log_level)
    root.propagate = False


# ---------------------------------------------------------------------------
# Error rendering
# ---------------------------------------------------------------------------

def _render_not_found(exc: TasksFileNotFoundError) -> None:
    logger.error("%s: %s", exc.code, exc.describe())
    err_console.print(f"[bold red]Error ({exc.code}):[/bold red] {escape(exc.message)}")
    if not exc.diagnostics:
        return

    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value")
    for key, value in exc.diagnostics.items():
        if isinstance(value, (list, tuple)):
            value = "\n".join(f"{idx}. {item}" for idx, item in enumerate(value, 1))
        table.add_row(key, "-" if value is None else str(value))
    err_console.print(table)


def _render_os_error(exc: OSError) -> None:
    logger.error("Cannot prepare output location: %s", exc)
    err_console.print(f"[bold red]Error:[/bold red] cannot prepare output location: {escape(str(exc))}")


def _project_root(ctx: click.Context, explicit: Optional[str]) -> Optional[str]:
    settings: Settings = ctx.obj["settings"]
    return explicit or settings.project_root


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

_project_root_option = click.option(
    "--project-root",
    default=None,
    help="Project root to use instead of searching (env: TASK_PATHS_PROJECT_ROOT).",
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """Locate a project's tasks file, PRD and output path."""
    try:
        settings = load_settings()
    except ValueError as exc:
        raise click.UsageError(f"Invalid environment configuration: {exc}") from exc
    _setup_logging(settings, verbose)
    ctx.obj = {"settings": settings}


@main.command()
@_project_root_option
@click.option("--file", "file_", default=None, help="Tasks file path relative to the project root.")
@click.option(
    "--wide",
    is_flag=True,
    help="Also search near the executable and in ~/.task-master. Ignored when a project root is given.",
)
@click.pass_context
def tasks(ctx: click.Context, project_root: Optional[str], file_: Optional[str], wide: bool):
    """Print the absolute path of the tasks file."""
    root = _project_root(ctx, project_root)
    if wide and root:
        click.echo(f"Warning: --wide is ignored because project root {root} was given.", err=True)
    try:
        if wide and not root:
            found = default_resolver.find_with_fallbacks(Path.cwd(), file_)
        else:
            found = default_resolver.find_tasks_json_path(
                ResolutionRequest(project_root=root, file=file_)
            )
    except TasksFileNotFoundError as exc:
        _render_not_found(exc)
        raise SystemExit(1)
    click.echo(str(found))


@main.command()
@_project_root_option
@click.option("--input", "input_", default=None, help="Explicit PRD path (absolute or root-relative).")
@click.pass_context
def prd(ctx: click.Context, project_root: Optional[str], input_: Optional[str]):
    """Print the path of the requirements document (PRD)."""
    root = _project_root(ctx, project_root) or str(Path.cwd())
    found = default_resolver.find_prd_document_path(root, input_)
    if found is None:
        click.echo("No PRD document found.", err=True)
        raise SystemExit(1)
    click.echo(str(found))


@main.command()
@_project_root_option
@click.option("--output", "output", default=None, help="Explicit output path (absolute or root-relative).")
@click.pass_context
def output(ctx: click.Context, project_root: Optional[str], output: Optional[str]):
    """Print the tasks output path, creating its directory if needed."""
    root = _project_root(ctx, project_root) or str(Path.cwd())
    try:
        path = default_resolver.resolve_tasks_output_path(root, output)
    except OSError as exc:
        _render_os_error(exc)
        raise SystemExit(1)
    click.echo(str(path))


@main.command()
@_project_root_option
@click.option("--file", "file_", default=None, help="Tasks file path relative to the project root.")
@click.option("--input", "input_", default=None, help="Explicit PRD path.")
@click.option("--output", "output", default=None, help="Explicit output path.")
@click.option("--json", "as_json", is_flag=True, help="Emit the resolved paths as JSON.")
@click.pass_context
def resolve(
    ctx: click.Context,
    project_root: Optional[str],
    file_: Optional[str],
    input_: Optional[str],
    output: Optional[str],
    as_json: bool,
):
    """Resolve the tasks file, PRD and output path in one go."""
    root = _project_root(ctx, project_root) or str(Path.cwd())
    request = ResolutionRequest(project_root=root, file=file_, input=input_, output=output)
    try:
        paths = default_resolver.resolve_project_paths(root, request)
    except TasksFileNotFoundError as exc:
        _render_not_found(exc)
        raise SystemExit(1)
    except OSError as exc:
        _render_os_error(exc)
        raise SystemExit(1)

    if as_json:
        click.echo(paths.model_dump_json(indent=2))
    else:
        click.echo("\n".join(paths.as_lines()))


@main.command(name="package-path")
def package_path():
    """Print the installation directory of this package."""
    click.echo(str(get_package_path()))


if __name__ == "__main__":
    main()
