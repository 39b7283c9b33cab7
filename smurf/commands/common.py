"""Shared CLI application objects and helpers."""

from __future__ import annotations

# ruff: noqa: F401
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from smurf import __version__
from smurf.ai.base import ErrorExplainer
from smurf.ai.explain import explain_error
from smurf.ai.openai_provider import OpenAIExplainer
from smurf.core.config_validation import (
    require_positive_int,
    validate_choice,
    validate_image_reference,
    validate_scan_format,
)
from smurf.core.errors import (
    BackendNotConfigured,
    BinaryResolutionError,
    FormatError,
    ProcessError,
    SmurfError,
)
from smurf.logging_utils import configure_logging, default_log_file, get_logger
from smurf.registry.auth import EnvCredentialProvider
from smurf.registry.push import (
    NOMINAL_PROGRESS_TOTAL,
    DockerPushTransport,
    PushTransport,
    RegistryPushDriver,
)

app = typer.Typer(add_completion=False, no_args_is_help=True)
sdkr_app = typer.Typer(no_args_is_help=True, help="Docker image push and scan commands.")
stf_app = typer.Typer(no_args_is_help=True, help="Terraform remote state commands.")
console = Console()
LOGGER = get_logger()

app.add_typer(sdkr_app, name="sdkr")
app.add_typer(stf_app, name="stf")


def _version_callback(value: bool) -> None:
    """Print package version and exit when requested."""
    if value:
        console.print(__version__)
        raise typer.Exit()


def _ensure_positive(value: int, field_name: str) -> int:
    """Validate positive integer CLI values."""
    try:
        return require_positive_int(value, field_name)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _validate_log_format(value: str) -> str:
    """Validate log format option."""
    try:
        return validate_choice(value.strip().lower(), "log_format", {"text", "json"})
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _validate_image(value: str) -> str:
    """Validate image reference argument."""
    try:
        return validate_image_reference(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _validate_scan_format(value: str) -> str:
    """Validate scanner output format option."""
    try:
        return validate_scan_format(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _create_explainer() -> ErrorExplainer:
    """Create the model-backed explainer used by --ai."""
    return OpenAIExplainer()


def _maybe_explain(use_ai: bool, error_text: str) -> None:
    """Print a model explanation of ``error_text`` when --ai was requested."""
    if not use_ai:
        return
    try:
        explainer = _create_explainer()
    except ValueError as exc:
        console.print(f"[yellow]AI explanation unavailable: {escape(str(exc))}[/yellow]")
        return
    explanation = explain_error(error_text, explainer)
    if explanation is None:
        console.print("[yellow]AI explanation unavailable.[/yellow]")
        return
    console.print("[bold cyan]AI explanation:[/bold cyan]")
    console.print(escape(explanation))


def _fail(message: str, *, detail: str | None = None, use_ai: bool = False) -> NoReturn:
    """Report a failure in red, optionally explain it, and exit with code 1."""
    console.print(f"[red]{escape(message)}[/red]")
    if detail:
        console.print(escape(detail))
    _maybe_explain(use_ai, detail or message)
    raise typer.Exit(code=1)


def _create_push_transport() -> PushTransport:
    """Create the Docker Engine push transport."""
    return DockerPushTransport()


def _create_push_driver(timeout_seconds: int) -> RegistryPushDriver:
    """Create a push driver reading credentials from the environment."""
    return RegistryPushDriver(
        _create_push_transport(),
        EnvCredentialProvider(),
        timeout_seconds=float(timeout_seconds),
    )


class RichPushObserver:
    """Renders push events as a status spinner plus a progress bar."""

    def __init__(self, progress: Progress) -> None:
        self._progress = progress
        self._status_task = progress.add_task("Preparing push...", total=None)
        self._bar_task = progress.add_task("Push Progress", total=NOMINAL_PROGRESS_TOTAL)

    def on_status(self, status: str) -> None:
        self._progress.update(self._status_task, description=escape(status))

    def on_progress_text(self, text: str) -> None:
        self._progress.update(self._bar_task, description=escape(text))

    def on_advance(self, amount: int, total: int) -> None:
        del total
        self._progress.advance(self._bar_task, amount)


@contextmanager
def _push_progress() -> Iterator[RichPushObserver]:
    """Yield a push observer bound to a live rich progress display."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress:
        yield RichPushObserver(progress)


__all__ = [name for name in globals() if not name.startswith("__")]
