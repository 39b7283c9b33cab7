"""Terraform remote state commands."""

from __future__ import annotations

# mypy: ignore-errors
# ruff: noqa: B008,F403,F405,I001
from smurf.commands.common import *
from smurf.terraform.remediation import classify_error
from smurf.terraform.state import (
    StateRetriever,
    check_backend,
    format_state,
    terraform_invoker,
    write_state_file,
)


@stf_app.command("state-pull")
def state_pull(
    working_dir: Annotated[
        Path,
        typer.Option(
            "--dir",
            help="Terraform working directory.",
            exists=True,
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ] = Path("."),
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Save the formatted state to this file."),
    ] = None,
    ai: Annotated[
        bool,
        typer.Option("--ai/--no-ai", help="Ask a model to explain failures."),
    ] = False,
) -> None:
    """Pull the current remote state and print it or save it to a file.

    Examples:
        smurf stf state-pull --dir ./infra
        smurf stf state-pull --dir ./infra --output state.json
    """
    invoker = terraform_invoker()
    try:
        check_backend(invoker, working_dir)
    except BackendNotConfigured as exc:
        console.print(
            f"[yellow]No remote backend configured or unable to check: {escape(str(exc))}[/yellow]"
        )
        console.print("Attempting to pull state anyway...")
        LOGGER.warning("Backend precheck failed", extra={"working_dir": str(working_dir)})
    except BinaryResolutionError as exc:
        _fail(f"Failed to pull remote state: {exc}", detail=classify_error(str(exc)), use_ai=ai)

    console.print(f"Pulling remote state from: {escape(working_dir.name)}")
    try:
        state = StateRetriever(invoker).pull(working_dir)
    except SmurfError as exc:
        _fail(f"Failed to pull remote state: {exc}", detail=classify_error(str(exc)), use_ai=ai)

    if output is not None:
        try:
            saved = write_state_file(state, output)
        except SmurfError as exc:
            _fail(str(exc), use_ai=ai)
        console.print(f"[green]Remote state saved to: {escape(str(saved))}[/green]")
        return

    try:
        typer.echo(format_state(state), nl=False)
    except FormatError:
        typer.echo(state.decode("utf-8", errors="replace"))
    console.print("[green]Successfully pulled remote state[/green]")
