"""Root CLI callback: version, verbosity and log destination."""

from __future__ import annotations

# mypy: ignore-errors
# ruff: noqa: B008,F403,F405,I001
from smurf.commands.common import *


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show smurf version and exit.",
            is_eager=True,
            callback=_version_callback,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose debug logging."),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write logs to this file (default: $SMURF_LOG_FILE or ~/.smurf/smurf.log).",
        ),
    ] = None,
    log_format: Annotated[
        str,
        typer.Option("--log-format", help="Log record format: text or json."),
    ] = "text",
) -> None:
    """DevOps helpers for registry pushes, image scans and Terraform state."""
    resolved_format = _validate_log_format(log_format)
    configure_logging(
        log_file=log_file or default_log_file(),
        verbose=verbose,
        json_format=resolved_format == "json",
    )
