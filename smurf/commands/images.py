"""Image push and scan commands."""

from __future__ import annotations

# mypy: ignore-errors
# ruff: noqa: B008,F403,F405,I001
from smurf.commands.common import *
from smurf.scanning.trivy import ScanRunner, trivy_invoker


@sdkr_app.command("push")
def push_image(
    image: Annotated[str, typer.Argument(help="Image reference, e.g. myorg/app:1.2.0.")],
    timeout: Annotated[
        int,
        typer.Option("--timeout", help="Overall push deadline in seconds."),
    ] = 300,
    ai: Annotated[
        bool,
        typer.Option("--ai/--no-ai", help="Ask a model to explain failures."),
    ] = False,
) -> None:
    """Push an image to its registry using DOCKER_USERNAME/DOCKER_PASSWORD.

    Example:
        smurf sdkr push myorg/app:1.2.0 --timeout 600
    """
    resolved_image = _validate_image(image)
    driver = _create_push_driver(_ensure_positive(timeout, "timeout"))
    console.print(f"Pushing image {escape(resolved_image)}...")
    try:
        with _push_progress() as observer:
            result = driver.push(resolved_image, observer)
    except SmurfError as exc:
        _fail(f"Failed to push image {resolved_image}: {exc}", use_ai=ai)
    LOGGER.info(
        "Push command finished",
        extra={"image": resolved_image, "events": result.events_processed},
    )
    console.print(f"[green]Successfully pushed image {escape(resolved_image)}[/green]")


@sdkr_app.command("scan")
def scan_image(
    image: Annotated[str, typer.Argument(help="Image reference to scan.")],
    output_format: Annotated[
        str,
        typer.Option("--format", help="Report format: table, json or sarif."),
    ] = "table",
    timeout: Annotated[
        int | None,
        typer.Option("--timeout", help="Optional scan deadline in seconds."),
    ] = None,
    ai: Annotated[
        bool,
        typer.Option("--ai/--no-ai", help="Ask a model to explain failures."),
    ] = False,
) -> None:
    """Scan an image for vulnerabilities with trivy and print its report."""
    resolved_image = _validate_image(image)
    resolved_format = _validate_scan_format(output_format)
    timeout_seconds = _ensure_positive(timeout, "timeout") if timeout is not None else None
    runner = ScanRunner(
        trivy_invoker(timeout_seconds=timeout_seconds),
        output_format=resolved_format,
    )
    try:
        with console.status("Running 'trivy image' scan"):
            report = runner.scan(resolved_image)
    except SmurfError as exc:
        _fail(f"Error running 'trivy image': {exc}", use_ai=ai)
    if report.output:
        if resolved_format == "table":
            console.print("Trivy scan results:")
            console.print(
                report.output,
                style="yellow",
                markup=False,
                highlight=False,
                soft_wrap=True,
            )
        else:
            typer.echo(report.output, nl=False)
    console.print("[green]Scan completed successfully.[/green]")
