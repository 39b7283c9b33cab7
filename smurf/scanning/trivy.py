"""Vulnerability scan runner that relays ``trivy image`` output verbatim."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from smurf.core.config_validation import validate_scan_format
from smurf.core.process import SecureProcessInvoker
from smurf.logging_utils import get_logger

LOGGER = get_logger()

TRIVY_BINARY = "trivy"
# Scanner cache location, registry auth and daemon socket settings.
TRIVY_PASSTHROUGH_ENV = (
    "HOME",
    "XDG_CACHE_HOME",
    "TRIVY_CACHE_DIR",
    "TRIVY_USERNAME",
    "TRIVY_PASSWORD",
    "DOCKER_HOST",
    "DOCKER_CONFIG",
)


@dataclass(frozen=True)
class ScanReport:
    """Scanner output for one image, uninterpreted."""

    image: str
    output_format: str
    output: str


def trivy_invoker(*, timeout_seconds: float | None = None) -> SecureProcessInvoker:
    """Return an invoker for the trivy binary."""
    return SecureProcessInvoker(
        TRIVY_BINARY,
        passthrough_env=TRIVY_PASSTHROUGH_ENV,
        timeout_seconds=timeout_seconds,
    )


class ScanRunner:
    """Runs one image scan and returns the tool's formatted report."""

    def __init__(
        self,
        invoker: SecureProcessInvoker | None = None,
        *,
        output_format: str = "table",
        working_dir: Path | None = None,
    ) -> None:
        self.invoker = invoker or trivy_invoker()
        self.output_format = validate_scan_format(output_format)
        self.working_dir = working_dir or Path.cwd()

    def scan(self, image: str) -> ScanReport:
        """Scan ``image``; raises ProcessError carrying stderr on failure."""
        LOGGER.info("Scan requested", extra={"image": image, "format": self.output_format})
        result = self.invoker.run_checked(
            ("image", image, "--format", self.output_format),
            cwd=self.working_dir,
        )
        LOGGER.info(
            "Scan completed",
            extra={"image": image, "duration_seconds": round(result.duration_seconds, 2)},
        )
        return ScanReport(
            image=image,
            output_format=self.output_format,
            output=result.stdout.decode("utf-8", errors="replace"),
        )
