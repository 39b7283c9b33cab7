"""Image scanning exports."""

from __future__ import annotations

from smurf.scanning.trivy import ScanReport, ScanRunner, trivy_invoker

__all__ = ["ScanReport", "ScanRunner", "trivy_invoker"]
