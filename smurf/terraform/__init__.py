"""Terraform remote state exports."""

from __future__ import annotations

from smurf.terraform.remediation import REMEDIATION_RULES, RemediationRule, classify_error
from smurf.terraform.state import (
    StateRetriever,
    check_backend,
    format_state,
    terraform_invoker,
    write_state_file,
)

__all__ = [
    "REMEDIATION_RULES",
    "RemediationRule",
    "StateRetriever",
    "check_backend",
    "classify_error",
    "format_state",
    "terraform_invoker",
    "write_state_file",
]
