"""Remote Terraform state retrieval, backend precheck and persistence."""

from __future__ import annotations

import json
import os
from pathlib import Path

from smurf.core.errors import (
    BackendNotConfigured,
    EmptyState,
    FormatError,
    ProcessError,
    WriteError,
)
from smurf.core.process import SecureProcessInvoker
from smurf.logging_utils import get_logger

LOGGER = get_logger()

TERRAFORM_BINARY = "terraform"
STATE_PULL_ARGS = ("state", "pull")
BACKEND_CHECK_ARGS = ("init", "-backend=true", "-get=false")
TERRAFORM_METADATA_DIR = ".terraform"
STATE_FILE_MODE = 0o644
STATE_INDENT = "  "


def terraform_invoker(*, timeout_seconds: float | None = None) -> SecureProcessInvoker:
    """Return an invoker for the terraform binary with no inherited environment."""
    return SecureProcessInvoker(TERRAFORM_BINARY, timeout_seconds=timeout_seconds)


class StateRetriever:
    """Fetches the raw remote state document through ``terraform state pull``."""

    def __init__(self, invoker: SecureProcessInvoker) -> None:
        self.invoker = invoker

    def pull(self, working_dir: Path) -> bytes:
        """Return the raw state bytes; empty output is treated as failure."""
        LOGGER.info("State pull requested", extra={"working_dir": str(working_dir)})
        result = self.invoker.run_checked(STATE_PULL_ARGS, cwd=working_dir)
        if not result.stdout:
            raise EmptyState("received empty state")
        LOGGER.info(
            "State pull succeeded",
            extra={"working_dir": str(working_dir), "bytes": len(result.stdout)},
        )
        return result.stdout


def check_backend(invoker: SecureProcessInvoker, working_dir: Path) -> None:
    """Verify that a backend appears initialized for ``working_dir``.

    Raises BackendNotConfigured when the init check fails or the local
    metadata directory is missing. Callers are expected to log the failure
    and attempt the pull anyway: metadata presence does not prove the backend
    is healthy, and its absence does not prove the pull will fail.
    """
    try:
        result = invoker.run(BACKEND_CHECK_ARGS, cwd=working_dir)
    except ProcessError as exc:
        raise BackendNotConfigured("backend initialization check failed") from exc
    if not result.ok:
        raise BackendNotConfigured("backend initialization check failed")
    if not (working_dir / TERRAFORM_METADATA_DIR).is_dir():
        raise BackendNotConfigured(
            "terraform directory not found, run 'terraform init' first"
        )


def format_state(raw: bytes) -> str:
    """Return the state document indented by two spaces with a trailing newline.

    Only insignificant whitespace changes; number literals, string escapes and
    key order are kept exactly as terraform emitted them.
    """
    try:
        text = raw.decode("utf-8")
        json.loads(text)
    except (UnicodeDecodeError, ValueError) as exc:
        raise FormatError(f"failed to format JSON: {exc}") from exc
    return _reindent(text, STATE_INDENT) + "\n"


def _reindent(document: str, indent: str) -> str:
    """Re-indent a valid JSON document token by token."""
    pieces: list[str] = []
    depth = 0
    in_string = False
    escaped = False
    after_open = False
    for char in document:
        if in_string:
            pieces.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char in " \t\r\n":
            continue
        if char in "}]":
            depth -= 1
            # Empty containers stay on one line.
            if not after_open:
                pieces.append("\n" + indent * depth)
            pieces.append(char)
            after_open = False
            continue
        if after_open:
            pieces.append("\n" + indent * depth)
            after_open = False
        if char in "{[":
            pieces.append(char)
            depth += 1
            after_open = True
        elif char == ",":
            pieces.append(",\n" + indent * depth)
        elif char == ":":
            pieces.append(": ")
        else:
            in_string = char == '"'
            pieces.append(char)
    return "".join(pieces)


def write_state_file(raw: bytes, output_file: Path) -> Path:
    """Persist the formatted state document with a fixed 0644 mode.

    Formatting happens before the file is opened, so invalid documents never
    reach disk.
    """
    formatted = format_state(raw)
    target = output_file.expanduser()
    try:
        target.write_text(formatted, encoding="utf-8")
        os.chmod(target, STATE_FILE_MODE)
    except OSError as exc:
        raise WriteError(f"failed to write state file: {exc}") from exc
    LOGGER.info("State written", extra={"output_file": str(target)})
    return target
