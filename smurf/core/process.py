"""Secure resolution and invocation of external tool binaries.

Binaries are looked up once per call on the search path, rejected when their
permission bits allow group or other writes, and executed with a fixed
``PATH`` and no inherited environment. This keeps an attacker-controlled
directory earlier in ``PATH`` (or a hostile environment variable) from
substituting the tool we meant to run.
"""

from __future__ import annotations

import os
import shutil
import stat
import subprocess  # nosec B404
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from smurf.core.errors import BinaryNotFound, InsecureBinary, ProcessError
from smurf.core.security import redact_sensitive_text
from smurf.logging_utils import get_logger

LOGGER = get_logger()

SECURE_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/bin"
INSECURE_MODE_BITS = stat.S_IWGRP | stat.S_IWOTH


@dataclass(frozen=True)
class ResolvedBinary:
    """Absolute binary path plus the environment it must run with."""

    name: str
    path: Path
    env: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one external binary invocation."""

    command: tuple[str, ...]
    exit_code: int
    stdout: bytes
    stderr: bytes
    duration_seconds: float

    @property
    def ok(self) -> bool:
        """Whether the process exited successfully."""
        return self.exit_code == 0

    @property
    def exit_error(self) -> str | None:
        """Describe a failed exit, or None when the process succeeded."""
        if self.exit_code == 0:
            return None
        if self.exit_code < 0:
            return f"signal: {-self.exit_code}"
        return f"exit status {self.exit_code}"

    @property
    def stderr_text(self) -> str:
        """Decoded stderr with surrounding whitespace removed."""
        return self.stderr.decode("utf-8", errors="replace").strip()


def resolve_binary(name: str, *, search_path: str | None = None) -> Path:
    """Resolve ``name`` to an absolute path and verify it is safe to execute."""
    located = shutil.which(name, path=search_path)
    if located is None:
        raise BinaryNotFound(f"{name} binary not found in PATH")
    resolved = Path(located).absolute()
    try:
        info = resolved.stat()
    except OSError as exc:
        raise BinaryNotFound(f"unable to stat {name} binary: {exc}") from exc
    if info.st_mode & INSECURE_MODE_BITS:
        raise InsecureBinary(
            f"{name} binary is writable; insecure PATH configuration ({resolved})"
        )
    return resolved


def secure_env(
    passthrough: Sequence[str] = (),
    *,
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Return the restricted execution environment.

    Only ``PATH`` is set, to a fixed system value. Variables named in
    ``passthrough`` are copied from ``environ`` when present.
    """
    source = os.environ if environ is None else environ
    env = {"PATH": SECURE_PATH}
    for name in passthrough:
        if name == "PATH":
            continue
        value = source.get(name)
        if value is not None:
            env[name] = value
    return env


class SecureProcessInvoker:
    """Runs one external tool with a verified path and restricted environment."""

    def __init__(
        self,
        binary_name: str,
        *,
        search_path: str | None = None,
        passthrough_env: Sequence[str] = (),
        timeout_seconds: float | None = None,
    ) -> None:
        if not binary_name.strip():
            raise ValueError("binary_name must be non-empty.")
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be greater than zero.")
        self.binary_name = binary_name
        self.search_path = search_path
        self.passthrough_env = tuple(passthrough_env)
        self.timeout_seconds = timeout_seconds

    def resolve(self) -> ResolvedBinary:
        """Resolve the binary and build a fresh environment for this call."""
        path = resolve_binary(self.binary_name, search_path=self.search_path)
        return ResolvedBinary(
            name=self.binary_name,
            path=path,
            env=secure_env(self.passthrough_env),
        )

    def run(self, args: Sequence[str], *, cwd: Path) -> ProcessResult:
        """Execute the binary once and capture stdout and stderr separately."""
        binary = self.resolve()
        command = (str(binary.path), *args)
        LOGGER.debug(
            "Running external tool",
            extra={"tool": self.binary_name, "tool_args": list(args), "cwd": str(cwd)},
        )
        start = time.monotonic()
        try:
            completed = subprocess.run(  # noqa: S603  # nosec B603
                command,
                cwd=str(cwd),
                env=binary.env,
                capture_output=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise ProcessError(
                f"{self.binary_name} {' '.join(args)}: context deadline exceeded"
            ) from exc
        except OSError as exc:
            raise ProcessError(f"failed to start {self.binary_name}: {exc}") from exc
        result = ProcessResult(
            command=command,
            exit_code=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
            duration_seconds=time.monotonic() - start,
        )
        if not result.ok:
            LOGGER.warning(
                "External tool exited with failure",
                extra={
                    "tool": self.binary_name,
                    "exit_code": result.exit_code,
                    "stderr": redact_sensitive_text(result.stderr_text),
                },
            )
        return result

    def run_checked(self, args: Sequence[str], *, cwd: Path) -> ProcessResult:
        """Execute the binary and raise ProcessError on a failed exit."""
        result = self.run(args, cwd=cwd)
        if result.ok:
            return result
        stderr = result.stderr_text
        message = f"{result.exit_error}: {stderr}" if stderr else str(result.exit_error)
        raise ProcessError(message, stderr=stderr, exit_code=result.exit_code)
