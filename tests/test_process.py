"""Tests for secure binary resolution and invocation."""

from __future__ import annotations

from pathlib import Path

import pytest

from smurf.core import process as process_module
from smurf.core.errors import BinaryNotFound, InsecureBinary, ProcessError
from smurf.core.process import (
    SECURE_PATH,
    SecureProcessInvoker,
    resolve_binary,
    secure_env,
)


def _write_tool(directory: Path, name: str, body: str, mode: int = 0o755) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    tool = directory / name
    tool.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
    tool.chmod(mode)
    return tool


def test_resolve_binary_returns_absolute_path(tmp_path: Path) -> None:
    bin_dir = tmp_path / "bin"
    tool = _write_tool(bin_dir, "terraform", "exit 0")

    resolved = resolve_binary("terraform", search_path=str(bin_dir))

    assert resolved.is_absolute()
    assert resolved == tool.absolute()


def test_resolve_binary_missing_raises_not_found(tmp_path: Path) -> None:
    empty = tmp_path / "empty"
    empty.mkdir()
    with pytest.raises(BinaryNotFound, match="terraform binary not found"):
        resolve_binary("terraform", search_path=str(empty))


@pytest.mark.parametrize("mode", [0o775, 0o757, 0o777])
def test_resolve_binary_rejects_group_or_other_writable(tmp_path: Path, mode: int) -> None:
    bin_dir = tmp_path / "bin"
    _write_tool(bin_dir, "terraform", "exit 0", mode=mode)

    with pytest.raises(InsecureBinary, match="insecure PATH"):
        resolve_binary("terraform", search_path=str(bin_dir))


def test_missing_binary_spawns_no_process(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[object] = []
    monkeypatch.setattr(process_module.subprocess, "run", lambda *a, **k: calls.append(a))
    empty = tmp_path / "empty"
    empty.mkdir()
    invoker = SecureProcessInvoker("terraform", search_path=str(empty))

    with pytest.raises(BinaryNotFound):
        invoker.run(("state", "pull"), cwd=tmp_path)

    assert calls == []


def test_secure_env_only_passes_named_variables() -> None:
    environ = {"HOME": "/home/ci", "PATH": "/attacker/bin", "AWS_SECRET_ACCESS_KEY": "x"}

    assert secure_env(environ=environ) == {"PATH": SECURE_PATH}
    assert secure_env(("HOME", "PATH", "MISSING"), environ=environ) == {
        "PATH": SECURE_PATH,
        "HOME": "/home/ci",
    }


def test_run_uses_restricted_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEAK_ME", "should-not-pass")
    bin_dir = tmp_path / "bin"
    _write_tool(bin_dir, "envdump", 'echo "$PATH"\necho "${LEAK_ME:-unset}"')
    invoker = SecureProcessInvoker("envdump", search_path=str(bin_dir))

    result = invoker.run((), cwd=tmp_path)

    assert result.ok
    assert result.stdout.decode().splitlines() == [SECURE_PATH, "unset"]


def test_run_captures_stdout_and_stderr_separately(tmp_path: Path) -> None:
    bin_dir = tmp_path / "bin"
    _write_tool(bin_dir, "noisy", "echo out\necho err 1>&2\nexit 3")
    invoker = SecureProcessInvoker("noisy", search_path=str(bin_dir))

    result = invoker.run((), cwd=tmp_path)

    assert result.stdout == b"out\n"
    assert result.stderr == b"err\n"
    assert result.exit_code == 3
    assert result.exit_error == "exit status 3"


def test_run_checked_includes_stderr_in_error(tmp_path: Path) -> None:
    bin_dir = tmp_path / "bin"
    _write_tool(bin_dir, "failing", "echo 'boom happened' 1>&2\nexit 1")
    invoker = SecureProcessInvoker("failing", search_path=str(bin_dir))

    with pytest.raises(ProcessError) as excinfo:
        invoker.run_checked(("x",), cwd=tmp_path)

    assert str(excinfo.value) == "exit status 1: boom happened"
    assert excinfo.value.stderr == "boom happened"
    assert excinfo.value.exit_code == 1


def test_run_checked_without_stderr_reports_exit_status(tmp_path: Path) -> None:
    bin_dir = tmp_path / "bin"
    _write_tool(bin_dir, "quiet", "exit 2")
    invoker = SecureProcessInvoker("quiet", search_path=str(bin_dir))

    with pytest.raises(ProcessError, match=r"^exit status 2$"):
        invoker.run_checked((), cwd=tmp_path)


def test_run_passes_arguments_and_working_directory(tmp_path: Path) -> None:
    bin_dir = tmp_path / "bin"
    workdir = tmp_path / "work"
    workdir.mkdir()
    _write_tool(bin_dir, "echoargs", 'echo "$@"\npwd')
    invoker = SecureProcessInvoker("echoargs", search_path=str(bin_dir))

    result = invoker.run(("state", "pull"), cwd=workdir)

    lines = result.stdout.decode().splitlines()
    assert lines[0] == "state pull"
    assert Path(lines[1]).resolve() == workdir.resolve()


def test_run_timeout_surfaces_deadline_error(tmp_path: Path) -> None:
    bin_dir = tmp_path / "bin"
    _write_tool(bin_dir, "slow", "exec sleep 5")
    invoker = SecureProcessInvoker("slow", search_path=str(bin_dir), timeout_seconds=0.2)

    with pytest.raises(ProcessError, match="context deadline exceeded"):
        invoker.run((), cwd=tmp_path)


def test_invoker_rejects_invalid_configuration() -> None:
    with pytest.raises(ValueError):
        SecureProcessInvoker(" ")
    with pytest.raises(ValueError):
        SecureProcessInvoker("terraform", timeout_seconds=0)
