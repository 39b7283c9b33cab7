"""Tests for remote state retrieval, backend precheck and persistence."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from smurf.core.errors import (
    BackendNotConfigured,
    EmptyState,
    FormatError,
    ProcessError,
    WriteError,
)
from smurf.core.process import SecureProcessInvoker
from smurf.terraform.state import (
    StateRetriever,
    check_backend,
    format_state,
    write_state_file,
)


def _fake_terraform(tmp_path: Path, body: str) -> SecureProcessInvoker:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)
    tool = bin_dir / "terraform"
    tool.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
    tool.chmod(0o755)
    return SecureProcessInvoker("terraform", search_path=str(bin_dir))


def _workdir(tmp_path: Path) -> Path:
    workdir = tmp_path / "infra"
    workdir.mkdir(exist_ok=True)
    return workdir


def test_pull_returns_raw_state_bytes(tmp_path: Path) -> None:
    invoker = _fake_terraform(tmp_path, """printf '%s' '{"a":1}'""")

    state = StateRetriever(invoker).pull(_workdir(tmp_path))

    assert state == b'{"a":1}'


def test_pull_runs_state_pull_subcommand(tmp_path: Path) -> None:
    invoker = _fake_terraform(tmp_path, 'printf \'{"args":"%s"}\' "$*"')

    state = StateRetriever(invoker).pull(_workdir(tmp_path))

    assert state == b'{"args":"state pull"}'


def test_pull_with_empty_output_is_failure(tmp_path: Path) -> None:
    invoker = _fake_terraform(tmp_path, "exit 0")

    with pytest.raises(EmptyState, match="received empty state"):
        StateRetriever(invoker).pull(_workdir(tmp_path))


def test_pull_failure_carries_stderr(tmp_path: Path) -> None:
    invoker = _fake_terraform(
        tmp_path,
        "echo 'Error: dial tcp: lookup bucket: no such host' 1>&2\nexit 1",
    )

    with pytest.raises(ProcessError) as excinfo:
        StateRetriever(invoker).pull(_workdir(tmp_path))

    assert "no such host" in str(excinfo.value)
    assert str(excinfo.value).startswith("exit status 1")


def test_format_state_indents_two_spaces() -> None:
    assert format_state(b'{"a":1}') == '{\n  "a": 1\n}\n'


def test_format_state_preserves_key_order_and_unicode() -> None:
    formatted = format_state('{"z":"ü","a":[1,2]}'.encode())

    assert formatted == '{\n  "z": "ü",\n  "a": [\n    1,\n    2\n  ]\n}\n'


@pytest.mark.parametrize(
    "literal",
    ["1.10", "1e2", "12345678901234567890.5", "-0.0", "3E-7"],
)
def test_format_state_keeps_number_text(literal: str) -> None:
    raw = f'{{"a":{literal}}}'.encode()

    assert format_state(raw) == f'{{\n  "a": {literal}\n}}\n'


def test_format_state_keeps_string_escapes_and_empty_containers() -> None:
    raw = b'{"s":"a\\"b, {c}: \\u00fc","o":{},"l":[ ]}'

    assert format_state(raw) == (
        '{\n  "s": "a\\"b, {c}: \\u00fc",\n  "o": {},\n  "l": []\n}\n'
    )


def test_format_state_reindents_pretty_input() -> None:
    raw = b'{\n    "version": 4,\n    "outputs": {\n        "ip": "10.0.0.1"\n    }\n}\n'

    assert format_state(raw) == (
        '{\n  "version": 4,\n  "outputs": {\n    "ip": "10.0.0.1"\n  }\n}\n'
    )


def test_write_state_file_keeps_number_text(tmp_path: Path) -> None:
    target = tmp_path / "state.json"

    write_state_file(b'{"price":1.10}', target)

    assert target.read_text(encoding="utf-8") == '{\n  "price": 1.10\n}\n'


def test_format_state_rejects_invalid_json() -> None:
    with pytest.raises(FormatError, match="failed to format JSON"):
        format_state(b"not json")


def test_write_state_file_uses_fixed_mode(tmp_path: Path) -> None:
    target = tmp_path / "state.json"

    written = write_state_file(b'{"version":4}', target)

    assert written == target
    assert target.read_text(encoding="utf-8") == '{\n  "version": 4\n}\n'
    assert stat.S_IMODE(target.stat().st_mode) == 0o644


def test_write_state_file_does_not_write_unformattable_state(tmp_path: Path) -> None:
    target = tmp_path / "state.json"

    with pytest.raises(FormatError):
        write_state_file(b"{broken", target)

    assert not target.exists()


def test_write_state_file_reports_write_errors(tmp_path: Path) -> None:
    with pytest.raises(WriteError, match="failed to write state file"):
        write_state_file(b"{}", tmp_path / "missing-dir" / "state.json")


def test_check_backend_passes_with_metadata_dir(tmp_path: Path) -> None:
    workdir = _workdir(tmp_path)
    (workdir / ".terraform").mkdir()
    invoker = _fake_terraform(tmp_path, 'test "$1" = init || exit 9')

    check_backend(invoker, workdir)


def test_check_backend_requires_metadata_dir(tmp_path: Path) -> None:
    invoker = _fake_terraform(tmp_path, "exit 0")

    with pytest.raises(BackendNotConfigured, match="terraform directory not found"):
        check_backend(invoker, _workdir(tmp_path))


def test_check_backend_init_failure(tmp_path: Path) -> None:
    workdir = _workdir(tmp_path)
    (workdir / ".terraform").mkdir()
    invoker = _fake_terraform(tmp_path, "exit 1")

    with pytest.raises(BackendNotConfigured, match="backend initialization check failed"):
        check_backend(invoker, workdir)


def test_check_backend_uses_non_mutating_init_flags(tmp_path: Path) -> None:
    workdir = _workdir(tmp_path)
    (workdir / ".terraform").mkdir()
    record = tmp_path / "args.txt"
    invoker = _fake_terraform(tmp_path, f'echo "$*" > "{record}"')

    check_backend(invoker, workdir)

    assert record.read_text(encoding="utf-8").strip() == "init -backend=true -get=false"
