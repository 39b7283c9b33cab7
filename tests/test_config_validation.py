"""Tests for shared configuration validation helpers."""

from __future__ import annotations

import pytest

from smurf.core.config_validation import (
    require_positive_int,
    validate_choice,
    validate_image_reference,
    validate_scan_format,
)


def test_require_positive_int() -> None:
    assert require_positive_int(300, "timeout") == 300
    with pytest.raises(ValueError, match="timeout must be greater than zero"):
        require_positive_int(0, "timeout")


def test_validate_choice_lists_allowed_values() -> None:
    with pytest.raises(ValueError, match="log_format must be one of: json, text"):
        validate_choice("xml", "log_format", {"text", "json"})


@pytest.mark.parametrize(("raw", "expected"), [("table", "table"), (" SARIF ", "sarif")])
def test_validate_scan_format_normalizes(raw: str, expected: str) -> None:
    assert validate_scan_format(raw) == expected


def test_validate_image_reference() -> None:
    assert validate_image_reference(" myorg/app:1.0 ") == "myorg/app:1.0"
    with pytest.raises(ValueError, match="non-empty"):
        validate_image_reference("  ")
    with pytest.raises(ValueError, match="whitespace"):
        validate_image_reference("myorg/app 1.0")
