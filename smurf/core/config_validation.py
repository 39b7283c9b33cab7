"""Shared configuration validation helpers."""

from __future__ import annotations

SCAN_OUTPUT_FORMATS = frozenset({"table", "json", "sarif"})


def require_positive_int(value: int, field_name: str) -> int:
    """Validate a positive integer input and return it."""
    if value <= 0:
        raise ValueError(f"{field_name} must be greater than zero.")
    return value


def validate_choice(value: str, field_name: str, allowed: set[str] | frozenset[str]) -> str:
    """Validate that a string value is within a set of allowed options."""
    if value not in allowed:
        options = ", ".join(sorted(allowed))
        raise ValueError(f"{field_name} must be one of: {options}.")
    return value


def validate_scan_format(value: str) -> str:
    """Validate scanner output format option."""
    return validate_choice(value.strip().lower(), "format", SCAN_OUTPUT_FORMATS)


def validate_image_reference(value: str) -> str:
    """Validate an image reference is non-empty and free of whitespace."""
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("image must be non-empty.")
    if any(char.isspace() for char in cleaned):
        raise ValueError(f"image must not contain whitespace: '{value}'")
    return cleaned
