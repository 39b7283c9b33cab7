"""Redaction helpers applied before tool output is logged or shared."""

from __future__ import annotations

import re
from typing import Final

POTENTIAL_SECRET_PATTERNS: tuple[tuple[str, str], ...] = (
    ("aws_access_key_id", r"(?:AKIA|ASIA)[0-9A-Z]{16}"),
    ("github_token", r"gh[pousr]_[A-Za-z0-9]{20,}"),
    ("docker_pat", r"dckr_pat_[A-Za-z0-9_-]{20,}"),
    ("private_key_block", r"-----BEGIN (?:RSA|OPENSSH|EC|PRIVATE) KEY-----"),
    ("bearer_token", r"(?i)bearer\s+[A-Za-z0-9._-]{16,}"),
)

SENSITIVE_KEY_PATTERN: Final[str] = (
    r"[A-Za-z0-9_.-]*(?:token|secret|password|passphrase|access[_-]?key|"
    r"client[_-]?secret|sas[_-]?token)[A-Za-z0-9_.-]*"
)

_SENSITIVE_JSON_VALUE_PATTERN: Final[re.Pattern[str]] = re.compile(
    rf"(?i)(\"{SENSITIVE_KEY_PATTERN}\"\s*:\s*)\"[^\"]*\""
)
_SENSITIVE_INLINE_VALUE_PATTERN: Final[re.Pattern[str]] = re.compile(
    rf"(?i)(\b{SENSITIVE_KEY_PATTERN}\b)(\s*[:=]\s*)([^\s,;\"']+)"
)
_BASIC_AUTH_URL_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?i)(https?://[^:\s/]+:)[^@\s/]+@"
)


def find_potential_secrets(text: str) -> list[str]:
    """Return labels for secret-like substrings found in text."""
    return [label for label, pattern in POTENTIAL_SECRET_PATTERNS if re.search(pattern, text)]


def redact_sensitive_text(text: str) -> str:
    """Replace secret-like values with redaction placeholders."""
    redacted = text
    for label, pattern in POTENTIAL_SECRET_PATTERNS:
        redacted = re.sub(pattern, f"[REDACTED:{label}]", redacted)
    redacted = _SENSITIVE_JSON_VALUE_PATTERN.sub(r'\1"[REDACTED:value]"', redacted)
    redacted = _SENSITIVE_INLINE_VALUE_PATTERN.sub(r"\1\2[REDACTED:value]", redacted)
    redacted = _BASIC_AUTH_URL_PATTERN.sub(r"\1[REDACTED:value]@", redacted)
    return redacted
