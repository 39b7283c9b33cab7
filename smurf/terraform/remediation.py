"""Map raw state-pull failures to actionable remediation guidance."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RemediationRule:
    """Substring patterns mapped to one remediation message."""

    category: str
    patterns: tuple[str, ...]
    message: str

    def matches(self, error_message: str) -> bool:
        """Return whether any pattern occurs in the error message."""
        return any(pattern in error_message for pattern in self.patterns)


# Ordered most specific first; the first matching rule wins.
REMEDIATION_RULES: tuple[RemediationRule, ...] = (
    RemediationRule(
        category="missing_state",
        patterns=("no state file",),
        message=(
            "No remote state found. This could mean:\n"
            "  • The remote backend hasn't been initialized (run 'terraform init')\n"
            "  • No resources have been created yet\n"
            "  • The state file doesn't exist in the remote backend"
        ),
    ),
    RemediationRule(
        category="access_denied",
        patterns=("access denied", "permission denied"),
        message=(
            "Permission denied accessing remote state. Check:\n"
            "  • Your AWS/GCP/Azure credentials are properly configured\n"
            "  • You have read access to the backend\n"
            "  • The backend configuration is correct"
        ),
    ),
    RemediationRule(
        category="timeout",
        patterns=("context deadline exceeded", "timeout"),
        message=(
            "Timeout while connecting to remote backend. Check:\n"
            "  • Your network connection\n"
            "  • The backend endpoint is accessible\n"
            "  • Proxy/firewall settings"
        ),
    ),
    RemediationRule(
        category="dns",
        patterns=("no such host",),
        message=(
            "Cannot resolve backend hostname. Check:\n"
            "  • Your DNS configuration\n"
            "  • The backend endpoint URL is correct"
        ),
    ),
)


def generic_remediation(error_message: str) -> str:
    """Return the catch-all troubleshooting message echoing the original error."""
    return (
        f"Failed to pull remote state: {error_message}\n\n"
        "Troubleshooting steps:\n"
        "  1. Run 'terraform init'\n"
        "  2. Verify backend configuration\n"
        "  3. Check cloud provider credentials\n"
        "  4. Ensure network access to backend"
    )


def classify_error(
    error_message: str,
    rules: tuple[RemediationRule, ...] = REMEDIATION_RULES,
) -> str:
    """Return remediation text for the first rule matching ``error_message``."""
    for rule in rules:
        if rule.matches(error_message):
            return rule.message
    return generic_remediation(error_message)
