"""Optional model-backed explanations for failed commands."""

from __future__ import annotations

from openai import OpenAIError

from smurf.ai.base import ErrorExplainer
from smurf.core.security import redact_sensitive_text
from smurf.logging_utils import get_logger

LOGGER = get_logger()

EXPLAIN_SYSTEM_PROMPT = (
    "You are a DevOps assistant. Explain the following command-line failure from "
    "Docker, Trivy or Terraform in plain language, name the most likely cause, and "
    "list at most three concrete next steps. Keep the answer under 150 words."
)


def build_user_prompt(error_text: str) -> str:
    """Return the user prompt for an error, with secret-like values redacted."""
    return f"Error output:\n{redact_sensitive_text(error_text.strip())}"


def explain_error(error_text: str, explainer: ErrorExplainer) -> str | None:
    """Ask the explainer about ``error_text``.

    Explanations are advisory: provider failures are logged and None is
    returned so the original error remains the reported outcome.
    """
    if not error_text.strip():
        return None
    try:
        return explainer.explain(EXPLAIN_SYSTEM_PROMPT, build_user_prompt(error_text))
    except (OpenAIError, RuntimeError, ValueError) as exc:
        LOGGER.warning("Error explanation unavailable", extra={"error": str(exc)})
        return None
