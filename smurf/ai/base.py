"""Explainer abstraction for model-backed error explanations."""

from __future__ import annotations

from typing import Protocol


class ErrorExplainer(Protocol):
    """Interface implemented by all explanation providers."""

    def explain(self, system_prompt: str, user_prompt: str) -> str:
        """Return a plain-text explanation for the prompt pair."""
        ...
