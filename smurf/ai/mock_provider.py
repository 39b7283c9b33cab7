"""Test explainer that returns queued responses."""

from __future__ import annotations

from collections.abc import Iterable


class StaticExplainer:
    """A deterministic explainer for unit tests."""

    def __init__(self, responses: Iterable[str]) -> None:
        """Initialize with queued explanation strings."""
        self._responses = list(responses)
        self.prompts: list[tuple[str, str]] = []

    def explain(self, system_prompt: str, user_prompt: str) -> str:
        """Return next queued response and record prompts."""
        self.prompts.append((system_prompt, user_prompt))
        if not self._responses:
            raise RuntimeError("StaticExplainer has no remaining responses.")
        return self._responses.pop(0)
