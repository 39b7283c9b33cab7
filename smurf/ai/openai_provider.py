"""OpenAI-backed explainer for failed command output."""

from __future__ import annotations

import logging
import os
import time

from openai import APIConnectionError, APITimeoutError, OpenAI, RateLimitError

from smurf.ai.rate_limit import RateLimitBackoff, retry_after_seconds

logger = logging.getLogger(__name__)

SMURF_AI_MODEL_ENV = "SMURF_AI_MODEL"
DEFAULT_MODEL = "gpt-4o-mini"


class OpenAIExplainer:
    """Explainer implementation using the OpenAI Python SDK."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float = 0.2,
        max_output_tokens: int = 800,
        backoff: RateLimitBackoff | None = None,
    ) -> None:
        """Initialize explainer with API key and model settings."""
        resolved_api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not resolved_api_key:
            raise ValueError("OPENAI_API_KEY is required for OpenAIExplainer.")
        self.client = OpenAI(api_key=resolved_api_key)
        self.model = model or os.getenv(SMURF_AI_MODEL_ENV) or DEFAULT_MODEL
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.backoff = backoff or RateLimitBackoff()

    def explain(self, system_prompt: str, user_prompt: str) -> str:
        """Return the model's explanation, retrying transient failures."""
        for attempt in range(1, self.backoff.max_retries + 1):
            try:
                return self._complete(system_prompt, user_prompt)
            except (RateLimitError, APIConnectionError, APITimeoutError) as exc:
                if attempt >= self.backoff.max_retries:
                    raise
                delay = self.backoff.next_delay(
                    attempt=attempt,
                    retry_after=retry_after_seconds(exc),
                )
                logger.warning(
                    "OpenAI request failed (%s); retrying in %.2fs (attempt %s/%s).",
                    type(exc).__name__,
                    delay,
                    attempt,
                    self.backoff.max_retries,
                )
                time.sleep(delay)
        raise RuntimeError("OpenAI retries exhausted.")

    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_output_tokens,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
        message = response.choices[0].message.content
        if not message:
            raise RuntimeError("Model returned empty message content.")
        return message.strip()
