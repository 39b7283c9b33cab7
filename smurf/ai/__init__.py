"""Error explanation providers."""

from smurf.ai.explain import explain_error
from smurf.ai.mock_provider import StaticExplainer
from smurf.ai.openai_provider import OpenAIExplainer

__all__ = ["OpenAIExplainer", "StaticExplainer", "explain_error"]
