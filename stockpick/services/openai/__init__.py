"""OpenAI chat completion provider."""

from .client import OpenAIClientManager
from .config import ModelLimits, OpenAISettings, get_model_limits, get_settings
from .generate import (
    CompletionProvider,
    OpenAICompletionProvider,
    calculate_safe_output_tokens,
    count_tokens,
)
from .prompts import ANALYST_INSTRUCTIONS, get_instructions

__all__ = [
    "ANALYST_INSTRUCTIONS",
    "CompletionProvider",
    "ModelLimits",
    "OpenAIClientManager",
    "OpenAICompletionProvider",
    "OpenAISettings",
    "calculate_safe_output_tokens",
    "count_tokens",
    "get_instructions",
    "get_model_limits",
    "get_settings",
]
