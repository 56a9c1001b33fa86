"""
Chat completion provider.

Wraps the OpenAI client with:
- Token budget calculation (using tiktoken)
- A client-side timeout
- Mapping of provider failures onto ExternalServiceError

There is no retry: a failed analysis is reported to the caller, who can
trigger it again.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from functools import lru_cache
from typing import Protocol, runtime_checkable

import openai
import tiktoken

from stockpick.core.exceptions import ExternalServiceError
from stockpick.core.logging import get_logger

from .client import OpenAIClientManager
from .config import OpenAISettings, get_model_limits, get_settings
from .prompts import get_instructions


logger = get_logger("openai.generate")


# =============================================================================
# TOKEN COUNTING WITH TIKTOKEN
# =============================================================================


@lru_cache(maxsize=8)
def _get_encoding(model: str) -> tiktoken.Encoding:
    """
    Get the tiktoken encoding for a model.

    Falls back to cl100k_base for models tiktoken does not know.
    """
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        return tiktoken.get_encoding("cl100k_base")


def count_tokens(text: str, model: str | None = None) -> int:
    """Count exact tokens in text using tiktoken."""
    if not text:
        return 0

    model = model or get_settings().default_model
    encoding = _get_encoding(model)
    return len(encoding.encode(text))


def calculate_safe_output_tokens(
    model: str,
    instructions: str,
    prompt: str,
    desired_output: int,
) -> tuple[int, bool]:
    """
    Calculate safe output token budget based on input size.

    Returns:
        Tuple of (safe_output_tokens, input_overflow)
        If input_overflow is True, the input is too large for the model.
    """
    limits = get_model_limits(model)
    input_tokens = count_tokens(instructions + prompt, model)

    available = limits.context_window - input_tokens - limits.reserved_overhead
    if available <= 0:
        return 0, True

    safe_output = min(desired_output, available, limits.max_output)
    if safe_output < 50:
        return 0, True

    return safe_output, False


# =============================================================================
# PROVIDER
# =============================================================================


@runtime_checkable
class CompletionProvider(Protocol):
    """Anything that turns a prompt into free-form report text."""

    @property
    def is_configured(self) -> bool: ...

    async def complete(self, prompt: str) -> str: ...

    async def close(self) -> None: ...


class OpenAICompletionProvider:
    """CompletionProvider backed by OpenAI chat completions."""

    def __init__(
        self,
        settings: OpenAISettings | None = None,
        manager: OpenAIClientManager | None = None,
    ):
        self.settings = settings or get_settings()
        self.manager = manager or OpenAIClientManager(self.settings)

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured

    async def complete(self, prompt: str) -> str:
        """
        Send one analysis prompt and return the raw response text.

        Raises:
            ExternalServiceError: provider not configured, timed out,
                failed, or returned nothing.
        """
        client = await self.manager.get_client()
        if client is None:
            raise ExternalServiceError(
                "AI provider is not configured", error_code="AI_NOT_CONFIGURED"
            )

        model = self.settings.default_model
        instructions = get_instructions()
        max_tokens, overflow = calculate_safe_output_tokens(
            model=model,
            instructions=instructions,
            prompt=prompt,
            desired_output=self.settings.max_tokens,
        )
        if overflow:
            logger.error(f"Prompt too large for {model}")
            raise ExternalServiceError(
                "Analysis prompt is too large for the configured model",
                error_code="AI_PROMPT_TOO_LARGE",
            )

        start_time = datetime.now(UTC)
        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(
                    model=model,
                    messages=[
                        {"role": "system", "content": instructions},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=self.settings.temperature,
                    max_tokens=max_tokens,
                ),
                timeout=self.settings.timeout_seconds,
            )
        except (asyncio.TimeoutError, openai.APITimeoutError) as e:
            logger.warning(f"OpenAI request timed out after {self.settings.timeout_seconds}s")
            raise ExternalServiceError(
                "AI analysis timed out, please try again",
                error_code="AI_TIMEOUT",
                details={"timeout_seconds": self.settings.timeout_seconds, "retry": True},
            ) from e
        except openai.OpenAIError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise ExternalServiceError(
                f"AI provider error: {e}", error_code="AI_PROVIDER_ERROR"
            ) from e

        duration_ms = int((datetime.now(UTC) - start_time).total_seconds() * 1000)
        content = response.choices[0].message.content if response.choices else None
        usage = getattr(response, "usage", None)
        logger.info(
            f"OpenAI completion finished in {duration_ms}ms",
            extra={
                "model": model,
                "duration_ms": duration_ms,
                "input_tokens": getattr(usage, "prompt_tokens", None),
                "output_tokens": getattr(usage, "completion_tokens", None),
            },
        )

        if not content or not content.strip():
            raise ExternalServiceError(
                "AI provider returned an empty response", error_code="AI_EMPTY_RESPONSE"
            )
        return content

    async def close(self) -> None:
        await self.manager.close()
