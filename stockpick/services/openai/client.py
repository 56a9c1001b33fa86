"""
OpenAI async client manager with connection pooling.

The client is created lazily under an asyncio.Lock, refreshed after its
TTL expires, and shares one pooled httpx.AsyncClient.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import httpx
from openai import AsyncOpenAI

from stockpick.core.logging import get_logger

from .config import OpenAISettings, get_settings


logger = get_logger("openai.client")


class OpenAIClientManager:
    """
    Manages the OpenAI client lifecycle.

    Usage:
        manager = OpenAIClientManager()
        client = await manager.get_client()
        response = await client.chat.completions.create(...)
    """

    def __init__(self, settings: OpenAISettings | None = None):
        self._settings = settings or get_settings()
        self._client: AsyncOpenAI | None = None
        self._created_at: datetime | None = None
        self._lock = asyncio.Lock()
        self._http_client: httpx.AsyncClient | None = None

    @property
    def settings(self) -> OpenAISettings:
        """Get current settings."""
        return self._settings

    def _is_client_expired(self) -> bool:
        """Check if the current client has exceeded its TTL."""
        if not self._created_at:
            return True
        return datetime.now(UTC) - self._created_at > self._settings.client_ttl

    async def get_client(self) -> AsyncOpenAI | None:
        """Get or create an OpenAI client; None when no API key is configured."""
        async with self._lock:
            if self._client is not None and not self._is_client_expired():
                return self._client

            if not self._settings.api_key:
                logger.warning("OpenAI API key not configured")
                return None

            await self._close_client()

            self._http_client = httpx.AsyncClient(
                limits=httpx.Limits(
                    max_connections=self._settings.max_connections,
                    max_keepalive_connections=max(self._settings.max_connections // 2, 1),
                ),
                timeout=httpx.Timeout(self._settings.timeout_seconds + 15.0, connect=10.0),
            )
            self._client = AsyncOpenAI(
                api_key=self._settings.api_key,
                http_client=self._http_client,
                max_retries=0,
            )
            self._created_at = datetime.now(UTC)

            logger.debug("Created new OpenAI client")
            return self._client

    async def _close_client(self) -> None:
        """Close the current client and HTTP client."""
        if self._http_client:
            try:
                await self._http_client.aclose()
            except Exception as e:
                logger.debug(f"Error closing HTTP client: {e}")
            self._http_client = None

        self._client = None
        self._created_at = None

    async def close(self) -> None:
        """Close the client manager and release resources."""
        async with self._lock:
            await self._close_client()
