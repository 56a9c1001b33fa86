"""Valkey client connection management."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as redis
from redis.asyncio import ConnectionPool, Redis

from stockpick.core.config import settings
from stockpick.core.exceptions import StoreUnavailableError
from stockpick.core.logging import get_logger


logger = get_logger("store.client")

# Connection pools are bound to the event loop that created them
_pools: dict[tuple[int, str], ConnectionPool] = {}
_clients: dict[tuple[int, str], Redis] = {}


def _get_loop_id() -> int:
    """Get current event loop id for tracking client per loop."""
    try:
        loop = asyncio.get_running_loop()
        return id(loop)
    except RuntimeError:
        return 0


def _pool_key(url: str | None) -> tuple[int, str]:
    return _get_loop_id(), url or settings.valkey_url


async def init_valkey_pool(url: str | None = None) -> ConnectionPool:
    """Initialize Valkey connection pool for current event loop."""
    key = _pool_key(url)
    if key not in _pools:
        _pools[key] = ConnectionPool.from_url(
            key[1],
            max_connections=settings.valkey_max_connections,
            decode_responses=True,
            socket_timeout=5.0,
            socket_connect_timeout=5.0,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        logger.info(
            "Valkey connection pool initialized",
            extra={"url": key[1], "loop_id": key[0]},
        )
    return _pools[key]


async def get_valkey_client(url: str | None = None) -> Redis:
    """Get Valkey client instance for current event loop."""
    key = _pool_key(url)
    if key not in _clients:
        pool = await init_valkey_pool(url)
        _clients[key] = Redis(connection_pool=pool)
    return _clients[key]


async def close_valkey_client(url: str | None = None) -> None:
    """Close Valkey client and connection pool for current event loop."""
    key = _pool_key(url)
    if key in _clients:
        await _clients.pop(key).aclose()
    if key in _pools:
        await _pools.pop(key).disconnect()
    logger.info("Valkey connection pool closed", extra={"loop_id": key[0]})


async def valkey_healthcheck(url: str | None = None) -> bool:
    """Check Valkey connection health."""
    try:
        client = await get_valkey_client(url)
        result = await asyncio.wait_for(client.ping(), timeout=5.0)
        return result is True or result == "PONG"
    except Exception as e:
        logger.warning(f"Valkey healthcheck failed: {e}")
        return False


@asynccontextmanager
async def valkey_connection(url: str | None = None, operation: str = "operation") -> AsyncIterator[Redis]:
    """Yield a client; Valkey failures surface as StoreUnavailableError."""
    client = await get_valkey_client(url)
    try:
        yield client
    except redis.RedisError as e:
        logger.error(f"Valkey {operation} failed: {e}")
        raise StoreUnavailableError(details={"operation": operation}) from e
