"""Valkey-backed document store.

Layout, under ``{prefix}``:

* ``{prefix}:doc:{path}`` is a hash whose field values are JSON-encoded.
* ``{prefix}:idx:{collection}`` is a set of the child document paths.

Replace-writes run DEL + HSET in one MULTI block so readers never see a
half-written document. Counters use HINCRBY, which stores plain integers
that are also valid JSON.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from stockpick.core.config import settings
from stockpick.core.logging import get_logger

from .base import Document, collection_of, sort_documents
from .client import close_valkey_client, valkey_connection, valkey_healthcheck


logger = get_logger("store.valkey")


def _serialize(value: Any) -> str:
    return json.dumps(value, default=str, ensure_ascii=False)


def _deserialize(value: str) -> Any:
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return value


def _decode(raw: dict[str, str]) -> Optional[Document]:
    if not raw:
        return None
    return {field: _deserialize(value) for field, value in raw.items()}


class ValkeyDocumentStore:
    """DocumentStore over a Valkey (Redis protocol) server."""

    def __init__(self, url: str | None = None, prefix: str | None = None):
        self.url = url or settings.valkey_url
        self.prefix = prefix or settings.store_prefix

    def doc_key(self, path: str) -> str:
        return f"{self.prefix}:doc:{path.strip('/')}"

    def index_key(self, collection: str) -> str:
        return f"{self.prefix}:idx:{collection.strip('/')}"

    async def get(self, path: str) -> Optional[Document]:
        async with valkey_connection(self.url, "get") as client:
            raw = await client.hgetall(self.doc_key(path))
        return _decode(raw)

    async def set(self, path: str, data: Document, merge: bool = False) -> None:
        path = path.strip("/")
        mapping = {field: _serialize(value) for field, value in data.items()}
        async with valkey_connection(self.url, "set") as client:
            async with client.pipeline(transaction=True) as pipe:
                if not merge:
                    pipe.delete(self.doc_key(path))
                if mapping:
                    pipe.hset(self.doc_key(path), mapping=mapping)
                pipe.sadd(self.index_key(collection_of(path)), path)
                await pipe.execute()
        logger.debug(f"Stored document {path}", extra={"merge": merge})

    async def delete(self, path: str) -> bool:
        path = path.strip("/")
        async with valkey_connection(self.url, "delete") as client:
            async with client.pipeline(transaction=True) as pipe:
                pipe.delete(self.doc_key(path))
                pipe.srem(self.index_key(collection_of(path)), path)
                deleted, _ = await pipe.execute()
        return bool(deleted)

    async def list(
        self,
        collection: str,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        index = self.index_key(collection)
        async with valkey_connection(self.url, "list") as client:
            paths = sorted(await client.smembers(index))
            if not paths:
                return []
            async with client.pipeline(transaction=False) as pipe:
                for path in paths:
                    pipe.hgetall(self.doc_key(path))
                rows = await pipe.execute()

            documents: list[Document] = []
            stale: list[str] = []
            for path, raw in zip(paths, rows):
                document = _decode(raw)
                if document is None:
                    stale.append(path)
                else:
                    documents.append(document)
            if stale:
                await client.srem(index, *stale)
                logger.debug(f"Dropped {len(stale)} stale index entries from {collection}")

        return sort_documents(documents, order_by, descending, limit)

    async def increment(self, path: str, field: str, amount: int = 1) -> int:
        path = path.strip("/")
        async with valkey_connection(self.url, "increment") as client:
            async with client.pipeline(transaction=True) as pipe:
                pipe.hincrby(self.doc_key(path), field, amount)
                pipe.sadd(self.index_key(collection_of(path)), path)
                value, _ = await pipe.execute()
        return int(value)

    async def ping(self) -> bool:
        return await valkey_healthcheck(self.url)

    async def close(self) -> None:
        await close_valkey_client(self.url)
