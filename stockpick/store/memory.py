"""In-process document store for development and tests."""

from __future__ import annotations

import asyncio
import copy
from typing import Optional

from stockpick.core.logging import get_logger

from .base import Document, collection_of, sort_documents


logger = get_logger("store.memory")


class MemoryDocumentStore:
    """Dict-backed DocumentStore. Mutations are serialized with a lock."""

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._lock = asyncio.Lock()

    async def get(self, path: str) -> Optional[Document]:
        document = self._documents.get(path.strip("/"))
        return copy.deepcopy(document) if document is not None else None

    async def set(self, path: str, data: Document, merge: bool = False) -> None:
        key = path.strip("/")
        async with self._lock:
            if merge and key in self._documents:
                self._documents[key].update(copy.deepcopy(data))
            else:
                self._documents[key] = copy.deepcopy(data)

    async def delete(self, path: str) -> bool:
        async with self._lock:
            return self._documents.pop(path.strip("/"), None) is not None

    async def list(
        self,
        collection: str,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        parent = collection.strip("/")
        documents = [
            copy.deepcopy(document)
            for key, document in self._documents.items()
            if collection_of(key) == parent
        ]
        return sort_documents(documents, order_by, descending, limit)

    async def increment(self, path: str, field: str, amount: int = 1) -> int:
        key = path.strip("/")
        async with self._lock:
            document = self._documents.setdefault(key, {})
            document[field] = int(document.get(field) or 0) + amount
            return document[field]

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        logger.debug(f"Memory store closed with {len(self._documents)} documents")
