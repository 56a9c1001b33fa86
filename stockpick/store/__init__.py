"""Document persistence: protocol plus memory and Valkey backends."""

from stockpick.core.config import settings

from .base import DocumentStore, collection_of, join_path
from .memory import MemoryDocumentStore
from .valkey import ValkeyDocumentStore


def create_store(backend: str | None = None) -> DocumentStore:
    """Build the configured DocumentStore backend."""
    backend = (backend or settings.store_backend).lower()
    if backend == "memory":
        return MemoryDocumentStore()
    return ValkeyDocumentStore()


__all__ = [
    "DocumentStore",
    "MemoryDocumentStore",
    "ValkeyDocumentStore",
    "collection_of",
    "create_store",
    "join_path",
]
