"""Document store interface.

Documents are flat JSON objects addressed by hierarchical ``/``-separated
paths. A collection is the parent path of its documents; a document path
can itself be the parent of a sub-collection (``users/u1`` and
``users/u1/portfolio/<id>``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, runtime_checkable


Document = dict[str, Any]


def collection_of(path: str) -> str:
    """Parent collection of a document path."""
    path = path.strip("/")
    if "/" not in path:
        return ""
    return path.rsplit("/", 1)[0]


def join_path(*parts: str) -> str:
    return "/".join(str(part).strip("/") for part in parts if str(part).strip("/"))


def _sort_value(value: Any) -> Any:
    # ISO timestamps drop the fraction when it is zero, so compare them as datetimes
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return value
    return value


def sort_documents(
    documents: list[Document],
    order_by: Optional[str] = None,
    descending: bool = False,
    limit: Optional[int] = None,
) -> list[Document]:
    """Order by a field (missing values last) and apply the limit."""
    if order_by:
        present = [d for d in documents if d.get(order_by) is not None]
        missing = [d for d in documents if d.get(order_by) is None]
        present.sort(key=lambda d: _sort_value(d[order_by]), reverse=descending)
        documents = present + missing
    if limit is not None:
        documents = documents[: max(limit, 0)]
    return documents


@runtime_checkable
class DocumentStore(Protocol):
    async def get(self, path: str) -> Optional[Document]: ...

    async def set(self, path: str, data: Document, merge: bool = False) -> None: ...

    async def delete(self, path: str) -> bool: ...

    async def list(
        self,
        collection: str,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]: ...

    async def increment(self, path: str, field: str, amount: int = 1) -> int: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...
