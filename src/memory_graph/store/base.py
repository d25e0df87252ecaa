"""Abstract base class for content-store backends.

A content store persists :class:`ContentNode` records keyed by their exact
text. Adding a backend only requires subclassing :class:`ContentStoreBase`
and implementing the abstract methods.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

from memory_graph.errors import StoreError


class ContentNode(BaseModel):
    """Persisted chunk text and its embedding. ``content`` is the key."""

    model_config = ConfigDict(frozen=True)

    content: str
    embedding: list[float]


class SearchHit(BaseModel):
    """One similarity-search result."""

    content: str
    score: float


def content_id(content: str) -> str:
    """Stable backend identifier for a content key."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class ContentStoreBase(ABC):
    """Backend-agnostic content-node store.

    Parameters
    ----------
    dimension:
        Required length of every stored embedding.
    """

    def __init__(self, dimension: int) -> None:
        self.dimension = dimension

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def _upsert(self, content: str, embedding: list[float]) -> None:
        """Write one node, replacing any node with the same content."""
        ...

    @abstractmethod
    def get(self, content: str) -> ContentNode | None:
        """Return the node stored under *content*, if any."""
        ...

    @abstractmethod
    def contents(self) -> list[str]:
        """Return every stored content key."""
        ...

    @abstractmethod
    def similarity_search(self, embedding: list[float], *, k: int = 5) -> list[SearchHit]:
        """Return the top-*k* nodes closest to *embedding*, best first."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...

    # -- shared behaviour -----------------------------------------------------

    def upsert(self, content: str, embedding: list[float]) -> ContentNode:
        """Validate and persist a node. Identical *content* overwrites.

        Raises
        ------
        StoreError
            Empty content, wrong embedding length, or a backend failure.
        """
        if not content:
            raise StoreError("content key must not be empty", operation="upsert")
        if len(embedding) != self.dimension:
            raise StoreError(
                f"embedding has {len(embedding)} dimensions, store expects {self.dimension}",
                operation="upsert",
            )
        self._upsert(content, embedding)
        return ContentNode(content=content, embedding=embedding)

    def count(self) -> int:
        return len(self.contents())

    # -- optional overrides ---------------------------------------------------

    def close(self) -> None:
        """Release the connection handle. Optional — no-op by default."""

    def __enter__(self) -> ContentStoreBase:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
