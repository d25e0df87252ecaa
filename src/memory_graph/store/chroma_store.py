"""Chroma implementation of the content-store abstraction."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import chromadb
from chromadb.config import Settings as ChromaSettings

from memory_graph.config import Settings
from memory_graph.errors import StoreError
from memory_graph.store.base import ContentNode, ContentStoreBase, SearchHit, content_id

logger = logging.getLogger(__name__)


@contextmanager
def _store_operation(operation: str) -> Iterator[None]:
    """Re-raise backend failures as :class:`StoreError`."""
    try:
        yield
    except StoreError:
        raise
    except Exception as exc:
        logger.error("Chroma %s failed: %s", operation, exc)
        raise StoreError(f"chroma {operation} failed: {exc}", operation=operation) from exc


class ChromaContentStore(ContentStoreBase):
    """Chroma-backed content store.

    Each node is one Chroma record: ``id = sha256(content)``,
    ``document = content``, ``embedding = embedding``. Writes use
    ``collection.upsert`` so re-ingesting identical text overwrites.

    Parameters
    ----------
    dimension:
        Required embedding length.
    collection_name:
        Name of the Chroma collection.
    client:
        A ready Chroma client (``PersistentClient``, ``HttpClient``,
        ``EphemeralClient``).
    """

    def __init__(
        self,
        dimension: int,
        *,
        collection_name: str = "content_nodes",
        client: Any,
    ) -> None:
        super().__init__(dimension)
        self.collection_name = collection_name
        self._client = client
        with _store_operation("open"):
            self._collection = client.get_or_create_collection(
                name=collection_name,
                metadata={"hnsw:space": "cosine"},
            )
        logger.info("Opened Chroma collection %r (dimension=%d)", collection_name, dimension)

    @classmethod
    def from_settings(cls, settings: Settings, dimension: int) -> ChromaContentStore:
        """Open the store described by *settings*.

        Uses a Chroma server when ``chroma_host`` is set, otherwise the
        embedded database at ``chroma_path``.
        """
        with _store_operation("connect"):
            if settings.chroma_host:
                client = chromadb.HttpClient(host=settings.chroma_host, port=settings.chroma_port)
            else:
                client = chromadb.PersistentClient(
                    path=settings.chroma_path,
                    settings=ChromaSettings(anonymized_telemetry=False),
                )
        return cls(dimension, collection_name=settings.chroma_collection, client=client)

    # -- ContentStoreBase overrides -------------------------------------------

    def _upsert(self, content: str, embedding: list[float]) -> None:
        with _store_operation("upsert"):
            self._collection.upsert(
                ids=[content_id(content)],
                embeddings=[[float(value) for value in embedding]],
                documents=[content],
            )

    def get(self, content: str) -> ContentNode | None:
        with _store_operation("get"):
            result = self._collection.get(
                ids=[content_id(content)],
                include=["documents", "embeddings"],
            )
        if not result.get("ids"):
            return None
        embeddings = result.get("embeddings")
        embedding = [] if embeddings is None else [float(value) for value in embeddings[0]]
        return ContentNode(content=result["documents"][0], embedding=embedding)

    def contents(self) -> list[str]:
        with _store_operation("list"):
            result = self._collection.get(include=["documents"])
        return [doc for doc in result.get("documents") or [] if doc is not None]

    def count(self) -> int:
        with _store_operation("count"):
            return self._collection.count()

    def similarity_search(self, embedding: list[float], *, k: int = 5) -> list[SearchHit]:
        total = self.count()
        if total == 0:
            return []

        with _store_operation("query"):
            results = self._collection.query(
                query_embeddings=[[float(value) for value in embedding]],
                n_results=min(k, total),
                include=["documents", "distances"],
            )

        docs = (results.get("documents") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]
        # Cosine distance is 1 - cosine similarity.
        return [
            SearchHit(content=doc or "", score=1.0 - float(dist))
            for doc, dist in zip(docs, distances)
        ]

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    def close(self) -> None:
        self._collection = None
        self._client = None
