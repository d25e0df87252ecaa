"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import math

import pytest

from memory_graph.store.base import ContentNode, ContentStoreBase, SearchHit


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


class FakeContentStore(ContentStoreBase):
    """In-memory store keyed by content; shares its dict across handles."""

    def __init__(self, dimension: int, nodes: dict[str, list[float]] | None = None) -> None:
        super().__init__(dimension)
        self.nodes: dict[str, list[float]] = {} if nodes is None else nodes
        self.writes = 0
        self.closed = False

    def _upsert(self, content: str, embedding: list[float]) -> None:
        self.nodes[content] = list(embedding)
        self.writes += 1

    def get(self, content: str) -> ContentNode | None:
        if content not in self.nodes:
            return None
        return ContentNode(content=content, embedding=self.nodes[content])

    def contents(self) -> list[str]:
        return list(self.nodes)

    def similarity_search(self, embedding: list[float], *, k: int = 5) -> list[SearchHit]:
        def cosine(other: list[float]) -> float:
            dot = sum(a * b for a, b in zip(embedding, other))
            norm = math.sqrt(sum(a * a for a in embedding) * sum(b * b for b in other))
            return dot / norm if norm else 0.0

        hits = [SearchHit(content=c, score=cosine(v)) for c, v in self.nodes.items()]
        return sorted(hits, key=lambda h: h.score, reverse=True)[:k]

    def health_check(self) -> bool:
        return True

    def close(self) -> None:
        self.closed = True


class FakeStoreFactory:
    """Store factory recording every handle it opens; all handles share one dict."""

    def __init__(self) -> None:
        self.nodes: dict[str, list[float]] = {}
        self.opened: list[FakeContentStore] = []

    def __call__(self, dimension: int) -> FakeContentStore:
        store = FakeContentStore(dimension, self.nodes)
        self.opened.append(store)
        return store


@pytest.fixture()
def store_factory() -> FakeStoreFactory:
    return FakeStoreFactory()
