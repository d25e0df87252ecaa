"""Query-time similarity search over persisted content nodes.

Usage::

    async with create_embedding_provider(settings) as embedder:
        with ChromaContentStore.from_settings(settings, embedder.dimension) as store:
            hits = await search("Who founded the company?", embedder=embedder, store=store)
"""

from __future__ import annotations

import asyncio
import logging

from memory_graph.errors import EmptyInputError
from memory_graph.providers.base import EmbeddingProvider, EmbeddingPurpose
from memory_graph.store.base import ContentStoreBase, SearchHit

logger = logging.getLogger(__name__)


async def search(
    query: str,
    *,
    embedder: EmbeddingProvider,
    store: ContentStoreBase,
    k: int = 5,
    score_threshold: float | None = None,
) -> list[SearchHit]:
    """Embed *query* for retrieval and return the closest nodes, best first."""
    if not query.strip():
        raise EmptyInputError("query is empty", provider=embedder.name.value, operation="search")

    embedding = await embedder.embed(query, EmbeddingPurpose.QUERY)
    hits = await asyncio.to_thread(store.similarity_search, embedding, k=k)
    if score_threshold is not None:
        hits = [hit for hit in hits if hit.score >= score_threshold]
    hits.sort(key=lambda hit: hit.score, reverse=True)
    logger.info("Search returned %d hits (k=%d)", len(hits), k)
    return hits
