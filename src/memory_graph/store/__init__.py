"""
Store — persistence of content nodes (chunk text + embedding).

Public surface
--------------
- :class:`ContentStoreBase` — abstract backend.
- :class:`ChromaContentStore` — default Chroma backend.
- :class:`ContentNode`, :class:`SearchHit` — data models.
- :func:`search` — query-time similarity search.
"""

from memory_graph.store.base import ContentNode, ContentStoreBase, SearchHit, content_id
from memory_graph.store.search import search

__all__ = [
    "ChromaContentStore",
    "ContentNode",
    "ContentStoreBase",
    "SearchHit",
    "content_id",
    "search",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaContentStore to avoid pulling in chromadb at import time."""
    if name == "ChromaContentStore":
        from memory_graph.store.chroma_store import ChromaContentStore

        return ChromaContentStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
