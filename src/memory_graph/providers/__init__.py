"""
Providers — pluggable embedding and extraction backends.

Public surface
--------------
- :class:`EmbeddingProvider` / :class:`ExtractionProvider` — abstract contracts.
- :class:`EmbeddingPurpose`, :class:`ProviderName` — enums.
- :func:`create_embedding_provider` / :func:`create_extraction_provider` —
  construct the backend named in :class:`~memory_graph.config.Settings`.
"""

from memory_graph.providers.base import (
    EmbeddingProvider,
    EmbeddingPurpose,
    ExtractionProvider,
    ProviderName,
)
from memory_graph.providers.factory import create_embedding_provider, create_extraction_provider

__all__ = [
    "EmbeddingProvider",
    "EmbeddingPurpose",
    "ExtractionProvider",
    "ProviderName",
    "create_embedding_provider",
    "create_extraction_provider",
]
