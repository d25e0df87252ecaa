"""Build providers from configuration.

Every remote provider validates its credentials in its constructor, so a
missing API key or an unknown provider name fails here rather than on the
first request.
"""

from __future__ import annotations

import logging

import httpx

from memory_graph.config import Settings
from memory_graph.errors import ProviderConstructionError
from memory_graph.providers.base import EmbeddingProvider, ExtractionProvider, ProviderName
from memory_graph.providers.gemini import GeminiEmbeddingProvider, GeminiExtractionProvider
from memory_graph.providers.mistral import MistralEmbeddingProvider, MistralExtractionProvider
from memory_graph.providers.mock import MockEmbeddingProvider, MockExtractionProvider

logger = logging.getLogger(__name__)


def _parse_provider(value: str, kind: str) -> ProviderName:
    try:
        return ProviderName(value.strip().lower())
    except ValueError:
        raise ProviderConstructionError(
            f"unknown {kind} provider: {value}", operation="construct"
        ) from None


def create_embedding_provider(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> EmbeddingProvider:
    """Return the embedding provider named by ``settings.embedding_provider``."""
    provider = _parse_provider(settings.embedding_provider, "embedding")

    if provider is ProviderName.MISTRAL:
        instance: EmbeddingProvider = MistralEmbeddingProvider(
            settings.mistral_api_key,
            model=settings.mistral_embedding_model,
            base_url=settings.mistral_base_url,
            dimension=settings.embedding_dim,
            timeout=settings.request_timeout,
            transport=transport,
        )
    elif provider is ProviderName.GEMINI:
        instance = GeminiEmbeddingProvider(
            settings.gemini_api_key,
            model=settings.gemini_embedding_model,
            base_url=settings.gemini_base_url,
            dimension=settings.embedding_dim,
            timeout=settings.request_timeout,
            transport=transport,
        )
    else:
        instance = MockEmbeddingProvider(dimension=settings.embedding_dim)

    logger.info("Embedding provider %s ready (dimension=%d)", provider.value, instance.dimension)
    return instance


def create_extraction_provider(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ExtractionProvider:
    """Return the extraction provider named by ``settings.extraction_provider``."""
    provider = _parse_provider(settings.extraction_provider, "extraction")

    if provider is ProviderName.MISTRAL:
        instance: ExtractionProvider = MistralExtractionProvider(
            settings.mistral_api_key,
            chat_model=settings.mistral_chat_model,
            multimodal_model=settings.mistral_vision_model,
            base_url=settings.mistral_base_url,
            timeout=settings.request_timeout,
            transport=transport,
        )
    elif provider is ProviderName.GEMINI:
        instance = GeminiExtractionProvider(
            settings.gemini_api_key,
            model=settings.gemini_chat_model,
            base_url=settings.gemini_base_url,
            timeout=settings.request_timeout,
            transport=transport,
        )
    else:
        instance = MockExtractionProvider()

    logger.info("Extraction provider %s ready", provider.value)
    return instance
