"""Abstract base classes for embedding and extraction providers.

Adding a new backend only requires subclassing :class:`EmbeddingProvider`
or :class:`ExtractionProvider` and registering it in
:mod:`memory_graph.providers.factory`. The orchestrator never sees
which service is behind a provider.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

import httpx

DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"


class ProviderName(str, Enum):
    """Backends selectable through configuration."""

    MISTRAL = "mistral"
    GEMINI = "gemini"
    MOCK = "mock"


class EmbeddingPurpose(str, Enum):
    """How an embedding will be used. Never changes its dimension."""

    DOCUMENT = "RETRIEVAL_DOCUMENT"
    QUERY = "RETRIEVAL_QUERY"


class _Closeable:
    """Async context-manager support for providers holding an HTTP client."""

    _client: httpx.AsyncClient | None = None

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def __aenter__(self):  # noqa: ANN204
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class EmbeddingProvider(_Closeable, ABC):
    """Turns text into a fixed-length float vector.

    Attributes
    ----------
    name:
        The :class:`ProviderName` of the backend.
    dimension:
        Length of every vector returned by :meth:`embed`.
    """

    name: ProviderName
    dimension: int

    @abstractmethod
    async def embed(
        self,
        text: str,
        purpose: EmbeddingPurpose = EmbeddingPurpose.DOCUMENT,
        *,
        timeout: float | None = None,
    ) -> list[float]:
        """Return the embedding of *text*.

        Parameters
        ----------
        text:
            Text to embed.
        purpose:
            Document-side or query-side retrieval.
        timeout:
            Overrides the provider's default per-request timeout.

        Raises
        ------
        EmptyInputError
            *text* is empty (remote providers check before any I/O).
        ProviderTransportError, ProviderResponseError, ProviderDecodeError,
        ProviderEmptyResultError
            See :mod:`memory_graph.errors`.
        """
        ...


class ExtractionProvider(_Closeable, ABC):
    """Language-model service used to describe entities and relationships."""

    name: ProviderName

    @abstractmethod
    async def generate_text(self, prompt: str, *, timeout: float | None = None) -> str:
        """Return the model's completion for *prompt*."""
        ...

    @abstractmethod
    async def extract_from_image(
        self,
        prompt: str,
        image: bytes,
        mime_type: str | None = None,
        *,
        timeout: float | None = None,
    ) -> str:
        """Describe *image* following *prompt*.

        Raises :class:`~memory_graph.errors.EmptyInputError` before any
        network call when *image* is empty. A missing *mime_type* falls
        back to :data:`DEFAULT_IMAGE_MIME_TYPE` with a warning.
        """
        ...
