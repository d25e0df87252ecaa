"""Error taxonomy for the ingestion pipeline.

Every error raised by the pipeline derives from :class:`MemoryGraphError`
so callers can catch the whole family at once, while the provider errors
stay distinguishable enough to decide whether a retry makes sense::

    MemoryGraphError
    ├── LoadError
    │   └── DocumentNotFoundError
    ├── ChunkingError
    ├── ProviderConstructionError
    ├── ProviderError
    │   ├── EmptyInputError
    │   ├── ProviderTransportError      (ProviderUnavailableError)
    │   ├── ProviderResponseError
    │   ├── ProviderDecodeError
    │   └── ProviderEmptyResultError    (NoResultError)
    ├── StoreError
    └── IngestionCancelledError
"""

from __future__ import annotations


class MemoryGraphError(Exception):
    """Base class for all pipeline errors.

    Attributes
    ----------
    operation:
        Name of the operation that failed (e.g. ``"embed"``, ``"upsert"``).
    stage:
        Ingestion state the error surfaced in. Filled in by the
        orchestrator when the error propagates out of an ingestion call.
    """

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.stage: str | None = None


class LoadError(MemoryGraphError):
    """The source document could not be read."""


class DocumentNotFoundError(LoadError):
    """The source path does not name an existing file."""


class ChunkingError(MemoryGraphError, ValueError):
    """Chunking configuration is invalid or the text could not be split."""


class ProviderConstructionError(MemoryGraphError):
    """A provider could not be built (unknown name, missing credentials)."""


class ProviderError(MemoryGraphError):
    """Base class for failures of an embedding or extraction provider."""

    def __init__(self, message: str, *, provider: str, operation: str | None = None) -> None:
        prefix = f"{provider} {operation}" if operation else provider
        super().__init__(f"{prefix}: {message}", operation=operation)
        self.provider = provider


class EmptyInputError(ProviderError, ValueError):
    """The provider was asked to process empty text or image data."""


class ProviderTransportError(ProviderError):
    """The request never produced an HTTP response (connect error, timeout, …)."""


class ProviderResponseError(ProviderError):
    """The backing service answered with a non-success status."""

    def __init__(
        self,
        status_code: int,
        body: str,
        *,
        provider: str,
        operation: str | None = None,
        reason: str = "",
    ) -> None:
        status = f"{status_code} {reason}".strip()
        super().__init__(f"API error: {status} - {body}", provider=provider, operation=operation)
        self.status_code = status_code
        self.body = body


class ProviderDecodeError(ProviderError):
    """A successful response could not be decoded into the expected schema."""


class ProviderEmptyResultError(ProviderError):
    """A well-formed response contained no embeddings / choices."""


class StoreError(MemoryGraphError):
    """Schema, connection, or write failure in the content store."""


class IngestionCancelledError(MemoryGraphError):
    """The ingestion call was aborted because its deadline expired."""


# Aliases for the names used by callers that think in terms of availability.
ProviderUnavailableError = ProviderTransportError
NoResultError = ProviderEmptyResultError

__all__ = [
    "ChunkingError",
    "DocumentNotFoundError",
    "EmptyInputError",
    "IngestionCancelledError",
    "LoadError",
    "MemoryGraphError",
    "NoResultError",
    "ProviderConstructionError",
    "ProviderDecodeError",
    "ProviderEmptyResultError",
    "ProviderError",
    "ProviderResponseError",
    "ProviderTransportError",
    "ProviderUnavailableError",
    "StoreError",
]
