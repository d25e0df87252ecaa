"""Records flowing through one ingestion call."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Document(BaseModel):
    """One loaded artifact: where it came from and its full text."""

    model_config = ConfigDict(frozen=True)

    uri: str
    full_text: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class Chunk(BaseModel):
    """A bounded slice of a :class:`Document`.

    Attributes
    ----------
    content:
        The chunk text. Always equals ``full_text[start_offset:end_offset]``.
    index:
        Ordinal position of the chunk within the document.
    start_offset, end_offset:
        Character span in the source text (end exclusive).
    overlap_with_previous:
        Number of leading characters shared with the previous chunk.
    """

    model_config = ConfigDict(frozen=True)

    content: str
    index: int
    start_offset: int
    end_offset: int
    overlap_with_previous: int = 0

    @property
    def fresh_content(self) -> str:
        """The part of the chunk not already covered by its predecessor."""
        return self.content[self.overlap_with_previous :]


class ExtractionResult(BaseModel):
    """Language-model output for one chunk, before any graph merge."""

    model_config = ConfigDict(frozen=True)

    uri: str
    chunk_index: int
    content_key: str
    text: str


class IngestionState(str, Enum):
    LOADING = "loading"
    CHUNKING = "chunking"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ErrorPolicy(str, Enum):
    """What to do when one chunk fails to embed, extract, or persist."""

    ABORT = "abort"
    SKIP = "skip"


class ChunkFailure(BaseModel):
    """A chunk that was skipped under :attr:`ErrorPolicy.SKIP`."""

    index: int
    stage: str
    error_type: str
    message: str


class IngestionReport(BaseModel):
    """Outcome of one ingestion call."""

    uri: str
    state: IngestionState = IngestionState.LOADING
    chunk_count: int = 0
    persisted_keys: list[str] = Field(default_factory=list)
    extractions: int = 0
    failures: list[ChunkFailure] = Field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.state is IngestionState.COMPLETED and not self.failures
