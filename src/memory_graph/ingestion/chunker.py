"""Text chunking strategies."""

from __future__ import annotations

import logging

from langchain_text_splitters import RecursiveCharacterTextSplitter
from pydantic import BaseModel, Field

from memory_graph.errors import ChunkingError
from memory_graph.ingestion.models import Chunk

logger = logging.getLogger(__name__)

DEFAULT_SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


class ChunkingConfig(BaseModel):
    """Chunk size bounds, in characters."""

    chunk_size: int = 1000
    chunk_overlap: int = 100
    separators: list[str] = Field(default_factory=lambda: list(DEFAULT_SEPARATORS))

    def validate_bounds(self) -> None:
        if self.chunk_size <= 0:
            raise ChunkingError(f"chunk_size ({self.chunk_size}) must be positive", operation="split")
        if self.chunk_overlap < 0:
            raise ChunkingError(
                f"chunk_overlap ({self.chunk_overlap}) must not be negative", operation="split"
            )
        if self.chunk_overlap >= self.chunk_size:
            raise ChunkingError(
                f"chunk_overlap ({self.chunk_overlap}) must be < chunk_size ({self.chunk_size})",
                operation="split",
            )


def _build_splitter(config: ChunkingConfig) -> RecursiveCharacterTextSplitter:
    # Separators are kept and whitespace is preserved so that chunks are
    # exact substrings of the source and their spans can be recovered.
    return RecursiveCharacterTextSplitter(
        chunk_size=config.chunk_size,
        chunk_overlap=config.chunk_overlap,
        length_function=len,
        separators=config.separators,
        keep_separator=True,
        strip_whitespace=False,
    )


def _locate_spans(full_text: str, contents: list[str], max_overlap: int) -> list[tuple[int, int]]:
    """Place every chunk in *full_text* as a gap-free sequence of spans.

    A chunk may start anywhere from ``max_overlap`` characters before the
    end of its predecessor up to that end, and must extend past it. Short
    chunks (a lone ``"\\n"``) often match at several starts inside that
    window, so every candidate end is tracked and the chain that finishes
    exactly at ``len(full_text)`` is picked afterwards.
    """
    if not contents:
        raise ChunkingError("splitter produced no chunks for non-empty text", operation="split")

    # per chunk: end offset -> (start offset, end offset of the predecessor)
    layers: list[dict[int, tuple[int, int]]] = []
    for index, content in enumerate(contents):
        layer: dict[int, tuple[int, int]] = {}
        if index == 0:
            if full_text.startswith(content):
                layer[len(content)] = (0, 0)
        else:
            previous = layers[-1]
            low = max(0, min(previous) - max_overlap)
            for start in range(low, max(previous) + 1):
                end = start + len(content)
                if end in layer or not full_text.startswith(content, start):
                    continue
                for previous_end in sorted(previous, reverse=True):
                    if start <= previous_end < end and previous_end - start <= max_overlap:
                        layer[end] = (start, previous_end)
                        break
        if not layer:
            raise ChunkingError(
                f"chunk {index} could not be located contiguously in the source text",
                operation="split",
            )
        layers.append(layer)

    end = len(full_text)
    if end not in layers[-1]:
        raise ChunkingError(
            f"chunks cover {max(layers[-1])} of {len(full_text)} characters", operation="split"
        )

    spans: list[tuple[int, int]] = []
    for layer in reversed(layers):
        start, previous_end = layer[end]
        spans.append((start, end))
        end = previous_end
    spans.reverse()
    return spans


def split(full_text: str, config: ChunkingConfig | None = None) -> list[Chunk]:
    """Split *full_text* into overlapping chunks in source order.

    Parameters
    ----------
    full_text:
        The complete document text.
    config:
        Size and overlap bounds. Defaults to :class:`ChunkingConfig`.

    Returns
    -------
    list[Chunk]
        Chunks covering the whole text with no gaps. Empty text yields an
        empty list; text shorter than ``chunk_size`` yields one chunk.

    Raises
    ------
    ChunkingError
        On invalid bounds, or if a chunk cannot be placed contiguously
        after its predecessor.
    """
    config = config or ChunkingConfig()
    config.validate_bounds()

    if not full_text:
        return []

    contents = _build_splitter(config).split_text(full_text)
    spans = _locate_spans(full_text, contents, config.chunk_overlap)

    chunks: list[Chunk] = []
    previous_end = 0
    for index, (content, (start, end)) in enumerate(zip(contents, spans)):
        chunks.append(
            Chunk(
                content=content,
                index=index,
                start_offset=start,
                end_offset=end,
                overlap_with_previous=previous_end - start if index else 0,
            )
        )
        previous_end = end

    logger.debug(
        "Split %d chars into %d chunks (size=%d, overlap=%d)",
        len(full_text),
        len(chunks),
        config.chunk_size,
        config.chunk_overlap,
    )
    return chunks
