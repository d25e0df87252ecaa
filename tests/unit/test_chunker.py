"""Unit tests for the chunker module."""

from __future__ import annotations

import random

import pytest

from memory_graph.errors import ChunkingError
from memory_graph.ingestion.chunker import ChunkingConfig, _locate_spans, split

PROSE = (
    "Kuzu is an embedded graph database. It stores nodes and relationships.\n\n"
    "Chroma is a vector database. It stores embeddings next to documents.\n"
    "Together they back a memory graph for agents. "
) * 40


def _reconstruct(chunks) -> str:
    return "".join(c.fresh_content for c in chunks)


def test_split_long_text_into_several_chunks() -> None:
    """A document longer than chunk_size should be split."""
    long_text = "word " * 500  # ~2500 chars
    chunks = split(long_text, ChunkingConfig(chunk_size=256, chunk_overlap=32))
    assert len(chunks) > 1


def test_empty_input_yields_no_chunks() -> None:
    assert split("") == []


def test_short_input_yields_one_chunk() -> None:
    chunks = split("Short text.", ChunkingConfig(chunk_size=256, chunk_overlap=0))
    assert len(chunks) == 1
    chunk = chunks[0]
    assert chunk.content == "Short text."
    assert (chunk.index, chunk.start_offset, chunk.end_offset) == (0, 0, 11)
    assert chunk.overlap_with_previous == 0


@pytest.mark.parametrize("size,overlap", [(100, 0), (100, 20), (256, 64), (1000, 100)])
def test_chunks_reconstruct_source_text(size: int, overlap: int) -> None:
    chunks = split(PROSE, ChunkingConfig(chunk_size=size, chunk_overlap=overlap))
    assert _reconstruct(chunks) == PROSE


@pytest.mark.parametrize("size,overlap", [(100, 20), (256, 64)])
def test_chunk_spans_match_content(size: int, overlap: int) -> None:
    chunks = split(PROSE, ChunkingConfig(chunk_size=size, chunk_overlap=overlap))
    for chunk in chunks:
        assert PROSE[chunk.start_offset : chunk.end_offset] == chunk.content


def test_chunk_bounds_and_order() -> None:
    config = ChunkingConfig(chunk_size=120, chunk_overlap=30)
    chunks = split(PROSE, config)

    assert [c.index for c in chunks] == list(range(len(chunks)))
    assert chunks[0].start_offset == 0
    assert chunks[-1].end_offset == len(PROSE)
    for previous, current in zip(chunks, chunks[1:]):
        assert previous.start_offset <= current.start_offset
        # no gaps
        assert current.start_offset <= previous.end_offset
    assert all(len(c.content) <= config.chunk_size for c in chunks)
    assert all(c.overlap_with_previous <= config.chunk_overlap for c in chunks)


def test_chunk_count_covers_text_length() -> None:
    text = "word " * 2000
    size, overlap = 200, 40
    chunks = split(text, ChunkingConfig(chunk_size=size, chunk_overlap=overlap))
    assert len(chunks) * (size - overlap) + overlap >= len(text)
    assert _reconstruct(chunks) == text


def test_trailing_partial_content_becomes_final_chunk() -> None:
    text = "a" * 250
    chunks = split(text, ChunkingConfig(chunk_size=100, chunk_overlap=0))
    assert [len(c.content) for c in chunks] == [100, 100, 50]
    assert chunks[-1].end_offset == 250


def test_ten_thousand_characters_with_default_like_bounds() -> None:
    text = "abcdefghij" * 1000
    chunks = split(text, ChunkingConfig(chunk_size=1000, chunk_overlap=100))
    assert 11 <= len(chunks) <= 12
    assert _reconstruct(chunks) == text
    assert all(c.overlap_with_previous == 100 for c in chunks[1:])


def test_whitespace_is_preserved() -> None:
    text = "line one\n\n   indented line\n\n\n\ttabbed"
    chunks = split(text, ChunkingConfig(chunk_size=12, chunk_overlap=0))
    assert _reconstruct(chunks) == text


@pytest.mark.parametrize(
    "size,overlap",
    [(0, 0), (-5, 0), (100, -1), (100, 100), (100, 150)],
)
def test_invalid_bounds_raise_chunking_error(size: int, overlap: int) -> None:
    with pytest.raises(ChunkingError):
        split("some text", ChunkingConfig(chunk_size=size, chunk_overlap=overlap))


def test_invalid_bounds_raise_even_for_empty_text() -> None:
    with pytest.raises(ChunkingError):
        split("", ChunkingConfig(chunk_size=10, chunk_overlap=10))


def test_repeated_newline_chunk_is_placed_after_its_predecessor() -> None:
    # "\n" also matches one character early, inside the overlap window
    text = "abc\n\n\nXY"
    spans = _locate_spans(text, ["abc\n", "\n", "\nXY"], max_overlap=2)
    assert spans == [(0, 4), (4, 5), (5, 8)]


def test_unplaceable_chunk_raises() -> None:
    with pytest.raises(ChunkingError):
        _locate_spans("abcdef", ["abc", "xyz"], max_overlap=1)


_WORDS = ["graph", "node", "edge", "Kuzu", "Chroma", "a", "ab", "stores", "memory"]
_SEPARATORS = [" ", " ", " ", ". ", "\n", "\n\n", "\n\n\n", "\t", "  "]


def _random_text(rng: random.Random) -> str:
    parts = []
    for _ in range(rng.randint(1, 250)):
        parts.append(rng.choice(_WORDS))
        parts.append(rng.choice(_SEPARATORS))
    text = "".join(parts)
    if rng.random() < 0.3:
        text = rng.choice(["\n", "\n\n", " "]) + text
    return text


@pytest.mark.parametrize("seed", range(20))
def test_random_texts_keep_chunk_invariants(seed: int) -> None:
    rng = random.Random(seed)
    for _ in range(25):
        text = _random_text(rng)
        size = rng.choice([8, 20, 37, 64, 100, 256])
        overlap = rng.randint(0, size // 2)
        config = ChunkingConfig(chunk_size=size, chunk_overlap=overlap)

        chunks = split(text, config)

        assert _reconstruct(chunks) == text
        assert chunks[0].start_offset == 0
        assert chunks[-1].end_offset == len(text)
        for previous, current in zip(chunks, chunks[1:]):
            assert current.start_offset <= previous.end_offset < current.end_offset
            assert current.overlap_with_previous == previous.end_offset - current.start_offset
        for chunk in chunks:
            assert len(chunk.content) <= size
            assert text[chunk.start_offset : chunk.end_offset] == chunk.content
            assert 0 <= chunk.overlap_with_previous <= overlap
