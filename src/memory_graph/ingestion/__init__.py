"""
Ingestion — document loading, chunking, embedding, extraction and persistence.

This module is responsible for the pipeline that turns a raw document into
content nodes (chunk text + embedding) in the store, while forwarding the
language-model description of each chunk's entities and relationships to
an extraction sink.
"""

from memory_graph.ingestion.chunker import ChunkingConfig, split
from memory_graph.ingestion.models import (
    Chunk,
    ChunkFailure,
    Document,
    ErrorPolicy,
    ExtractionResult,
    IngestionReport,
    IngestionState,
)
from memory_graph.ingestion.pipeline import IngestionPipeline, ingest_file
from memory_graph.ingestion.sinks import (
    CollectingExtractionSink,
    ExtractionSink,
    LoggingExtractionSink,
)

__all__ = [
    "Chunk",
    "ChunkFailure",
    "ChunkingConfig",
    "CollectingExtractionSink",
    "Document",
    "ErrorPolicy",
    "ExtractionResult",
    "ExtractionSink",
    "IngestionPipeline",
    "IngestionReport",
    "IngestionState",
    "LoggingExtractionSink",
    "ingest_file",
    "split",
]
