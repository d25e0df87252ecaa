"""Destinations for per-chunk extraction results.

Merging extracted entities/relationships into graph nodes is not done by
the pipeline itself; a sink receives every :class:`ExtractionResult` and
decides what to do with it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from memory_graph.ingestion.models import ExtractionResult

logger = logging.getLogger(__name__)


class ExtractionSink(ABC):
    @abstractmethod
    async def handle(self, result: ExtractionResult) -> None:
        """Consume one extraction result."""
        ...


class LoggingExtractionSink(ExtractionSink):
    """Logs each extraction at INFO level."""

    async def handle(self, result: ExtractionResult) -> None:
        logger.info("Graph info for %s#%d: %s", result.uri, result.chunk_index, result.text)


class CollectingExtractionSink(ExtractionSink):
    """Keeps every result in memory, in arrival order."""

    def __init__(self) -> None:
        self.results: list[ExtractionResult] = []

    async def handle(self, result: ExtractionResult) -> None:
        self.results.append(result)
