"""Ingestion orchestrator — load → chunk → (embed, extract) per chunk → persist.

One call to :meth:`IngestionPipeline.ingest` walks through these states::

    loading → chunking → processing → completed
       └──────────┴───────────┴──────→ failed

Chunks are processed one at a time, in document order, against a single
store handle opened for the call. For each chunk the embedding and the
extraction are requested (concurrently unless ``concurrent_calls`` is
off), the content node is upserted, and the extraction is forwarded to
the sink.

Usage::

    async with IngestionPipeline.from_settings(settings) as pipeline:
        report = await pipeline.ingest("notes/meeting.md")
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import httpx

from memory_graph.config import Settings
from memory_graph.errors import (
    IngestionCancelledError,
    MemoryGraphError,
    ProviderError,
    StoreError,
)
from memory_graph.ingestion.chunker import ChunkingConfig, split
from memory_graph.ingestion.loader import load_document
from memory_graph.ingestion.models import (
    Chunk,
    ChunkFailure,
    Document,
    ErrorPolicy,
    ExtractionResult,
    IngestionReport,
    IngestionState,
)
from memory_graph.ingestion.prompts import EXTRACTION_PROMPT, build_extraction_prompt
from memory_graph.ingestion.sinks import ExtractionSink, LoggingExtractionSink
from memory_graph.providers.base import EmbeddingProvider, EmbeddingPurpose, ExtractionProvider
from memory_graph.providers.factory import create_embedding_provider, create_extraction_provider
from memory_graph.store.base import ContentStoreBase

logger = logging.getLogger(__name__)

A = TypeVar("A")
B = TypeVar("B")

# Called once per ingestion run with the embedding dimension.
StoreFactory = Callable[[int], ContentStoreBase]


async def _both(first: Awaitable[A], second: Awaitable[B]) -> tuple[A, B]:
    """Await two coroutines concurrently; if one fails, cancel the other."""
    tasks = [asyncio.ensure_future(first), asyncio.ensure_future(second)]
    try:
        _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)

    errors = [task.exception() for task in tasks if task.done() and not task.cancelled()]
    for error in errors:
        if error is not None:
            raise error
    return tasks[0].result(), tasks[1].result()


_closing: set[asyncio.Task] = set()


def _close_provider(provider: EmbeddingProvider | ExtractionProvider) -> None:
    """Release a provider's HTTP client from synchronous code."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        asyncio.run(provider.aclose())
        return
    # Keep a reference until the task is done.
    task = loop.create_task(provider.aclose())
    _closing.add(task)
    task.add_done_callback(_closing.discard)


class IngestionPipeline:
    """Drives one document at a time through the ingestion states.

    Parameters
    ----------
    embedder:
        Embedding provider; its ``dimension`` sizes the store.
    extractor:
        Extraction provider used for entity/relationship descriptions.
    store_factory:
        Returns a fresh store handle for each run.
    sink:
        Receives every extraction. Defaults to :class:`LoggingExtractionSink`.
    chunking:
        Chunk size bounds.
    error_policy:
        ``ABORT`` propagates the first provider/store failure; ``SKIP``
        records it in the report and moves on to the next chunk.
    concurrent_calls:
        Issue the embedding and extraction requests of a chunk together.
    extraction_prompt:
        Template with a ``{text}`` placeholder.
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        extractor: ExtractionProvider,
        store_factory: StoreFactory,
        *,
        sink: ExtractionSink | None = None,
        chunking: ChunkingConfig | None = None,
        error_policy: ErrorPolicy = ErrorPolicy.ABORT,
        concurrent_calls: bool = True,
        extraction_prompt: str = EXTRACTION_PROMPT,
    ) -> None:
        self.chunking = chunking or ChunkingConfig()
        self.chunking.validate_bounds()
        self.embedder = embedder
        self.extractor = extractor
        self.sink = sink or LoggingExtractionSink()
        self.error_policy = ErrorPolicy(error_policy)
        self.concurrent_calls = concurrent_calls
        self.extraction_prompt = extraction_prompt
        self._store_factory = store_factory

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        store_factory: StoreFactory | None = None,
        sink: ExtractionSink | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> IngestionPipeline:
        """Build a pipeline and its providers from configuration.

        Unknown providers, missing credentials and invalid chunk bounds
        all fail here, before any document is read.
        """
        chunking = ChunkingConfig(chunk_size=settings.chunk_size, chunk_overlap=settings.chunk_overlap)
        chunking.validate_bounds()
        error_policy = ErrorPolicy(settings.error_policy)

        if store_factory is None:
            from memory_graph.store.chroma_store import ChromaContentStore

            def _open_chroma(dimension: int) -> ContentStoreBase:
                return ChromaContentStore.from_settings(settings, dimension)

            store_factory = _open_chroma

        embedder = create_embedding_provider(settings, transport=transport)
        try:
            extractor = create_extraction_provider(settings, transport=transport)
        except MemoryGraphError:
            _close_provider(embedder)
            raise

        return cls(
            embedder,
            extractor,
            store_factory,
            sink=sink,
            chunking=chunking,
            error_policy=error_policy,
            concurrent_calls=settings.concurrent_calls,
        )

    async def aclose(self) -> None:
        await self.embedder.aclose()
        await self.extractor.aclose()

    async def __aenter__(self) -> IngestionPipeline:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -- public API -----------------------------------------------------------

    async def ingest(self, path: str | Path, *, timeout: float | None = None) -> IngestionReport:
        """Ingest the document at *path*.

        Parameters
        ----------
        path:
            File to load.
        timeout:
            Deadline in seconds for the whole call. In-flight provider
            requests are cancelled when it expires.

        Returns
        -------
        IngestionReport
            Final state, persisted keys and (under ``SKIP``) chunk failures.

        Raises
        ------
        MemoryGraphError
            Any failure, unchanged, with ``stage`` set to the state it
            happened in. Deadline expiry raises
            :class:`IngestionCancelledError`.
        """
        report = IngestionReport(uri=str(path))
        started = time.monotonic()
        try:
            if timeout is None:
                await self._run(Path(path), report)
            else:
                await asyncio.wait_for(self._run(Path(path), report), timeout)
        except asyncio.TimeoutError as exc:
            error = IngestionCancelledError(
                f"ingestion of {path} exceeded its {timeout}s deadline", operation="ingest"
            )
            self._fail(report, error)
            raise error from exc
        except MemoryGraphError as exc:
            self._fail(report, exc)
            raise
        finally:
            report.elapsed_seconds = time.monotonic() - started

        logger.info(
            "Ingested %s: %d chunks, %d nodes persisted, %d failures in %.2fs",
            report.uri,
            report.chunk_count,
            len(report.persisted_keys),
            len(report.failures),
            report.elapsed_seconds,
        )
        return report

    # -- internals ------------------------------------------------------------

    def _enter(self, report: IngestionReport, state: IngestionState) -> None:
        logger.debug("%s: %s → %s", report.uri, report.state.value, state.value)
        report.state = state

    def _fail(self, report: IngestionReport, error: MemoryGraphError) -> None:
        if error.stage is None:
            error.stage = report.state.value
        logger.error("Ingestion of %s failed during %s: %s", report.uri, error.stage, error)
        self._enter(report, IngestionState.FAILED)

    async def _run(self, path: Path, report: IngestionReport) -> None:
        self._enter(report, IngestionState.LOADING)
        document = await asyncio.to_thread(load_document, path)

        self._enter(report, IngestionState.CHUNKING)
        chunks = split(document.full_text, self.chunking)
        report.chunk_count = len(chunks)
        if not chunks:
            logger.warning("No chunks produced from %s", document.uri)
            self._enter(report, IngestionState.COMPLETED)
            return

        self._enter(report, IngestionState.PROCESSING)
        store = await asyncio.to_thread(self._store_factory, self.embedder.dimension)
        try:
            for chunk in chunks:
                try:
                    await self._process_chunk(document, chunk, store, report)
                except (ProviderError, StoreError) as exc:
                    if self.error_policy is ErrorPolicy.ABORT:
                        raise
                    logger.warning("Skipping chunk %d of %s: %s", chunk.index, document.uri, exc)
                    report.failures.append(
                        ChunkFailure(
                            index=chunk.index,
                            stage=exc.operation or IngestionState.PROCESSING.value,
                            error_type=type(exc).__name__,
                            message=str(exc),
                        )
                    )
        finally:
            store.close()

        self._enter(report, IngestionState.COMPLETED)

    async def _process_chunk(
        self,
        document: Document,
        chunk: Chunk,
        store: ContentStoreBase,
        report: IngestionReport,
    ) -> None:
        prompt = build_extraction_prompt(chunk.content, self.extraction_prompt)

        if self.concurrent_calls:
            embedding, graph_info = await _both(
                self.embedder.embed(chunk.content, EmbeddingPurpose.DOCUMENT),
                self.extractor.generate_text(prompt),
            )
            await asyncio.to_thread(store.upsert, chunk.content, embedding)
            report.persisted_keys.append(chunk.content)
        else:
            embedding = await self.embedder.embed(chunk.content, EmbeddingPurpose.DOCUMENT)
            await asyncio.to_thread(store.upsert, chunk.content, embedding)
            report.persisted_keys.append(chunk.content)
            graph_info = await self.extractor.generate_text(prompt)

        await self.sink.handle(
            ExtractionResult(
                uri=document.uri,
                chunk_index=chunk.index,
                content_key=chunk.content,
                text=graph_info,
            )
        )
        report.extractions += 1


def ingest_file(path: str | Path, settings: Settings | None = None) -> IngestionReport:
    """Synchronously ingest one file with providers and store built from *settings*."""
    if settings is None:
        from memory_graph.config import settings as default_settings

        settings = default_settings

    async def _run() -> IngestionReport:
        async with IngestionPipeline.from_settings(settings) as pipeline:
            return await pipeline.ingest(path, timeout=settings.ingest_timeout)

    return asyncio.run(_run())
