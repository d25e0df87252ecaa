"""FastAPI application exposing ingestion as a REST API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from memory_graph.config import Settings, settings
from memory_graph.errors import (
    ChunkingError,
    DocumentNotFoundError,
    IngestionCancelledError,
    LoadError,
    MemoryGraphError,
    ProviderConstructionError,
    ProviderError,
)
from memory_graph.ingestion.models import ChunkFailure, IngestionReport, IngestionState
from memory_graph.ingestion.pipeline import IngestionPipeline
from memory_graph.store.base import content_id

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Agent Memory Graph API",
    version="0.1.0",
    description="REST interface to the knowledge-ingestion pipeline.",
)

PipelineFactory = Callable[[], IngestionPipeline]

# Checked in order; the first matching class decides the status code.
_STATUS_BY_ERROR: list[tuple[type[MemoryGraphError], int]] = [
    (DocumentNotFoundError, 404),
    (LoadError, 422),
    (ChunkingError, 422),
    (ProviderConstructionError, 500),
    (IngestionCancelledError, 504),
    (ProviderError, 502),
]


def get_settings() -> Settings:
    return settings


def get_pipeline_factory(config: Settings = Depends(get_settings)) -> PipelineFactory:
    """Each request gets its own providers and store handle."""
    return lambda: IngestionPipeline.from_settings(config)


def status_for(error: MemoryGraphError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


def resolve_ingest_path(requested: str, root: str) -> Path:
    """Resolve *requested* against *root*; refuse anything that escapes it.

    Relative paths are taken relative to *root*. Symlinks and ``..`` are
    resolved before the check.
    """
    base = Path(root).resolve()
    candidate = (base / requested).resolve()
    if not candidate.is_relative_to(base):
        logger.warning("Rejected ingest path outside %s: %s", base, requested)
        raise HTTPException(status_code=403, detail="path is outside the ingest root")
    return candidate


# ── Request / Response schemas ────────────────────────────────────────
class IngestRequest(BaseModel):
    """File to ingest, relative to the server's ingest root."""

    path: str


class IngestResponse(BaseModel):
    """Outcome of one ingestion. Nodes are identified by hash, never by their text."""

    uri: str
    state: IngestionState
    chunk_count: int
    node_ids: list[str]
    extractions: int
    failures: list[ChunkFailure]
    elapsed_seconds: float

    @classmethod
    def from_report(cls, report: IngestionReport, uri: str) -> IngestResponse:
        return cls(
            uri=uri,
            state=report.state,
            chunk_count=report.chunk_count,
            node_ids=[content_id(key) for key in report.persisted_keys],
            extractions=report.extractions,
            failures=report.failures,
            elapsed_seconds=report.elapsed_seconds,
        )


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.post("/ingest", response_model=IngestResponse)
async def ingest(
    request: IngestRequest,
    config: Settings = Depends(get_settings),
    pipeline_factory: PipelineFactory = Depends(get_pipeline_factory),
) -> IngestResponse:
    """Run one ingestion and return its report."""
    path = resolve_ingest_path(request.path, config.ingest_root)
    try:
        pipeline = pipeline_factory()
        async with pipeline:
            report = await pipeline.ingest(path, timeout=config.ingest_timeout)
    except MemoryGraphError as exc:
        raise HTTPException(status_code=status_for(exc), detail=str(exc)) from exc
    return IngestResponse.from_report(report, request.path)
