"""Unit tests for the serving layer."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from memory_graph.config import Settings
from memory_graph.errors import (
    ChunkingError,
    DocumentNotFoundError,
    IngestionCancelledError,
    LoadError,
    ProviderConstructionError,
    ProviderResponseError,
    StoreError,
)
from memory_graph.ingestion.pipeline import IngestionPipeline
from memory_graph.providers.mock import MockEmbeddingProvider, MockExtractionProvider
from memory_graph.serving.app import app, get_pipeline_factory, get_settings, status_for
from memory_graph.store.base import content_id


@pytest.fixture()
def ingest_root(tmp_path: Path) -> Path:
    root = tmp_path / "docs"
    root.mkdir()
    return root


@pytest.fixture()
def client(store_factory, ingest_root: Path):
    app.dependency_overrides[get_settings] = lambda: Settings(ingest_root=str(ingest_root))
    app.dependency_overrides[get_pipeline_factory] = lambda: lambda: IngestionPipeline(
        MockEmbeddingProvider(dimension=8), MockExtractionProvider(), store_factory
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_endpoint() -> None:
    """GET /health should return 200 with status ok."""
    client = TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ingest_returns_report(client: TestClient, store_factory, ingest_root: Path) -> None:
    text = "# Notes\n\nKuzu stores the graph. Chroma stores vectors.\n"
    (ingest_root / "note.md").write_text(text, encoding="utf-8")

    response = client.post("/ingest", json={"path": "note.md"})

    assert response.status_code == 200
    body = response.json()
    assert body["uri"] == "note.md"
    assert body["state"] == "completed"
    assert body["chunk_count"] == 1
    assert body["node_ids"] == [content_id(text)]
    assert body["failures"] == []
    assert list(store_factory.nodes) == [text]


def test_response_never_contains_document_text(client: TestClient, ingest_root: Path) -> None:
    (ingest_root / "secret.env").write_text("DB_PASSWORD=hunter2\n", encoding="utf-8")

    response = client.post("/ingest", json={"path": "secret.env"})

    assert response.status_code == 200
    assert "hunter2" not in response.text
    assert "persisted_keys" not in response.json()


def test_absolute_path_inside_root_is_accepted(client: TestClient, ingest_root: Path) -> None:
    path = ingest_root / "nested" / "a.txt"
    path.parent.mkdir()
    path.write_text("inside", encoding="utf-8")

    response = client.post("/ingest", json={"path": str(path)})

    assert response.status_code == 200


@pytest.mark.parametrize("requested", ["../secret.env", "{outside}"])
def test_paths_outside_root_are_forbidden(
    client: TestClient, store_factory, ingest_root: Path, requested: str
) -> None:
    secret = ingest_root.parent / "secret.env"
    secret.write_text("DB_PASSWORD=hunter2\n", encoding="utf-8")

    response = client.post("/ingest", json={"path": requested.format(outside=secret)})

    assert response.status_code == 403
    assert "hunter2" not in response.text
    assert store_factory.opened == []


def test_symlink_escaping_root_is_forbidden(client: TestClient, ingest_root: Path) -> None:
    secret = ingest_root.parent / "secret.env"
    secret.write_text("DB_PASSWORD=hunter2\n", encoding="utf-8")
    (ingest_root / "link.env").symlink_to(secret)

    response = client.post("/ingest", json={"path": "link.env"})

    assert response.status_code == 403


def test_ingest_missing_file_is_404(client: TestClient) -> None:
    response = client.post("/ingest", json={"path": "nope.txt"})
    assert response.status_code == 404
    assert "not a file" in response.json()["detail"]


def test_ingest_undecodable_file_is_422(client: TestClient, ingest_root: Path) -> None:
    (ingest_root / "binary.txt").write_bytes(b"\xff\xfe\xfa invalid utf-8 \xc3\x28")
    response = client.post("/ingest", json={"path": "binary.txt"})
    assert response.status_code == 422


def test_ingest_requires_path(client: TestClient) -> None:
    response = client.post("/ingest", json={})
    assert response.status_code == 422


def test_construction_error_is_500(ingest_root: Path) -> None:
    def broken_factory() -> IngestionPipeline:
        raise ProviderConstructionError("MISTRAL_API_KEY environment variable not set")

    app.dependency_overrides[get_settings] = lambda: Settings(ingest_root=str(ingest_root))
    app.dependency_overrides[get_pipeline_factory] = lambda: broken_factory
    try:
        response = TestClient(app).post("/ingest", json={"path": "whatever.txt"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert "MISTRAL_API_KEY" in response.json()["detail"]


@pytest.mark.parametrize(
    "error,status",
    [
        (DocumentNotFoundError("missing"), 404),
        (LoadError("undecodable"), 422),
        (ChunkingError("bad bounds"), 422),
        (ProviderConstructionError("no key"), 500),
        (ProviderResponseError(500, "boom", provider="mistral", operation="embed"), 502),
        (IngestionCancelledError("deadline"), 504),
        (StoreError("disk full"), 500),
    ],
)
def test_status_for(error, status: int) -> None:
    assert status_for(error) == status
