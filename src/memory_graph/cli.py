"""Command-line entry point: ``amg ingest PATH`` and ``amg search QUERY``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from memory_graph.config import Settings
from memory_graph.errors import MemoryGraphError
from memory_graph.ingestion.pipeline import ingest_file
from memory_graph.providers.factory import create_embedding_provider
from memory_graph.store.search import search

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="amg",
        description="Ingest documents into the memory graph and search them.",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL (e.g. DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="Ingest a file into the memory graph")
    ingest.add_argument("path", help="File to ingest")

    find = sub.add_parser("search", help="Similarity search over ingested content")
    find.add_argument("query", help="Natural-language query")
    find.add_argument("-k", type=int, default=5, help="Number of results")
    return parser


async def _search(query: str, k: int, settings: Settings) -> list:
    from memory_graph.store.chroma_store import ChromaContentStore

    async with create_embedding_provider(settings) as embedder:
        with ChromaContentStore.from_settings(settings, embedder.dimension) as store:
            return await search(query, embedder=embedder, store=store, k=k)


def main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = settings or Settings()
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "ingest":
        try:
            report = ingest_file(args.path, settings)
        except MemoryGraphError as exc:
            print(f"Error ingesting file: {exc}", file=sys.stderr)
            return 1
        print(f"Ingested file: {args.path} ({report.chunk_count} chunks)")
        for failure in report.failures:
            print(f"  skipped chunk {failure.index}: {failure.message}", file=sys.stderr)
        return 0 if report.succeeded else 1

    try:
        hits = asyncio.run(_search(args.query, args.k, settings))
    except MemoryGraphError as exc:
        print(f"Error searching: {exc}", file=sys.stderr)
        return 1
    for hit in hits:
        print(f"{hit.score:.3f}  {hit.content[:120]!r}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
