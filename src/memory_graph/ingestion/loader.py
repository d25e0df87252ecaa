"""Document loaders — thin wrappers around LangChain document loaders."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from langchain_community.document_loaders import PyPDFLoader, TextLoader
from pypdf.errors import PyPdfError

from memory_graph.errors import DocumentNotFoundError, LoadError
from memory_graph.ingestion.models import Document

if TYPE_CHECKING:
    from langchain_core.documents import Document as LCDocument

logger = logging.getLogger(__name__)

_PAGE_SEPARATOR = "\n\n"


def load_text(path: str | Path) -> list[LCDocument]:
    """Load a single plain-text (or Markdown) file."""
    return TextLoader(str(path), encoding="utf-8").load()


def load_pdf(path: str | Path) -> list[LCDocument]:
    """Load a single PDF file, one LangChain document per page."""
    return PyPDFLoader(str(path)).load()


def load_document(path: str | Path) -> Document:
    """Read *path* into a :class:`Document`.

    PDFs are loaded page by page and joined with a blank line; every other
    file is read as UTF-8 text.

    Raises
    ------
    DocumentNotFoundError
        When *path* is not an existing file.
    LoadError
        When the file exists but cannot be read or decoded.
    """
    path = Path(path)
    if not path.is_file():
        raise DocumentNotFoundError(
            f"failed to load document: {path} is not a file", operation="load"
        )

    try:
        if path.suffix.lower() == ".pdf":
            pages = load_pdf(path)
        else:
            pages = load_text(path)
    except (OSError, RuntimeError, ValueError, PyPdfError) as exc:
        raise LoadError(f"failed to load document {path}: {exc}", operation="load") from exc

    full_text = _PAGE_SEPARATOR.join(page.page_content for page in pages)
    logger.info("Loaded %s (%d pages, %d chars)", path, len(pages), len(full_text))
    return Document(
        uri=str(path),
        full_text=full_text,
        metadata={"source": str(path), "pages": len(pages)},
    )
