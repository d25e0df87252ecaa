"""Prompt templates used during ingestion."""

from __future__ import annotations

EXTRACTION_PROMPT = """\
Extract entities and relationships from the following text:

{text}"""


def build_extraction_prompt(text: str, template: str = EXTRACTION_PROMPT) -> str:
    """Fill the extraction *template* with one chunk of *text*."""
    return template.format(text=text)
