"""Deterministic offline providers for tests and local dry runs."""

from __future__ import annotations

import hashlib
import random

from memory_graph.errors import EmptyInputError
from memory_graph.providers.base import (
    DEFAULT_IMAGE_MIME_TYPE,
    EmbeddingProvider,
    EmbeddingPurpose,
    ExtractionProvider,
    ProviderName,
)

DEFAULT_DIMENSION = 768


class MockEmbeddingProvider(EmbeddingProvider):
    """Returns a pseudo-random vector seeded from the text.

    Empty text returns ``[]`` instead of raising; the remote providers
    raise :class:`EmptyInputError` for the same input.
    """

    name = ProviderName.MOCK

    def __init__(self, dimension: int | None = None) -> None:
        self.dimension = dimension or DEFAULT_DIMENSION
        self.calls: list[tuple[str, EmbeddingPurpose]] = []

    async def embed(
        self,
        text: str,
        purpose: EmbeddingPurpose = EmbeddingPurpose.DOCUMENT,
        *,
        timeout: float | None = None,
    ) -> list[float]:
        if not text:
            return []
        self.calls.append((text, purpose))
        seed = int.from_bytes(hashlib.sha256(text.encode("utf-8")).digest()[:8], "big")
        rng = random.Random(seed)
        return [rng.uniform(-1.0, 1.0) for _ in range(self.dimension)]


class MockExtractionProvider(ExtractionProvider):
    """Echoes a short description of the prompt."""

    name = ProviderName.MOCK

    def __init__(self) -> None:
        self.prompts: list[str] = []

    async def generate_text(self, prompt: str, *, timeout: float | None = None) -> str:
        self.prompts.append(prompt)
        return f"mock extraction ({len(prompt)} chars)"

    async def extract_from_image(
        self,
        prompt: str,
        image: bytes,
        mime_type: str | None = None,
        *,
        timeout: float | None = None,
    ) -> str:
        if not image:
            raise EmptyInputError(
                "image data is empty",
                provider=ProviderName.MOCK.value,
                operation="extract_from_image",
            )
        self.prompts.append(prompt)
        return f"mock image extraction ({mime_type or DEFAULT_IMAGE_MIME_TYPE}, {len(image)} bytes)"
