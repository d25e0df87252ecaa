"""Google Gemini implementations of the embedding and extraction providers.

Uses the public REST surface of the Generative Language API
(``models/{model}:embedContent`` and ``models/{model}:generateContent``),
authenticated with the ``x-goog-api-key`` header.
"""

from __future__ import annotations

import base64
import logging

import httpx

from memory_graph.errors import EmptyInputError, ProviderConstructionError, ProviderEmptyResultError
from memory_graph.providers.base import (
    DEFAULT_IMAGE_MIME_TYPE,
    EmbeddingProvider,
    EmbeddingPurpose,
    ExtractionProvider,
    ProviderName,
)
from memory_graph.providers.http import build_client, post_json
from memory_graph.providers.schemas import (
    GeminiContent,
    GeminiEmbedRequest,
    GeminiEmbedResponse,
    GeminiGenerateRequest,
    GeminiGenerateResponse,
    GeminiGenerationConfig,
    GeminiInlineData,
    GeminiPart,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_DIMENSION = 768

_PROVIDER = ProviderName.GEMINI.value


def _auth_headers(api_key: str) -> dict[str, str]:
    if not api_key:
        raise ProviderConstructionError(
            "GEMINI_API_KEY environment variable not set", operation="construct"
        )
    return {"x-goog-api-key": api_key}


class GeminiEmbeddingProvider(EmbeddingProvider):
    """Embeddings with retrieval task types (document vs. query)."""

    name = ProviderName.GEMINI

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "text-embedding-004",
        base_url: str = DEFAULT_BASE_URL,
        dimension: int | None = None,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = _auth_headers(api_key)
        self.model = model
        self.dimension = dimension or DEFAULT_DIMENSION
        self._client = build_client(base_url, headers=headers, timeout=timeout, transport=transport)

    async def embed(
        self,
        text: str,
        purpose: EmbeddingPurpose = EmbeddingPurpose.DOCUMENT,
        *,
        timeout: float | None = None,
    ) -> list[float]:
        if not text:
            raise EmptyInputError("text is empty", provider=_PROVIDER, operation="embed")

        logger.debug(
            "Requesting embeddings model=%s text_length=%d task_type=%s",
            self.model,
            len(text),
            purpose.value,
        )
        request = GeminiEmbedRequest(
            model=f"models/{self.model}",
            content=GeminiContent(parts=[GeminiPart(text=text)]),
            task_type=purpose.value,
            output_dimensionality=self.dimension,
        )
        response = await post_json(
            self._client,
            f"/models/{self.model}:embedContent",
            request,
            GeminiEmbedResponse,
            provider=_PROVIDER,
            operation="embed",
            timeout=timeout,
        )
        if response.embedding is None or not response.embedding.values:
            raise ProviderEmptyResultError(
                "no embeddings found in response", provider=_PROVIDER, operation="embed"
            )
        return response.embedding.values


class GeminiExtractionProvider(ExtractionProvider):
    """Text and multimodal generation via ``generateContent``."""

    name = ProviderName.GEMINI

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gemini-2.0-flash",
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = _auth_headers(api_key)
        self.model = model
        self._client = build_client(base_url, headers=headers, timeout=timeout, transport=transport)

    async def generate_text(self, prompt: str, *, timeout: float | None = None) -> str:
        logger.info("GenerateText called model=%s prompt_length=%d", self.model, len(prompt))
        return await self._generate(
            [GeminiPart(text=prompt)],
            GeminiGenerationConfig(temperature=0.7, max_output_tokens=500),
            operation="generate_text",
            timeout=timeout,
        )

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
                "image data is empty", provider=_PROVIDER, operation="extract_from_image"
            )
        if not mime_type:
            logger.warning("MIME type is empty, defaulting to %s", DEFAULT_IMAGE_MIME_TYPE)
            mime_type = DEFAULT_IMAGE_MIME_TYPE

        parts = [
            GeminiPart(text=prompt),
            GeminiPart(
                inline_data=GeminiInlineData(
                    mime_type=mime_type, data=base64.b64encode(image).decode("ascii")
                )
            ),
        ]
        return await self._generate(
            parts,
            GeminiGenerationConfig(temperature=0.2, max_output_tokens=300),
            operation="extract_from_image",
            timeout=timeout,
        )

    async def _generate(
        self,
        parts: list[GeminiPart],
        config: GeminiGenerationConfig,
        *,
        operation: str,
        timeout: float | None,
    ) -> str:
        request = GeminiGenerateRequest(
            contents=[GeminiContent(role="user", parts=parts)],
            generation_config=config,
        )
        response = await post_json(
            self._client,
            f"/models/{self.model}:generateContent",
            request,
            GeminiGenerateResponse,
            provider=_PROVIDER,
            operation=operation,
            timeout=timeout,
        )
        text = response.first_text()
        if not text:
            raise ProviderEmptyResultError(
                "no candidates returned", provider=_PROVIDER, operation=operation
            )
        return text
