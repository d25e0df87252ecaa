"""Mistral implementations of the embedding and extraction providers."""

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
    MistralChatRequest,
    MistralChatResponse,
    MistralEmbeddingRequest,
    MistralEmbeddingResponse,
    MistralImagePart,
    MistralImageUrl,
    MistralMessage,
    MistralTextPart,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.mistral.ai/v1"
MISTRAL_EMBED_DIMENSION = 1024

_PROVIDER = ProviderName.MISTRAL.value


def _auth_headers(api_key: str) -> dict[str, str]:
    if not api_key:
        raise ProviderConstructionError(
            "MISTRAL_API_KEY environment variable not set", operation="construct"
        )
    return {"Authorization": f"Bearer {api_key}"}


class MistralEmbeddingProvider(EmbeddingProvider):
    """Embeddings from ``POST /embeddings``.

    Mistral has no retrieval task types, so *purpose* only shows up in
    the logs.
    """

    name = ProviderName.MISTRAL

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "mistral-embed",
        base_url: str = DEFAULT_BASE_URL,
        dimension: int | None = None,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = _auth_headers(api_key)
        if model == "mistral-embed" and dimension not in (None, MISTRAL_EMBED_DIMENSION):
            raise ProviderConstructionError(
                f"mistral-embed produces {MISTRAL_EMBED_DIMENSION}-dimensional vectors, "
                f"not {dimension}",
                operation="construct",
            )
        self.model = model
        self.dimension = dimension or MISTRAL_EMBED_DIMENSION
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
            "Requesting embeddings model=%s text_length=%d purpose=%s",
            self.model,
            len(text),
            purpose.value,
        )
        response = await post_json(
            self._client,
            "/embeddings",
            MistralEmbeddingRequest(model=self.model, input=[text]),
            MistralEmbeddingResponse,
            provider=_PROVIDER,
            operation="embed",
            timeout=timeout,
        )
        if not response.data:
            raise ProviderEmptyResultError(
                "no embeddings found in response", provider=_PROVIDER, operation="embed"
            )
        return response.data[0].embedding


class MistralExtractionProvider(ExtractionProvider):
    """Chat completions (text and multimodal) from ``POST /chat/completions``."""

    name = ProviderName.MISTRAL

    def __init__(
        self,
        api_key: str,
        *,
        chat_model: str = "mistral-small-latest",
        multimodal_model: str = "mistral-medium-latest",
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = _auth_headers(api_key)
        self.chat_model = chat_model
        self.multimodal_model = multimodal_model
        self._client = build_client(base_url, headers=headers, timeout=timeout, transport=transport)

    async def generate_text(self, prompt: str, *, timeout: float | None = None) -> str:
        logger.info("GenerateText called model=%s prompt_length=%d", self.chat_model, len(prompt))
        request = MistralChatRequest(
            model=self.chat_model,
            messages=[MistralMessage(role="user", content=prompt)],
            temperature=0.7,
            max_tokens=500,
        )
        return await self._complete(request, operation="generate_text", timeout=timeout)

    async def extract_from_image(
        self,
        prompt: str,
        image: bytes,
        mime_type: str | None = None,
        *,
        timeout: float | None = None,
    ) -> str:
        logger.info(
            "ExtractFromImage called model=%s prompt_length=%d image_size=%d mime_type=%s",
            self.multimodal_model,
            len(prompt),
            len(image),
            mime_type,
        )
        if not image:
            raise EmptyInputError(
                "image data is empty", provider=_PROVIDER, operation="extract_from_image"
            )
        if not mime_type:
            logger.warning(
                "MIME type is empty, defaulting to %s. An accurate MIME type is preferred.",
                DEFAULT_IMAGE_MIME_TYPE,
            )
            mime_type = DEFAULT_IMAGE_MIME_TYPE

        encoded = base64.b64encode(image).decode("ascii")
        request = MistralChatRequest(
            model=self.multimodal_model,
            messages=[
                MistralMessage(
                    role="user",
                    content=[
                        MistralTextPart(text=prompt),
                        MistralImagePart(
                            image_url=MistralImageUrl(url=f"data:{mime_type};base64,{encoded}")
                        ),
                    ],
                )
            ],
            # Lower temperature for more factual extraction
            temperature=0.2,
            max_tokens=300,
        )
        return await self._complete(request, operation="extract_from_image", timeout=timeout)

    async def _complete(
        self, request: MistralChatRequest, *, operation: str, timeout: float | None
    ) -> str:
        response = await post_json(
            self._client,
            "/chat/completions",
            request,
            MistralChatResponse,
            provider=_PROVIDER,
            operation=operation,
            timeout=timeout,
        )
        content = response.first_content()
        if not content:
            logger.warning("No content found in Mistral response for %s", operation)
            raise ProviderEmptyResultError(
                "no content found in response", provider=_PROVIDER, operation=operation
            )
        logger.info("%s succeeded response_length=%d", operation, len(content))
        return content
