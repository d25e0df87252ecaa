"""Wire-format request/response models for the remote providers.

Payloads are explicit pydantic models instead of ad-hoc dicts so that a
change in a provider's schema shows up as a :class:`ProviderDecodeError`
at the boundary rather than a ``KeyError`` deep in the pipeline.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# ── Mistral ───────────────────────────────────────────────────────────


class MistralEmbeddingRequest(BaseModel):
    model: str
    input: list[str]


class MistralEmbeddingData(BaseModel):
    embedding: list[float]


class MistralEmbeddingResponse(BaseModel):
    data: list[MistralEmbeddingData] = Field(default_factory=list)


class MistralTextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class MistralImageUrl(BaseModel):
    url: str


class MistralImagePart(BaseModel):
    type: Literal["image_url"] = "image_url"
    image_url: MistralImageUrl


class MistralMessage(BaseModel):
    role: str = "user"
    content: str | list[MistralTextPart | MistralImagePart]


class MistralChatRequest(BaseModel):
    model: str
    messages: list[MistralMessage]
    temperature: float
    max_tokens: int


class MistralResponseMessage(BaseModel):
    content: str | None = None


class MistralChoice(BaseModel):
    message: MistralResponseMessage


class MistralChatResponse(BaseModel):
    choices: list[MistralChoice] = Field(default_factory=list)

    def first_content(self) -> str:
        """Content of the first choice, or ``""`` when there is none."""
        if not self.choices:
            return ""
        return self.choices[0].message.content or ""


# ── Gemini ────────────────────────────────────────────────────────────


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GeminiInlineData(_CamelModel):
    mime_type: str = Field(alias="mimeType")
    data: str


class GeminiPart(_CamelModel):
    text: str | None = None
    inline_data: GeminiInlineData | None = Field(default=None, alias="inlineData")


class GeminiContent(_CamelModel):
    role: str | None = None
    parts: list[GeminiPart] = Field(default_factory=list)


class GeminiEmbedRequest(_CamelModel):
    model: str
    content: GeminiContent
    task_type: str = Field(alias="taskType")
    output_dimensionality: int | None = Field(default=None, alias="outputDimensionality")


class GeminiEmbedding(_CamelModel):
    values: list[float] = Field(default_factory=list)


class GeminiEmbedResponse(_CamelModel):
    embedding: GeminiEmbedding | None = None


class GeminiGenerationConfig(_CamelModel):
    temperature: float
    max_output_tokens: int = Field(alias="maxOutputTokens")


class GeminiGenerateRequest(_CamelModel):
    contents: list[GeminiContent]
    generation_config: GeminiGenerationConfig = Field(alias="generationConfig")


class GeminiCandidate(_CamelModel):
    content: GeminiContent | None = None


class GeminiGenerateResponse(_CamelModel):
    candidates: list[GeminiCandidate] = Field(default_factory=list)

    def first_text(self) -> str:
        """Concatenated text parts of the first candidate, or ``""``."""
        if not self.candidates or self.candidates[0].content is None:
            return ""
        return "".join(part.text or "" for part in self.candidates[0].content.parts)
