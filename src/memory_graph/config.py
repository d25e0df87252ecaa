"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Provider credentials
    mistral_api_key: str = Field(default="", description="Mistral API key")
    gemini_api_key: str = Field(default="", description="Google Gemini API key")

    mistral_base_url: str = "https://api.mistral.ai/v1"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # Provider selection: one of "mistral", "gemini", "mock"
    embedding_provider: str = "mistral"
    extraction_provider: str = "mistral"

    # Models
    mistral_embedding_model: str = "mistral-embed"
    mistral_chat_model: str = "mistral-small-latest"
    mistral_vision_model: str = "mistral-medium-latest"
    gemini_embedding_model: str = "text-embedding-004"
    gemini_chat_model: str = "gemini-2.0-flash"
    embedding_dim: int | None = Field(
        default=None,
        description="Vector size stored per content node. Empty means the provider's native size.",
    )

    # Chunking
    chunk_size: int = 1000
    chunk_overlap: int = 100

    # Content store
    chroma_path: str = "amg.db"
    chroma_host: str = Field(
        default="",
        description="Chroma server hostname. Leave empty to use the embedded store at chroma_path.",
    )
    chroma_port: int = 8000
    chroma_collection: str = "content_nodes"

    # Files reachable through the HTTP service must resolve inside this directory
    ingest_root: str = "."

    # Ingestion behaviour
    request_timeout: float = Field(default=60.0, description="Per-request HTTP timeout in seconds")
    ingest_timeout: float | None = Field(default=None, description="Deadline for one ingestion call")
    error_policy: Literal["abort", "skip"] = "abort"
    concurrent_calls: bool = True

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


# Import `settings` in collaborators (CLI, service); factories take an explicit Settings.
settings = Settings()
