"""
Embedding client configuration.

Provides Pydantic settings for the OpenAI-compatible embedding endpoint:
model, target dimensionality, input budget and request limits.
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Shared with the storage schema: documents.embedding is vector(EMBEDDING_DIMENSIONS)
EMBEDDING_DIMENSIONS = 1536

# Characters kept from each input before it is sent to the endpoint
MAX_INPUT_CHARS = 8000


class EmbeddingConfig(BaseSettings):
    """
    Configuration for the embedding client.

    Settings can be overridden via environment variables prefixed with EMBEDDING_.
    """

    model_config = SettingsConfigDict(
        env_prefix="EMBEDDING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: SecretStr | None = Field(
        default=None,
        description="API key for the inference endpoint",
    )
    base_url: str = Field(
        default="https://api.novita.ai/openai",
        description="Base URL of the OpenAI-compatible endpoint",
    )
    model_name: str = Field(
        default="qwen/qwen3-embedding-8b",
        description="Embedding model identifier",
    )
    dimensions: int = Field(
        default=EMBEDDING_DIMENSIONS,
        ge=1,
        le=16000,
        description="Requested vector dimensionality (must match the storage schema)",
    )
    max_input_chars: int = Field(
        default=MAX_INPUT_CHARS,
        ge=1,
        description="Inputs longer than this are silently truncated",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=300.0,
        description="Per-request timeout for the embedding call",
    )
    batch_size: int = Field(
        default=64,
        ge=1,
        le=2048,
        description="Maximum texts submitted in a single request",
    )
