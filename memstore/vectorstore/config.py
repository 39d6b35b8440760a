"""
Configuration for vector store operations.

Uses Pydantic BaseSettings for environment variable support.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VectorStoreConfig(BaseSettings):
    """
    Configuration for VectorStore and VectorStoreManager.

    All settings can be overridden via environment variables with
    VECTORSTORE_ prefix (e.g., VECTORSTORE_DEFAULT_LIMIT=20).
    """

    # Search defaults
    default_limit: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Default number of results to return",
    )
    max_limit: int = Field(
        default=1000,
        ge=1,
        description="Upper bound applied to caller-supplied limits",
    )
    default_threshold: float = Field(
        default=0.3,
        ge=-1.0,
        le=1.0,
        description="Default minimum similarity threshold (strict inequality)",
    )

    # IVFFlat index tuning
    ivfflat_lists: int = Field(
        default=100,
        ge=1,
        le=32768,
        description="Number of inverted lists created for the embedding index",
    )
    ivfflat_probes: int = Field(
        default=10,
        ge=1,
        le=32768,
        description="Lists scanned per query (higher = better recall, slower)",
    )

    model_config = SettingsConfigDict(env_prefix="VECTORSTORE_")
