"""
Configuration for the agent memory plugin.

Uses Pydantic BaseSettings for environment variable support.
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from memstore.plugin.capture import DEFAULT_CAPTURE_PATTERNS


class PluginConfig(BaseSettings):
    """
    Configuration for MemoryClient and MemoryPlugin.

    All settings can be overridden via environment variables with
    MEMORY_PLUGIN_ prefix (e.g., MEMORY_PLUGIN_MIN_SCORE=0.6).
    """

    api_url: str = Field(
        default="http://localhost:8787",
        description="Base URL of the memory API",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Bearer token sent when the API requires one",
    )
    timeout_seconds: float = Field(default=10.0, gt=0.0, le=120.0)

    # Hook behaviour
    auto_recall: bool = Field(
        default=True,
        description="Search memories before each agent turn",
    )
    auto_capture: bool = Field(
        default=True,
        description="Store user statements that match a capture pattern",
    )
    recall_limit: int = Field(default=3, ge=1, le=100)
    min_score: float = Field(
        default=0.55,
        ge=-1.0,
        le=1.0,
        description="Recall threshold (stricter than the API default of 0.3)",
    )
    capture_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CAPTURE_PATTERNS),
        description="Case-insensitive regexes; any match triggers capture",
    )

    model_config = SettingsConfigDict(env_prefix="MEMORY_PLUGIN_")
