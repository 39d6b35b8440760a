"""Configuration for the memstore service."""

from memstore.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
