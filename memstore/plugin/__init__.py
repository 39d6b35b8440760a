"""
Agent memory plugin.

Recalls relevant memories before an agent turn and captures factual user
statements after it, over the memory API's search and add endpoints.
"""

from memstore.plugin.capture import DEFAULT_CAPTURE_PATTERNS, CapturePolicy
from memstore.plugin.client import MemoryClient, MemoryClientError
from memstore.plugin.config import PluginConfig
from memstore.plugin.hooks import MemoryPlugin, extract_text, format_memories

__all__ = [
    "DEFAULT_CAPTURE_PATTERNS",
    "CapturePolicy",
    "MemoryClient",
    "MemoryClientError",
    "MemoryPlugin",
    "PluginConfig",
    "extract_text",
    "format_memories",
]
