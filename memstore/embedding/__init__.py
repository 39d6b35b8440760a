"""
Embedding generation for memory documents.

This module provides:
- EmbeddingService: Async client for the OpenAI-compatible embeddings endpoint
- EmbeddingConfig: Configuration settings for the embedding client
- EMBEDDING_DIMENSIONS: Vector size shared with the storage schema
"""

from memstore.embedding.config import EMBEDDING_DIMENSIONS, MAX_INPUT_CHARS, EmbeddingConfig
from memstore.embedding.service import EmbeddingService

__all__ = [
    "EMBEDDING_DIMENSIONS",
    "MAX_INPUT_CHARS",
    "EmbeddingConfig",
    "EmbeddingService",
]
