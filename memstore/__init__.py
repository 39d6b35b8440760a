"""Memstore: a semantic memory store over PostgreSQL and pgvector."""

__version__ = "1.0.0"
