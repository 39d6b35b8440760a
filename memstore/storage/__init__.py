"""Storage layer for document and settings persistence."""

from memstore.storage.database import Database
from memstore.storage.repository import DocumentRepository
from memstore.storage.schema import create_tables, verify_embedding_dimension
from memstore.storage.settings_repository import SettingsRepository

__all__ = [
    "Database",
    "DocumentRepository",
    "SettingsRepository",
    "create_tables",
    "verify_embedding_dimension",
]
