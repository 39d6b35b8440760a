"""
Dependency injection for FastAPI endpoints.

Process-scoped singletons (connection pool, embedding client and the
services built on them) are constructed once, on first use, and handed
to endpoints through ``Depends``. Tests replace them with
``app.dependency_overrides``.
"""

import asyncio

import structlog

from memstore.config.settings import get_settings
from memstore.documents.service import DocumentService
from memstore.embedding.service import EmbeddingService
from memstore.exceptions import StorageFailure
from memstore.storage.database import Database
from memstore.storage.repository import DocumentRepository
from memstore.storage.settings_repository import SettingsRepository
from memstore.vectorstore.config import VectorStoreConfig
from memstore.vectorstore.manager import VectorStoreManager
from memstore.vectorstore.pgvector_store import PgVectorStore

logger = structlog.get_logger(__name__)

# Global service instances (initialized on first request)
_database: Database | None = None
_embedding_service: EmbeddingService | None = None
_vector_store_config: VectorStoreConfig | None = None
_document_service: DocumentService | None = None
_vector_store_manager: VectorStoreManager | None = None

_database_lock = asyncio.Lock()


async def get_database() -> Database:
    """
    Get the shared Database instance, connecting on first use.

    A failed connection is not cached; the next request tries again.

    Raises:
        StorageFailure: If the database is unreachable
    """
    global _database

    if _database is None:
        async with _database_lock:
            if _database is None:
                settings = get_settings()
                database = Database(
                    database_url=str(settings.database_url),
                    min_size=settings.db_pool_min_size,
                    max_size=settings.db_pool_max_size,
                    acquire_timeout=settings.db_acquire_timeout,
                )
                await database.connect()
                _database = database

    return _database


async def get_optional_database() -> Database | None:
    """Get the Database, or None when it cannot be reached."""
    try:
        return await get_database()
    except StorageFailure as e:
        logger.warning("Database unavailable", error=str(e))
        return None


async def get_embedding_service() -> EmbeddingService:
    """Get the shared embedding service instance."""
    global _embedding_service

    if _embedding_service is None:
        _embedding_service = EmbeddingService()

    return _embedding_service


def get_vector_store_config() -> VectorStoreConfig:
    """Get the vector store configuration."""
    global _vector_store_config

    if _vector_store_config is None:
        _vector_store_config = VectorStoreConfig()

    return _vector_store_config


async def get_document_repository() -> DocumentRepository:
    """Get a document repository bound to the shared pool."""
    database = await get_database()
    embedding_service = await get_embedding_service()
    return DocumentRepository(database, dimensions=embedding_service.dimensions)


async def get_settings_repository() -> SettingsRepository:
    """Get a settings repository bound to the shared pool."""
    return SettingsRepository(await get_database())


async def get_document_service() -> DocumentService:
    """
    Get document service instance.

    Creates a singleton service with DocumentRepository and EmbeddingService.
    """
    global _document_service

    if _document_service is None:
        _document_service = DocumentService(
            repository=await get_document_repository(),
            embedding_service=await get_embedding_service(),
        )

    return _document_service


async def get_vector_store_manager() -> VectorStoreManager:
    """
    Get vector store manager instance.

    Creates a singleton manager with Database, PgVectorStore, and EmbeddingService.
    """
    global _vector_store_manager

    if _vector_store_manager is None:
        database = await get_database()
        embedding_service = await get_embedding_service()
        config = get_vector_store_config()

        vector_store = PgVectorStore(
            database,
            config=config,
            dimensions=embedding_service.dimensions,
        )
        _vector_store_manager = VectorStoreManager(
            vector_store=vector_store,
            embedding_service=embedding_service,
            config=config,
        )

    return _vector_store_manager


async def cleanup_dependencies() -> None:
    """Clean up global dependencies on shutdown."""
    global _database, _embedding_service, _vector_store_config
    global _document_service, _vector_store_manager

    _vector_store_manager = None
    _document_service = None
    _vector_store_config = None

    if _embedding_service is not None:
        await _embedding_service.close()
        _embedding_service = None

    if _database is not None:
        await _database.close()
        _database = None
