"""
Database schema for documents and settings.

The embedding column is declared as vector(N), so the dimension is a
structural property of the table. Changing it means recreating every
stored vector; a mismatched configuration is detected at startup.
"""

import structlog

from memstore.embedding.config import EMBEDDING_DIMENSIONS
from memstore.exceptions import EmbeddingDimensionError
from memstore.storage.database import Database

logger = structlog.get_logger(__name__)

SETTINGS_ROW_ID = "default"


def build_schema_sql(dimensions: int = EMBEDDING_DIMENSIONS, ivfflat_lists: int = 100) -> str:
    """Render the migration script for the given vector dimension."""
    return f"""
        -- Enable required extensions
        CREATE EXTENSION IF NOT EXISTS vector;
        CREATE EXTENSION IF NOT EXISTS pg_trgm;

        -- Memory documents
        CREATE TABLE IF NOT EXISTS documents (
            id TEXT PRIMARY KEY,
            content TEXT NOT NULL,
            metadata JSONB NOT NULL DEFAULT '{{}}',
            embedding vector({dimensions}),
            container_tag TEXT NOT NULL DEFAULT 'default',
            status TEXT NOT NULL DEFAULT 'processed',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        -- IVFFlat index for approximate cosine-distance search
        CREATE INDEX IF NOT EXISTS idx_documents_embedding
            ON documents
            USING ivfflat (embedding vector_cosine_ops)
            WITH (lists = {ivfflat_lists});

        CREATE INDEX IF NOT EXISTS idx_documents_container_tag
            ON documents(container_tag);
        CREATE INDEX IF NOT EXISTS idx_documents_created_at
            ON documents(created_at DESC);

        -- Only the rare not-yet-embedded rows are indexed
        CREATE INDEX IF NOT EXISTS idx_documents_processing
            ON documents(created_at DESC)
            WHERE status = 'processing';

        -- Single-row settings blob
        CREATE TABLE IF NOT EXISTS settings (
            id TEXT PRIMARY KEY DEFAULT '{SETTINGS_ROW_ID}',
            data JSONB NOT NULL DEFAULT '{{}}',
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        INSERT INTO settings (id, data) VALUES ('{SETTINGS_ROW_ID}', '{{}}')
        ON CONFLICT (id) DO NOTHING;
    """


async def create_tables(
    db: Database,
    dimensions: int = EMBEDDING_DIMENSIONS,
    ivfflat_lists: int = 100,
) -> None:
    """
    Create database tables and indexes if they don't exist.

    Safe to run repeatedly. Verifies afterwards that an existing
    documents table was created with the same vector dimension.

    Args:
        db: Connected Database instance
        dimensions: Embedding vector dimension
        ivfflat_lists: Number of IVF lists for the embedding index

    Raises:
        EmbeddingDimensionError: If the existing column has another dimension
    """
    async with db.transaction() as conn:
        await conn.execute(build_schema_sql(dimensions, ivfflat_lists))

    logger.info("Database schema ready", dimensions=dimensions, ivfflat_lists=ivfflat_lists)
    await verify_embedding_dimension(db, dimensions)


async def get_embedding_dimension(db: Database) -> int | None:
    """
    Read the declared dimension of documents.embedding.

    Returns:
        The vector dimension, or None if the table does not exist yet
    """
    sql = """
        SELECT a.atttypmod
        FROM pg_attribute a
        WHERE a.attrelid = to_regclass('documents')
          AND a.attname = 'embedding'
          AND NOT a.attisdropped
    """
    typmod = await db.fetchval(sql)
    if typmod is None or typmod < 0:
        return None
    return int(typmod)


async def verify_embedding_dimension(db: Database, expected: int) -> None:
    """
    Fail fast when the configured dimension disagrees with the schema.

    Raises:
        EmbeddingDimensionError: On mismatch
    """
    actual = await get_embedding_dimension(db)
    if actual is None:
        logger.warning("documents table not found; run `memstore init-db`")
        return
    if actual != expected:
        raise EmbeddingDimensionError(expected=actual, actual=expected)
