"""Shared fixtures for API tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from memstore.api.app import create_app
from memstore.api.auth import verify_api_key
from memstore.api.dependencies import (
    get_document_service,
    get_optional_database,
    get_settings_repository,
    get_vector_store_manager,
)
from memstore.vectorstore.base import VectorSearchResult


@pytest.fixture
def mock_document_service(make_document):
    """Mock DocumentService."""
    service = AsyncMock()
    service.insert = AsyncMock(return_value=make_document(doc_id="doc-new"))
    service.insert_file = AsyncMock(return_value=make_document(doc_id="doc-file"))
    service.get = AsyncMock(return_value=make_document())
    service.list_documents = AsyncMock(return_value=([make_document()], 1))
    service.list_processing = AsyncMock(return_value=[])
    service.update = AsyncMock(return_value=None)
    service.delete = AsyncMock(return_value=True)
    service.delete_bulk = AsyncMock(return_value=[])
    service.delete_by_tag = AsyncMock(return_value=0)
    return service


@pytest.fixture
def search_results(created_at) -> list[VectorSearchResult]:
    return [
        VectorSearchResult(
            document_id="doc-1",
            score=0.91,
            content="We use Postgres with pgvector for embeddings",
            metadata={"source": "chat"},
            container_tag="work",
            created_at=created_at,
            updated_at=created_at,
        ),
        VectorSearchResult(
            document_id="doc-2",
            score=0.44,
            content="Deploys go out on Tuesdays",
            metadata={},
            container_tag="work",
            created_at=created_at,
            updated_at=created_at,
        ),
    ]


@pytest.fixture
def mock_manager(search_results):
    """Mock VectorStoreManager."""
    manager = AsyncMock()
    manager.query = AsyncMock(return_value=search_results)
    return manager


@pytest.fixture
def mock_settings_repository():
    repository = AsyncMock()
    repository.get = AsyncMock(return_value={})
    repository.merge = AsyncMock(return_value={})
    return repository


@pytest.fixture
def mock_health_database():
    database = MagicMock()
    database.health_check = AsyncMock(return_value=True)
    return database


@pytest.fixture
def app(mock_document_service, mock_manager, mock_settings_repository, mock_health_database):
    """Application with auth bypassed and services mocked."""
    app = create_app()
    app.dependency_overrides[verify_api_key] = lambda: "test-key"
    app.dependency_overrides[get_document_service] = lambda: mock_document_service
    app.dependency_overrides[get_vector_store_manager] = lambda: mock_manager
    app.dependency_overrides[get_settings_repository] = lambda: mock_settings_repository
    app.dependency_overrides[get_optional_database] = lambda: mock_health_database
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """Test client without lifespan, so no real pool is opened."""
    return TestClient(app)
