"""Tests for the memstore CLI."""

import json
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from memstore.cli import main
from memstore.exceptions import EmbeddingFailure
from memstore.vectorstore.base import VectorSearchResult


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def services(make_document):
    """Fake Services bundle with mocked document and search services."""
    bundle = MagicMock()
    bundle.documents = AsyncMock()
    bundle.documents.insert = AsyncMock(return_value=make_document(doc_id="doc-cli"))
    bundle.documents.delete_bulk = AsyncMock(return_value=["a"])
    bundle.documents.delete_by_tag = AsyncMock(return_value=3)
    bundle.search = AsyncMock()
    bundle.search.query = AsyncMock(
        return_value=[
            VectorSearchResult(
                document_id="doc-1",
                score=0.8765,
                content="We use Postgres",
                metadata={"a": 1},
                container_tag="work",
            )
        ]
    )
    return bundle


@pytest.fixture
def patched_services(services):
    @asynccontextmanager
    async def _open():
        yield services

    with patch("memstore.cli.open_services", _open):
        yield services


class TestSearch:
    def test_search_prints_results(self, runner, patched_services):
        result = runner.invoke(main, ["search", "what database?", "--limit", "5"])

        assert result.exit_code == 0, result.output
        assert "We use Postgres" in result.output
        assert "0.8765" in result.output
        assert "Found 1 results" in result.output
        patched_services.search.query.assert_awaited_once_with(
            text="what database?", limit=5, threshold=None, container_tag=None
        )

    def test_search_json(self, runner, patched_services):
        result = runner.invoke(main, ["search", "db", "--json", "--tag", "work", "--threshold", "0"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload == [
            {
                "id": "doc-1",
                "content": "We use Postgres",
                "metadata": {"a": 1},
                "containerTag": "work",
                "score": 0.8765,
            }
        ]
        kwargs = patched_services.search.query.call_args.kwargs
        assert kwargs["threshold"] == 0.0
        assert kwargs["container_tag"] == "work"

    def test_search_no_results(self, runner, patched_services):
        patched_services.search.query.return_value = []

        result = runner.invoke(main, ["search", "nothing"])

        assert "No results found." in result.output

    def test_error_exits_1(self, runner, patched_services):
        patched_services.search.query.side_effect = EmbeddingFailure("endpoint down")

        result = runner.invoke(main, ["search", "x"])

        assert result.exit_code == 1
        assert "endpoint down" in result.output


class TestAdd:
    def test_add(self, runner, patched_services):
        result = runner.invoke(
            main, ["add", "We use Postgres", "--tag", "work", "--metadata", '{"a": 1}']
        )

        assert result.exit_code == 0, result.output
        assert "Stored doc-cli (processed)" in result.output
        patched_services.documents.insert.assert_awaited_once_with(
            "We use Postgres", metadata={"a": 1}, container_tag="work"
        )

    @pytest.mark.parametrize("metadata", ["{not json", "[1, 2]"])
    def test_bad_metadata(self, runner, patched_services, metadata):
        result = runner.invoke(main, ["add", "x", "--metadata", metadata])

        assert result.exit_code == 2
        patched_services.documents.insert.assert_not_called()


class TestForget:
    def test_forget_ids(self, runner, patched_services):
        result = runner.invoke(main, ["forget", "--id", "a", "--id", "b"])

        assert result.exit_code == 0, result.output
        assert "Deleted 1 memories" in result.output
        patched_services.documents.delete_bulk.assert_awaited_once_with(["a", "b"])

    def test_forget_tag(self, runner, patched_services):
        result = runner.invoke(main, ["forget", "--tag", "scratch"])

        assert "Deleted 3 memories" in result.output
        patched_services.documents.delete_by_tag.assert_awaited_once_with("scratch")

    def test_forget_requires_selector(self, runner, patched_services):
        result = runner.invoke(main, ["forget"])

        assert result.exit_code == 2
        assert "Provide --id or --tag" in result.output


class TestInitDb:
    def test_init_db(self, runner):
        db = MagicMock()
        db.__aenter__ = AsyncMock(return_value=db)
        db.__aexit__ = AsyncMock(return_value=None)
        create_tables = AsyncMock()

        with patch("memstore.cli.Database", return_value=db), patch(
            "memstore.storage.schema.create_tables", create_tables
        ):
            result = runner.invoke(main, ["init-db"])

        assert result.exit_code == 0, result.output
        assert "vector(1536)" in result.output
        create_tables.assert_awaited_once_with(db, dimensions=1536, ivfflat_lists=100)


class TestHealth:
    def _database(self, healthy: bool):
        db = MagicMock()
        db.connect = AsyncMock()
        db.close = AsyncMock()
        db.health_check = AsyncMock(return_value=healthy)
        return db

    def test_all_healthy(self, runner):
        embedding = MagicMock(is_configured=True)

        with patch("memstore.cli.Database", return_value=self._database(True)), patch(
            "memstore.cli.EmbeddingService", return_value=embedding
        ):
            result = runner.invoke(main, ["health"])

        assert result.exit_code == 0, result.output
        assert "All core services healthy!" in result.output

    def test_database_down(self, runner):
        embedding = MagicMock(is_configured=True)

        with patch("memstore.cli.Database", return_value=self._database(False)), patch(
            "memstore.cli.EmbeddingService", return_value=embedding
        ):
            result = runner.invoke(main, ["health"])

        assert result.exit_code == 1
        assert "Some services unhealthy!" in result.output
