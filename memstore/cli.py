"""
Command-line interface for memstore.

Provides commands to run the API server, initialize the database, and
work with stored memories directly.

Usage:
    memstore serve              # Run the API server
    memstore init-db            # Create tables and indexes
    memstore health             # Check database and embedding configuration
    memstore search "query"     # Similarity search
    memstore add "content"      # Store a memory
    memstore forget --tag work  # Delete memories
"""

import asyncio
import json
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import click

from memstore.config.settings import get_settings
from memstore.documents.service import DocumentService
from memstore.embedding.service import EmbeddingService
from memstore.exceptions import MemstoreError
from memstore.observability.logging import setup_logging
from memstore.observability.metrics import get_metrics
from memstore.storage.database import Database
from memstore.storage.repository import DocumentRepository
from memstore.vectorstore.config import VectorStoreConfig
from memstore.vectorstore.manager import VectorStoreManager
from memstore.vectorstore.pgvector_store import PgVectorStore


class Services:
    """Components wired for one CLI invocation."""

    def __init__(self, database: Database, embedding_service: EmbeddingService):
        self.database = database
        self.embedding_service = embedding_service
        self.documents = DocumentService(
            repository=DocumentRepository(database, dimensions=embedding_service.dimensions),
            embedding_service=embedding_service,
        )
        config = VectorStoreConfig()
        self.search = VectorStoreManager(
            vector_store=PgVectorStore(
                database,
                config=config,
                dimensions=embedding_service.dimensions,
            ),
            embedding_service=embedding_service,
            config=config,
        )


@asynccontextmanager
async def open_services() -> AsyncIterator[Services]:
    """Connect the database and build services; close both on exit."""
    database = Database()
    await database.connect()
    embedding_service = EmbeddingService()
    try:
        yield Services(database, embedding_service)
    finally:
        await embedding_service.close()
        await database.close()


def run_command(coro) -> None:
    """Run a command coroutine, reporting memstore errors and exiting 1."""
    try:
        asyncio.run(coro)
    except MemstoreError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Memstore - semantic memory store."""
    setup_logging(level="DEBUG" if debug else None)


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics/--no-metrics", default=True, help="Enable metrics server")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(
    host: str | None,
    port: int | None,
    reload: bool,
    metrics: bool,
    metrics_port: int | None,
) -> None:
    """Start the memory API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    if metrics:
        get_metrics().start_server(port=metrics_port)
        click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "memstore.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


@main.command("init-db")
def init_db() -> None:
    """Initialize the database schema."""
    from memstore.embedding.config import EmbeddingConfig
    from memstore.storage.schema import create_tables

    async def run():
        dimensions = EmbeddingConfig().dimensions
        lists = VectorStoreConfig().ivfflat_lists

        async with Database() as db:
            await create_tables(db, dimensions=dimensions, ivfflat_lists=lists)

        click.echo(f"Database initialized successfully (vector({dimensions}), lists={lists})")

    run_command(run())


@main.command()
def health() -> None:
    """Check database connectivity and embedding configuration."""

    async def check():
        results: dict[str, bool] = {}

        db = Database()
        try:
            await db.connect()
            results["postgres"] = await db.health_check()
        except MemstoreError as e:
            results["postgres"] = False
            click.echo(click.style(f"  postgres error: {e}", fg="red"), err=True)
        finally:
            await db.close()

        results["embedding_configured"] = EmbeddingService().is_configured

        click.echo("\nHealth Check Results:")
        click.echo("-" * 40)

        for name, status in results.items():
            icon = "✓" if status else "✗"
            color = "green" if status else "red"
            click.echo(click.style(f"  {icon} {name}: {status}", fg=color))

        click.echo("-" * 40)

        if all(results.values()):
            click.echo(click.style("All core services healthy!", fg="green"))
            sys.exit(0)
        else:
            click.echo(click.style("Some services unhealthy!", fg="red"))
            sys.exit(1)

    asyncio.run(check())


@main.command()
@click.argument("query")
@click.option("--limit", default=None, type=int, help="Maximum results to return")
@click.option("--threshold", default=None, type=float, help="Exclusive minimum score")
@click.option("--tag", "container_tag", default=None, help="Restrict to one container")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def search(
    query: str,
    limit: int | None,
    threshold: float | None,
    container_tag: str | None,
    as_json: bool,
) -> None:
    """Search for semantically similar memories.

    Example:
        memstore search "what database do we use?" --limit 5
    """

    async def run():
        async with open_services() as services:
            results = await services.search.query(
                text=query,
                limit=limit,
                threshold=threshold,
                container_tag=container_tag,
            )

        if as_json:
            payload = [
                {
                    "id": r.document_id,
                    "content": r.content,
                    "metadata": r.metadata,
                    "containerTag": r.container_tag,
                    "score": r.score,
                }
                for r in results
            ]
            click.echo(json.dumps(payload, indent=2))
            return

        if not results:
            click.echo("No results found.")
            return

        for i, result in enumerate(results, 1):
            click.echo(f"\n{i}. [{result.container_tag}] {result.content[:120]}")
            click.echo(f"   Score: {result.score:.4f}")
            click.echo(f"   ID: {result.document_id}")

        click.echo(f"\n{'-' * 60}")
        click.echo(f"Found {len(results)} results")

    run_command(run())


@main.command()
@click.argument("content")
@click.option("--tag", "container_tag", default=None, help="Container tag (default: 'default')")
@click.option("--metadata", default=None, help="Metadata as a JSON object")
def add(content: str, container_tag: str | None, metadata: str | None) -> None:
    """Store a memory."""
    parsed_metadata = None
    if metadata:
        try:
            parsed_metadata = json.loads(metadata)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"not valid JSON: {e}", param_hint="--metadata") from e
        if not isinstance(parsed_metadata, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--metadata")

    async def run():
        async with open_services() as services:
            document = await services.documents.insert(
                content,
                metadata=parsed_metadata,
                container_tag=container_tag,
            )
        click.echo(f"Stored {document.id} ({document.status.value})")

    run_command(run())


@main.command()
@click.option("--tag", "container_tag", default=None, help="Delete every memory in this container")
@click.option("--id", "ids", multiple=True, help="Delete this id (can repeat)")
def forget(container_tag: str | None, ids: tuple[str, ...]) -> None:
    """Delete memories by id or by container tag.

    Example:
        memstore forget --id 3f2c... --id 9a01...
        memstore forget --tag scratch
    """
    if not ids and not container_tag:
        raise click.UsageError("Provide --id or --tag")

    async def run():
        async with open_services() as services:
            if ids:
                deleted = await services.documents.delete_bulk(list(ids))
                count = len(deleted)
            else:
                count = await services.documents.delete_by_tag(container_tag)
        click.echo(f"Deleted {count} memories")

    run_command(run())


if __name__ == "__main__":
    main()
