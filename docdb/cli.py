"""Command line interface for browsing an account."""

import asyncio
import json
from typing import Any, Awaitable, Callable, Optional

import typer
from pydantic import Field
from pydantic_settings import BaseSettings

from .client import DocumentDBClient
from .config import ClientConfig, LoggingConfig
from .exceptions import DocDBError
from .metadata import ResponseMetadata
from .options import CommonRequestOptions
from .query import Query


class CLISettings(BaseSettings):
    """CLI settings with environment variable support."""

    connection_string: str = Field(
        default="", description="AccountEndpoint=...;AccountKey=...; connection string"
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        pattern="^(DEBUG|INFO|WARNING|ERROR)$",
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")

    model_config = {
        "env_prefix": "DOCDB_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


def get_settings() -> CLISettings:
    return CLISettings()


def build_client(settings: CLISettings) -> DocumentDBClient:
    """Create the client the commands run against."""
    if not settings.connection_string:
        raise DocDBError("DOCDB_CONNECTION_STRING is not set")
    config = ClientConfig.from_connection_string(
        settings.connection_string,
        verify_ssl=settings.verify_ssl,
        logging=LoggingConfig(level=settings.log_level),
    )
    return DocumentDBClient(config)


def parse_value(text: str) -> Any:
    """Parse a CLI value as JSON, falling back to the plain string."""
    try:
        return json.loads(text)
    except ValueError:
        return text


def parse_param(text: str) -> tuple[str, Any]:
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise typer.BadParameter(f"expected NAME=VALUE, got '{text}'")
    if not name.startswith("@"):
        name = f"@{name}"
    return name, parse_value(value)


def _run(operation: Callable[[DocumentDBClient], Awaitable[Any]]) -> None:
    async def main() -> Any:
        async with build_client(get_settings()) as client:
            return await operation(client)

    try:
        result = asyncio.run(main())
    except DocDBError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    typer.echo(json.dumps(result, indent=2))


def _collector(items: list[Any]) -> Callable[[list[Any], ResponseMetadata], bool]:
    def collect(page: list[Any], metadata: ResponseMetadata) -> bool:
        items.extend(page)
        return True

    return collect


cli = typer.Typer(name="docdb", help="Browse databases, collections and documents")


@cli.command()
def databases() -> None:
    """List the databases in the account."""

    async def operation(client: DocumentDBClient) -> list[Any]:
        items: list[Any] = []
        await client.list_databases_raw(_collector(items))
        return items

    _run(operation)


@cli.command()
def collections(database: str = typer.Argument(..., help="Database id")) -> None:
    """List the collections in a database."""

    async def operation(client: DocumentDBClient) -> list[Any]:
        items: list[Any] = []
        await client.with_database(database).list_collections_raw(_collector(items))
        return items

    _run(operation)


@cli.command()
def documents(
    database: str = typer.Argument(..., help="Database id"),
    collection: str = typer.Argument(..., help="Collection id"),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="SQL-like query text"),
    param: Optional[list[str]] = typer.Option(
        None, "--param", "-p", help="Query parameter as NAME=VALUE (repeatable)"
    ),
    max_item_count: int = typer.Option(0, help="Maximum items per page (0 = server default)"),
) -> None:
    """List or query the documents in a collection."""
    params = [parse_param(p) for p in param or []]
    if params and query is None:
        raise typer.BadParameter("--param requires --query")

    async def operation(client: DocumentDBClient) -> list[Any]:
        coll = client.with_database(database).with_collection(collection)
        items: list[Any] = []
        if query is None:
            await coll.list_documents_raw(
                _collector(items), CommonRequestOptions(max_item_count=max_item_count)
            )
        else:
            q = Query(query, max_item_count=max_item_count)
            for name, value in params:
                q.add_parameter(name, value)
            await coll.query_documents_raw(q, _collector(items))
        return items

    _run(operation)


@cli.command()
def get_document(
    database: str = typer.Argument(..., help="Database id"),
    collection: str = typer.Argument(..., help="Collection id"),
    document: str = typer.Argument(..., help="Document id"),
    partition_key: Optional[str] = typer.Option(
        None, help="Partition key value (parsed as JSON when possible)"
    ),
) -> None:
    """Read a single document."""

    async def operation(client: DocumentDBClient) -> Any:
        pk = [parse_value(partition_key)] if partition_key is not None else None
        doc = client.with_database(database).with_collection(collection).with_document(
            document, pk
        )
        body, _ = await doc.get_raw()
        return json.loads(body)

    _run(operation)


@cli.command()
def offers() -> None:
    """List the offers in the account."""

    async def operation(client: DocumentDBClient) -> list[Any]:
        items: list[Any] = []
        await client.list_offers_raw(_collector(items))
        return items

    _run(operation)


if __name__ == "__main__":
    cli()
