"""FastAPI application factory and CLI for the emulator."""

import os
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

import structlog
import typer
import uvicorn
from fastapi import FastAPI

from .config import EmulatorConfig, get_config
from .endpoints import collections, control, databases, documents, health, offers, scripts
from .exceptions import EmulatorError, emulator_error_handler
from .logging_config import setup_logging
from .middleware import (
    AuthorizationMiddleware,
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    ThrottleMiddleware,
)
from .state import EmulatorState


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and shutdown; state is created eagerly by create_app."""
    logger = structlog.get_logger("emulator.startup")
    config: EmulatorConfig = app.state.config
    logger.info(
        "Emulator starting up",
        config={
            "require_auth": config.require_auth,
            "max_clock_skew_seconds": config.max_clock_skew_seconds,
            "default_max_item_count": config.default_max_item_count,
            "default_offer_throughput": config.default_offer_throughput,
            "log_level": config.log_level,
            "log_format": config.log_format,
        },
    )
    yield
    logger.info("Emulator shutting down")


def create_app(config: Optional[EmulatorConfig] = None) -> FastAPI:
    """
    Create and configure the emulator application.

    State is attached before the first request, so the app also works under
    transports that never run the lifespan (e.g. ``httpx.ASGITransport``).
    """
    config = config or get_config()
    setup_logging(config.log_level, config.log_format)

    app = FastAPI(
        title="Document DB Emulator",
        description="In-memory emulator of the document database REST API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if config.enable_docs else None,
        redoc_url="/redoc" if config.enable_docs else None,
        openapi_url="/openapi.json" if config.enable_docs else None,
    )
    app.state.config = config
    app.state.emulator = EmulatorState(config)
    app.add_exception_handler(EmulatorError, emulator_error_handler)

    for router in (
        health.router,
        control.router,
        databases.router,
        collections.router,
        documents.router,
        scripts.sprocs_router,
        scripts.udfs_router,
        offers.router,
    ):
        app.include_router(router)

    # The last middleware added runs first: error handling wraps logging,
    # which wraps authorization, which wraps throttling.
    app.add_middleware(ThrottleMiddleware, manager=app.state.emulator.throttle)
    if config.require_auth:
        app.add_middleware(
            AuthorizationMiddleware,
            key=config.key_bytes(),
            max_clock_skew=timedelta(seconds=config.max_clock_skew_seconds),
        )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ErrorHandlingMiddleware)

    return app


cli = typer.Typer(name="docdb-emulator", help="In-memory document database emulator")


@cli.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind to"),
    port: Optional[int] = typer.Option(None, help="Port to bind to"),
    account_key: Optional[str] = typer.Option(None, help="Base64 master key"),
    no_auth: bool = typer.Option(False, "--no-auth", help="Accept unsigned requests"),
    log_level: Optional[str] = typer.Option(None, help="Log level (DEBUG, INFO, WARNING, ERROR)"),
    log_format: Optional[str] = typer.Option(None, help="Log format (json, console)"),
    reload: bool = typer.Option(False, help="Enable auto-reload for development"),
):
    """Start the emulator."""
    # The app is built by uvicorn through the factory, so overrides travel
    # through the environment like any other setting.
    overrides = {
        "EMULATOR_HOST": host,
        "EMULATOR_PORT": str(port) if port is not None else None,
        "EMULATOR_ACCOUNT_KEY": account_key,
        "EMULATOR_REQUIRE_AUTH": "false" if no_auth else None,
        "EMULATOR_LOG_LEVEL": log_level,
        "EMULATOR_LOG_FORMAT": log_format,
    }
    for name, value in overrides.items():
        if value is not None:
            os.environ[name] = value

    config = get_config()
    uvicorn.run(
        "emulator.main:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=reload,
        log_level="info",
        access_log=False,
    )


@cli.command()
def config_info():
    """Display current configuration."""
    config = get_config()

    typer.echo("Current Emulator Configuration:")
    typer.echo(f"  Host: {config.host}")
    typer.echo(f"  Port: {config.port}")
    typer.echo(f"  Require Auth: {config.require_auth}")
    typer.echo(f"  Max Clock Skew: {config.max_clock_skew_seconds}s")
    typer.echo(f"  Default Max Item Count: {config.default_max_item_count}")
    typer.echo(f"  Default Offer Throughput: {config.default_offer_throughput}")
    typer.echo(f"  Log Level: {config.log_level}")
    typer.echo(f"  Log Format: {config.log_format}")
    typer.echo(
        f"  Connection String: AccountEndpoint=http://{config.host}:{config.port}/;"
        f"AccountKey={config.account_key};"
    )


if __name__ == "__main__":
    cli()
