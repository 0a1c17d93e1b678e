"""Command-line interface for dfood.

Runs the auth API server and manages its database and secrets.
"""

import asyncio
import secrets
from typing import NoReturn

import click

from dfood import __version__
from dfood.core.config import DEFAULT_SECRET_KEY, get_settings
from dfood.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version=__version__, prog_name="dfood")
def cli() -> None:
    """dfood - authentication service of the food-delivery backend.

    Configuration is read from DFOOD_* environment variables and .env.
    """


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload/--no-reload",
    default=None,
    help="Auto-reload on code changes (default: on in development)",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool | None) -> None:
    """Start the dfood API server.

    Each worker process keeps its own revocation list, so a token revoked
    in one worker is still accepted by the others.
    """
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers
    if reload is None:
        reload = settings.is_development

    if bind_workers > 1 and settings.database_url.startswith("sqlite"):
        click.echo(
            "Error: SQLite does not support multiple worker processes. "
            "Use --workers 1 or switch to PostgreSQL.",
            err=True,
        )
        raise SystemExit(1)

    configure_logging(settings)
    logger = get_logger(__name__)
    logger.info(
        "Starting dfood server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )
    if bind_workers > 1:
        logger.warning("Revocations are not shared between workers", workers=bind_workers)

    uvicorn.run(
        "dfood.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
def init_db(force: bool) -> None:
    """Create the database tables.

    Use this only in development. In production, run ``alembic upgrade head``.
    """
    from dfood.infrastructure.persistence.database import get_db_manager

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo(
            "ERROR: Running in production mode. Use migrations instead of init-db.",
            err=True,
        )
        raise SystemExit(1)

    if not force:
        click.confirm(
            "This will create all database tables. Continue?",
            abort=True,
            default=False,
        )

    async def initialize() -> None:
        db = get_db_manager()
        try:
            if not await db.check_connection():
                raise click.ClickException("Failed to connect to database")
            await db.create_tables()
            click.echo("Database initialized successfully.")
        finally:
            await db.disconnect()

    asyncio.run(initialize())


@cli.command()
def info() -> None:
    """Display dfood configuration."""
    settings = get_settings()
    secret_state = "default (insecure)" if settings.secret_key == DEFAULT_SECRET_KEY else "set"

    click.echo(f"""
dfood v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}
  API Prefix:   {settings.api_prefix}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}

Database:
  URL:          {settings.database_url}
  Pool Size:    {settings.db_pool_size}
  Echo:         {settings.db_echo}

Security:
  Secret Key:   {secret_state}
  Access Exp:   {settings.access_token_expire_minutes} minutes
  Refresh Exp:  {settings.refresh_token_expire_days} days
  Sweep Every:  {settings.revocation_sweep_interval_seconds} seconds

Rate Limiting:
  Enabled:      {settings.rate_limit_enabled}
  Per Minute:   {settings.rate_limit_per_minute}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


@cli.command()
@click.option("--bytes", "num_bytes", type=int, default=32, show_default=True)
def generate_secret(num_bytes: int) -> None:
    """Print a random signing secret for DFOOD_SECRET_KEY."""
    if num_bytes < 32:
        raise click.BadParameter("use at least 32 bytes for HS256", param_hint="--bytes")
    click.echo(secrets.token_hex(num_bytes))


def main() -> NoReturn:
    """Main entry point for the CLI.

    Called by the ``dfood`` command and by ``python -m dfood``.
    """
    cli()


if __name__ == "__main__":
    main()
