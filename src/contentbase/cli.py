"""Command-line interface for ContentBase.

This module provides the CLI commands for running and managing
the ContentBase application.
"""

import asyncio
from pathlib import Path
from typing import NoReturn

import click

from contentbase.core.config import get_settings
from contentbase.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(package_name="contentbase", prog_name="ContentBase")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default=None,
    help="Set log level (overrides CONTENTBASE_LOG_LEVEL)",
)
def cli(log_level: str | None) -> None:
    """ContentBase - headless CMS content engine.

    Settings are read from CONTENTBASE_* environment variables and .env.
    """
    settings = get_settings()
    if log_level:
        settings.log_level = log_level
    configure_logging(settings)


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
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Start the ContentBase API server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    logger = get_logger(__name__)
    logger.info(
        "Starting ContentBase server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "contentbase.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command("init-db")
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
def init_db(force: bool) -> None:
    """Create all database tables.

    Use this only in development. In production, use migrations instead.
    """
    from contentbase.infrastructure.persistence.database import get_db_manager, init_database

    settings = get_settings()
    if settings.is_production and not force:
        click.echo(
            "ERROR: Running in production mode. Use migrations instead of init-db.",
            err=True,
        )
        raise SystemExit(1)

    if not force:
        click.confirm("This will create all database tables. Continue?", abort=True, default=False)

    async def initialize() -> None:
        try:
            await init_database(create_tables=True)
            click.echo("Database initialized successfully.")
        finally:
            await get_db_manager().disconnect()

    asyncio.run(initialize())


@cli.command()
@click.option("--revision", default="head", show_default=True, help="Target revision")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default="alembic.ini",
    show_default=True,
    help="Alembic configuration file",
)
def migrate(revision: str, config_path: str) -> None:
    """Upgrade the database schema with Alembic migrations."""
    from alembic import command
    from alembic.config import Config

    command.upgrade(Config(config_path), revision)
    click.echo(f"Database upgraded to {revision}.")


@cli.command("export")
@click.argument("project_id", type=int)
@click.argument("collection_id", type=int)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["json", "csv", "excel"]),
    default="json",
    show_default=True,
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Output file (defaults to the collection slug)",
)
def export_content(project_id: int, collection_id: int, fmt: str, output: str | None) -> None:
    """Export every entry of a collection to a file."""
    from contentbase.application.services import ContentService, ContentServiceError
    from contentbase.infrastructure.persistence.database import get_db_manager

    async def run() -> None:
        db = get_db_manager()
        try:
            async with db.session() as session:
                content, _, filename = await ContentService(session).export(
                    project_id, collection_id, fmt
                )
        except ContentServiceError as e:
            click.echo(f"ERROR: {e.message}", err=True)
            raise SystemExit(1) from e
        finally:
            await db.disconnect()
        Path(output or filename).write_bytes(content)
        click.echo(f"Exported to {output or filename}.")

    asyncio.run(run())


@cli.command("import")
@click.argument("project_id", type=int)
@click.argument("collection_id", type=int)
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def import_content(project_id: int, collection_id: int, file: str) -> None:
    """Import entries from a JSON or CSV file."""
    from contentbase.application.services import ContentService, ContentServiceError
    from contentbase.infrastructure.persistence.database import get_db_manager

    path = Path(file)

    async def run() -> dict:
        db = get_db_manager()
        try:
            async with db.session() as session:
                result = await ContentService(session).import_entries(
                    project_id, collection_id, path.name, path.read_bytes()
                )
                await session.commit()
                return result
        except ContentServiceError as e:
            click.echo(f"ERROR: {e.message}", err=True)
            raise SystemExit(1) from e
        finally:
            await db.disconnect()

    result = asyncio.run(run())
    click.echo(f"Imported {result['imported']} entries.")
    for error in result["errors"]:
        click.echo(f"  {error}", err=True)


@cli.command("hash-password")
@click.option(
    "--password",
    type=str,
    default=None,
    help="Password to hash (prompts if not provided)",
)
def hash_password_command(password: str | None) -> None:
    """Print the Argon2 hash to set as CONTENTBASE_CONFIRM_PASSWORD_HASH.

    The password is the one users re-enter to confirm permanent bulk deletes.
    """
    from contentbase.infrastructure.security import hash_password

    if password is None:
        password = click.prompt("Confirmation password", hide_input=True, confirmation_prompt=True)
    if not password:
        click.echo("Error: Password cannot be empty", err=True)
        raise SystemExit(1)
    click.echo(hash_password(password))


@cli.command()
def info() -> None:
    """Display ContentBase configuration."""
    settings = get_settings()

    click.echo(f"""
ContentBase v{settings.app_version}
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

Content list:
  Settings dir: {settings.table_settings_path}
  Debounce:     {settings.table_debounce_ms} ms
  Page size:    {settings.table_default_per_page}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    Called by the `contentbase` command and by `python -m contentbase`.
    """
    cli()


if __name__ == "__main__":
    main()
