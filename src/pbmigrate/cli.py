"""Command-line interface for pbmigrate.

This module provides the CLI commands for creating, applying and reverting
collection schema migrations.
"""

import asyncio
from typing import Any, Awaitable, Callable, NoReturn

import click

from pbmigrate.core.config import Settings, get_settings
from pbmigrate.core.logging import configure_logging, get_logger
from pbmigrate.domain.exceptions import MigrationError, MigrationRunError


def _settings(ctx: click.Context) -> Settings:
    return ctx.find_object(dict)["settings"]


def _run(settings: Settings, coro_factory: Callable[[Any], Awaitable[Any]]) -> Any:
    """Run a coroutine against a fresh database manager and dispose it afterwards."""
    from pbmigrate.infrastructure.persistence.database import DatabaseManager

    async def runner() -> Any:
        db = DatabaseManager(settings)
        try:
            return await coro_factory(db)
        finally:
            await db.disconnect()

    return asyncio.run(runner())


def _fail(error: MigrationError) -> NoReturn:
    logger = get_logger(__name__)
    if isinstance(error, MigrationRunError):
        report = error.report
        logger.error(
            "Migration run failed",
            direction=report.direction.value,
            failed_unit=report.failed_unit,
            processed=report.count,
        )
    else:
        logger.error("Migration command failed", error=error.message, code=error.code)
    click.echo(f"Error: {error.message}", err=True)
    raise SystemExit(1)


@click.group()
@click.version_option(version="0.1.0", prog_name="pbmigrate")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default=None,
    help="Set log level (overrides config)",
)
@click.option(
    "--database-url",
    type=str,
    default=None,
    help="Database URL (overrides config)",
)
@click.option(
    "--dir",
    "migrations_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Migrations directory (overrides config)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    log_level: str | None,
    database_url: str | None,
    migrations_dir: str | None,
) -> None:
    """pbmigrate - reversible collection schema migrations."""
    overrides = {
        key: value
        for key, value in {
            "log_level": log_level,
            "database_url": database_url,
            "migrations_dir": migrations_dir,
        }.items()
        if value is not None
    }
    settings = get_settings().model_copy(update=overrides)
    configure_logging(settings)
    ctx.ensure_object(dict)["settings"] = settings


@cli.group()
def migrate() -> None:
    """Create, apply and revert migrations."""


@migrate.command()
@click.pass_context
def up(ctx: click.Context) -> None:
    """Apply all pending migrations."""
    from pbmigrate.application.services.migration_service import MigrationService

    settings = _settings(ctx)
    try:
        report = _run(settings, lambda db: MigrationService(db).up())
    except MigrationError as e:
        _fail(e)

    if not report.applied:
        click.echo("No new migrations to apply.")
        return
    for name in report.applied:
        click.echo(f"Applied {name}")
    click.echo(report.summary())


@migrate.command()
@click.argument("n", type=click.IntRange(min=1), default=1)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def down(ctx: click.Context, n: int, yes: bool) -> None:
    """Revert the last N applied migrations (default 1)."""
    from pbmigrate.application.services.migration_service import MigrationService

    settings = _settings(ctx)
    if not yes:
        click.confirm(f"Do you really want to revert the last {n} applied migration(s)?", abort=True)

    try:
        report = _run(settings, lambda db: MigrationService(db).down(n))
    except MigrationError as e:
        _fail(e)

    if not report.applied:
        click.echo("No migrations to revert.")
        return
    for name in report.applied:
        click.echo(f"Reverted {name}")
    click.echo(report.summary())


@migrate.command()
@click.argument("name")
@click.pass_context
def create(ctx: click.Context, name: str) -> None:
    """Create a new blank migration file."""
    from pbmigrate.infrastructure.migrations import MigrationGenerator

    settings = _settings(ctx)
    try:
        path = MigrationGenerator(settings.migrations_dir).create(name)
    except (ValueError, FileExistsError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"Successfully created file {path}")


@migrate.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show applied and pending migrations."""
    from pbmigrate.application.services.migration_service import MigrationService

    settings = _settings(ctx)
    try:
        entries, orphans = _run(settings, lambda db: MigrationService(db).status())
    except MigrationError as e:
        _fail(e)

    if not entries and not orphans:
        click.echo("No migrations found.")
        return
    for entry in entries:
        applied_at = entry.applied_at.isoformat() if entry.applied_at else "-"
        click.echo(f"{entry.state.value:<8} {entry.name}  {applied_at}")
    for file in orphans:
        click.echo(f"{'missing':<8} {file}")


@migrate.command("history-sync")
@click.pass_context
def history_sync(ctx: click.Context) -> None:
    """Remove applied-migration records whose files no longer exist."""
    from pbmigrate.application.services.migration_service import MigrationService

    settings = _settings(ctx)
    try:
        removed = _run(settings, lambda db: MigrationService(db).history_sync())
    except MigrationError as e:
        _fail(e)

    click.echo(f"Removed {len(removed)} orphaned migration record(s).")


@migrate.command()
@click.pass_context
def collections(ctx: click.Context) -> None:
    """Create a migration that snapshots all current collections."""
    from pbmigrate.application.services.migration_service import MigrationService

    settings = _settings(ctx)
    try:
        path = _run(settings, lambda db: MigrationService(db).snapshot())
    except MigrationError as e:
        _fail(e)
    except FileExistsError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"Successfully created file {path}")


@migrate.command()
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def unlock(ctx: click.Context, yes: bool) -> None:
    """Release a migration lock left behind by a runner that died."""
    from pbmigrate.application.services.migration_service import MigrationService

    settings = _settings(ctx)
    if not yes:
        click.confirm(
            "Only do this if no other migration run is in progress. Release the lock?",
            abort=True,
        )

    try:
        owner = _run(settings, lambda db: MigrationService(db).unlock())
    except MigrationError as e:
        _fail(e)

    if owner is None:
        click.echo("Migrations are not locked.")
        return
    click.echo(f"Released migration lock held by {owner}.")


@cli.command("init-db")
@click.option(
    "--force",
    is_flag=True,
    help="Skip confirmation prompt",
)
@click.pass_context
def init_db(ctx: click.Context, force: bool) -> None:
    """Create the system tables.

    Use this only in development. In production, run `alembic upgrade head`.
    """
    from pbmigrate.infrastructure.persistence.database import init_database

    settings = _settings(ctx)
    if settings.is_production and not force:
        click.echo(
            "ERROR: Running in production mode. Use `alembic upgrade head` instead of init-db.",
            err=True,
        )
        raise SystemExit(1)

    if not force:
        click.confirm(
            "This will create the system tables. Continue?",
            abort=True,
            default=False,
        )

    _run(settings, init_database)
    click.echo("Database initialized successfully.")


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Display pbmigrate configuration."""
    settings = _settings(ctx)

    click.echo(f"""
pbmigrate v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}

Database:
  URL:          {settings.database_url}
  Echo:         {settings.db_echo}

Migrations:
  Directory:    {settings.migrations_dir}
  Lock owner:   {settings.lock_owner}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `pbmigrate` command is run
    or when using `python -m pbmigrate`.
    """
    cli()


if __name__ == "__main__":
    main()
