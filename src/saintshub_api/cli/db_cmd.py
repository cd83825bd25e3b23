"""Schema migration commands (``saintshub-api db ...``) driving Alembic."""

from pathlib import Path

import typer
from alembic import command
from alembic.config import Config
from loguru import logger

db_app = typer.Typer()

ConfigOption = typer.Option(Path("alembic.ini"), "--config", "-c", help="Path to alembic.ini")


def _alembic_config(path: Path) -> Config:
    if not path.is_file():
        typer.echo(f"Error: Alembic config not found at {path}", err=True)
        raise typer.Exit(code=1)
    return Config(str(path))


@db_app.command()
def upgrade(
    revision: str = typer.Argument("head", help="Target revision"),
    config: Path = ConfigOption,
) -> None:
    """Apply migrations up to REVISION."""
    alembic_config = _alembic_config(config)
    logger.info("Migrating schema up to {}", revision)
    command.upgrade(alembic_config, revision)
    logger.info("Schema is at {}", revision)


@db_app.command()
def downgrade(
    revision: str = typer.Argument("-1", help="Target revision"),
    config: Path = ConfigOption,
) -> None:
    """Revert migrations down to REVISION (one step by default)."""
    alembic_config = _alembic_config(config)
    logger.info("Migrating schema down to {}", revision)
    command.downgrade(alembic_config, revision)


@db_app.command()
def current(config: Path = ConfigOption) -> None:
    """Show the revision the database is at."""
    command.current(_alembic_config(config), verbose=True)


@db_app.command()
def history(config: Path = ConfigOption) -> None:
    """List known revisions."""
    command.history(_alembic_config(config))
