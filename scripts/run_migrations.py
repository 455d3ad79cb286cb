#!/usr/bin/env python3
"""Create the schema, apply pending data migrations and repair rating caches."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from domain.config import DEFAULT_CONFIG_PATH
from domain.runtime import configure_logging, open_engine

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    help="Apply pending match log migrations.",
)


@app.command()
def migrate(
    config: Annotated[
        Path,
        typer.Option("--config", help="Engine TOML config file."),
    ] = DEFAULT_CONFIG_PATH,
    db_url: Annotated[
        str | None,
        typer.Option("--db-url", help="Database URL. Overrides [database].url from the config."),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Python logging level."),
    ] = "INFO",
) -> None:
    """Run every startup step and report what changed."""
    configure_logging(log_level)
    engine = open_engine(config, db_url=db_url, initialize=False)
    result = engine.initialize()
    migration = result.migration

    typer.echo(
        f"migration success={migration.success} version={migration.version} "
        f"matches_analyzed={migration.matches_analyzed} "
        f"stats_converted={migration.stats_converted} "
        f"players_affected={migration.players_affected} "
        f"duration={migration.duration_seconds:.2f}s"
    )
    if result.rebuild is not None:
        typer.echo(
            f"rebuilt ratings processed_matches={result.rebuild.processed_matches} "
            f"updated_players={result.rebuild.updated_players}"
        )
    if not migration.success:
        typer.echo(f"migration error: {migration.error}", err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
