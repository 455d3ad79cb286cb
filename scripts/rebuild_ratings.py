#!/usr/bin/env python3
"""Replay the full match log and rewrite cached player ratings."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from domain.config import DEFAULT_CONFIG_PATH, load_engine_config
from domain.runtime import configure_logging, open_engine

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Rating rebuild commands.",
)


@app.command()
def rebuild(
    config: Annotated[
        Path,
        typer.Option("--config", help="Engine TOML config file."),
    ] = DEFAULT_CONFIG_PATH,
    db_url: Annotated[
        str | None,
        typer.Option("--db-url", help="Database URL. Overrides [database].url from the config."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Replay without writing cached ratings."),
    ] = False,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Python logging level."),
    ] = "WARNING",
) -> None:
    """Replay every stored match from default beliefs."""
    configure_logging(log_level)
    engine = open_engine(config, db_url=db_url, initialize=False)
    engine.ensure_schema()
    summary = engine.rebuild_ratings(dry_run=dry_run, echo=typer.echo)
    if summary.skipped_matches:
        typer.echo(f"skipped_matches={summary.skipped_matches} (a side had no players)")


@app.command()
def show_config(
    config: Annotated[
        Path,
        typer.Option("--config", help="Engine TOML config file."),
    ] = DEFAULT_CONFIG_PATH,
) -> None:
    """Print the resolved engine config as JSON."""
    engine_config = load_engine_config(config)
    typer.echo(json.dumps(engine_config.as_config_json(), indent=2, sort_keys=True))


if __name__ == "__main__":
    app()
