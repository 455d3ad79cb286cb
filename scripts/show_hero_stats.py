#!/usr/bin/env python3
"""Show hero win rates, synergies and counters, or cumulative win rate over time."""

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
from domain.runtime import configure_logging, open_engine, parse_date_range

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Query hero analytics from the match log.",
)

ConfigOption = Annotated[Path, typer.Option("--config", help="Engine TOML config file.")]
DbUrlOption = Annotated[
    str | None,
    typer.Option("--db-url", help="Database URL. Overrides [database].url from the config."),
]
LogLevelOption = Annotated[str, typer.Option("--log-level", help="Python logging level.")]
SinceOption = Annotated[str | None, typer.Option("--since", help="ISO start date.")]
UntilOption = Annotated[str | None, typer.Option("--until", help="ISO end date (inclusive).")]


@app.command()
def heroes(
    min_relationship_games: Annotated[
        int | None,
        typer.Option(
            "--min-relationship-games",
            help="Minimum shared games for synergy/counter lists. Defaults to [analytics] in the config.",
        ),
    ] = None,
    details: Annotated[
        bool,
        typer.Option("--details", help="Also print best teammates and best/worst matchups."),
    ] = False,
    since: SinceOption = None,
    until: UntilOption = None,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    db_url: DbUrlOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Print per-hero records sorted by games played."""
    if min_relationship_games is not None and min_relationship_games < 1:
        raise typer.BadParameter("--min-relationship-games must be >= 1")
    configure_logging(log_level)
    engine = open_engine(config, db_url=db_url)
    rows = engine.hero_stats(min_relationship_games, date_range=parse_date_range(since, until))

    if not rows:
        typer.echo("No hero games recorded.")
        return

    for index, hero in enumerate(rows, start=1):
        typer.echo(
            f"{index:2d}. {hero.hero_name:<16} games={hero.total_games:3d} "
            f"wins={hero.wins:3d} losses={hero.losses:3d} win_rate={hero.win_rate:5.1f}% "
            f"complexity={hero.complexity} expansion={hero.expansion} roles={','.join(hero.roles)}"
        )
        if not details:
            continue
        for label, relations in (
            ("best with", hero.best_teammates),
            ("best vs", hero.best_against),
            ("worst vs", hero.worst_against),
        ):
            rendered = ", ".join(
                f"{relation.name} {relation.win_rate:.0f}% ({relation.games_played})"
                for relation in relations
            )
            typer.echo(f"      {label:<10} {rendered or '-'}")


@app.command()
def timeline(
    hero_ids: Annotated[
        list[int] | None,
        typer.Option("--hero-id", help="Hero id to include (repeatable). Defaults to all heroes."),
    ] = None,
    min_games: Annotated[
        int,
        typer.Option("--min-games", help="Hide points before a hero's n-th game."),
    ] = 1,
    since: SinceOption = None,
    until: UntilOption = None,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    db_url: DbUrlOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Print each hero's cumulative win rate by day."""
    if min_games < 1:
        raise typer.BadParameter("--min-games must be >= 1")
    configure_logging(log_level)
    engine = open_engine(config, db_url=db_url)
    series = engine.hero_win_rate_over_time(
        hero_ids=hero_ids or None,
        min_games=min_games,
        date_range=parse_date_range(since, until),
    )

    if not series:
        typer.echo(f"No heroes with at least {min_games} games.")
        return

    for hero in series:
        typer.echo(f"{hero.hero_name} (id={hero.hero_id}) games={hero.total_games} win_rate={hero.win_rate:.1f}%")
        for point in hero.points:
            typer.echo(
                f"  {point.day.isoformat()} day_games={point.games_played_on_day:2d} games={point.games_played_total:3d} "
                f"wins={point.wins_total:3d} win_rate={point.win_rate:5.1f}%"
            )


if __name__ == "__main__":
    app()
