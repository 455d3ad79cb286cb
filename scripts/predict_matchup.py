#!/usr/bin/env python3
"""Predict a matchup between two rosters, or split a group into balanced teams."""

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
from domain.matchmaking import BalanceMode
from domain.runtime import configure_logging, open_engine

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Win probability and team balancing.",
)

ConfigOption = Annotated[Path, typer.Option("--config", help="Engine TOML config file.")]
DbUrlOption = Annotated[
    str | None,
    typer.Option("--db-url", help="Database URL. Overrides [database].url from the config."),
]
LogLevelOption = Annotated[str, typer.Option("--log-level", help="Python logging level.")]


def _split_roster(value: str) -> list[str]:
    return [player_id.strip() for player_id in value.split(",") if player_id.strip()]


@app.command()
def predict(
    team_a: Annotated[str, typer.Option("--team-a", help="Comma-separated player ids.")],
    team_b: Annotated[str, typer.Option("--team-b", help="Comma-separated player ids.")],
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    db_url: DbUrlOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Print each roster's win chance with a 95% interval."""
    roster_a = _split_roster(team_a)
    roster_b = _split_roster(team_b)
    configure_logging(log_level)
    engine = open_engine(config, db_url=db_url)
    try:
        probability = engine.win_probability(roster_a, roster_b)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    typer.echo(
        f"team_a={','.join(roster_a)} win={probability.team_a}% "
        f"range={probability.team_a_low}-{probability.team_a_high}%"
    )
    typer.echo(
        f"team_b={','.join(roster_b)} win={probability.team_b}% "
        f"range={probability.team_b_low}-{probability.team_b_high}%"
    )


@app.command()
def balance(
    player_ids: Annotated[list[str], typer.Argument(help="Players to split (at least 4).")],
    mode: Annotated[
        BalanceMode,
        typer.Option("--mode", help="Balance by display rating or by games played."),
    ] = BalanceMode.RATING,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    db_url: DbUrlOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Split players into two teams with similar totals and predict the result."""
    configure_logging(log_level)
    engine = open_engine(config, db_url=db_url)
    try:
        teams = engine.balanced_teams(player_ids, mode)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="PLAYER_IDS") from exc

    probability = engine.win_probability(teams.team_a, teams.team_b)
    typer.echo(f"mode={mode.value} difference={teams.difference:.0f}")
    typer.echo(f"team_a={','.join(teams.team_a)} total={teams.total_a:.0f} win={probability.team_a}%")
    typer.echo(f"team_b={','.join(teams.team_b)} total={teams.total_b:.0f} win={probability.team_b}%")


if __name__ == "__main__":
    app()
