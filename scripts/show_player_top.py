#!/usr/bin/env python3
"""Show the player leaderboard, one player's stats, or player synergies."""

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
from domain.errors import PlayerNotFoundError
from domain.runtime import configure_logging, open_engine, parse_date_range

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Query player ratings and player analytics.",
)

ConfigOption = Annotated[Path, typer.Option("--config", help="Engine TOML config file.")]
DbUrlOption = Annotated[
    str | None,
    typer.Option("--db-url", help="Database URL. Overrides [database].url from the config."),
]
LogLevelOption = Annotated[str, typer.Option("--log-level", help="Python logging level.")]


@app.command()
def top(
    top_n: Annotated[int, typer.Option("--top-n", help="Number of players to return.")] = 20,
    min_games: Annotated[
        int,
        typer.Option("--min-games", help="Hide players with fewer games than this."),
    ] = 1,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    db_url: DbUrlOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Print players by display rating (highest first)."""
    if top_n <= 0:
        raise typer.BadParameter("--top-n must be greater than 0")
    if min_games < 0:
        raise typer.BadParameter("--min-games must be >= 0")

    configure_logging(log_level)
    engine = open_engine(config, db_url=db_url)
    ratings = [rating for rating in engine.player_ratings().values() if rating.total_games >= min_games]
    ratings.sort(key=lambda rating: (-rating.display_rating, -rating.ordinal, rating.player_id))

    if not ratings:
        typer.echo(f"No players found with min_games={min_games}.")
        return

    typer.echo(f"top_n={top_n} min_games={min_games}")
    for index, rating in enumerate(ratings[:top_n], start=1):
        typer.echo(
            f"{index:2d}. {rating.player_id:<20} "
            f"rating={rating.display_rating:5d} ordinal={rating.ordinal:8.3f} "
            f"mu={rating.mu:7.3f} sigma={rating.sigma:6.3f} "
            f"games={rating.total_games:3d} wins={rating.wins:3d} losses={rating.losses:3d}"
        )


@app.command()
def stats(
    player_id: Annotated[str, typer.Argument(help="Player id (name).")],
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    db_url: DbUrlOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Print one player's record, favourite heroes and roles, and combat averages."""
    configure_logging(log_level)
    engine = open_engine(config, db_url=db_url)
    try:
        player = engine.player_stats(player_id)
    except PlayerNotFoundError as exc:
        raise typer.BadParameter(str(exc), param_hint="PLAYER_ID") from exc

    rating = engine.current_ratings().get(player_id)
    typer.echo(
        f"player={player.player_id} rating={rating} games={player.games_played} "
        f"wins={player.wins} losses={player.losses} win_rate={player.win_rate:.1f}%"
    )
    for hero in player.favourite_heroes:
        typer.echo(f"  hero  {hero.hero_name:<16} games={hero.count}")
    for role in player.favourite_roles:
        typer.echo(f"  role  {role.role:<16} games={role.count}")
    for stat_name, average in player.combat_averages.items():
        if average is None:
            typer.echo(f"  {stat_name:<14} not tracked")
        else:
            typer.echo(
                f"  {stat_name:<14} avg={average:7.2f} "
                f"tracked_games={player.tracked_games.get(stat_name, 0)}"
            )


@app.command()
def synergy(
    player_ids: Annotated[list[str], typer.Argument(help="Players to include in the network.")],
    min_games: Annotated[
        int,
        typer.Option("--min-games", help="Minimum shared games for a pair to count."),
    ] = 1,
    since: Annotated[str | None, typer.Option("--since", help="ISO start date.")] = None,
    until: Annotated[str | None, typer.Option("--until", help="ISO end date (inclusive).")] = None,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    db_url: DbUrlOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Print pair records and each player's best teammates and opponents."""
    if min_games < 1:
        raise typer.BadParameter("--min-games must be >= 1")
    configure_logging(log_level)
    engine = open_engine(config, db_url=db_url)
    date_range = parse_date_range(since, until)

    relationships = engine.player_relationships(player_ids, min_games=min_games, date_range=date_range)
    if not relationships:
        typer.echo(f"No player pairs with at least {min_games} shared games.")
        return

    for relationship in relationships:
        typer.echo(
            f"{relationship.player_id:<16} -> {relationship.related_player_id:<16} "
            f"with={relationship.teammate_wins}-{relationship.teammate_losses} "
            f"against={relationship.opponent_wins}-{relationship.opponent_losses}"
        )

    for summary in engine.player_synergies(player_ids, min_games=min_games, date_range=date_range):
        typer.echo(f"{summary.player_id}:")
        for label, relations in (
            ("best with", summary.best_teammates),
            ("best vs", summary.best_against),
            ("worst vs", summary.worst_against),
        ):
            rendered = ", ".join(
                f"{relation.name} {relation.win_rate:.0f}% ({relation.games_played})"
                for relation in relations
            )
            typer.echo(f"  {label:<10} {rendered or '-'}")


if __name__ == "__main__":
    app()
