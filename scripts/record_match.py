#!/usr/bin/env python3
"""Record, edit or delete matches. Every write replays all ratings."""

from __future__ import annotations

import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from domain.common import (
    COMBAT_STAT_FIELDS,
    GameLength,
    MatchSubmission,
    ParticipantSubmission,
    Side,
    utc_now,
)
from domain.config import DEFAULT_CONFIG_PATH
from domain.editing.patches import ParticipationPatch
from domain.editing.validation import ValidationIssue
from domain.errors import MatchNotFoundError, MatchValidationError
from domain.heroes import HeroCatalog
from domain.runtime import configure_logging, open_engine

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Match log write commands.",
)

ConfigOption = Annotated[Path, typer.Option("--config", help="Engine TOML config file.")]
DbUrlOption = Annotated[
    str | None,
    typer.Option("--db-url", help="Database URL. Overrides [database].url from the config."),
]
LogLevelOption = Annotated[str, typer.Option("--log-level", help="Python logging level.")]


def _parse_pick(value: str, side: Side, catalog: HeroCatalog) -> ParticipantSubmission:
    player_id, separator, hero_name = value.partition(":")
    if not separator or not player_id.strip() or not hero_name.strip():
        raise typer.BadParameter(f"expected PLAYER:HERO, got '{value}'")
    hero = catalog.by_name(hero_name.strip())
    if hero is None:
        raise typer.BadParameter(f"unknown hero '{hero_name.strip()}'")
    return ParticipantSubmission(
        player_id=player_id.strip(),
        side=side,
        hero_id=hero.id,
        hero_name=hero.name,
        hero_roles=hero.roles,
    )


def _parse_stat_value(raw: str) -> int | None:
    if raw.strip().lower() in ("", "none", "-"):
        return None
    return int(raw)


def _parse_stats(value: str) -> tuple[str, dict[str, int | None]]:
    """``PLAYER=kills,deaths,assists,gold_earned,minion_kills,level``; blanks stay untracked."""
    player_id, separator, raw_values = value.partition("=")
    values = raw_values.split(",")
    if not separator or len(values) != len(COMBAT_STAT_FIELDS):
        raise typer.BadParameter(
            f"expected PLAYER={','.join(COMBAT_STAT_FIELDS)}, got '{value}'",
            param_hint="--stats",
        )
    try:
        parsed = {stat: _parse_stat_value(raw) for stat, raw in zip(COMBAT_STAT_FIELDS, values)}
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--stats") from exc
    return player_id.strip(), parsed


def _parse_change(value: str) -> tuple[int, str, Any]:
    """``PARTICIPATION_ID.FIELD=VALUE``."""
    target, separator, raw = value.partition("=")
    participation_id, dot, field_name = target.partition(".")
    if not separator or not dot:
        raise typer.BadParameter(f"expected PARTICIPATION_ID.FIELD=VALUE, got '{value}'", param_hint="--set")
    try:
        if field_name in COMBAT_STAT_FIELDS:
            parsed: Any = _parse_stat_value(raw)
        elif field_name == "hero_id":
            parsed = int(raw)
        elif field_name == "hero_roles":
            parsed = tuple(role.strip() for role in raw.split(",") if role.strip())
        else:
            parsed = raw
        return int(participation_id), field_name, parsed
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--set") from exc


def _echo_issues(label: str, issues: tuple[ValidationIssue, ...]) -> None:
    for issue in issues:
        target = f" player={issue.player_id}" if issue.player_id is not None else ""
        typer.echo(f"{label}: {issue.field}{target}: {issue.message}")


@app.command()
def record(
    winner: Annotated[Side, typer.Option("--winner", help="Winning side.")],
    titans: Annotated[
        list[str],
        typer.Option("--titan", help="PLAYER:HERO on the titans side (repeatable)."),
    ],
    atlanteans: Annotated[
        list[str],
        typer.Option("--atlantean", help="PLAYER:HERO on the atlanteans side (repeatable)."),
    ],
    length: Annotated[GameLength, typer.Option("--length", help="Game length.")] = GameLength.LONG,
    double_lanes: Annotated[bool, typer.Option("--double-lanes", help="Played on the double-lane map.")] = False,
    date: Annotated[
        str | None,
        typer.Option("--date", help="ISO-8601 match date. Defaults to now (UTC)."),
    ] = None,
    stats: Annotated[
        list[str] | None,
        typer.Option("--stats", help="PLAYER=kills,deaths,assists,gold_earned,minion_kills,level (repeatable)."),
    ] = None,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    db_url: DbUrlOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Record one finished match."""
    configure_logging(log_level)
    engine = open_engine(config, db_url=db_url)

    participants = [_parse_pick(value, Side.TITANS, engine.catalog) for value in titans]
    participants.extend(_parse_pick(value, Side.ATLANTEANS, engine.catalog) for value in atlanteans)
    by_player = {entry.player_id: index for index, entry in enumerate(participants)}
    for value in stats or []:
        player_id, values = _parse_stats(value)
        if player_id not in by_player:
            raise typer.BadParameter(f"player '{player_id}' is not in the match", param_hint="--stats")
        index = by_player[player_id]
        participants[index] = replace(participants[index], **values)

    match_date = datetime.fromisoformat(date) if date is not None else utc_now()
    submission = MatchSubmission(
        date=match_date,
        winning_side=winner,
        game_length=length,
        double_lanes=double_lanes,
        participants=tuple(participants),
    )
    try:
        result = engine.record_match(submission)
    except MatchValidationError as exc:
        _echo_issues("error", exc.result.errors)
        raise typer.Exit(code=1) from exc

    _echo_issues("warning", result.warnings)
    typer.echo(
        f"recorded match_id={result.match_id} "
        f"created_players={','.join(result.created_players) or '-'} "
        f"processed_matches={result.rebuild.processed_matches}"
    )


@app.command()
def show(
    match_id: Annotated[int, typer.Argument(help="Match id.")],
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    db_url: DbUrlOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Print one match with participation ids (used by ``edit --set``)."""
    configure_logging(log_level)
    engine = open_engine(config, db_url=db_url)
    try:
        draft = engine.open_edit(match_id)
    except MatchNotFoundError as exc:
        raise typer.BadParameter(str(exc), param_hint="MATCH_ID") from exc

    match = draft.match
    typer.echo(
        f"match_id={match.id} date={match.date.isoformat()} winner={match.winning_side.value} "
        f"length={match.game_length.value} double_lanes={match.double_lanes}"
    )
    for entry in draft.participations:
        rendered = " ".join(
            f"{stat}={'-' if getattr(entry, stat) is None else getattr(entry, stat)}"
            for stat in COMBAT_STAT_FIELDS
        )
        typer.echo(
            f"  [{entry.id}] {entry.side.value:<10} {entry.player_id:<16} {entry.hero_name:<14} {rendered}"
        )
    draft.discard()


@app.command()
def edit(
    match_id: Annotated[int, typer.Argument(help="Match id.")],
    winner: Annotated[Side | None, typer.Option("--winner", help="New winning side.")] = None,
    length: Annotated[GameLength | None, typer.Option("--length", help="New game length.")] = None,
    double_lanes: Annotated[
        bool | None,
        typer.Option("--double-lanes/--single-lanes", help="New map modifier."),
    ] = None,
    date: Annotated[str | None, typer.Option("--date", help="New ISO-8601 match date.")] = None,
    changes: Annotated[
        list[str] | None,
        typer.Option("--set", help="PARTICIPATION_ID.FIELD=VALUE (repeatable; VALUE 'none' untracks a stat)."),
    ] = None,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    db_url: DbUrlOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Edit a stored match and replay every rating."""
    configure_logging(log_level)
    engine = open_engine(config, db_url=db_url)

    match_patch: dict[str, Any] = {}
    if winner is not None:
        match_patch["winning_side"] = winner
    if length is not None:
        match_patch["game_length"] = length
    if double_lanes is not None:
        match_patch["double_lanes"] = double_lanes
    if date is not None:
        match_patch["date"] = datetime.fromisoformat(date)

    grouped: dict[int, dict[str, Any]] = {}
    for value in changes or []:
        participation_id, field_name, parsed = _parse_change(value)
        grouped.setdefault(participation_id, {})[field_name] = parsed
    try:
        patches = [
            ParticipationPatch(participation_id=participation_id, changes=fields)
            for participation_id, fields in grouped.items()
        ]
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--set") from exc

    try:
        result = engine.commit(match_id, match_patch, patches)
    except MatchNotFoundError as exc:
        raise typer.BadParameter(str(exc), param_hint="MATCH_ID") from exc
    except MatchValidationError as exc:
        _echo_issues("error", exc.result.errors)
        raise typer.Exit(code=1) from exc

    _echo_issues("warning", result.warnings)
    typer.echo(
        f"updated match_id={result.match_id} "
        f"match_fields={','.join(result.changed_match_fields) or '-'} "
        f"participations={','.join(str(pid) for pid in result.changed_participation_ids) or '-'} "
        f"processed_matches={result.rebuild.processed_matches}"
    )


@app.command()
def delete(
    match_id: Annotated[int, typer.Argument(help="Match id.")],
    yes: Annotated[bool, typer.Option("--yes", help="Skip the confirmation prompt.")] = False,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    db_url: DbUrlOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Delete a match and its participations, then replay."""
    if not yes:
        typer.confirm(f"Delete match_id={match_id}?", abort=True)
    configure_logging(log_level)
    engine = open_engine(config, db_url=db_url)
    try:
        result = engine.delete_match(match_id)
    except MatchNotFoundError as exc:
        raise typer.BadParameter(str(exc), param_hint="MATCH_ID") from exc
    typer.echo(f"deleted match_id={result.match_id} processed_matches={result.rebuild.processed_matches}")


if __name__ == "__main__":
    app()
