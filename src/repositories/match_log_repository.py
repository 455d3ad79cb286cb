"""Persistence helpers for the match log (players, matches, participations)."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from domain.common import (
    COMBAT_STAT_FIELDS,
    GameLength,
    Match,
    MatchSubmission,
    Participation,
    Player,
    Side,
)
from domain.editing.patches import ParticipationPatch, normalize_match_changes
from domain.errors import MatchNotFoundError
from domain.ratings.replay import PlayerRating
from models import AppMetadata, Base, MatchPlayerRecord, MatchRecord, PlayerRecord

_MATCH_LOG_TABLES = (
    PlayerRecord.__table__,
    MatchRecord.__table__,
    MatchPlayerRecord.__table__,
    AppMetadata.__table__,
)


def ensure_schema(engine: Engine) -> None:
    """Create the match log tables and their indexes if they do not exist."""
    Base.metadata.create_all(bind=engine, tables=list(_MATCH_LOG_TABLES))


def _to_player(record: PlayerRecord) -> Player:
    return Player(
        id=record.id,
        name=record.name,
        total_games=record.total_games,
        wins=record.wins,
        losses=record.losses,
        mu=record.mu,
        sigma=record.sigma,
        ordinal=record.ordinal,
        display_rating=record.display_rating,
        level=record.level,
        last_played=record.last_played,
        date_created=record.date_created,
    )


def _to_match(record: MatchRecord) -> Match:
    return Match(
        id=int(record.id),
        date=record.date,
        winning_side=Side(record.winning_team),
        game_length=GameLength(record.game_length),
        double_lanes=bool(record.double_lanes),
        titan_players=int(record.titan_players),
        atlantean_players=int(record.atlantean_players),
    )


def _to_participation(record: MatchPlayerRecord) -> Participation:
    return Participation(
        id=int(record.id),
        match_id=int(record.match_id),
        player_id=record.player_id,
        side=Side(record.team),
        hero_id=int(record.hero_id),
        hero_name=record.hero_name,
        hero_roles=tuple(str(role) for role in record.hero_roles or ()),
        kills=record.kills,
        deaths=record.deaths,
        assists=record.assists,
        gold_earned=record.gold_earned,
        minion_kills=record.minion_kills,
        level=record.level,
    )


def fetch_players(session: Session) -> list[Player]:
    records = session.scalars(select(PlayerRecord).order_by(PlayerRecord.id)).all()
    return [_to_player(record) for record in records]


def fetch_player_ids(session: Session) -> list[str]:
    return list(session.scalars(select(PlayerRecord.id).order_by(PlayerRecord.id)).all())


def fetch_matches(session: Session) -> list[Match]:
    """Fetch every match in replay order (date, then insertion order)."""
    records = session.scalars(select(MatchRecord).order_by(MatchRecord.date, MatchRecord.id)).all()
    return [_to_match(record) for record in records]


def get_match(session: Session, match_id: int) -> Match:
    record = session.get(MatchRecord, match_id)
    if record is None:
        raise MatchNotFoundError(match_id)
    return _to_match(record)


def fetch_participations(session: Session, match_id: int) -> list[Participation]:
    records = session.scalars(
        select(MatchPlayerRecord)
        .where(MatchPlayerRecord.match_id == match_id)
        .order_by(MatchPlayerRecord.id)
    ).all()
    return [_to_participation(record) for record in records]


def fetch_all_participations(session: Session) -> list[Participation]:
    records = session.scalars(
        select(MatchPlayerRecord).order_by(MatchPlayerRecord.match_id, MatchPlayerRecord.id)
    ).all()
    return [_to_participation(record) for record in records]


def ensure_players(
    session: Session,
    player_ids: Iterable[str],
    *,
    levels: Mapping[str, int | None] | None = None,
) -> list[str]:
    """Create missing players with no cached rating; return the created ids."""
    wanted = list(dict.fromkeys(player_ids))
    if not wanted:
        return []
    existing = set(
        session.scalars(select(PlayerRecord.id).where(PlayerRecord.id.in_(wanted))).all()
    )
    created: list[str] = []
    for player_id in wanted:
        if player_id in existing:
            continue
        session.add(
            PlayerRecord(
                id=player_id,
                name=player_id,
                total_games=0,
                wins=0,
                losses=0,
                level=None if levels is None else levels.get(player_id),
            )
        )
        created.append(player_id)
    if created:
        session.flush()
    return created


def insert_match(session: Session, submission: MatchSubmission) -> int:
    """Insert one match with all of its participations and return its id."""
    participants = submission.participants
    record = MatchRecord(
        date=submission.date,
        winning_team=submission.winning_side.value,
        game_length=submission.game_length.value,
        double_lanes=submission.double_lanes,
        titan_players=sum(1 for entry in participants if entry.side == Side.TITANS),
        atlantean_players=sum(1 for entry in participants if entry.side == Side.ATLANTEANS),
    )
    session.add(record)
    session.flush()

    session.add_all(
        MatchPlayerRecord(
            match_id=record.id,
            player_id=entry.player_id,
            team=entry.side.value,
            hero_id=entry.hero_id,
            hero_name=entry.hero_name,
            hero_roles=list(entry.hero_roles),
            kills=entry.kills,
            deaths=entry.deaths,
            assists=entry.assists,
            gold_earned=entry.gold_earned,
            minion_kills=entry.minion_kills,
            level=entry.level,
        )
        for entry in participants
    )
    session.flush()
    return int(record.id)


def _match_column_value(field_name: str, value: Any) -> tuple[str, Any]:
    if field_name == "winning_side":
        return "winning_team", Side(value).value
    if field_name == "game_length":
        return "game_length", GameLength(value).value
    if field_name == "double_lanes":
        return "double_lanes", bool(value)
    return field_name, value


def _participation_column_value(field_name: str, value: Any) -> tuple[str, Any]:
    if field_name == "side":
        return "team", Side(value).value
    if field_name == "hero_roles":
        return "hero_roles", list(value)
    return field_name, value


def apply_match_patch(session: Session, match_id: int, changes: Mapping[str, Any]) -> None:
    """Write only the changed match fields."""
    changes = normalize_match_changes(changes)
    record = session.get(MatchRecord, match_id)
    if record is None:
        raise MatchNotFoundError(match_id)
    for field_name, value in changes.items():
        column, column_value = _match_column_value(field_name, value)
        setattr(record, column, column_value)
    session.flush()


def apply_participation_patches(
    session: Session,
    match_id: int,
    patches: Sequence[ParticipationPatch],
) -> None:
    """Write changed participation fields and refresh the match roster sizes."""
    for patch in patches:
        if patch.is_empty:
            continue
        record = session.get(MatchPlayerRecord, patch.participation_id)
        if record is None or record.match_id != match_id:
            raise ValueError(
                f"participation_id={patch.participation_id} does not belong to match_id={match_id}"
            )
        for field_name, value in patch.changes.items():
            column, column_value = _participation_column_value(field_name, value)
            setattr(record, column, column_value)
    session.flush()
    refresh_roster_sizes(session, match_id)


def refresh_roster_sizes(session: Session, match_id: int) -> None:
    record = session.get(MatchRecord, match_id)
    if record is None:
        raise MatchNotFoundError(match_id)
    teams = session.scalars(
        select(MatchPlayerRecord.team).where(MatchPlayerRecord.match_id == match_id)
    ).all()
    record.titan_players = sum(1 for team in teams if team == Side.TITANS.value)
    record.atlantean_players = sum(1 for team in teams if team == Side.ATLANTEANS.value)
    session.flush()


def delete_match(session: Session, match_id: int) -> None:
    """Delete one match and its participations."""
    record = session.get(MatchRecord, match_id)
    if record is None:
        raise MatchNotFoundError(match_id)
    session.execute(delete(MatchPlayerRecord).where(MatchPlayerRecord.match_id == match_id))
    session.delete(record)
    session.flush()


def save_player_ratings(session: Session, ratings: Mapping[str, PlayerRating]) -> int:
    """Overwrite the cached rating columns of every player from a replay result.

    Players absent from ``ratings`` keep their row untouched. Returns the number
    of rows updated.
    """
    updated = 0
    for record in session.scalars(select(PlayerRecord)).all():
        rating = ratings.get(record.id)
        if rating is None:
            continue
        record.mu = rating.mu
        record.sigma = rating.sigma
        record.ordinal = rating.ordinal
        record.display_rating = rating.display_rating
        record.total_games = rating.total_games
        record.wins = rating.wins
        record.losses = rating.losses
        record.last_played = rating.last_played
        updated += 1
    session.flush()
    return updated


def mark_stat_untracked(session: Session, participation_ids: Sequence[int], stat: str) -> int:
    """Set one combat stat to NULL on the given participations."""
    if stat not in COMBAT_STAT_FIELDS:
        raise ValueError(f"unknown combat stat: {stat}")
    if not participation_ids:
        return 0
    session.execute(
        update(MatchPlayerRecord)
        .where(MatchPlayerRecord.id.in_(list(participation_ids)))
        .values({stat: None})
    )
    return len(participation_ids)


def count_unrated_active_players(session: Session) -> int:
    """Players with games on record but no cached belief."""
    return len(
        session.scalars(
            select(PlayerRecord.id).where(
                PlayerRecord.total_games > 0,
                PlayerRecord.mu.is_(None),
            )
        ).all()
    )


def get_metadata_value(session: Session, key: str) -> str | None:
    record = session.get(AppMetadata, key)
    return None if record is None else record.value


def set_metadata_value(session: Session, key: str, value: str, *, now: datetime) -> None:
    record = session.get(AppMetadata, key)
    if record is None:
        session.add(AppMetadata(key=key, value=value, updated_at=now))
    else:
        record.value = value
        record.updated_at = now
    session.flush()


__all__ = [
    "apply_match_patch",
    "apply_participation_patches",
    "count_unrated_active_players",
    "delete_match",
    "ensure_players",
    "ensure_schema",
    "fetch_all_participations",
    "fetch_matches",
    "fetch_participations",
    "fetch_player_ids",
    "fetch_players",
    "get_match",
    "get_metadata_value",
    "insert_match",
    "mark_stat_untracked",
    "refresh_roster_sizes",
    "save_player_ratings",
    "set_metadata_value",
]
