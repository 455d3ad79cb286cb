"""StatsEngine: the single entry point used by scripts and callers.

The engine holds no belief state. Every read loads the match log and replays
it, so results are always a function of what is stored right now.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.engine import Engine

from db import create_db_engine, create_session_factory
from domain.analytics import (
    HeroStats,
    HeroTimeSeries,
    PlayerRelationship,
    PlayerStats,
    PlayerSynergy,
    hero_stats,
    hero_win_rate_over_time,
    player_relationships,
    player_stats,
    player_synergies,
)
from domain.common import DateRange, Match, MatchSubmission, Participation, utc_now
from domain.config import EngineConfig
from domain.editing.controller import CommitResult, DeleteResult, MatchEditController
from domain.editing.patches import ParticipationPatch
from domain.editing.session import MatchEditSession
from domain.editing.validation import (
    ValidationIssue,
    ValidationResult,
    validate_match_edit,
    validate_submission,
)
from domain.errors import MatchValidationError, PlayerNotFoundError
from domain.heroes import EMPTY_CATALOG, HeroCatalog, load_hero_catalog
from domain.matchmaking import BalancedTeams, BalanceMode, balance_teams
from domain.migrations import MigrationResult, run_migrations
from domain.pipeline import RebuildSummary, rebuild_in_session, rebuild_player_ratings
from domain.ratings.calculator import RatingParameters, default_belief, display_rating
from domain.ratings.replay import PlayerRating, RatingSnapshot, ReplayResult, replay_ratings
from domain.ratings.win_probability import WinProbability, estimate_win_probability
from repositories.match_log_repository import (
    count_unrated_active_players,
    ensure_players,
    ensure_schema,
    fetch_all_participations,
    fetch_matches,
    fetch_player_ids,
    insert_match,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchLog:
    matches: list[Match]
    participations: list[Participation]
    player_ids: list[str]


@dataclass(frozen=True)
class RecordResult:
    match_id: int
    created_players: tuple[str, ...]
    warnings: tuple[ValidationIssue, ...]
    rebuild: RebuildSummary


@dataclass(frozen=True)
class InitializeResult:
    migration: MigrationResult
    rebuild: RebuildSummary | None


class StatsEngine:
    def __init__(
        self,
        db_engine: Engine,
        *,
        params: RatingParameters | None = None,
        catalog: HeroCatalog = EMPTY_CATALOG,
        min_relationship_games: int = 1,
        migration_timeout_seconds: float = 30.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if min_relationship_games < 1:
            raise ValueError("min_relationship_games must be >= 1")
        self.db_engine = db_engine
        self.session_factory = create_session_factory(db_engine)
        self.params = params or RatingParameters()
        self.catalog = catalog
        self.min_relationship_games = min_relationship_games
        self.migration_timeout_seconds = migration_timeout_seconds
        self._clock = clock
        self._controller = MatchEditController(self.session_factory, self.params, clock=clock)

    @classmethod
    def from_config(cls, config: EngineConfig) -> StatsEngine:
        catalog = EMPTY_CATALOG
        if config.hero_catalog_path is not None:
            catalog = load_hero_catalog(config.hero_catalog_path)
        return cls(
            create_db_engine(config.db_url),
            params=config.rating,
            catalog=catalog,
            min_relationship_games=config.min_relationship_games,
            migration_timeout_seconds=config.migration_timeout_seconds,
        )

    def ensure_schema(self) -> None:
        ensure_schema(self.db_engine)

    def initialize(self) -> InitializeResult:
        """Create missing tables, apply pending migrations and repair stale rating caches."""
        self.ensure_schema()
        migration = run_migrations(
            session_factory=self.session_factory,
            timeout_seconds=self.migration_timeout_seconds,
        )
        if not migration.success:
            logger.warning("migration did not complete: %s", migration.error)

        with self.session_factory() as session:
            unrated = count_unrated_active_players(session)
        rebuild = None
        if unrated:
            logger.info("rebuilding ratings: %d players with games have no cached rating", unrated)
            rebuild = self.rebuild_ratings()
        return InitializeResult(migration=migration, rebuild=rebuild)

    def load_log(self) -> MatchLog:
        with self.session_factory() as session:
            return MatchLog(
                matches=fetch_matches(session),
                participations=fetch_all_participations(session),
                player_ids=fetch_player_ids(session),
            )

    def replay(self) -> ReplayResult:
        log = self.load_log()
        return replay_ratings(log.matches, log.participations, log.player_ids, self.params)

    def current_ratings(self) -> dict[str, int]:
        return self.replay().display_ratings()

    def player_ratings(self) -> dict[str, PlayerRating]:
        return self.replay().ratings

    def historical_ratings(self) -> list[RatingSnapshot]:
        return self.replay().snapshots

    def win_probability(self, roster_a: Sequence[str], roster_b: Sequence[str]) -> WinProbability:
        return estimate_win_probability(roster_a, roster_b, self.replay().beliefs, self.params)

    def hero_stats(
        self,
        min_relationship_games: int | None = None,
        date_range: DateRange | None = None,
    ) -> list[HeroStats]:
        log = self.load_log()
        return hero_stats(
            log.matches,
            log.participations,
            min_relationship_games=(
                self.min_relationship_games if min_relationship_games is None else min_relationship_games
            ),
            date_range=date_range,
            catalog=self.catalog,
        )

    def player_relationships(
        self,
        player_ids: Iterable[str],
        min_games: int = 1,
        date_range: DateRange | None = None,
    ) -> list[PlayerRelationship]:
        log = self.load_log()
        return player_relationships(
            log.matches,
            log.participations,
            player_ids,
            min_games=min_games,
            date_range=date_range,
        )

    def player_synergies(
        self,
        player_ids: Iterable[str],
        min_games: int = 1,
        date_range: DateRange | None = None,
    ) -> list[PlayerSynergy]:
        log = self.load_log()
        return player_synergies(
            log.matches,
            log.participations,
            player_ids,
            min_games=min_games,
            date_range=date_range,
        )

    def hero_win_rate_over_time(
        self,
        hero_ids: Iterable[int] | None = None,
        min_games: int = 1,
        date_range: DateRange | None = None,
    ) -> list[HeroTimeSeries]:
        log = self.load_log()
        return hero_win_rate_over_time(
            log.matches,
            log.participations,
            hero_ids=hero_ids,
            min_games=min_games,
            date_range=date_range,
        )

    def player_stats(self, player_id: str) -> PlayerStats:
        log = self.load_log()
        if player_id not in log.player_ids:
            raise PlayerNotFoundError(player_id)
        return player_stats(player_id, log.matches, log.participations)

    def balanced_teams(
        self,
        player_ids: Sequence[str],
        mode: BalanceMode = BalanceMode.RATING,
    ) -> BalancedTeams:
        ratings = self.replay().ratings
        initial = display_rating(default_belief(self.params), self.params.ordinal_z)
        by_experience = BalanceMode(mode) is BalanceMode.EXPERIENCE
        values: dict[str, float] = {}
        for player_id in player_ids:
            rating = ratings.get(player_id)
            if by_experience:
                values[player_id] = float(rating.total_games if rating is not None else 0)
            else:
                values[player_id] = float(rating.display_rating if rating is not None else initial)
        return balance_teams(player_ids, values)

    def record_match(self, submission: MatchSubmission) -> RecordResult:
        """Store a new match, creating unknown players, then replay."""
        validation = validate_submission(submission, now=self._clock())
        if not validation.is_valid:
            raise MatchValidationError(validation)

        with self.session_factory() as session:
            try:
                created = ensure_players(
                    session,
                    [entry.player_id for entry in submission.participants],
                    levels={entry.player_id: entry.level for entry in submission.participants},
                )
                match_id = insert_match(session, submission)
                _, rebuild = rebuild_in_session(session, self.params)
                session.commit()
            except Exception:
                session.rollback()
                raise

        logger.info("recorded match_id=%s created_players=%s", match_id, created)
        return RecordResult(
            match_id=match_id,
            created_players=tuple(created),
            warnings=validation.warnings,
            rebuild=rebuild,
        )

    def delete_match(self, match_id: int) -> DeleteResult:
        return self._controller.delete_match(match_id)

    def open_edit(self, match_id: int) -> MatchEditSession:
        return self._controller.load(match_id)

    def validate(
        self,
        match_draft: Match,
        participations_draft: Sequence[Participation],
    ) -> ValidationResult:
        return validate_match_edit(match_draft, participations_draft, now=self._clock())

    def commit(
        self,
        match_id: int,
        match_patch: Mapping[str, Any] | None = None,
        participation_patches: Sequence[ParticipationPatch] = (),
    ) -> CommitResult:
        return self._controller.commit_patch(match_id, match_patch, participation_patches)

    def commit_edit(self, edit: MatchEditSession) -> CommitResult:
        return self._controller.commit(edit)

    def rebuild_ratings(
        self,
        dry_run: bool = False,
        echo: Callable[[str], None] | None = None,
    ) -> RebuildSummary:
        return rebuild_player_ratings(
            session_factory=self.session_factory,
            params=self.params,
            dry_run=dry_run,
            echo=echo,
        )


__all__ = ["InitializeResult", "MatchLog", "RecordResult", "StatsEngine"]
