"""Tests for the one-time legacy stats migration."""

from __future__ import annotations

import itertools
import logging
from datetime import timedelta
from pathlib import Path

import pytest

from builders import BASE_DATE, submission
from db import create_db_engine
from domain.engine import StatsEngine
from domain.migrations import CURRENT_MIGRATION_VERSION, applied_version, run_migrations
from repositories.match_log_repository import fetch_participations

ALL_ZERO = {"kills": 0, "deaths": 0, "assists": 0, "gold_earned": 0, "minion_kills": 0}


@pytest.fixture
def legacy_engine(tmp_path: Path) -> StatsEngine:
    """A store with data but no migration marker yet."""
    engine = StatsEngine(create_db_engine(f"sqlite:///{tmp_path / 'legacy.db'}"))
    engine.ensure_schema()
    # Every stat zero for everyone: recorded before stats were tracked.
    engine.record_match(
        submission(
            [("a", "Brogan")],
            [("b", "Arien")],
            date=BASE_DATE,
            stats={"a": ALL_ZERO, "b": ALL_ZERO},
        )
    )
    # Kills genuinely tracked; deaths zero for both.
    engine.record_match(
        submission(
            [("a", "Brogan")],
            [("b", "Arien")],
            date=BASE_DATE + timedelta(days=1),
            stats={"a": {"kills": 3, "deaths": 0}, "b": {"kills": 0, "deaths": 0}},
        )
    )
    return engine


def _stats(engine: StatsEngine, match_id: int, stat: str) -> list[int | None]:
    with engine.session_factory() as session:
        return [getattr(entry, stat) for entry in fetch_participations(session, match_id)]


def test_all_zero_stats_become_untracked(legacy_engine: StatsEngine) -> None:
    result = run_migrations(session_factory=legacy_engine.session_factory)

    assert result.success
    assert result.version == CURRENT_MIGRATION_VERSION
    assert result.matches_analyzed == 2
    # Five stats on two players in match 1, deaths on two players in match 2.
    assert result.stats_converted == 12
    assert result.players_affected == 2
    assert _stats(legacy_engine, 1, "kills") == [None, None]
    assert _stats(legacy_engine, 2, "kills") == [3, 0]
    assert _stats(legacy_engine, 2, "deaths") == [None, None]
    with legacy_engine.session_factory() as session:
        assert applied_version(session) == CURRENT_MIGRATION_VERSION


def test_second_run_is_a_no_op(legacy_engine: StatsEngine) -> None:
    run_migrations(session_factory=legacy_engine.session_factory)

    again = run_migrations(session_factory=legacy_engine.session_factory)

    assert again.success
    assert again.matches_analyzed == 0
    assert again.stats_converted == 0


def test_timeout_leaves_data_and_marker_untouched(
    legacy_engine: StatsEngine,
    caplog: pytest.LogCaptureFixture,
) -> None:
    ticks = itertools.count(0.0, 10.0)

    with caplog.at_level(logging.ERROR, logger="domain.migrations"):
        result = run_migrations(
            session_factory=legacy_engine.session_factory,
            timeout_seconds=15.0,
            clock=lambda: next(ticks),
        )

    assert not result.success
    assert result.version == 0
    assert "deadline" in (result.error or "")
    assert "failed" in caplog.text
    assert _stats(legacy_engine, 1, "kills") == [0, 0]
    with legacy_engine.session_factory() as session:
        assert applied_version(session) == 0


def test_non_positive_timeout_is_rejected(legacy_engine: StatsEngine) -> None:
    with pytest.raises(ValueError, match="timeout_seconds"):
        run_migrations(session_factory=legacy_engine.session_factory, timeout_seconds=0)


def test_initialize_runs_pending_migration(legacy_engine: StatsEngine) -> None:
    result = legacy_engine.initialize()

    assert result.migration.success
    assert result.migration.stats_converted == 12
    assert result.rebuild is None
