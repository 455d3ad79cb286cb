"""Tests for match validation errors and warnings."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest

from builders import BASE_DATE, LogBuilder, submission
from domain.common import GameLength, Side, utc_now
from domain.editing.validation import validate_match_edit, validate_submission

NOW = BASE_DATE + timedelta(days=1)


def _fields(issues) -> list[str]:
    return [issue.field for issue in issues]


def test_clean_submission_is_valid() -> None:
    result = validate_submission(
        submission([("a", "Brogan"), ("b", "Arien")], [("c", "Sabina"), ("d", "Wasp")]),
        now=NOW,
    )

    assert result.is_valid
    assert result.warnings == ()


def test_empty_side_is_an_error() -> None:
    result = validate_submission(submission([("a", "Brogan")], []), now=NOW)

    assert not result.is_valid
    assert "atlanteans side has no players" in [issue.message for issue in result.errors]


def test_duplicate_hero_and_player_are_errors() -> None:
    result = validate_submission(
        submission([("a", "Brogan"), ("a", "Arien")], [("c", "Brogan")]),
        now=NOW,
    )

    assert _fields(result.errors) == ["player_id", "hero_id"]
    assert result.errors[1].player_id == "c"


@pytest.mark.parametrize(
    ("stats", "field_name"),
    [
        ({"kills": -1}, "kills"),
        ({"gold_earned": -5}, "gold_earned"),
        ({"level": 0}, "level"),
        ({"level": 11}, "level"),
    ],
)
def test_out_of_range_stats_are_errors(stats: dict[str, int], field_name: str) -> None:
    result = validate_submission(
        submission([("a", "Brogan")], [("b", "Arien")], stats={"a": stats}),
        now=NOW,
    )

    assert _fields(result.errors) == [field_name]
    assert result.errors[0].player_id == "a"


def test_untracked_and_zero_stats_are_accepted() -> None:
    result = validate_submission(
        submission(
            [("a", "Brogan")],
            [("b", "Arien")],
            stats={"a": {"kills": 0, "deaths": 0}, "b": {"kills": None, "level": None}},
        ),
        now=NOW,
    )

    assert result.is_valid


def test_soft_limits_produce_warnings_only() -> None:
    result = validate_submission(
        submission(
            [("a", "Brogan"), ("b", "Arien"), ("c", "Misa")],
            [("d", "Sabina")],
            game_length=GameLength.QUICK,
            stats={"a": {"kills": 13}, "d": {"deaths": 13}},
        ),
        now=NOW,
    )

    assert result.is_valid
    assert sorted(_fields(result.warnings)) == ["deaths", "kills", "side"]


def test_long_games_allow_more_kills_before_warning() -> None:
    result = validate_submission(
        submission([("a", "Brogan")], [("b", "Arien")], stats={"a": {"kills": 13}}),
        now=NOW,
    )

    assert result.warnings == ()


@pytest.mark.parametrize(
    ("match_date", "message"),
    [
        (NOW + timedelta(hours=1), "future"),
        (NOW - timedelta(days=400), "more than a year old"),
    ],
)
def test_suspicious_dates_warn(match_date: datetime, message: str) -> None:
    result = validate_submission(
        submission([("a", "Brogan")], [("b", "Arien")], date=match_date),
        now=NOW,
    )

    assert result.is_valid
    assert message in result.warnings[0].message


def test_match_edit_reports_participation_ids() -> None:
    log = LogBuilder()
    match = log.add([("a", "Brogan")], [("b", "Arien")], winner=Side.TITANS, date=BASE_DATE)
    bad = [
        log.participations[0],
        replace(log.participations[1], hero_id=1),
    ]

    result = validate_match_edit(match, bad, now=NOW)

    assert _fields(result.errors) == ["hero_id"]
    assert result.errors[0].participation_id == 2


def test_default_clock_is_naive_utc(monkeypatch: pytest.MonkeyPatch) -> None:
    moment = utc_now()
    assert moment.tzinfo is None
    assert abs(moment - datetime.now(UTC).replace(tzinfo=None)) < timedelta(minutes=1)

    monkeypatch.setattr("domain.editing.validation.utc_now", lambda: BASE_DATE - timedelta(days=1))
    result = validate_submission(submission([("a", "Brogan")], [("b", "Arien")], date=BASE_DATE))

    assert "future" in result.warnings[0].message
