"""End-to-end tests of StatsEngine against a temporary sqlite store."""

from __future__ import annotations

from datetime import timedelta

import pytest

from builders import BASE_DATE, submission
from conftest import FIXED_NOW
from domain.common import Side
from domain.editing import EditState, ParticipationPatch
from domain.engine import StatsEngine
from domain.errors import MatchNotFoundError, MatchValidationError, PlayerNotFoundError
from domain.matchmaking import BalanceMode
from models import PlayerRecord
from repositories.match_log_repository import fetch_participations, fetch_players, get_match


def _day(offset: int):
    return BASE_DATE + timedelta(days=offset)


def _cached_ratings(engine: StatsEngine) -> dict[str, int | None]:
    with engine.session_factory() as session:
        return {player.id: player.display_rating for player in fetch_players(session)}


def _seed_disjoint_groups(engine: StatsEngine) -> list[int]:
    """Match 3 pits a (from match 1) against newcomers; match 2 is an unrelated group."""
    first = engine.record_match(
        submission(
            [("a", "Brogan"), ("b", "Arien")],
            [("c", "Sabina"), ("d", "Wasp")],
            winner=Side.TITANS,
            date=_day(0),
        )
    )
    second = engine.record_match(
        submission(
            [("e", "Brogan"), ("f", "Arien")],
            [("g", "Sabina"), ("h", "Wasp")],
            winner=Side.ATLANTEANS,
            date=_day(1),
        )
    )
    third = engine.record_match(
        submission(
            [("a", "Tigerclaw"), ("i", "Misa")],
            [("j", "Dodger"), ("k", "Xargatha")],
            winner=Side.TITANS,
            date=_day(2),
        )
    )
    return [first.match_id, second.match_id, third.match_id]


def test_record_match_creates_players_and_caches_ratings(stats_engine: StatsEngine) -> None:
    result = stats_engine.record_match(
        submission([("a", "Brogan"), ("b", "Arien")], [("c", "Sabina"), ("d", "Wasp")])
    )

    assert result.created_players == ("a", "b", "c", "d")
    assert result.warnings == ()
    assert result.rebuild.processed_matches == 1
    cached = _cached_ratings(stats_engine)
    assert cached == stats_engine.current_ratings()
    assert cached["a"] > 1200 > cached["c"]

    again = stats_engine.record_match(
        submission([("a", "Brogan"), ("e", "Arien")], [("c", "Sabina"), ("d", "Wasp")], date=_day(1))
    )
    assert again.created_players == ("e",)


def test_invalid_submission_writes_nothing(stats_engine: StatsEngine) -> None:
    with pytest.raises(MatchValidationError) as exc_info:
        stats_engine.record_match(submission([("a", "Brogan")], [("b", "Brogan")]))

    assert exc_info.value.result.errors[0].field == "hero_id"
    log = stats_engine.load_log()
    assert log.matches == []
    assert log.player_ids == []


def test_flipping_old_winner_only_moves_connected_players(stats_engine: StatsEngine) -> None:
    first_id, _, _ = _seed_disjoint_groups(stats_engine)
    before = stats_engine.player_ratings()

    result = stats_engine.commit(first_id, {"winning_side": "atlanteans"})
    after = stats_engine.player_ratings()

    assert result.changed_match_fields == ("winning_side",)
    for player_id in ("e", "f", "g", "h"):
        assert after[player_id] == before[player_id]
    assert after["a"].mu < before["a"].mu
    assert after["c"].mu > before["c"].mu
    # i, j and k never played match 1 but met a afterwards.
    for player_id in ("i", "j", "k"):
        assert after[player_id].mu != pytest.approx(before[player_id].mu, abs=1e-9)
    assert _cached_ratings(stats_engine) == {
        player_id: rating.display_rating for player_id, rating in after.items()
    }


def test_rating_neutral_edit_is_idempotent(stats_engine: StatsEngine) -> None:
    first_id, _, _ = _seed_disjoint_groups(stats_engine)
    before = stats_engine.current_ratings()

    stats_engine.commit(first_id, {"double_lanes": True})
    once = stats_engine.current_ratings()
    stats_engine.commit(first_id, {"double_lanes": True})

    assert once == before
    assert stats_engine.current_ratings() == before
    with stats_engine.session_factory() as session:
        assert get_match(session, first_id).double_lanes is True


def test_participation_patch_updates_stats_and_roster(stats_engine: StatsEngine) -> None:
    first_id, _, _ = _seed_disjoint_groups(stats_engine)
    with stats_engine.session_factory() as session:
        roster = fetch_participations(session, first_id)
    titan = next(entry for entry in roster if entry.player_id == "b")

    result = stats_engine.commit(
        first_id,
        participation_patches=[
            ParticipationPatch(titan.id, {"side": "atlanteans", "kills": 0}),
        ],
    )

    assert result.changed_participation_ids == (titan.id,)
    assert any(issue.field == "side" for issue in result.warnings)
    with stats_engine.session_factory() as session:
        match = get_match(session, first_id)
        patched = next(entry for entry in fetch_participations(session, first_id) if entry.id == titan.id)
    assert (match.titan_players, match.atlantean_players) == (1, 3)
    assert patched.side == Side.ATLANTEANS
    assert patched.kills == 0


def test_invalid_edit_rolls_back(stats_engine: StatsEngine) -> None:
    first_id, _, _ = _seed_disjoint_groups(stats_engine)
    before = stats_engine.current_ratings()
    with stats_engine.session_factory() as session:
        roster = fetch_participations(session, first_id)

    with pytest.raises(MatchValidationError):
        stats_engine.commit(
            first_id,
            {"winning_side": "atlanteans"},
            [ParticipationPatch(roster[1].id, {"hero_id": roster[0].hero_id})],
        )
    with pytest.raises(ValueError, match="not part of this match"):
        stats_engine.commit(first_id, {"winning_side": "atlanteans"}, [ParticipationPatch(9999, {"kills": 1})])

    with stats_engine.session_factory() as session:
        assert get_match(session, first_id).winning_side == Side.TITANS
        assert fetch_participations(session, first_id) == roster
    assert stats_engine.current_ratings() == before


def test_failure_during_replay_rolls_back_the_write(
    stats_engine: StatsEngine,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    first_id, _, _ = _seed_disjoint_groups(stats_engine)
    cached = _cached_ratings(stats_engine)

    def failing_rebuild(session, params):
        raise RuntimeError("replay failed")

    monkeypatch.setattr("domain.editing.controller.rebuild_in_session", failing_rebuild)
    with pytest.raises(RuntimeError, match="replay failed"):
        stats_engine.commit(first_id, {"winning_side": "atlanteans"})

    with stats_engine.session_factory() as session:
        assert get_match(session, first_id).winning_side == Side.TITANS
    assert _cached_ratings(stats_engine) == cached


def test_edit_session_commit_closes_session(stats_engine: StatsEngine) -> None:
    first_id, _, _ = _seed_disjoint_groups(stats_engine)

    edit = stats_engine.open_edit(first_id)
    edit.update_match(winning_side=Side.ATLANTEANS)
    result = stats_engine.commit_edit(edit)

    assert edit.state == EditState.COMMITTED
    assert result.changed_match_fields == ("winning_side",)
    with pytest.raises(MatchNotFoundError):
        stats_engine.open_edit(12345)


def test_delete_match_replays_without_it(stats_engine: StatsEngine) -> None:
    _, second_id, _ = _seed_disjoint_groups(stats_engine)

    result = stats_engine.delete_match(second_id)

    assert result.rebuild.processed_matches == 2
    ratings = stats_engine.player_ratings()
    for player_id in ("e", "f", "g", "h"):
        assert ratings[player_id].display_rating == 1200
        assert ratings[player_id].total_games == 0
    assert _cached_ratings(stats_engine)["e"] == 1200
    with pytest.raises(MatchNotFoundError):
        stats_engine.delete_match(second_id)


def test_initialize_repairs_missing_rating_cache(stats_engine: StatsEngine) -> None:
    stats_engine.record_match(submission([("a", "Brogan")], [("b", "Arien")]))
    with stats_engine.session_factory() as session:
        record = session.get(PlayerRecord, "a")
        record.mu = None
        record.sigma = None
        session.commit()

    repaired = stats_engine.initialize()

    assert repaired.migration.success
    assert repaired.rebuild is not None
    assert repaired.rebuild.updated_players == 2
    assert stats_engine.initialize().rebuild is None


def test_analytics_read_through_the_store(stats_engine: StatsEngine) -> None:
    _seed_disjoint_groups(stats_engine)

    heroes = {row.hero_name: row for row in stats_engine.hero_stats()}
    assert heroes["Brogan"].total_games == 2
    assert heroes["Brogan"].win_rate == pytest.approx(50.0)
    assert stats_engine.player_stats("a").games_played == 2
    with pytest.raises(PlayerNotFoundError):
        stats_engine.player_stats("zed")
    assert len(stats_engine.historical_ratings()) == 4

    probability = stats_engine.win_probability(["a", "b"], ["c", "d"])
    assert probability.team_a + probability.team_b == 100


def test_balanced_teams_use_current_ratings(stats_engine: StatsEngine) -> None:
    _seed_disjoint_groups(stats_engine)

    teams = stats_engine.balanced_teams(["a", "b", "c", "d", "newcomer"])
    assert len(teams.team_a) + len(teams.team_b) == 5
    assert abs(len(teams.team_a) - len(teams.team_b)) == 1

    by_games = stats_engine.balanced_teams(["c", "d", "e", "f"], mode=BalanceMode.EXPERIENCE)
    assert by_games.total_a == by_games.total_b == 2.0


def test_clock_drives_date_warnings(stats_engine: StatsEngine) -> None:
    result = stats_engine.record_match(
        submission([("a", "Brogan")], [("b", "Arien")], date=FIXED_NOW + timedelta(days=2))
    )

    assert [issue.field for issue in result.warnings] == ["date"]
