"""Tests for roster win probability."""

from __future__ import annotations

from statistics import NormalDist

import pytest

from domain.ratings.calculator import Belief, RatingParameters
from domain.ratings.win_probability import estimate_win_probability


def test_equal_default_rosters_are_a_coin_flip() -> None:
    probability = estimate_win_probability(["a", "b"], ["c", "d"], {}, RatingParameters())

    assert probability.team_a == 50
    assert probability.team_b == 50
    assert probability.team_a_low < 50 < probability.team_a_high


def test_side_b_values_complement_side_a() -> None:
    beliefs = {
        "a": Belief(mu=31.0, sigma=3.0),
        "b": Belief(mu=27.0, sigma=4.0),
        "c": Belief(mu=22.0, sigma=5.0),
        "d": Belief(mu=24.0, sigma=2.0),
    }
    probability = estimate_win_probability(["a", "b"], ["c", "d"], beliefs, RatingParameters())

    assert probability.team_a > 50
    assert probability.team_a + probability.team_b == 100
    assert probability.team_b_low == 100 - probability.team_a_high
    assert probability.team_b_high == 100 - probability.team_a_low
    assert 0 <= probability.team_a_low <= probability.team_a <= probability.team_a_high <= 100


def test_swapping_rosters_mirrors_the_result() -> None:
    beliefs = {
        "a": Belief(mu=29.0, sigma=4.0),
        "b": Belief(mu=21.0, sigma=6.0),
    }
    params = RatingParameters()
    forward = estimate_win_probability(["a"], ["b"], beliefs, params)
    backward = estimate_win_probability(["b"], ["a"], beliefs, params)

    assert forward.team_a == backward.team_b
    assert forward.team_a_low == backward.team_b_low
    assert forward.team_a_high == backward.team_b_high


def test_point_estimate_matches_closed_form() -> None:
    params = RatingParameters()
    beliefs = {"a": Belief(mu=30.0, sigma=2.0), "b": Belief(mu=25.0, sigma=2.0)}
    probability = estimate_win_probability(["a"], ["b"], beliefs, params)

    # delta = 5, performance variance = 2 * (sigma^2 + beta^2)
    expected = NormalDist(0.0, (2 * (4.0 + params.beta**2)) ** 0.5).cdf(5.0)
    assert probability.team_a == round(expected * 100)


def test_higher_uncertainty_widens_interval() -> None:
    params = RatingParameters()
    confident = estimate_win_probability(
        ["a"], ["b"], {"a": Belief(27.0, 1.0), "b": Belief(25.0, 1.0)}, params
    )
    uncertain = estimate_win_probability(
        ["a"], ["b"], {"a": Belief(27.0, 6.0), "b": Belief(25.0, 6.0)}, params
    )

    assert (uncertain.team_a_high - uncertain.team_a_low) > (confident.team_a_high - confident.team_a_low)


@pytest.mark.parametrize(
    ("roster_a", "roster_b", "message"),
    [
        ([], ["b"], "at least one player"),
        (["a"], [], "at least one player"),
        (["a", "b"], ["b", "c"], "disjoint"),
    ],
)
def test_invalid_rosters_raise_error(roster_a: list[str], roster_b: list[str], message: str) -> None:
    with pytest.raises(ValueError, match=message):
        estimate_win_probability(roster_a, roster_b, {}, RatingParameters())
