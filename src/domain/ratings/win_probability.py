"""Win probability for two rosters from current beliefs."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from statistics import NormalDist

from domain.ratings.calculator import Belief, RatingParameters, default_belief

CONFIDENCE_Z = 1.96


@dataclass(frozen=True)
class WinProbability:
    """Percentages in [0, 100]; side B values complement side A."""

    team_a: int
    team_a_low: int
    team_a_high: int
    team_b: int
    team_b_low: int
    team_b_high: int


def _team_beliefs(
    roster: Sequence[str],
    beliefs: Mapping[str, Belief],
    params: RatingParameters,
) -> list[Belief]:
    initial = default_belief(params)
    return [beliefs.get(player_id, initial) for player_id in roster]


def _win_chance(delta_mu: float, performance_sd: float) -> float:
    if performance_sd <= 0.0:
        if delta_mu > 0.0:
            return 1.0
        return 0.0 if delta_mu < 0.0 else 0.5
    return NormalDist(mu=0.0, sigma=performance_sd).cdf(delta_mu)


def _percent(probability: float) -> int:
    return min(100, max(0, round(probability * 100.0)))


def estimate_win_probability(
    roster_a: Sequence[str],
    roster_b: Sequence[str],
    beliefs: Mapping[str, Belief],
    params: RatingParameters,
) -> WinProbability:
    """Estimate how likely ``roster_a`` beats ``roster_b``.

    The point estimate uses skill uncertainty plus per-player performance noise
    (``n * beta**2`` per team). The interval is a 95% bound on the mu delta using
    skill uncertainty alone, pushed through the same win-chance formula.
    """
    if not roster_a or not roster_b:
        raise ValueError("both rosters need at least one player")
    overlap = set(roster_a) & set(roster_b)
    if overlap:
        raise ValueError(f"rosters must be disjoint, shared players: {sorted(overlap)}")

    team_a = _team_beliefs(roster_a, beliefs, params)
    team_b = _team_beliefs(roster_b, beliefs, params)

    team_a_mu = sum(belief.mu for belief in team_a)
    team_b_mu = sum(belief.mu for belief in team_b)
    team_a_skill_var = sum(belief.sigma**2 for belief in team_a)
    team_b_skill_var = sum(belief.sigma**2 for belief in team_b)
    team_a_perf_var = team_a_skill_var + len(team_a) * params.beta**2
    team_b_perf_var = team_b_skill_var + len(team_b) * params.beta**2

    delta_mu = team_a_mu - team_b_mu
    performance_sd = math.sqrt(team_a_perf_var + team_b_perf_var)
    skill_sd = math.sqrt(team_a_skill_var + team_b_skill_var)

    point = _percent(_win_chance(delta_mu, performance_sd))
    low = _percent(_win_chance(delta_mu - CONFIDENCE_Z * skill_sd, performance_sd))
    high = _percent(_win_chance(delta_mu + CONFIDENCE_Z * skill_sd, performance_sd))

    return WinProbability(
        team_a=point,
        team_a_low=low,
        team_a_high=high,
        team_b=100 - point,
        team_b_low=100 - high,
        team_b_high=100 - low,
    )


__all__ = ["CONFIDENCE_Z", "WinProbability", "estimate_win_probability"]
