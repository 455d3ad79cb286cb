"""Team OpenSkill rating primitive (Plackett-Luce model).

Beliefs are plain ``(mu, sigma)`` values; every function here is pure and
builds fresh OpenSkill rating objects per call, so callers own all state.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache

from openskill.models import PlackettLuce

from domain.common import Side

# Display rating = round((ordinal + DISPLAY_OFFSET) * DISPLAY_SCALE + DISPLAY_BASE).
# Changing any of these invalidates every stored and historical rating comparison.
DISPLAY_OFFSET = 25.0
DISPLAY_SCALE = 40.0
DISPLAY_BASE = 200.0


@dataclass(frozen=True)
class RatingParameters:
    initial_mu: float = 25.0
    initial_sigma: float = 25.0 / 3.0
    beta: float = 25.0 / 6.0
    kappa: float = 0.0001
    tau: float = 25.0 / 300.0
    limit_sigma: bool = False
    balance: bool = False
    ordinal_z: float = 3.0


@dataclass(frozen=True)
class Belief:
    """A player's skill estimate: mean ``mu`` and uncertainty ``sigma``."""

    mu: float
    sigma: float

    def ordinal(self, z: float = 3.0) -> float:
        return ordinal(self, z)

    def display_rating(self, z: float = 3.0) -> int:
        return display_rating(self, z)


def default_belief(params: RatingParameters) -> Belief:
    return Belief(mu=params.initial_mu, sigma=params.initial_sigma)


def ordinal(belief: Belief, z: float = 3.0) -> float:
    """Conservative skill estimate ``mu - z * sigma``."""
    return belief.mu - z * belief.sigma


def display_rating(belief: Belief, z: float = 3.0) -> int:
    """Rescale the ordinal into the user-facing ~1000-2000 range."""
    return round((ordinal(belief, z) + DISPLAY_OFFSET) * DISPLAY_SCALE + DISPLAY_BASE)


@lru_cache(maxsize=8)
def _model(params: RatingParameters) -> PlackettLuce:
    return PlackettLuce(
        mu=params.initial_mu,
        sigma=params.initial_sigma,
        beta=params.beta,
        kappa=params.kappa,
        tau=params.tau,
        limit_sigma=params.limit_sigma,
        balance=params.balance,
    )


def rate_teams(
    team_a: Sequence[Belief],
    team_b: Sequence[Belief],
    winning_side: Side,
    params: RatingParameters,
    *,
    side_a: Side = Side.TITANS,
) -> tuple[list[Belief], list[Belief]]:
    """Apply one team-vs-team update and return the posterior beliefs.

    ``team_a`` plays as ``side_a``; the team on ``winning_side`` is ranked first.
    """
    if not team_a or not team_b:
        raise ValueError("both teams need at least one player to be rated")

    model = _model(params)
    team_a_pre = [model.rating(mu=belief.mu, sigma=belief.sigma) for belief in team_a]
    team_b_pre = [model.rating(mu=belief.mu, sigma=belief.sigma) for belief in team_b]

    ranks = [1, 2] if winning_side == side_a else [2, 1]
    updated = model.rate([team_a_pre, team_b_pre], ranks=ranks)

    team_a_post = [Belief(mu=float(rating.mu), sigma=float(rating.sigma)) for rating in updated[0]]
    team_b_post = [Belief(mu=float(rating.mu), sigma=float(rating.sigma)) for rating in updated[1]]
    return team_a_post, team_b_post


__all__ = [
    "Belief",
    "DISPLAY_BASE",
    "DISPLAY_OFFSET",
    "DISPLAY_SCALE",
    "RatingParameters",
    "default_belief",
    "display_rating",
    "ordinal",
    "rate_teams",
]
