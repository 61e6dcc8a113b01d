"""Round-robin fixture generation.

Uses the circle method (polygon scheduling): one team stays fixed while the
others rotate one place per round, so every pair meets exactly once per leg.

Terminology:
  - **round**: one matchday, a set of fixtures in which no team appears twice.
    With N teams (even) a round has N/2 fixtures.
  - **leg**: a complete pass in which every team meets every other team once.
    A leg takes N-1 rounds. The second leg replays the first with home and
    away reversed, numbered on from where the first leg ended.

With 4 teams and ``legs=2``: 6 rounds, 2 fixtures each, 12 fixtures in total.
An odd team count is padded with a BYE; fixtures against it are dropped, so
each round then has one team resting.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, TypeVar

from tourney.core.inputs import check_legs, coerce_teams
from tourney.models.fixture import RoundRobinFixture
from tourney.models.team import BYE_TEAM, Team

logger = logging.getLogger(__name__)

T = TypeVar("T")


def rotate(seq: Sequence[T]) -> tuple[T, ...]:
    """Return a new sequence with the last element moved to the front."""
    if len(seq) <= 1:
        return tuple(seq)
    return (seq[-1], *seq[:-1])


def circle_rounds(entrants: Sequence[T]) -> list[list[tuple[T, T]]]:
    """Pair an even-length entrant list into N-1 rounds of (home, away).

    The fixed entrant hosts on odd rounds and travels on even ones; the
    other pairings alternate by their position on the circle.
    """
    n = len(entrants)
    fixed = entrants[0]
    rotating = tuple(entrants[1:])
    rounds: list[list[tuple[T, T]]] = []

    for r in range(n - 1):
        rotating = rotate(rotating)
        pairs: list[tuple[T, T]] = []

        opponent = rotating[0]
        pairs.append((fixed, opponent) if r % 2 == 0 else (opponent, fixed))

        for i in range(1, n // 2):
            a, b = rotating[i], rotating[n - 1 - i]
            pairs.append((a, b) if i % 2 == 0 else (b, a))

        rounds.append(pairs)

    return rounds


def generate_round_robin(
    teams: Iterable[Team | Mapping[str, Any] | str],
    legs: int = 1,
) -> list[RoundRobinFixture]:
    """Generate a single or double round robin using the circle method.

    Args:
        teams: Teams in draw order. ``teams[0]`` is the fixed team.
            Accepts ``Team`` models, dicts, or bare team ids.
        legs: 1 for a single round robin, 2 for home-and-away.

    Returns:
        Fixtures ordered by round, BYE fixtures removed.

    Raises:
        InsufficientTeamsError: fewer than two teams.
        InvalidConfigurationError: legs not 1 or 2, or duplicate team ids.
    """
    check_legs(legs)
    entrants = coerce_teams(teams)
    team_count = len(entrants)
    if team_count % 2 != 0:
        entrants.append(BYE_TEAM)

    n = len(entrants)
    rounds = circle_rounds(entrants)
    fixtures: list[RoundRobinFixture] = []

    for leg in range(1, legs + 1):
        for r, pairs in enumerate(rounds):
            round_number = (leg - 1) * (n - 1) + r + 1
            for home, away in pairs:
                if leg == 2:
                    home, away = away, home
                if home.is_bye or away.is_bye:
                    continue
                fixtures.append(
                    RoundRobinFixture(
                        id=f"fixture_{len(fixtures) + 1}",
                        round_number=round_number,
                        leg=leg,
                        home_team_id=home.id,
                        away_team_id=away.id,
                    )
                )

    logger.info(
        "round_robin_generated teams=%d legs=%d rounds=%d fixtures=%d",
        team_count,
        legs,
        (n - 1) * legs,
        len(fixtures),
    )
    return fixtures
