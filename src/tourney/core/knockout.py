"""Knockout bracket generation.

Builds a single-elimination bracket from a ranked team list:

1. Size the bracket to the smallest power of two that holds every team,
   halving it when that would leave more than a quarter of the slots as BYEs
   and the smaller bracket still fits everyone.
2. Seed: rank k meets rank ``size + 1 - k``. Ranks beyond the team count are
   BYEs, so the top seeds are the ones given a free pass.
3. Walk the rounds top-down. A pairing against a BYE emits no fixture; the
   real team is carried straight into the next round. Every played pairing
   forwards a placeholder entrant (``Winner QF 2``) to the next round.

Two-leg ties emit both legs. Only the deciding leg (the second, or the only
one) carries extra-time, penalty and replay eligibility.

A requested third-place match is appended to every bracket of four or more
slots, even when a semifinal was a BYE and one loser slot stays empty.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from tourney.core.inputs import coerce_model, coerce_teams
from tourney.models.fixture import KnockoutFixture
from tourney.models.rules import KnockoutConfig, Seeding
from tourney.models.team import BYE_ID, Team

logger = logging.getLogger(__name__)

ROUND_NAMES: dict[int, str] = {
    64: "R64",
    32: "R32",
    16: "R16",
    8: "QF",
    4: "SF",
    2: "Final",
}

THIRD_PLACE_STAGE = "Third Place"


@dataclass(frozen=True)
class Entrant:
    """A bracket slot: a real team, a BYE, or the winner of an earlier tie."""

    id: str
    label: str
    is_bye: bool = False
    is_placeholder: bool = False

    @classmethod
    def from_team(cls, team: Team) -> Entrant:
        return cls(id=team.id, label=team.display_name)


_BYE = Entrant(id=BYE_ID, label="BYE", is_bye=True)


def bracket_size(team_count: int) -> int:
    """Smallest power of two >= ``team_count``, after the BYE-reduction rule."""
    size = 1
    while size < team_count:
        size *= 2
    byes = size - team_count
    if byes > size // 4 and size // 2 >= team_count:
        logger.debug("bracket_rebalanced byes=%d size=%d->%d", byes, size, size // 2)
        size //= 2
    return size


def stage_name(size: int, round_number: int) -> str:
    return ROUND_NAMES.get(size, f"Round {round_number}")


def seed_bracket(ranked: list[Entrant], size: int) -> list[Entrant]:
    """Lay out round one as consecutive pairs: 1 v size, 2 v size-1, ...

    Missing ranks are filled with BYEs.
    """
    padded = ranked + [_BYE] * (size - len(ranked))
    slots: list[Entrant] = []
    for k in range(size // 2):
        slots.append(padded[k])
        slots.append(padded[size - 1 - k])
    return slots


def generate_knockout(
    teams: Iterable[Team | Mapping[str, Any] | str],
    config: KnockoutConfig | Mapping[str, Any] | None = None,
    rng: random.Random | None = None,
) -> list[KnockoutFixture]:
    """Generate every fixture of a knockout bracket.

    Args:
        teams: Teams in rank order (rank 1 first).
        config: Format options; defaults to a single-leg bracket with
            penalties and no third-place match.
        rng: Random source for ``random`` seeding. Without one, random
            seeding is nondeterministic.

    Returns:
        Fixtures ordered by round, then bracket position, then leg.

    Raises:
        InsufficientTeamsError: fewer than two teams.
        InvalidConfigurationError: a config option is out of range.
    """
    cfg = coerce_model(KnockoutConfig, config)
    ranked = coerce_teams(teams)

    if cfg.seeding == Seeding.RANDOM:
        ranked = list(ranked)
        (rng or random.Random()).shuffle(ranked)

    size = bracket_size(len(ranked))
    entrants = seed_bracket([Entrant.from_team(t) for t in ranked], size)

    fixtures: list[KnockoutFixture] = []
    round_number = 1
    current = size

    while current >= 2:
        stage = stage_name(current, round_number)
        advancing: list[Entrant] = []

        for i in range(current // 2):
            home, away = entrants[2 * i], entrants[2 * i + 1]
            if home.is_bye or away.is_bye:
                carried = away if home.is_bye else home
                logger.debug("bye_advance stage=%s entrant=%s", stage, carried.id)
                advancing.append(carried)
                continue

            fixtures.extend(_tie_fixtures(cfg, home, away, stage, round_number, len(fixtures)))
            advancing.append(
                Entrant(
                    id=f"winner_{stage.lower().replace(' ', '_')}_{i + 1}",
                    label=f"Winner {stage} {i + 1}",
                    is_placeholder=True,
                )
            )

        entrants = advancing
        current //= 2
        round_number += 1

    if cfg.include_third_place and size >= 4:
        fixtures.append(_third_place_fixture(cfg, round_number, len(fixtures)))

    logger.info(
        "knockout_generated teams=%d bracket=%d legs=%d seeding=%s fixtures=%d",
        len(ranked),
        size,
        cfg.legs,
        cfg.seeding.value,
        len(fixtures),
    )
    return fixtures


def _tie_fixtures(
    cfg: KnockoutConfig,
    home: Entrant,
    away: Entrant,
    stage: str,
    round_number: int,
    emitted: int,
) -> list[KnockoutFixture]:
    if cfg.legs == 1:
        return [
            KnockoutFixture(
                id=f"knockout_{emitted + 1}",
                round_number=round_number,
                leg=1,
                home_team_id=home.id,
                away_team_id=away.id,
                home_label=home.label,
                away_label=away.label,
                stage=stage,
                extra_time=cfg.extra_time,
                penalties=cfg.penalties,
                replay_allowed=cfg.replay_enabled,
                tie_break_rules=cfg.tie_break_rules(1),
            )
        ]

    first_leg = KnockoutFixture(
        id=f"knockout_{emitted + 1}",
        round_number=round_number,
        leg=1,
        home_team_id=home.id,
        away_team_id=away.id,
        home_label=home.label,
        away_label=away.label,
        stage=stage,
        is_first_leg=True,
    )
    second_leg = KnockoutFixture(
        id=f"knockout_{emitted + 2}",
        round_number=round_number,
        leg=2,
        home_team_id=away.id,
        away_team_id=home.id,
        home_label=away.label,
        away_label=home.label,
        stage=stage,
        is_second_leg=True,
        away_goals_rule=cfg.away_goals_rule,
        extra_time=cfg.extra_time,
        penalties=cfg.penalties,
        replay_allowed=cfg.replay_enabled,
        tie_break_rules=cfg.tie_break_rules(2),
    )
    return [first_leg, second_leg]


def _third_place_fixture(cfg: KnockoutConfig, round_number: int, emitted: int) -> KnockoutFixture:
    return KnockoutFixture(
        id=f"knockout_{emitted + 1}",
        round_number=round_number,
        leg=1,
        home_team_id="loser_sf_1",
        away_team_id="loser_sf_2",
        home_label="Loser SF 1",
        away_label="Loser SF 2",
        stage=THIRD_PLACE_STAGE,
        is_third_place=True,
        extra_time=cfg.extra_time,
        penalties=cfg.penalties,
        replay_allowed=cfg.replay_enabled,
        tie_break_rules=cfg.tie_break_rules(1),
    )
