"""Group-stage draw and fixtures.

Teams are sorted by region and dealt into groups in a snake
(boustrophedon) order: A, B, C, C, B, A, A, B, ... Neighbouring teams of the
same region therefore land in different groups. Each group then plays its
own round robin.
"""

from __future__ import annotations

import logging
import string
from collections.abc import Iterable, Mapping
from typing import Any

from tourney.core.inputs import check_legs, coerce_teams
from tourney.core.round_robin import generate_round_robin
from tourney.errors import InsufficientTeamsError, InvalidConfigurationError
from tourney.models.fixture import Group, GroupFixture, GroupStage
from tourney.models.team import Team

logger = logging.getLogger(__name__)


def group_name(index: int) -> str:
    """``Group A`` .. ``Group Z``, then ``Group 27`` onwards."""
    if index < len(string.ascii_uppercase):
        return f"Group {string.ascii_uppercase[index]}"
    return f"Group {index + 1}"


def snake_order(group_count: int) -> Iterable[int]:
    """Yield group indices 0..g-1, g-1..0, 0..g-1, ... forever."""
    forward = list(range(group_count))
    backward = forward[::-1]
    while True:
        yield from forward
        yield from backward


def distribute_teams(
    teams: list[Team],
    group_count: int,
    teams_per_group: int,
) -> list[list[Team]]:
    """Deal region-sorted teams into groups in snake order, skipping full groups.

    When the team count is not a multiple of ``group_count`` the groups come
    out uneven: the groups the last pass of the snake never reaches are one
    team short.
    """
    ordered = sorted(teams, key=lambda t: t.region_key)
    buckets: list[list[Team]] = [[] for _ in range(group_count)]
    order = snake_order(group_count)
    for team in ordered:
        idx = next(order)
        while len(buckets[idx]) >= teams_per_group:
            idx = next(order)
        buckets[idx].append(team)
    return buckets


def compose_groups(
    teams: Iterable[Team | Mapping[str, Any] | str],
    group_count: int,
    teams_per_group: int,
    legs: int = 1,
) -> GroupStage:
    """Draw groups and generate every group fixture.

    Args:
        teams: Teams to draw.
        group_count: Number of groups.
        teams_per_group: Capacity of each group.
        legs: 1 or 2 round-robin legs inside each group.

    Returns:
        A ``GroupStage`` holding the groups and their fixtures. Fixture ids
        are numbered across all groups (``fixture_1`` ...).

    Raises:
        InvalidConfigurationError: non-positive counts, bad legs, or more
            teams than the groups can hold.
        InsufficientTeamsError: fewer than two teams, or a group that would
            end up with fewer than two.
    """
    check_legs(legs)
    for label, value in (("group count", group_count), ("teams per group", teams_per_group)):
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidConfigurationError(f"{label} must be a positive integer, got {value!r}")

    entrants = coerce_teams(teams)
    capacity = group_count * teams_per_group
    if len(entrants) > capacity:
        raise InvalidConfigurationError(
            f"{len(entrants)} teams do not fit in {group_count} groups of {teams_per_group}"
        )

    buckets = distribute_teams(entrants, group_count, teams_per_group)
    for idx, bucket in enumerate(buckets):
        if len(bucket) < 2:
            raise InsufficientTeamsError(
                f"{group_name(idx)} would have {len(bucket)} team(s); at least 2 are required"
            )

    groups: list[Group] = []
    fixtures: list[GroupFixture] = []
    for idx, bucket in enumerate(buckets):
        group = Group(id=f"group_{idx + 1}", name=group_name(idx), teams=tuple(bucket))
        groups.append(group)
        for fixture in generate_round_robin(bucket, legs=legs):
            fixtures.append(
                GroupFixture(
                    id=f"fixture_{len(fixtures) + 1}",
                    round_number=fixture.round_number,
                    leg=fixture.leg,
                    home_team_id=fixture.home_team_id,
                    away_team_id=fixture.away_team_id,
                    group_id=group.id,
                    group_name=group.name,
                )
            )

    logger.info(
        "group_stage_composed teams=%d groups=%d sizes=%s fixtures=%d",
        len(entrants),
        group_count,
        ",".join(str(len(b)) for b in buckets),
        len(fixtures),
    )
    return GroupStage(groups=groups, fixtures=fixtures)
