"""Fixture models: the output of the generators and the optimizer.

A fixture is a tagged union on ``kind``. Knockout-only fields (stage label,
leg flags, tie-break rules) live on ``KnockoutFixture`` alone; group tags live
on ``GroupFixture``. The optimizer fills the scheduling fields shared by all
variants and returns copies, so generator output is never mutated.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from tourney.models.team import Team


class FixtureStatus(StrEnum):
    PENDING = "pending"
    SCHEDULED = "scheduled"


class Priority(StrEnum):
    HIGH = "HIGH"
    NORMAL = "NORMAL"


class _FixtureBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    round_number: int = Field(ge=1)
    leg: int = Field(default=1, ge=1)
    home_team_id: str
    away_team_id: str
    status: FixtureStatus = FixtureStatus.PENDING

    # Filled in by the optimizer
    venue_id: str | None = None
    kickoff: datetime | None = None
    time_slot: str | None = None
    travel_cost: int | None = None
    is_derby: bool = False
    priority: Priority = Priority.NORMAL

    @property
    def team_ids(self) -> tuple[str, str]:
        return (self.home_team_id, self.away_team_id)

    @property
    def pairing(self) -> frozenset[str]:
        """Unordered pair of team ids, for head-to-head lookups."""
        return frozenset(self.team_ids)

    def involves(self, team_id: str) -> bool:
        return team_id in self.team_ids


class RoundRobinFixture(_FixtureBase):
    """A league fixture from a flat round robin."""

    kind: Literal["round_robin"] = "round_robin"


class GroupFixture(_FixtureBase):
    """A round-robin fixture played inside a group."""

    kind: Literal["group"] = "group"
    group_id: str
    group_name: str


class KnockoutFixture(_FixtureBase):
    """One leg of a knockout tie.

    Later-round entrants are placeholders (``Winner QF 1``); ``home_label`` and
    ``away_label`` carry the display name for real teams and placeholders alike.
    """

    kind: Literal["knockout"] = "knockout"
    stage: str
    home_label: str = ""
    away_label: str = ""
    is_first_leg: bool = False
    is_second_leg: bool = False
    is_third_place: bool = False
    extra_time: bool = False
    penalties: bool = False
    replay_allowed: bool = False
    away_goals_rule: bool = False
    tie_break_rules: tuple[str, ...] = ()

    @property
    def is_decisive(self) -> bool:
        """True for the leg after which a winner must be found."""
        return not self.is_first_leg


Fixture = Annotated[
    RoundRobinFixture | GroupFixture | KnockoutFixture,
    Field(discriminator="kind"),
]

FixtureAdapter: TypeAdapter[list[Fixture]] = TypeAdapter(list[Fixture])


class Group(BaseModel):
    """A group of teams drawn for a group stage."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    teams: tuple[Team, ...] = ()

    @property
    def team_ids(self) -> list[str]:
        return [t.id for t in self.teams]


class GroupStage(BaseModel):
    """Composer output: the draw plus every group fixture.

    The caller owns this object; nothing is kept between calls.
    """

    groups: list[Group] = Field(default_factory=list)
    fixtures: list[GroupFixture] = Field(default_factory=list)

    def fixtures_for(self, group_id: str) -> list[GroupFixture]:
        return [f for f in self.fixtures if f.group_id == group_id]
