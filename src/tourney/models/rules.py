"""Competition rule structs: knockout format and points system.

Every option is enumerated here with its default; a struct is validated once
when it is built and the generators trust it afterwards.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class Seeding(StrEnum):
    """How knockout entrants are ordered before pairing.

    ``performance`` means the caller already sorted teams by form, so it
    pairs exactly like ``standard``.
    """

    STANDARD = "standard"
    RANDOM = "random"
    PERFORMANCE = "performance"


class KnockoutConfig(BaseModel):
    """Knockout format options."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    legs: int = Field(default=1, ge=1, le=2)
    seeding: Seeding = Seeding.STANDARD
    include_third_place: bool = False
    extra_time: bool = False
    extra_time_duration: int = Field(default=30, ge=1, le=60)
    penalties: bool = True
    replay_enabled: bool = False
    max_replays: int = Field(default=1, ge=1, le=5)
    away_goals_rule: bool = False

    def tie_break_rules(self, legs: int | None = None) -> tuple[str, ...]:
        """Ordered rules deciding a tie played over ``legs`` legs.

        Falls back to ``higher_seed_advances`` when nothing else applies.
        """
        legs = self.legs if legs is None else legs
        rules: list[str] = []
        if legs == 2:
            rules.append("aggregate_score")
            if self.away_goals_rule:
                rules.append("away_goals")
        if self.extra_time:
            rules.append(f"extra_time_{self.extra_time_duration}min")
        if self.penalties:
            rules.append("penalties")
        if self.replay_enabled:
            rules.append(f"replay_max{self.max_replays}")
        if not rules:
            rules.append("higher_seed_advances")
        return tuple(rules)


class PointsSystem(BaseModel):
    """League points awarded per result."""

    model_config = ConfigDict(frozen=True)

    win: int = Field(default=3, ge=0)
    draw: int = Field(default=1, ge=0)
    loss: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> PointsSystem:
        if not self.win >= self.draw >= self.loss:
            msg = (
                "points must satisfy win >= draw >= loss "
                f"(got {self.win}/{self.draw}/{self.loss})"
            )
            raise ValueError(msg)
        return self

