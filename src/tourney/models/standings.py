"""Standings models: match results in, table rows out."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

# Statuses after which a result can no longer change.
TERMINAL_STATUSES: frozenset[str] = frozenset({"finished", "completed", "full_time"})


class CompletedMatch(BaseModel):
    """A played (or playing) match as reported by the results service."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    home_team_id: str
    away_team_id: str
    home_score: int | None = Field(default=None, ge=0)
    away_score: int | None = Field(default=None, ge=0)
    status: str = "finished"

    @property
    def is_final(self) -> bool:
        return self.status.strip().lower() in TERMINAL_STATUSES

    @property
    def has_score(self) -> bool:
        return self.home_score is not None and self.away_score is not None


class HeadToHeadRecord(BaseModel):
    """One team's accumulated record against a single opponent."""

    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0


class TeamStats(BaseModel):
    """A row of the standings table."""

    team_id: str
    team_name: str = ""
    position: int = 0
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0
    form: list[str] = Field(default_factory=list)
    head_to_head: dict[str, HeadToHeadRecord] = Field(default_factory=dict)
    # Still level with a neighbour after every tie-break; order is input order.
    tie_unresolved: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    @computed_field  # type: ignore[prop-decorator]
    @property
    def form_string(self) -> str:
        return "".join(self.form)

    def primary_key(self) -> tuple[int, int, int]:
        """(points, goal difference, goals for), the table's main ordering."""
        return (self.points, self.goal_difference, self.goals_for)
