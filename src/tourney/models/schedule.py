"""Scheduling constraints and the conflicts the optimizer reports."""

from __future__ import annotations

import re
from datetime import date, datetime, time
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from tourney.models.fixture import Fixture

_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


class TimeSlot(BaseModel):
    """A kickoff time offered on every matchday."""

    model_config = ConfigDict(frozen=True)

    time: str
    label: str = ""

    @field_validator("time")
    @classmethod
    def _check_time(cls, v: str) -> str:
        if not _TIME_RE.match(v.strip()):
            raise ValueError(f"time slot must look like HH:MM, got {v!r}")
        return v.strip()

    def as_time(self) -> time:
        hours, minutes = (int(part) for part in self.time.split(":"))
        return time(hours, minutes)


DEFAULT_TIME_SLOTS: tuple[TimeSlot, ...] = (
    TimeSlot(time="10:00", label="Morning"),
    TimeSlot(time="14:00", label="Afternoon"),
    TimeSlot(time="16:00", label="Evening"),
)


class ScheduleConstraints(BaseModel):
    """Inputs to the optimizer.

    ``derby_spacing`` is measured in rounds, ``minimum_rest_days`` in days.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    start_date: date
    time_slots: tuple[TimeSlot, ...] = DEFAULT_TIME_SLOTS
    minimum_rest_days: int = Field(default=2, ge=0, le=60)
    derby_spacing: int = Field(default=3, ge=0, le=100)

    @field_validator("start_date", mode="before")
    @classmethod
    def _parse_start_date(cls, v: object) -> object:
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str):
            text = v.strip()
            try:
                return date.fromisoformat(text)
            except ValueError:
                pass
            try:
                return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
            except ValueError:
                raise ValueError(f"start date {v!r} is not an ISO date") from None
        return v

    @field_validator("time_slots", mode="before")
    @classmethod
    def _coerce_slots(cls, v: object) -> object:
        if isinstance(v, str):
            v = [part for part in v.split(",") if part.strip()]
        if isinstance(v, (list, tuple)):
            if not v:
                raise ValueError("at least one time slot is required")
            return [TimeSlot(time=s) if isinstance(s, str) else s for s in v]
        return v


class ConflictType(StrEnum):
    VENUE_CONFLICT = "VENUE_CONFLICT"
    REST_PERIOD_VIOLATION = "REST_PERIOD_VIOLATION"
    TRAVEL_BURDEN = "TRAVEL_BURDEN"
    DERBY_SPACING = "DERBY_SPACING"


class Severity(StrEnum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Conflict(BaseModel):
    """A scheduling problem left for the caller to resolve or accept."""

    model_config = ConfigDict(frozen=True)

    type: ConflictType
    severity: Severity
    message: str
    fixture_ids: tuple[str, ...]
    team_id: str | None = None


class ScheduleResult(BaseModel):
    """Optimizer output."""

    fixtures: list[Fixture] = Field(default_factory=list)
    conflicts: list[Conflict] = Field(default_factory=list)

    def conflicts_of(self, conflict_type: ConflictType) -> list[Conflict]:
        return [c for c in self.conflicts if c.type == conflict_type]

    @property
    def has_blocking_conflicts(self) -> bool:
        return any(c.severity == Severity.HIGH for c in self.conflicts)
