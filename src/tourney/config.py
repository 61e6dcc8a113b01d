"""Application settings via pydantic-settings. Loads from environment and .env file.

The engine functions never read settings themselves. Applications build the
explicit config structs from here and pass them in.
"""

from __future__ import annotations

import logging
from datetime import date

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

from tourney.models.rules import PointsSystem
from tourney.models.schedule import ScheduleConstraints, TimeSlot

VALID_ENVS = frozenset({"development", "staging", "production"})


class Settings(BaseSettings):
    """Tourney engine configuration.

    All values can be overridden via environment variables or .env file.
    """

    # Environment
    tourney_env: str = "development"

    # Logging
    tourney_log_level: str = "INFO"

    # League points
    tourney_points_win: int = 3
    tourney_points_draw: int = 1
    tourney_points_loss: int = 0

    # Scheduling defaults
    tourney_minimum_rest_days: int = 2
    tourney_derby_spacing: int = 3  # rounds between meetings of the same derby
    tourney_time_slots: str = "10:00,14:00,16:00"

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @field_validator("tourney_env")
    @classmethod
    def _check_env(cls, v: str) -> str:
        if v not in VALID_ENVS:
            raise ValueError(f"TOURNEY_ENV must be one of {sorted(VALID_ENVS)}, got {v!r}")
        return v

    @field_validator("tourney_time_slots")
    @classmethod
    def _check_slots(cls, v: str) -> str:
        slots = [s.strip() for s in v.split(",") if s.strip()]
        if not slots:
            raise ValueError("TOURNEY_TIME_SLOTS needs at least one HH:MM entry")
        for s in slots:
            TimeSlot(time=s)
        return ",".join(slots)

    @model_validator(mode="after")
    def _check_points(self) -> Settings:
        """A draw may not be worth more than a win, nor a loss more than a draw."""
        PointsSystem(
            win=self.tourney_points_win,
            draw=self.tourney_points_draw,
            loss=self.tourney_points_loss,
        )
        return self

    def points_system(self) -> PointsSystem:
        return PointsSystem(
            win=self.tourney_points_win,
            draw=self.tourney_points_draw,
            loss=self.tourney_points_loss,
        )

    def time_slots(self) -> tuple[TimeSlot, ...]:
        return tuple(TimeSlot(time=s) for s in self.tourney_time_slots.split(","))

    def schedule_constraints(self, start_date: date | str) -> ScheduleConstraints:
        """Constraints for a schedule starting on ``start_date`` with the configured defaults."""
        return ScheduleConstraints(
            start_date=start_date,
            time_slots=self.time_slots(),
            minimum_rest_days=self.tourney_minimum_rest_days,
            derby_spacing=self.tourney_derby_spacing,
        )


def configure_logging(settings: Settings) -> None:
    """Root logging setup for applications and scripts. The library never calls this."""
    logging.basicConfig(
        level=getattr(logging, settings.tourney_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
