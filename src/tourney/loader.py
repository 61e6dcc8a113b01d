"""YAML helpers for tournament inputs and generated fixtures.

The only module that touches the filesystem. Engine functions take the
structs built here and never read files themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tourney.errors import InvalidConfigurationError
from tourney.models.fixture import Fixture, FixtureAdapter
from tourney.models.rules import KnockoutConfig, PointsSystem
from tourney.models.schedule import ScheduleConstraints
from tourney.models.team import Team, Venue

logger = logging.getLogger(__name__)


class TournamentInput(BaseModel):
    """Everything a caller needs to generate and schedule one competition."""

    name: str = ""
    teams: list[Team] = Field(default_factory=list)
    venues: list[Venue] = Field(default_factory=list)
    constraints: ScheduleConstraints | None = None
    points_system: PointsSystem = Field(default_factory=PointsSystem, alias="pointsSystem")
    knockout: KnockoutConfig = Field(default_factory=KnockoutConfig)

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


def load_tournament_yaml(path: Path | str) -> TournamentInput:
    """Load teams, venues and rules from a YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidConfigurationError(f"{path}: expected a mapping at the top level")
    try:
        tournament = TournamentInput.model_validate(data)
    except ValidationError as exc:
        raise InvalidConfigurationError(f"{path}: {exc.error_count()} invalid field(s)") from exc
    logger.info(
        "tournament_loaded path=%s teams=%d venues=%d",
        path,
        len(tournament.teams),
        len(tournament.venues),
    )
    return tournament


def dump_fixtures_yaml(fixtures: Sequence[Fixture], path: Path | str) -> None:
    """Save a fixture list to YAML with ISO timestamps."""
    data = FixtureAdapter.dump_python(list(fixtures), mode="json")
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    logger.info("fixtures_saved path=%s count=%d", path, len(fixtures))


def load_fixtures_yaml(path: Path | str) -> list[Fixture]:
    """Read back a fixture list written by ``dump_fixtures_yaml``."""
    with open(path) as f:
        data = yaml.safe_load(f) or []
    try:
        return FixtureAdapter.validate_python(data)
    except ValidationError as exc:
        raise InvalidConfigurationError(f"{path}: {exc.error_count()} invalid fixture(s)") from exc
