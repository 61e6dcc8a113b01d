"""Shared test fixtures."""

from datetime import date

import pytest

from tourney.config import Settings
from tourney.models.schedule import ScheduleConstraints
from tourney.models.team import Team, Venue


@pytest.fixture
def settings() -> Settings:
    """Test settings with defaults."""
    return Settings(tourney_env="development", _env_file=None)


@pytest.fixture
def four_teams() -> list[Team]:
    return [Team(id=f"T{i}", name=f"Team {i}") for i in range(1, 5)]


@pytest.fixture
def regional_teams() -> list[Team]:
    """Six teams over three counties; T1/T2 and T3/T4 are derbies."""
    return [
        Team(id="T1", name="Nakuru Stars", county="Nakuru", sub_county="Naivasha"),
        Team(id="T2", name="Nakuru United", county="Nakuru", sub_county="Gilgil"),
        Team(id="T3", name="Kisumu City", county="Kisumu", sub_county="Kisumu Central"),
        Team(id="T4", name="Kisumu Rangers", county="Kisumu", sub_county="Nyando"),
        Team(id="T5", name="Mombasa FC", county="Mombasa"),
        Team(id="T6", name="Nyeri Hills"),
    ]


@pytest.fixture
def venues() -> list[Venue]:
    return [
        Venue(id="V1", name="Afraha Stadium", county="Nakuru", capacity=8000),
        Venue(id="V2", name="Moi Stadium", county="Kisumu", capacity=5000),
        Venue(id="V3", name="Nyayo Stadium", county="Nairobi", capacity=30000),
    ]


@pytest.fixture
def constraints() -> ScheduleConstraints:
    return ScheduleConstraints(start_date=date(2025, 3, 1))
