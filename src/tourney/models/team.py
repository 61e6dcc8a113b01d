"""Team and Venue models: the immutable inputs to every generator.

Region attributes (county, sub-county, ward) drive derby detection and the
geographic spread of group draws.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Reserved id of the synthetic opponent used to pad odd counts and brackets.
BYE_ID = "BYE"


class Team(BaseModel):
    """A registered team."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str = ""
    county: str = ""
    sub_county: str = Field(default="", alias="subCounty")
    ward: str = ""
    region: str = ""

    @property
    def is_bye(self) -> bool:
        return self.id == BYE_ID

    @property
    def region_key(self) -> str:
        """Geographic key used to spread teams across groups."""
        return self.county or self.region or ""

    @property
    def display_name(self) -> str:
        return self.name or self.id


class Venue(BaseModel):
    """A pitch a fixture can be played at."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str = ""
    county: str = ""
    sub_county: str = Field(default="", alias="subCounty")
    capacity: int = Field(default=0, ge=0)


BYE_TEAM = Team(id=BYE_ID, name="BYE")


def shares_locality(home: Team, away: Team) -> bool:
    """True when two teams share a non-empty county, sub-county, or ward."""
    for attr in ("county", "sub_county", "ward"):
        value = getattr(home, attr)
        if value and value == getattr(away, attr):
            return True
    return False
