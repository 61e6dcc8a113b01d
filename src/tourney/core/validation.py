"""Sanity checks and summary figures for a generated fixture list.

Useful after a caller has edited fixtures by hand: confirms every team still
plays the right number of matches, that no fixture is duplicated, and that
derby meetings are spread out.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, Field

from tourney.core.inputs import check_legs, coerce_fixtures, coerce_team
from tourney.models.fixture import Fixture
from tourney.models.team import Team


class FixtureReport(BaseModel):
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


class FixtureStatistics(BaseModel):
    total_rounds: int = 0
    total_matches: int = 0
    matches_per_round: int = 0
    derby_matches: int = 0
    legs: int = 0


def validate_fixtures(
    fixtures: Iterable[Fixture | Mapping[str, Any]],
    teams: Iterable[Team | Mapping[str, Any] | str],
    legs: int = 1,
    derby_spacing: int = 0,
) -> FixtureReport:
    """Check a round-robin fixture list against its team list.

    Errors: a team playing other than ``(N-1) * legs`` matches, or the same
    (home, away, leg) fixture appearing twice. Warnings: a derby pairing that
    recurs within ``derby_spacing`` rounds (needs optimizer-tagged fixtures).
    """
    check_legs(legs)
    fixture_list = coerce_fixtures(fixtures)
    team_list = [coerce_team(t) for t in teams]
    report = FixtureReport()

    played: Counter[str] = Counter()
    for f in fixture_list:
        played.update(f.team_ids)

    expected = (len(team_list) - 1) * legs
    for team in team_list:
        if played[team.id] != expected:
            report.errors.append(
                f"Team {team.display_name} has {played[team.id]} matches, expected {expected}"
            )

    signatures: Counter[tuple[str, str, int]] = Counter(
        (f.home_team_id, f.away_team_id, f.leg) for f in fixture_list
    )
    for (home, away, leg), count in sorted(signatures.items()):
        if count > 1:
            report.errors.append(f"Duplicate fixture {home} v {away} (leg {leg}) x{count}")

    if derby_spacing > 0:
        last_round: dict[frozenset[str], int] = {}
        for f in sorted((f for f in fixture_list if f.is_derby), key=lambda f: f.round_number):
            previous = last_round.get(f.pairing)
            if previous is not None and 0 < f.round_number - previous < derby_spacing:
                report.warnings.append(
                    f"Derby spacing: {' v '.join(sorted(f.pairing))} "
                    f"gap of {f.round_number - previous} round(s)"
                )
            last_round[f.pairing] = f.round_number

    return report


def fixture_statistics(fixtures: Sequence[Fixture | Mapping[str, Any]]) -> FixtureStatistics:
    fixture_list = coerce_fixtures(fixtures)
    rounds = {f.round_number for f in fixture_list}
    total = len(fixture_list)
    return FixtureStatistics(
        total_rounds=len(rounds),
        total_matches=total,
        matches_per_round=round(total / len(rounds)) if rounds else 0,
        derby_matches=sum(1 for f in fixture_list if f.is_derby),
        legs=max((f.leg for f in fixture_list), default=0),
    )
