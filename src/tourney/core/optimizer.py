"""Schedule optimizer: venues, kickoff times, and conflict detection.

Takes the fixture list produced by a generator and:

1. Assigns a venue to each fixture, preferring the home team's county, then
   a venue tied to the home team's sub-county, then spreading the rest over
   all venues in turn. Each assignment gets a travel cost (1 home county,
   2 away county, 3 neutral).
2. Assigns kickoffs matchday by matchday. Fixtures of a matchday cycle through
   the configured time slots; consecutive matchdays are
   ``minimum_rest_days + 1`` days apart.
3. Tags derbies (shared county, sub-county or ward) with HIGH priority.
4. Reports conflicts. Nothing is moved to resolve them: whether to
   reschedule, warn, or block is the caller's call.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime, timedelta
from typing import Any

from tourney.core.inputs import coerce_fixtures, coerce_model, coerce_team, coerce_venues
from tourney.errors import InvalidConfigurationError
from tourney.models.fixture import Fixture, FixtureStatus, Priority
from tourney.models.schedule import (
    Conflict,
    ConflictType,
    ScheduleConstraints,
    ScheduleResult,
    Severity,
)
from tourney.models.team import Team, Venue, shares_locality

logger = logging.getLogger(__name__)

# Travel costs above this are reported as a burden.
MAX_ACCEPTABLE_TRAVEL_COST = 2

TeamLookup = Callable[[str], Team]


def select_venue(home: Team, venues: Sequence[Venue], index: int) -> Venue:
    """Home county first, then the home sub-county, then round-robin by index."""
    if home.county:
        for venue in venues:
            if venue.county == home.county:
                return venue
    if home.sub_county:
        for venue in venues:
            if home.sub_county in (venue.county, venue.sub_county):
                return venue
    return venues[index % len(venues)]


def travel_cost(venue: Venue, home: Team, away: Team) -> int:
    if venue.county and venue.county == home.county:
        return 1
    if venue.county and venue.county == away.county:
        return 2
    return 3


def matchdays(fixtures: Sequence[Fixture]) -> list[list[Fixture]]:
    """Group fixtures by (round, leg), in ascending order, keeping input order within."""
    grouped: dict[tuple[int, int], list[Fixture]] = defaultdict(list)
    for f in fixtures:
        grouped[(f.round_number, f.leg)].append(f)
    return [grouped[key] for key in sorted(grouped)]


def optimize_schedule(
    fixtures: Iterable[Fixture | Mapping[str, Any]],
    venues: Iterable[Venue | Mapping[str, Any]] | None,
    constraints: ScheduleConstraints | Mapping[str, Any],
    teams: Iterable[Team | Mapping[str, Any] | str] | None = None,
) -> ScheduleResult:
    """Assign venues and kickoffs, tag derbies, and report conflicts.

    Args:
        fixtures: Generator output (any fixture variant, or dicts). Rows that
            do not parse as a fixture are skipped with a warning.
        venues: Available venues. With none, fixtures keep no venue.
        constraints: Start date, time slots, rest days, derby spacing.
        teams: Team details for region lookups. Fixtures whose team ids are
            unknown (knockout placeholders included) are scheduled without
            regional preferences.

    Returns:
        ``ScheduleResult`` with new fixture objects in matchday order and the
        conflict list.

    Raises:
        InvalidConfigurationError: unparseable constraints, venues or teams.
    """
    cfg = coerce_model(ScheduleConstraints, constraints)
    venue_list = coerce_venues(venues)
    team_index = {t.id: t for t in (coerce_team(t) for t in teams or ())}
    source = _parse_fixtures(fixtures)

    def lookup(team_id: str) -> Team:
        team = team_index.get(team_id)
        if team is None:
            team = Team(id=team_id, name=team_id)
        return team

    unknown = sorted({tid for f in source for tid in f.team_ids if tid not in team_index})
    if team_index and unknown:
        logger.warning("schedule_unknown_teams count=%d ids=%s", len(unknown), ",".join(unknown))

    scheduled: list[Fixture] = []
    current_date = cfg.start_date
    position = {f.id: i for i, f in enumerate(source)}

    for day in matchdays(source):
        for slot_idx, fixture in enumerate(day):
            home, away = lookup(fixture.home_team_id), lookup(fixture.away_team_id)
            slot = cfg.time_slots[slot_idx % len(cfg.time_slots)]
            update: dict[str, Any] = {
                "kickoff": datetime.combine(current_date, slot.as_time()),
                "time_slot": slot.label or slot.time,
                "status": FixtureStatus.SCHEDULED,
            }
            if venue_list:
                venue = select_venue(home, venue_list, position[fixture.id])
                update["venue_id"] = venue.id
                update["travel_cost"] = travel_cost(venue, home, away)
            derby = shares_locality(home, away)
            update["is_derby"] = derby
            update["priority"] = Priority.HIGH if derby else Priority.NORMAL
            scheduled.append(fixture.model_copy(update=update))
        current_date += timedelta(days=cfg.minimum_rest_days + 1)

    venue_names = {v.id: v.name or v.id for v in venue_list}
    conflicts = [
        *_venue_conflicts(scheduled, venue_names),
        *_rest_conflicts(scheduled, cfg.minimum_rest_days, lookup),
        *_travel_conflicts(scheduled, venue_names, lookup),
        *_derby_spacing_conflicts(scheduled, cfg.derby_spacing, lookup),
    ]

    logger.info(
        "schedule_optimized fixtures=%d matchdays=%d venues=%d conflicts=%d",
        len(scheduled),
        len({(f.round_number, f.leg) for f in scheduled}),
        len(venue_list),
        len(conflicts),
    )
    return ScheduleResult(fixtures=scheduled, conflicts=conflicts)


def _parse_fixtures(raw_fixtures: Iterable[Fixture | Mapping[str, Any]]) -> list[Fixture]:
    parsed: list[Fixture] = []
    for raw in raw_fixtures:
        try:
            parsed.extend(coerce_fixtures([raw]))
        except InvalidConfigurationError as exc:
            fixture_id = raw.get("id", "?") if isinstance(raw, Mapping) else "?"
            logger.warning("schedule_invalid_fixture id=%s error=%s", fixture_id, exc)
    return parsed


def _venue_conflicts(fixtures: Sequence[Fixture], venue_names: dict[str, str]) -> list[Conflict]:
    conflicts: list[Conflict] = []
    booked: dict[tuple[str, datetime], Fixture] = {}
    for f in fixtures:
        if f.venue_id is None or f.kickoff is None:
            continue
        key = (f.venue_id, f.kickoff)
        first = booked.get(key)
        if first is not None:
            conflicts.append(
                Conflict(
                    type=ConflictType.VENUE_CONFLICT,
                    severity=Severity.HIGH,
                    message=(
                        f"Double booking at {venue_names.get(f.venue_id, f.venue_id)} "
                        f"on {f.kickoff:%Y-%m-%d %H:%M}"
                    ),
                    fixture_ids=(first.id, f.id),
                )
            )
        else:
            booked[key] = f
    return conflicts


def _rest_conflicts(
    fixtures: Sequence[Fixture], minimum_rest_days: int, lookup: TeamLookup
) -> list[Conflict]:
    conflicts: list[Conflict] = []
    last_played: dict[str, Fixture] = {}
    timed = sorted((f for f in fixtures if f.kickoff is not None), key=lambda f: f.kickoff)
    for f in timed:
        for team_id in f.team_ids:
            previous = last_played.get(team_id)
            if previous is not None:
                days = (f.kickoff - previous.kickoff) / timedelta(days=1)
                if days < minimum_rest_days:
                    conflicts.append(
                        Conflict(
                            type=ConflictType.REST_PERIOD_VIOLATION,
                            severity=Severity.MEDIUM,
                            message=(
                                f"{lookup(team_id).display_name} has only {math.floor(days)} "
                                f"day(s) rest (minimum {minimum_rest_days})"
                            ),
                            fixture_ids=(previous.id, f.id),
                            team_id=team_id,
                        )
                    )
            last_played[team_id] = f
    return conflicts


def _travel_conflicts(
    fixtures: Sequence[Fixture], venue_names: dict[str, str], lookup: TeamLookup
) -> list[Conflict]:
    conflicts: list[Conflict] = []
    for f in fixtures:
        if f.travel_cost is not None and f.travel_cost > MAX_ACCEPTABLE_TRAVEL_COST:
            conflicts.append(
                Conflict(
                    type=ConflictType.TRAVEL_BURDEN,
                    severity=Severity.LOW,
                    message=(
                        f"High travel burden for {lookup(f.home_team_id).display_name}: "
                        f"{venue_names.get(f.venue_id or '', f.venue_id)} is a neutral venue"
                    ),
                    fixture_ids=(f.id,),
                )
            )
    return conflicts


def _derby_spacing_conflicts(
    fixtures: Sequence[Fixture], spacing: int, lookup: TeamLookup
) -> list[Conflict]:
    if spacing <= 0:
        return []
    conflicts: list[Conflict] = []
    previous: dict[frozenset[str], Fixture] = {}
    for f in sorted((f for f in fixtures if f.is_derby), key=lambda f: f.round_number):
        earlier = previous.get(f.pairing)
        if earlier is not None:
            gap = f.round_number - earlier.round_number
            # Both legs of a knockout tie share a round; that is one tie, not two derbies.
            if 0 < gap < spacing:
                home, away = lookup(f.home_team_id), lookup(f.away_team_id)
                conflicts.append(
                    Conflict(
                        type=ConflictType.DERBY_SPACING,
                        severity=Severity.LOW,
                        message=(
                            f"Derby {home.display_name} v {away.display_name} repeats after "
                            f"{gap} round(s) (minimum {spacing})"
                        ),
                        fixture_ids=(earlier.id, f.id),
                    )
                )
        previous[f.pairing] = f
    return conflicts
