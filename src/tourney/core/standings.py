"""League table computation with head-to-head tie-breaks.

Table order:
    (a) points
    (b) goal difference
    (c) goals scored
    (d) head-to-head mini-league among the teams level on (a)-(c): points,
        then goal difference, then goals scored, counting only the matches
        those teams played against each other.

Step (d) recurses: when the mini-league separates some of the tied teams but
leaves a smaller group level, that group gets a mini-league of its own.
Teams still level after that keep their input order and are marked
``tie_unresolved``. There is no further criterion (no fair-play table, no
drawing of lots).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from itertools import groupby
from typing import Any

from pydantic import ValidationError

from tourney.core.inputs import coerce_model, coerce_team
from tourney.models.rules import PointsSystem
from tourney.models.standings import CompletedMatch, HeadToHeadRecord, TeamStats
from tourney.models.team import Team

logger = logging.getLogger(__name__)

FORM_LENGTH = 5

# Statuses counted only when provisional (live) tables are requested.
LIVE_STATUSES: frozenset[str] = frozenset({"live", "in_progress", "half_time"})


def calculate_standings(
    matches: Iterable[CompletedMatch | Mapping[str, Any]],
    teams: Iterable[Team | Mapping[str, Any] | str] = (),
    points_system: PointsSystem | Mapping[str, Any] | None = None,
    include_live: bool = False,
) -> list[TeamStats]:
    """Compute the sorted standings table.

    Args:
        matches: Match results. Only finished matches with both scores count;
            anything else is skipped, never raised.
        teams: Teams that get a row even before playing. Teams that appear
            only in matches get a row too, after the listed ones.
        points_system: Points per win/draw/loss (default 3/1/0).
        include_live: Also count in-play matches at their current score,
            for a provisional table.

    Returns:
        New ``TeamStats`` rows in table order with 1-based ``position``.
    """
    points = coerce_model(PointsSystem, points_system)
    rows: dict[str, TeamStats] = {}
    for t in teams:
        team = coerce_team(t)
        rows.setdefault(team.id, TeamStats(team_id=team.id, team_name=team.display_name))

    counted = 0
    skipped = 0
    for raw in matches:
        match = _coerce_match(raw)
        if match is None or not _counts(match, include_live):
            skipped += 1
            continue
        if match.home_team_id == match.away_team_id:
            logger.warning("standings_self_match team=%s", match.home_team_id)
            skipped += 1
            continue
        for team_id in (match.home_team_id, match.away_team_id):
            if team_id not in rows:
                rows[team_id] = TeamStats(team_id=team_id, team_name=team_id)
        _apply_result(rows[match.home_team_id], rows[match.away_team_id], match, points)
        counted += 1

    ordered = rank_rows(list(rows.values()), points)
    table = [row.model_copy(update={"position": i + 1}) for i, row in enumerate(ordered)]

    logger.info("standings_calculated teams=%d counted=%d skipped=%d", len(table), counted, skipped)
    return table


def rank_rows(rows: Sequence[TeamStats], points: PointsSystem) -> list[TeamStats]:
    """Sort by (points, GD, GF) and settle every level run by head-to-head."""
    ordered = sorted(rows, key=lambda r: _descending(r.primary_key()))
    result: list[TeamStats] = []
    for _key, run in groupby(ordered, key=TeamStats.primary_key):
        result.extend(resolve_head_to_head(list(run), points))
    return result


def resolve_head_to_head(tied: Sequence[TeamStats], points: PointsSystem) -> list[TeamStats]:
    """Order a group of level teams by their mini-league, recursively.

    Never looks outside ``tied``, so it cannot move a team past one that
    differs on the primary keys. Teams the mini-league cannot separate keep
    their order and come back flagged ``tie_unresolved``.
    """
    if len(tied) < 2:
        return list(tied)

    table = mini_league(tied, points)
    ordered = sorted(tied, key=lambda r: _descending(table[r.team_id]))
    result: list[TeamStats] = []
    for _key, run in groupby(ordered, key=lambda r: table[r.team_id]):
        level = list(run)
        if 1 < len(level) < len(tied):
            result.extend(resolve_head_to_head(level, points))
        elif len(level) > 1:
            logger.info(
                "standings_tie_unresolved teams=%s", ",".join(r.team_id for r in level)
            )
            result.extend(r.model_copy(update={"tie_unresolved": True}) for r in level)
        else:
            result.extend(level)
    return result


def mini_league(tied: Sequence[TeamStats], points: PointsSystem) -> dict[str, tuple[int, int, int]]:
    """(points, GD, GF) per team, from matches among ``tied`` only."""
    ids = {r.team_id for r in tied}
    table: dict[str, tuple[int, int, int]] = {}
    for row in tied:
        pts = gf = ga = 0
        for opponent_id, rec in row.head_to_head.items():
            if opponent_id not in ids or opponent_id == row.team_id:
                continue
            pts += rec.won * points.win + rec.drawn * points.draw + rec.lost * points.loss
            gf += rec.goals_for
            ga += rec.goals_against
        table[row.team_id] = (pts, gf - ga, gf)
    return table


def _descending(key: tuple[int, ...]) -> tuple[int, ...]:
    return tuple(-v for v in key)


def _coerce_match(raw: CompletedMatch | Mapping[str, Any]) -> CompletedMatch | None:
    if isinstance(raw, CompletedMatch):
        return raw
    try:
        return CompletedMatch.model_validate(raw)
    except ValidationError as exc:
        logger.warning("standings_invalid_match errors=%d", exc.error_count())
        return None


def _counts(match: CompletedMatch, include_live: bool) -> bool:
    if not match.has_score:
        logger.debug(
            "standings_match_without_score home=%s away=%s", match.home_team_id, match.away_team_id
        )
        return False
    if match.is_final:
        return True
    return include_live and match.status.strip().lower() in LIVE_STATUSES


def _apply_result(
    home: TeamStats,
    away: TeamStats,
    match: CompletedMatch,
    points: PointsSystem,
) -> None:
    home_score = match.home_score or 0
    away_score = match.away_score or 0

    for side, scored, conceded, opponent in (
        (home, home_score, away_score, away),
        (away, away_score, home_score, home),
    ):
        side.played += 1
        side.goals_for += scored
        side.goals_against += conceded
        rec = side.head_to_head.setdefault(opponent.team_id, HeadToHeadRecord())
        rec.played += 1
        rec.goals_for += scored
        rec.goals_against += conceded

        if scored > conceded:
            side.won += 1
            side.points += points.win
            rec.won += 1
            outcome = "W"
        elif scored < conceded:
            side.lost += 1
            side.points += points.loss
            rec.lost += 1
            outcome = "L"
        else:
            side.drawn += 1
            side.points += points.draw
            rec.drawn += 1
            outcome = "D"
        side.form = [*side.form, outcome][-FORM_LENGTH:]
