"""Tests for standings and head-to-head tie-breaks."""

import logging
import random

import pytest

from tourney.core.standings import calculate_standings, mini_league, resolve_head_to_head
from tourney.errors import InvalidConfigurationError
from tourney.models.rules import PointsSystem
from tourney.models.standings import CompletedMatch


def _m(home: str, away: str, hs: int | None, aws: int | None, status: str = "finished") -> dict:
    return {
        "homeTeamId": home,
        "awayTeamId": away,
        "homeScore": hs,
        "awayScore": aws,
        "status": status,
    }


def _order(table) -> list[str]:
    return [row.team_id for row in table]


def _random_season(seed: int, n_teams: int = 6, n_matches: int = 20) -> list[dict]:
    rng = random.Random(seed)
    ids = [f"T{i}" for i in range(1, n_teams + 1)]
    matches = []
    for _ in range(n_matches):
        home, away = rng.sample(ids, 2)
        matches.append(_m(home, away, rng.randint(0, 3), rng.randint(0, 3)))
    return matches


SEASONS = {
    "single_win": [_m("A", "B", 2, 0)],
    "all_draws": [_m("A", "B", 1, 1), _m("B", "C", 0, 0), _m("C", "A", 2, 2)],
    "cycle": [_m("A", "B", 1, 0), _m("B", "C", 1, 0), _m("C", "A", 1, 0)],
    "split_meetings": [
        _m("A", "B", 2, 1),
        _m("B", "A", 2, 1),
        _m("A", "C", 1, 1),
        _m("B", "C", 1, 1),
    ],
    "random_1": _random_season(1),
    "random_7": _random_season(7),
    "random_42": _random_season(42, n_teams=8, n_matches=40),
}


class TestBasicTable:
    def test_points_and_goals(self) -> None:
        """Wins, draws and goal difference are tallied per team."""
        table = calculate_standings([_m("A", "B", 2, 0), _m("B", "C", 1, 1)], ["A", "B", "C"])
        rows = {r.team_id: r for r in table}
        assert rows["A"].points == 3
        assert rows["A"].won == 1
        assert rows["B"].points == 1
        assert rows["B"].lost == 1 and rows["B"].drawn == 1
        assert rows["B"].goal_difference == -2
        assert rows["C"].points == 1
        assert _order(table) == ["A", "C", "B"]

    def test_positions_are_one_based(self) -> None:
        table = calculate_standings([_m("A", "B", 0, 1)], ["A", "B"])
        assert [(r.team_id, r.position) for r in table] == [("B", 1), ("A", 2)]

    def test_goal_difference_then_goals_for(self) -> None:
        """Level on points, goal difference decides, then goals scored."""
        matches = [
            _m("A", "X", 3, 1),
            _m("B", "X", 2, 0),
            _m("C", "X", 4, 2),
        ]
        table = calculate_standings(matches, ["A", "B", "C", "X"])
        assert _order(table)[:3] == ["C", "A", "B"]

    def test_teams_without_matches_listed(self) -> None:
        """Listed teams get a row before playing, level and flagged as unresolved."""
        table = calculate_standings([], ["A", "B"])
        assert _order(table) == ["A", "B"]
        assert all(r.played == 0 and r.points == 0 for r in table)
        assert all(r.tie_unresolved for r in table)

    def test_team_only_in_matches_gets_row(self) -> None:
        """A team seen only in a match is appended with its id as name."""
        table = calculate_standings([_m("A", "Z", 1, 0)], ["A"])
        assert _order(table) == ["A", "Z"]
        assert table[1].team_name == "Z"

    def test_team_names_from_models(self) -> None:
        table = calculate_standings([], [{"id": "A", "name": "Athletic"}])
        assert table[0].team_name == "Athletic"

    def test_form_keeps_last_five(self) -> None:
        """Form holds the five most recent results, oldest first."""
        matches = [_m("A", "B", 1, 0)] * 4 + [_m("A", "B", 0, 0), _m("A", "B", 0, 1)]
        row = {r.team_id: r for r in calculate_standings(matches)}["A"]
        assert row.form == ["W", "W", "W", "D", "L"]
        assert row.form_string == "WWWDL"

    def test_computed_fields_serialized(self) -> None:
        row = calculate_standings([_m("A", "B", 3, 1)])[0]
        data = row.model_dump()
        assert data["goal_difference"] == 2
        assert data["form_string"] == "W"
        assert data["tie_unresolved"] is False

    def test_accepts_match_models(self) -> None:
        """CompletedMatch models work as well as dicts."""
        match = CompletedMatch(home_team_id="A", away_team_id="B", home_score=1, away_score=1)
        table = calculate_standings([match])
        assert [r.points for r in table] == [1, 1]


class TestSkippedMatches:
    def test_unfinished_not_counted(self) -> None:
        """Scheduled and live matches are left out of the final table."""
        matches = [_m("A", "B", 1, 0, status="scheduled"), _m("A", "B", 1, 0, status="live")]
        table = calculate_standings(matches, ["A", "B"])
        assert all(r.played == 0 for r in table)

    def test_missing_scores_not_counted(self) -> None:
        table = calculate_standings([_m("A", "B", None, 2)], ["A", "B"])
        assert all(r.played == 0 for r in table)

    def test_terminal_status_variants(self) -> None:
        """Status matching ignores case and accepts the finished synonyms."""
        matches = [
            _m("A", "B", 1, 0, status="Completed"),
            _m("A", "B", 1, 0, status="FULL_TIME"),
        ]
        row = calculate_standings(matches)[0]
        assert row.team_id == "A"
        assert row.played == 2

    def test_invalid_match_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        """Malformed rows are logged and skipped, never raised."""
        matches = [_m("A", "B", -1, 0), {"homeTeamId": "A"}, _m("A", "B", 2, 1)]
        with caplog.at_level(logging.WARNING, logger="tourney.core.standings"):
            rows = {r.team_id: r for r in calculate_standings(matches)}
        assert rows["A"].played == 1
        assert "standings_invalid_match" in caplog.text

    def test_self_match_skipped(self) -> None:
        table = calculate_standings([_m("A", "A", 1, 0)], ["A"])
        assert table[0].played == 0

    def test_live_matches_on_request(self) -> None:
        """include_live counts in-play matches but still skips scheduled ones."""
        matches = [_m("A", "B", 2, 0, status="live"), _m("A", "B", 1, 0, status="scheduled")]
        table = calculate_standings(matches, ["A", "B"], include_live=True)
        assert table[0].team_id == "A"
        assert table[0].played == 1


class TestPointsSystem:
    def test_custom_points(self) -> None:
        matches = [_m("A", "B", 1, 0), _m("C", "D", 0, 0)]
        table = calculate_standings(matches, points_system={"win": 2, "draw": 1, "loss": 0})
        rows = {r.team_id: r for r in table}
        assert rows["A"].points == 2
        assert rows["C"].points == 1

    def test_points_model(self) -> None:
        table = calculate_standings([_m("A", "B", 1, 0)], points_system=PointsSystem(win=4))
        assert table[0].points == 4

    def test_invalid_points_system(self) -> None:
        """A draw worth more than a win is rejected."""
        with pytest.raises(InvalidConfigurationError):
            calculate_standings([], points_system={"win": 1, "draw": 2})


class TestHeadToHead:
    def test_head_to_head_winner_goes_above(self) -> None:
        """Two teams level on points, GD and GF are split by their meeting."""
        matches = [
            _m("A", "B", 1, 0),
            _m("C", "A", 2, 1),
            _m("B", "C", 2, 1),
        ]
        table = calculate_standings(matches, ["B", "A", "C"])
        assert _order(table) == ["C", "A", "B"]
        assert table[1].primary_key() == table[2].primary_key()
        assert not any(r.tie_unresolved for r in table)

    def test_scenario_d_split_meetings_keep_input_order(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Teams that split their meetings keep input order and are flagged."""
        matches = [
            _m("A", "B", 2, 1),
            _m("B", "A", 2, 1),
            _m("A", "C", 1, 1),
            _m("B", "C", 1, 1),
        ]
        with caplog.at_level(logging.INFO, logger="tourney.core.standings"):
            table = calculate_standings(matches, ["A", "B", "C"])
        assert _order(table)[:2] == ["A", "B"]
        assert {r.team_id: r.tie_unresolved for r in table} == {"A": True, "B": True, "C": False}
        assert "standings_tie_unresolved teams=A,B" in caplog.text
        assert _order(calculate_standings(matches, ["B", "A", "C"]))[:2] == ["B", "A"]

    def test_recursive_mini_league(self) -> None:
        """A three-way tie is split by the mini-league, then the remaining pair again."""
        matches = [
            _m("A", "B", 3, 2),
            _m("C", "A", 3, 2),
            _m("B", "C", 2, 1),
            _m("A", "D", 0, 0),
            _m("B", "D", 1, 1),
            _m("C", "D", 1, 1),
        ]
        table = calculate_standings(matches, ["C", "B", "A", "D"])
        assert _order(table) == ["A", "B", "C", "D"]
        assert len({r.primary_key() for r in table[:3]}) == 1
        assert not any(r.tie_unresolved for r in table)

    def test_head_to_head_only_settles_exact_ties(self) -> None:
        """Head-to-head never overrides a goal difference gap."""
        matches = [
            _m("B", "A", 1, 0),
            _m("A", "C", 5, 0),
            _m("C", "B", 1, 0),
        ]
        table = calculate_standings(matches, ["A", "B", "C"])
        assert [r.points for r in table] == [3, 3, 3]
        assert _order(table) == ["A", "B", "C"]

    def test_mini_league_counts_only_tied_teams(self) -> None:
        matches = [_m("A", "B", 1, 0), _m("A", "C", 5, 0), _m("B", "C", 1, 0)]
        rows = {r.team_id: r for r in calculate_standings(matches)}
        table = mini_league([rows["A"], rows["B"]], PointsSystem())
        assert table == {"A": (3, 1, 1), "B": (0, -1, 0)}

    def test_resolve_single_team(self) -> None:
        """A group of one comes back as is."""
        rows = calculate_standings([_m("A", "B", 1, 0)])
        assert resolve_head_to_head(rows[:1], PointsSystem()) == rows[:1]


class TestStandingsProperties:
    @pytest.mark.parametrize("name", sorted(SEASONS))
    def test_points_conserved(self, name: str) -> None:
        """Table points add up to the points awarded across all matches."""
        points = PointsSystem(win=3, draw=1, loss=0)
        matches = SEASONS[name]
        awarded = sum(
            2 * points.draw if m["homeScore"] == m["awayScore"] else points.win + points.loss
            for m in matches
        )
        table = calculate_standings(matches, points_system=points)
        assert sum(r.points for r in table) == awarded

    @pytest.mark.parametrize("name", sorted(SEASONS))
    def test_output_is_deterministic(self, name: str) -> None:
        """Two runs over the same input serialize identically."""
        first = calculate_standings(SEASONS[name])
        second = calculate_standings(SEASONS[name])
        assert [r.model_dump_json() for r in first] == [r.model_dump_json() for r in second]

    @pytest.mark.parametrize("name", sorted(SEASONS))
    def test_primary_keys_non_increasing(self, name: str) -> None:
        """(points, GD, GF) never rises going down the table."""
        keys = [r.primary_key() for r in calculate_standings(SEASONS[name])]
        assert keys == sorted(keys, reverse=True)

    @pytest.mark.parametrize("name", sorted(SEASONS))
    def test_flagged_rows_have_a_level_neighbour(self, name: str) -> None:
        table = calculate_standings(SEASONS[name])
        for i, row in enumerate(table):
            if not row.tie_unresolved:
                continue
            neighbours = table[max(i - 1, 0) : i] + table[i + 1 : i + 2]
            assert any(n.primary_key() == row.primary_key() for n in neighbours)
