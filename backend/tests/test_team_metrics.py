"""Tests for the team metrics calculator."""

import pytest

from conftest import issue_node
from services.models import Cycle, Team, issue_from_node
from services.team_metrics import (
    calculate_team_metrics,
    percentage,
    round_half_up,
    uses_estimation,
)


def make_team(estimation_type="notUsed"):
    return Team(id="team-1", name="Platform", key="PLA", estimation_type=estimation_type)


def make_cycle():
    return Cycle(id="cycle-1", number=3, name="Cycle 3")


def make_issues(specs):
    """specs: list of (state_type, estimate)."""
    return [
        issue_from_node(issue_node(str(i), state_type, estimate=estimate))
        for i, (state_type, estimate) in enumerate(specs)
    ]


class TestUsesEstimation:
    """Test accounting mode selection."""

    @pytest.mark.parametrize("estimation_type", ["exponential", "fibonacci", "linear", "tShirt"])
    def test_estimation_types(self, estimation_type):
        assert uses_estimation(make_team(estimation_type)) is True

    def test_not_used(self):
        assert uses_estimation(make_team("notUsed")) is False

    def test_missing_type(self):
        assert uses_estimation(make_team(None)) is False


class TestCalculateTeamMetrics:
    """Test scope/started/completed calculations."""

    def test_issue_count_mode(self):
        """10 issues: 4 started, 3 completed, 3 other."""
        issues = make_issues(
            [("started", None)] * 4 + [("completed", 8)] * 3 + [("backlog", None), ("triage", 2), ("canceled", None)]
        )

        metrics = calculate_team_metrics(make_team(), make_cycle(), issues)

        assert metrics.scope == 10
        assert metrics.started == 4
        assert metrics.completed == 3
        assert metrics.started_percentage == 40
        assert metrics.completed_percentage == 30
        assert metrics.scope_percentage == 100
        assert metrics.uses_estimation is False
        assert metrics.metric_type == "issues"

    def test_story_point_mode_ignores_unestimated(self):
        """Zero and missing estimates contribute nothing."""
        issues = make_issues([("started", 3), ("completed", 5), ("started", 0), ("completed", None)])

        metrics = calculate_team_metrics(make_team("fibonacci"), make_cycle(), issues)

        assert metrics.scope == 8
        assert metrics.started == 3
        assert metrics.completed == 5
        assert metrics.started_percentage == 38
        assert metrics.completed_percentage == 63
        assert metrics.metric_type == "story_points"

    def test_no_active_cycle(self):
        metrics = calculate_team_metrics(make_team(), None, [])

        assert metrics.cycle is None
        assert (metrics.scope, metrics.started, metrics.completed) == (0, 0, 0)
        assert metrics.scope_percentage == 0
        assert metrics.started_percentage == 0
        assert metrics.completed_percentage == 0

    def test_scope_percentage_is_binary(self):
        issues = make_issues([("unstarted", None)])

        metrics = calculate_team_metrics(make_team(), make_cycle(), issues)

        assert metrics.scope_percentage == 100
        assert metrics.started_percentage == 0

    def test_state_type_match_is_case_sensitive(self):
        issues = make_issues([("Started", None), ("COMPLETED", None)])

        metrics = calculate_team_metrics(make_team(), make_cycle(), issues)

        assert metrics.scope == 2
        assert metrics.started == 0
        assert metrics.completed == 0

    def test_negative_estimate_is_excluded(self):
        issues = make_issues([("started", 2), ("started", -1)])

        metrics = calculate_team_metrics(make_team("linear"), make_cycle(), issues)

        assert metrics.scope == 2
        assert metrics.started == 2

    def test_exact_half_percentage_rounds_up(self):
        """57 of 200 is exactly 28.5% and must round to 29."""
        issues = make_issues([("completed", None)] * 57 + [("unstarted", None)] * 143)

        metrics = calculate_team_metrics(make_team(), make_cycle(), issues)

        assert metrics.scope == 200
        assert metrics.completed_percentage == 29
        assert percentage(57, 200) == 29

    def test_percentage_does_not_crash_when_part_exceeds_scope(self):
        """Inconsistent upstream data still yields a number."""
        assert percentage(5, 4) == 125
        assert percentage(5, 0) == 0

    def test_cycle_progress_recomputed(self):
        issues = make_issues([("completed", None), ("started", None)])

        metrics = calculate_team_metrics(make_team(), make_cycle(), issues)

        assert metrics.cycle.progress == 0.5

    def test_idempotent(self):
        issues = make_issues([("started", 1), ("completed", 2)])
        first = calculate_team_metrics(make_team("linear"), make_cycle(), issues)
        second = calculate_team_metrics(make_team("linear"), make_cycle(), issues)
        assert first == second


class TestRoundHalfUp:
    """Test rounding behaviour."""

    @pytest.mark.parametrize("value,expected", [(37.5, 38), (62.5, 63), (0.5, 1), (2.5, 3), (2.49, 2)])
    def test_rounds_half_up(self, value, expected):
        assert round_half_up(value) == expected
