"""Cycle progress metrics for a single team."""

import math
from dataclasses import replace
from typing import Optional

from services.models import NOT_USED, Cycle, Team, TeamMetrics

STARTED = "started"
COMPLETED = "completed"


def uses_estimation(team: Team) -> bool:
    """Check if a team sizes issues with story points instead of counting them."""
    return team.estimation_type is not None and team.estimation_type != NOT_USED


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage(part: float, scope: float) -> int:
    if scope <= 0:
        return 0
    return round_half_up(100 * part / scope)


def _estimate(issue) -> float:
    return issue.estimate or 0


def calculate_team_metrics(team: Team, cycle: Optional[Cycle], issues: list) -> TeamMetrics:
    """Calculate scope/started/completed for a team's cycle.

    Teams using estimation sum the estimates of issues with estimate > 0;
    everyone else counts issues. State types are matched exactly against
    "started" and "completed"; any other type only adds to scope.

    scopePercentage is 100 whenever there is any scope at all, not a ratio.
    """
    estimated = uses_estimation(team)

    if estimated:
        sized = [issue for issue in issues if _estimate(issue) > 0]
        scope = sum(_estimate(issue) for issue in sized)
        started = sum(_estimate(issue) for issue in sized if issue.state.type == STARTED)
        completed = sum(_estimate(issue) for issue in sized if issue.state.type == COMPLETED)
    else:
        scope = len(issues)
        started = sum(1 for issue in issues if issue.state.type == STARTED)
        completed = sum(1 for issue in issues if issue.state.type == COMPLETED)

    if cycle is not None:
        cycle = replace(cycle, progress=round(completed / scope, 4) if scope > 0 else 0)

    return TeamMetrics(
        team=team,
        cycle=cycle,
        scope=scope,
        started=started,
        completed=completed,
        scope_percentage=100 if scope > 0 else 0,
        started_percentage=percentage(started, scope),
        completed_percentage=percentage(completed, scope),
        uses_estimation=estimated,
        metric_type="story_points" if estimated else "issues",
    )
