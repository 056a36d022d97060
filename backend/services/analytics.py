"""Secondary per-team statistics derived from a cycle's issues.

Everything here is best-effort: an issue missing a timestamp is left out of
the average that needs it, and nothing raises.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from services import queries
from services.models import LabelCount, TeamAnalytics
from services.workers import run_in_batches

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400
TRIAGE_STATE_TYPES = {"triage", "backlog"}
TRIAGE_SAMPLE_SIZE = 40
HISTORY_LIMIT = 20


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a Linear ISO-8601 timestamp such as 2024-01-02T10:00:00.000Z."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _elapsed_seconds(start, end) -> Optional[float]:
    start, end = parse_datetime(start), parse_datetime(end)
    if start is None or end is None:
        return None
    return max(0.0, (end - start).total_seconds())


def _average_days(durations: list) -> Optional[float]:
    values = [d for d in durations if d is not None]
    if not values:
        return None
    return round(sum(values) / len(values) / SECONDS_PER_DAY, 1)


def label_counts(issues: list) -> list:
    """Count label usage across issues, most used first, ties by name."""
    counts = {}
    for issue in issues:
        for label in issue.labels:
            entry = counts.get(label.id)
            if entry is None:
                counts[label.id] = [label, 1]
            else:
                entry[1] += 1

    result = [
        LabelCount(id=label.id, name=label.name, color=label.color, count=count)
        for label, count in counts.values()
    ]
    result.sort(key=lambda lc: (-lc.count, lc.name.lower(), lc.name))
    return result


def average_cycle_time_days(issues: list) -> Optional[float]:
    """Average time from start (or creation) to completion of completed issues."""
    return _average_days([
        _elapsed_seconds(issue.started_at or issue.created_at, issue.completed_at)
        for issue in issues
        if issue.completed_at
    ])


def average_open_age_days(issues: list, now: Optional[datetime] = None) -> Optional[float]:
    """Average age of issues that are not completed yet."""
    now = now or datetime.now(timezone.utc)
    return _average_days([
        _elapsed_seconds(issue.created_at, now)
        for issue in issues
        if not issue.completed_at
    ])


def average_triage_time_days(issues: list) -> Optional[float]:
    """Approximate triage time as startedAt - createdAt over started issues."""
    return _average_days([
        _elapsed_seconds(issue.created_at, issue.started_at)
        for issue in issues
        if issue.started_at
    ])


def triage_exit_time(history: list) -> Optional[str]:
    """Timestamp of the first transition out of a triage or backlog state."""
    transitions = [
        node for node in history
        if isinstance(node, dict) and node.get("fromState") and node.get("toState")
    ]
    transitions.sort(key=lambda node: parse_datetime(node.get("createdAt")) or datetime.max.replace(tzinfo=timezone.utc))

    for node in transitions:
        from_state, to_state = node["fromState"], node["toState"]
        if from_state.get("type") not in TRIAGE_STATE_TYPES:
            continue
        if to_state.get("id") == from_state.get("id"):
            continue
        return node.get("createdAt")
    return None


def _issue_triage_seconds(client, issue, history_limit: int) -> Optional[float]:
    data = client.execute(queries.ISSUE_STATE_HISTORY, {"issueId": issue.id, "n": history_limit})
    node = (data or {}).get("issue") or {}
    history = (node.get("history") or {}).get("nodes") or []

    exit_time = triage_exit_time(history)
    if exit_time:
        return _elapsed_seconds(issue.created_at, exit_time)
    if issue.started_at:
        return _elapsed_seconds(issue.created_at, issue.started_at)
    return None


def accurate_triage_time_days(client, issues: list, concurrency: int = 6,
                              sample_size: int = TRIAGE_SAMPLE_SIZE,
                              history_limit: int = HISTORY_LIMIT) -> Optional[float]:
    """Triage time from each sampled issue's state history.

    Fetches history for the first sample_size issues, concurrency requests at
    a time. Issues whose history cannot be fetched are skipped.
    """
    sample = issues[:sample_size]
    if not sample:
        return None

    durations = run_in_batches(
        lambda issue: _issue_triage_seconds(client, issue, history_limit),
        sample,
        concurrency,
    )
    return _average_days(durations)


def build_team_analytics(issues: list, team_lead: Optional[dict] = None,
                         client=None, accurate_triage: bool = False,
                         history_concurrency: int = 6,
                         now: Optional[datetime] = None) -> TeamAnalytics:
    """Assemble the analytics block for one team."""
    mode = "approximate"
    triage = None

    if accurate_triage and client is not None:
        mode = "accurate"
        try:
            triage = accurate_triage_time_days(client, issues, concurrency=history_concurrency)
        except Exception as e:
            logger.warning(f"Accurate triage time failed, using approximation: {e}")
            mode = "approximate"
            triage = average_triage_time_days(issues)
    else:
        triage = average_triage_time_days(issues)

    return TeamAnalytics(
        average_cycle_time_days=average_cycle_time_days(issues),
        average_triage_time_days=triage,
        average_open_age_days=average_open_age_days(issues, now=now),
        triage_time_mode=mode,
        team_lead=team_lead,
    )
