"""Dashboard assembly: one call produces metrics for every team."""

import logging
from dataclasses import replace
from datetime import datetime, timezone

from services.analytics import build_team_analytics, label_counts
from services.config import DashboardConfig
from services.fetch_strategy import fetch_team_leads, fetch_teams_with_cycles
from services.models import (
    DashboardData,
    cycle_from_node,
    issue_from_node,
    team_from_node,
)
from services.pagination import fetch_all_issues
from services.team_metrics import calculate_team_metrics
from services.workers import run_all

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class DashboardService:
    """Aggregates per-team cycle progress from Linear.

    Args:
        client: LinearClient used for every upstream request
        config: DashboardConfig with page sizes and triage settings
    """

    def __init__(self, client, config: DashboardConfig = None):
        self.client = client
        self.config = config or DashboardConfig()

    def get_dashboard_data(self) -> DashboardData:
        """Fetch all teams and compute their metrics.

        Only the initial combined query can fail the whole call; per-team
        problems degrade that team to empty metrics.
        """
        initial = fetch_teams_with_cycles(self.client, self.config.initial_page_size)
        leads = fetch_team_leads(self.client)

        teams = run_all(
            lambda node: self._process_team(node, initial.labels_included, leads),
            initial.team_nodes,
        )

        logger.info(f"Built dashboard for {len(teams)} teams")
        return DashboardData(teams=teams, last_updated=utc_timestamp())

    def _fetch_cycle_issues(self, cycle, cycle_node: dict, labels_included: bool) -> list:
        nodes = fetch_all_issues(
            self.client,
            cycle.id,
            cycle_node.get("issues"),
            page_size=self.config.page_size,
            max_pages=self.config.max_pages,
            backfill_labels=not labels_included,
        )
        return [issue_from_node(node) for node in nodes]

    def _process_team(self, team_node: dict, labels_included: bool, leads: dict):
        team = team_from_node(team_node)
        cycle_node = team_node.get("activeCycle")
        cycle = None
        issues = []

        try:
            cycle = cycle_from_node(cycle_node)
            if cycle is not None:
                issues = self._fetch_cycle_issues(cycle, cycle_node, labels_included)
        except Exception as e:
            logger.error(f"Failed to build cycle data for team {team.name}: {e}")
            issues = []

        metrics = calculate_team_metrics(team, cycle, issues)
        analytics = build_team_analytics(
            issues,
            team_lead=leads.get(team.id),
            client=self.client,
            accurate_triage=self.config.accurate_triage,
            history_concurrency=self.config.history_concurrency,
        )

        return replace(metrics, label_counts=label_counts(issues), analytics=analytics)


def get_dashboard_data(client, config: DashboardConfig = None) -> DashboardData:
    """Convenience wrapper around DashboardService.get_dashboard_data."""
    return DashboardService(client, config).get_dashboard_data()
