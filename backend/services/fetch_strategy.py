"""Initial bulk fetch of teams, active cycles and first issue pages.

Linear scores each query against a complexity budget that grows with the
requested page size and with nested selections such as labels. The combined
query is tried first; complexity rejections walk down a fallback ladder:

1. labeled query at the configured page size
2. labeled query at min(50, configured size)
3. label-less query at LIGHT_PAGE_SIZE, labels backfilled per cycle later

Any other error propagates immediately.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from services import queries
from services.linear_client import LinearFetchError, is_complexity_error
from services.models import team_nodes_from_response

logger = logging.getLogger(__name__)

RETRY_PAGE_SIZE = 50
LIGHT_PAGE_SIZE = 25


class DashboardFetchError(Exception):
    """The initial combined query failed and the dashboard cannot be built.

    Attributes:
        status_code: Upstream HTTP status when known
        upstream_message: First error message reported by Linear
    """

    def __init__(self, message: str, status_code: Optional[int] = None,
                 upstream_message: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.upstream_message = upstream_message


@dataclass(frozen=True)
class InitialFetch:
    """Result of the combined query.

    labels_included is False when the light query was used and each cycle's
    first page must be re-fetched with labels.
    """

    team_nodes: list
    labels_included: bool
    page_size: int


def _log_fetch_error(error: LinearFetchError):
    logger.error(f"Linear API Error: {error.message}")
    if error.status_code:
        logger.error(f"HTTP {error.status_code} error from Linear API")
    for message in error.messages:
        logger.error(f"Linear API Error: {message}")


def _as_dashboard_error(error: LinearFetchError) -> DashboardFetchError:
    _log_fetch_error(error)
    return DashboardFetchError(
        f"Failed to fetch teams data: {error.first_message}",
        status_code=error.status_code,
        upstream_message=error.first_message,
    )


def _run_combined(client, query: str, page_size: int) -> list:
    data = client.execute(query, {"issuesPage": page_size})
    return team_nodes_from_response(data)


def fetch_teams_with_cycles(client, initial_page_size: int = 50) -> InitialFetch:
    """Fetch every team with its active cycle and first page of issues.

    Raises:
        DashboardFetchError: A non-complexity error, or every fallback failed
        LinearDataError: The response carried no team list
    """
    attempts = [
        (queries.TEAMS_WITH_ACTIVE_CYCLE_ISSUES, initial_page_size, True),
        (queries.TEAMS_WITH_ACTIVE_CYCLE_ISSUES, min(RETRY_PAGE_SIZE, initial_page_size), True),
        (queries.TEAMS_WITH_ACTIVE_CYCLE_ISSUES_LIGHT, LIGHT_PAGE_SIZE, False),
    ]

    for index, (query, page_size, labels_included) in enumerate(attempts):
        is_last = index == len(attempts) - 1
        try:
            nodes = _run_combined(client, query, page_size)
        except LinearFetchError as e:
            if is_complexity_error(e) and not is_last:
                logger.warning(
                    f"Combined query too complex at page size {page_size}, falling back"
                )
                continue
            raise _as_dashboard_error(e)

        if not labels_included:
            logger.warning("Using label-less combined query; labels will be backfilled per cycle")
        logger.info(f"Fetched {len(nodes)} teams (page size {page_size})")
        return InitialFetch(team_nodes=nodes, labels_included=labels_included, page_size=page_size)

    raise DashboardFetchError("Failed to fetch teams data")


def fetch_team_leads(client) -> dict:
    """Best-effort lookup of each team's lead.

    Returns:
        Dict mapping team id to {"id", "name"}; empty if the lookup failed
    """
    try:
        data = client.execute(queries.TEAM_LEADS)
    except Exception as e:
        logger.warning(f"Team lead lookup failed, continuing without leads: {e}")
        return {}

    leads = {}
    for node in ((data or {}).get("teams") or {}).get("nodes") or []:
        if not isinstance(node, dict):
            continue
        lead = node.get("lead")
        if node.get("id") and lead:
            leads[node["id"]] = {"id": lead.get("id"), "name": lead.get("name")}
    return leads
