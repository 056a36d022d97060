"""Record types for Linear teams, cycles and issues, and the dashboard output.

Upstream nodes are plain JSON dicts. The *_from_node helpers validate the
fields the aggregation depends on and raise LinearDataError when they are
missing, so a malformed response is never mistaken for a transport error.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from services.linear_client import LinearDataError

NOT_USED = "notUsed"


@dataclass(frozen=True)
class Team:
    id: str
    name: str
    key: str
    color: Optional[str] = None
    estimation_type: Optional[str] = None
    estimation_allow_zero: bool = False
    estimation_extended: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "key": self.key,
            "color": self.color,
            "issueEstimationType": self.estimation_type,
            "issueEstimationAllowZero": self.estimation_allow_zero,
            "issueEstimationExtended": self.estimation_extended,
        }


@dataclass(frozen=True)
class Cycle:
    id: str
    number: Optional[int] = None
    name: Optional[str] = None
    starts_at: Optional[str] = None
    ends_at: Optional[str] = None
    progress: float = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "number": self.number,
            "name": self.name,
            "startsAt": self.starts_at,
            "endsAt": self.ends_at,
            "progress": self.progress,
        }


@dataclass(frozen=True)
class IssueState:
    id: str
    name: str
    type: str
    color: str = "#000000"


@dataclass(frozen=True)
class Label:
    id: str
    name: str
    color: Optional[str] = None


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str = ""


@dataclass(frozen=True)
class Issue:
    id: str
    identifier: str
    title: str
    state: IssueState
    created_at: str
    updated_at: Optional[str] = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    estimate: Optional[float] = None
    assignee: Optional[User] = None
    labels: tuple = ()


@dataclass(frozen=True)
class LabelCount:
    id: str
    name: str
    color: Optional[str]
    count: int

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "color": self.color, "count": self.count}


@dataclass(frozen=True)
class TeamAnalytics:
    average_cycle_time_days: Optional[float] = None
    average_triage_time_days: Optional[float] = None
    average_open_age_days: Optional[float] = None
    triage_time_mode: str = "approximate"
    team_lead: Optional[dict] = None

    def to_dict(self) -> dict:
        return {
            "averageCycleTimeDays": self.average_cycle_time_days,
            "averageTriageTimeDays": self.average_triage_time_days,
            "averageOpenAgeDays": self.average_open_age_days,
            "triageTimeMode": self.triage_time_mode,
            "teamLead": self.team_lead,
        }


@dataclass(frozen=True)
class TeamMetrics:
    team: Team
    cycle: Optional[Cycle]
    scope: float
    started: float
    completed: float
    scope_percentage: int
    started_percentage: int
    completed_percentage: int
    uses_estimation: bool
    metric_type: str
    label_counts: List[LabelCount] = field(default_factory=list)
    analytics: Optional[TeamAnalytics] = None

    def to_dict(self) -> dict:
        return {
            "team": self.team.to_dict(),
            "cycle": self.cycle.to_dict() if self.cycle else None,
            "scope": self.scope,
            "started": self.started,
            "completed": self.completed,
            "scopePercentage": self.scope_percentage,
            "startedPercentage": self.started_percentage,
            "completedPercentage": self.completed_percentage,
            "usesEstimation": self.uses_estimation,
            "metricType": self.metric_type,
            "labelCounts": [lc.to_dict() for lc in self.label_counts],
            "analytics": self.analytics.to_dict() if self.analytics else None,
        }


@dataclass(frozen=True)
class DashboardData:
    teams: List[TeamMetrics]
    last_updated: str

    def to_dict(self) -> dict:
        return {
            "teams": [t.to_dict() for t in self.teams],
            "lastUpdated": self.last_updated,
        }


def _require(node: dict, key: str, what: str):
    value = node.get(key) if isinstance(node, dict) else None
    if value is None:
        raise LinearDataError(f"{what} is missing required field '{key}'")
    return value


def team_from_node(node: dict) -> Team:
    return Team(
        id=_require(node, "id", "Team"),
        name=node.get("name") or "",
        key=node.get("key") or "",
        color=node.get("color"),
        estimation_type=node.get("issueEstimationType"),
        estimation_allow_zero=bool(node.get("issueEstimationAllowZero")),
        estimation_extended=bool(node.get("issueEstimationExtended")),
    )


def cycle_from_node(node: Optional[dict]) -> Optional[Cycle]:
    if not node:
        return None
    return Cycle(
        id=_require(node, "id", "Cycle"),
        number=node.get("number"),
        name=node.get("name"),
        starts_at=node.get("startsAt"),
        ends_at=node.get("endsAt"),
    )


def _labels_from_node(node: dict) -> tuple:
    labels = (node.get("labels") or {}).get("nodes") or []
    return tuple(
        Label(id=lbl.get("id") or lbl.get("name") or "", name=lbl.get("name") or "", color=lbl.get("color"))
        for lbl in labels
        if isinstance(lbl, dict)
    )


def issue_from_node(node: dict) -> Issue:
    """Map an upstream issue node to an Issue."""
    issue_id = _require(node, "id", "Issue")
    state = _require(node, "state", f"Issue {issue_id}")
    assignee = node.get("assignee")
    created_at = node.get("createdAt")

    return Issue(
        id=issue_id,
        identifier=node.get("identifier") or issue_id,
        title=node.get("title") or "",
        state=IssueState(
            id=state.get("id") or "",
            name=state.get("name") or "",
            type=state.get("type") or "",
            color=state.get("color") or "#000000",
        ),
        created_at=created_at,
        updated_at=node.get("updatedAt") or created_at,
        started_at=node.get("startedAt"),
        completed_at=node.get("completedAt"),
        estimate=node.get("estimate"),
        assignee=User(
            id=assignee.get("id"),
            name=assignee.get("name") or "",
            email=assignee.get("email") or "",
        ) if assignee else None,
        labels=_labels_from_node(node),
    )


def team_nodes_from_response(data: dict) -> list:
    """Extract the team list from a combined-query response."""
    nodes = ((data or {}).get("teams") or {}).get("nodes")
    if nodes is None:
        raise LinearDataError("No teams data received from Linear API")
    return nodes
