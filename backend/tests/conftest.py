"""Shared fixtures for cycle dashboard tests."""

import os
import sys

import pytest
from unittest.mock import Mock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from services.config import DashboardConfig
from services.linear_client import LinearClient


def issue_node(issue_id, state_type="unstarted", estimate=None, labels=None,
               created_at="2024-01-01T00:00:00.000Z", started_at=None,
               completed_at=None):
    """Build an upstream issue node the way Linear returns it."""
    node = {
        "id": issue_id,
        "identifier": f"ENG-{issue_id}",
        "title": f"Issue {issue_id}",
        "estimate": estimate,
        "state": {"id": f"state-{state_type}", "name": state_type.title(), "type": state_type},
        "assignee": None,
        "createdAt": created_at,
        "updatedAt": created_at,
        "startedAt": started_at,
        "completedAt": completed_at,
    }
    if labels is not None:
        node["labels"] = {
            "nodes": [{"id": f"label-{name}", "name": name, "color": "#ff0000"} for name in labels]
        }
    return node


def issues_page(nodes, has_next=False, cursor=None):
    return {"nodes": nodes, "pageInfo": {"hasNextPage": has_next, "endCursor": cursor}}


def team_node(team_id, name, estimation_type="notUsed", cycle=None):
    return {
        "id": team_id,
        "name": name,
        "key": name[:3].upper(),
        "color": "#5e6ad2",
        "issueEstimationType": estimation_type,
        "issueEstimationAllowZero": False,
        "issueEstimationExtended": False,
        "activeCycle": cycle,
    }


def cycle_node(cycle_id, first_page, number=7):
    return {
        "id": cycle_id,
        "number": number,
        "name": f"Cycle {number}",
        "startsAt": "2024-01-01T00:00:00.000Z",
        "endsAt": "2024-01-14T00:00:00.000Z",
        "issues": first_page,
    }


@pytest.fixture
def dashboard_config():
    """Config with a test credential and default knobs."""
    return DashboardConfig(api_key="lin_api_test123")


@pytest.fixture
def mock_client():
    """Mock LinearClient; set execute.side_effect per test."""
    return Mock(spec=LinearClient)


@pytest.fixture
def sample_team_nodes():
    """Two teams with active cycles and one without."""
    return [
        team_node("team-1", "Platform", cycle=cycle_node("cycle-1", issues_page([
            issue_node("1", "started", labels=["bug"]),
            issue_node("2", "completed", labels=["bug", "frontend"]),
            issue_node("3", "unstarted", labels=[]),
        ]))),
        team_node("team-2", "Mobile", estimation_type="fibonacci", cycle=cycle_node("cycle-2", issues_page([
            issue_node("4", "started", estimate=3, labels=["ios"]),
            issue_node("5", "completed", estimate=5, labels=["ios"]),
        ]))),
        team_node("team-3", "Design"),
    ]


@pytest.fixture
def app(dashboard_config):
    """Create Flask test app."""
    from app import create_app
    app = create_app(dashboard_config)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()
