"""GraphQL documents sent to the Linear API."""

VIEWER = """
query Viewer {
  viewer {
    id
    name
    email
  }
}
"""

SIMPLE_TEAMS = """
query SimpleTeams {
  teams {
    nodes {
      id
      name
    }
  }
}
"""

# Teams, their active cycle and the first page of cycle issues in one round trip
TEAMS_WITH_ACTIVE_CYCLE_ISSUES = """
query TeamsWithActiveCycleIssues($issuesPage: Int = 50) {
  teams {
    nodes {
      id
      name
      key
      color
      issueEstimationType
      issueEstimationAllowZero
      issueEstimationExtended
      activeCycle {
        id
        number
        name
        startsAt
        endsAt
        issues(first: $issuesPage) {
          nodes {
            id
            identifier
            title
            estimate
            state { id name type color }
            labels { nodes { id name color } }
            assignee { id name email }
            createdAt
            updatedAt
            startedAt
            completedAt
          }
          pageInfo { hasNextPage endCursor }
        }
      }
    }
  }
}
"""

# Same as above without labels, for when the labeled query is too complex
TEAMS_WITH_ACTIVE_CYCLE_ISSUES_LIGHT = """
query TeamsWithActiveCycleIssuesLight($issuesPage: Int = 25) {
  teams {
    nodes {
      id
      name
      key
      color
      issueEstimationType
      issueEstimationAllowZero
      issueEstimationExtended
      activeCycle {
        id
        number
        name
        startsAt
        endsAt
        issues(first: $issuesPage) {
          nodes {
            id
            identifier
            title
            estimate
            state { id name type color }
            assignee { id name email }
            createdAt
            updatedAt
            startedAt
            completedAt
          }
          pageInfo { hasNextPage endCursor }
        }
      }
    }
  }
}
"""

CYCLE_ISSUES_PAGE = """
query CycleIssuesPage($cycleId: String!, $after: String, $n: Int = 50) {
  cycle(id: $cycleId) {
    id
    issues(first: $n, after: $after) {
      nodes {
        id
        identifier
        title
        estimate
        state { id name type color }
        labels { nodes { id name color } }
        assignee { id name email }
        createdAt
        updatedAt
        startedAt
        completedAt
      }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""

TEAM_LEADS = """
query TeamLeads {
  teams {
    nodes {
      id
      lead { id name }
    }
  }
}
"""

ISSUE_STATE_HISTORY = """
query IssueStateHistory($issueId: String!, $n: Int = 20) {
  issue(id: $issueId) {
    id
    createdAt
    startedAt
    history(first: $n) {
      nodes {
        createdAt
        fromState { id name type }
        toState { id name type }
      }
    }
  }
}
"""
