"""Debug API endpoints for troubleshooting the Linear connection."""

from flask import Blueprint, current_app, jsonify

from app import get_linear_client
from services import queries
from services.config import MissingCredentialError
from services.linear_client import LinearFetchError

bp = Blueprint("debug", __name__, url_prefix="/api/debug")


def _run_test(client, name, query, summarize):
    try:
        data = client.execute(query)
        return {"name": name, "status": "PASSED", "data": summarize(data)}
    except LinearFetchError as e:
        return {
            "name": name,
            "status": "FAILED",
            "error": {
                "message": e.message,
                "statusCode": e.status_code,
                "errors": e.messages
            }
        }
    except Exception as e:
        return {"name": name, "status": "FAILED", "error": {"message": str(e)}}


@bp.route("/linear", methods=["GET"])
def debug_linear():
    """Run simple queries against Linear and report which ones pass.

    Useful for telling apart a bad API key, a network problem and a query
    that Linear rejects.
    """
    try:
        client = get_linear_client(current_app)
    except MissingCredentialError as e:
        return jsonify({"error": str(e)}), 500

    tests = [
        _run_test(client, "viewer", queries.VIEWER,
                  lambda data: (data or {}).get("viewer")),
        _run_test(client, "teams", queries.SIMPLE_TEAMS,
                  lambda data: {"count": len(((data or {}).get("teams") or {}).get("nodes") or [])}),
    ]

    passed = sum(1 for t in tests if t["status"] == "PASSED")
    return jsonify({
        "data": {
            "tests": tests,
            "summary": {"passed": passed, "failed": len(tests) - passed}
        }
    })
