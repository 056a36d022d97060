"""Dashboard API endpoints."""

from flask import Blueprint, current_app, jsonify

from app import get_dashboard_service
from services.config import MissingCredentialError
from services.fetch_strategy import DashboardFetchError
from services.linear_client import LinearError

bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")

CACHE_CONTROL = "s-maxage=60, stale-while-revalidate=300"


def build_dashboard_response():
    """Run the aggregation and serialize it, mapping failures to JSON errors."""
    try:
        service = get_dashboard_service(current_app)
        data = service.get_dashboard_data()
    except MissingCredentialError as e:
        current_app.logger.error(str(e))
        return jsonify({"error": str(e)}), 500
    except DashboardFetchError as e:
        current_app.logger.error(f"Dashboard fetch failed: {e}")
        status = e.status_code if isinstance(e.status_code, int) else 500
        return jsonify({"error": str(e)}), status
    except LinearError as e:
        current_app.logger.error(f"Linear API error: {e}")
        return jsonify({"error": str(e)}), 500
    except Exception as e:
        current_app.logger.exception("Unexpected error building dashboard")
        return jsonify({"error": str(e) or "Failed to fetch dashboard data"}), 500

    response = jsonify(data.to_dict())
    response.headers["Cache-Control"] = CACHE_CONTROL
    return response


@bp.route("", methods=["GET"])
def get_dashboard():
    """Get cycle progress for every team.

    Returns:
        - teams: per-team scope/started/completed with percentages,
          label counts and analytics
        - lastUpdated: ISO timestamp of when aggregation finished
    """
    return build_dashboard_response()


@bp.route("", methods=["POST"])
def refresh_dashboard():
    """Re-run the full aggregation (manual refresh)."""
    return build_dashboard_response()
