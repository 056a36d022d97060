"""Flask application factory."""

from flask import Flask
from flask_cors import CORS

from services.config import load_config
from services.dashboard import DashboardService
from services.linear_client import LinearClient


def get_linear_client(app):
    """Return the app-wide LinearClient, creating it on first use.

    Raises MissingCredentialError when LINEAR_API_KEY is not configured.
    """
    client = app.extensions.get("linear_client")
    if client is None:
        client = LinearClient.from_config(app.config["DASHBOARD_CONFIG"])
        app.extensions["linear_client"] = client
    return client


def get_dashboard_service(app):
    """Build a DashboardService around the shared client."""
    return DashboardService(get_linear_client(app), app.config["DASHBOARD_CONFIG"])


def create_app(config=None):
    """Create and configure the Flask application.

    Args:
        config: Optional DashboardConfig; loaded from the environment if omitted
    """
    app = Flask(__name__)

    # Enable CORS for frontend
    CORS(app, resources={
        r"/api/*": {
            "origins": ["http://localhost:3000", "http://127.0.0.1:3000"],
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type"]
        }
    })

    app.config["DASHBOARD_CONFIG"] = config or load_config()
    if not app.config["DASHBOARD_CONFIG"].api_key:
        app.logger.warning("LINEAR_API_KEY is not set; dashboard requests will fail")

    # Register blueprints
    from app.api import dashboard, debug
    app.register_blueprint(dashboard.bp)
    app.register_blueprint(debug.bp)

    # Health check endpoint
    @app.route("/health")
    def health():
        return {"status": "ok"}

    return app
