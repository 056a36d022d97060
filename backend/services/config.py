"""Configuration for the cycle dashboard backend.

Values come from environment variables (a local .env file is loaded when
present). Numeric knobs are clamped to safe ranges so a bad value cannot
blow the upstream query-complexity budget or loop forever.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_URL = "https://api.linear.app/graphql"

# (default, minimum, maximum)
INITIAL_PAGE_SIZE = (50, 10, 100)
PAGE_SIZE = (50, 10, 100)
MAX_PAGES = (100, 1, 1000)
HISTORY_CONCURRENCY = (6, 1, 20)
TIMEOUT = (30, 1, 300)

TRUTHY = {"1", "true", "yes", "on"}


class MissingCredentialError(Exception):
    """Raised when no Linear API key is configured."""

    def __init__(self):
        super().__init__(
            "LINEAR_API_KEY environment variable is required. "
            "Add it to your environment or a .env file. "
            "You can get an API key from https://linear.app/settings/api"
        )


def clamp(value: int, minimum: int, maximum: int) -> int:
    """Clamp value into [minimum, maximum]."""
    return max(minimum, min(maximum, value))


def _int_setting(environ, name: str, bounds: tuple) -> int:
    default, minimum, maximum = bounds
    raw = environ.get(name)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return clamp(value, minimum, maximum)


def _bool_setting(environ, name: str, default: bool = False) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in TRUTHY


@dataclass(frozen=True)
class DashboardConfig:
    """Knobs consumed by the aggregation layer."""

    api_key: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    timeout: int = TIMEOUT[0]
    initial_page_size: int = INITIAL_PAGE_SIZE[0]
    page_size: int = PAGE_SIZE[0]
    max_pages: int = MAX_PAGES[0]
    accurate_triage: bool = False
    history_concurrency: int = HISTORY_CONCURRENCY[0]

    def require_api_key(self) -> str:
        """Return the API key or raise MissingCredentialError."""
        if not self.api_key:
            raise MissingCredentialError()
        return self.api_key


def load_config(environ=None, dotenv: bool = True) -> DashboardConfig:
    """Build a DashboardConfig from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)
        dotenv: Whether to load a .env file first (only used with os.environ)
    """
    if environ is None:
        if dotenv:
            load_dotenv()
        environ = os.environ

    api_key = (environ.get("LINEAR_API_KEY") or "").strip() or None
    api_url = (environ.get("LINEAR_API_URL") or "").strip() or DEFAULT_API_URL

    return DashboardConfig(
        api_key=api_key,
        api_url=api_url,
        timeout=_int_setting(environ, "LINEAR_TIMEOUT", TIMEOUT),
        initial_page_size=_int_setting(environ, "DASHBOARD_INITIAL_PAGE_SIZE", INITIAL_PAGE_SIZE),
        page_size=_int_setting(environ, "DASHBOARD_PAGE_SIZE", PAGE_SIZE),
        max_pages=_int_setting(environ, "DASHBOARD_MAX_PAGES", MAX_PAGES),
        accurate_triage=_bool_setting(environ, "DASHBOARD_ACCURATE_TRIAGE"),
        history_concurrency=_int_setting(environ, "DASHBOARD_HISTORY_CONCURRENCY", HISTORY_CONCURRENCY),
    )
