"""Linear GraphQL API client.

Executes named queries against the Linear API and turns every failure into a
structured LinearFetchError. The client never retries; retry policy lives in
the fetch strategy.
"""

import enum
import logging
from typing import Optional

import requests

from services.config import MissingCredentialError

logger = logging.getLogger(__name__)


class LinearError(Exception):
    """Base class for Linear API errors."""


class LinearDataError(LinearError):
    """Upstream answered but a required field is missing from the response."""


class LinearFetchError(LinearError):
    """A query failed.

    Attributes:
        status_code: HTTP status from Linear, or None if no response arrived
        errors: Upstream error objects, each a dict with at least "message"
    """

    def __init__(self, message: str, status_code: Optional[int] = None, errors=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = list(errors or [])

    @property
    def messages(self) -> list:
        return [e.get("message", "") for e in self.errors if isinstance(e, dict)]

    @property
    def first_message(self) -> str:
        messages = [m for m in self.messages if m]
        return messages[0] if messages else self.message


class LinearNetworkError(LinearFetchError):
    """Transport failure or non-2xx HTTP response."""


class LinearGraphQLError(LinearFetchError):
    """Linear responded but reported query errors."""


class ErrorKind(enum.Enum):
    FATAL = "fatal"
    COMPLEXITY = "complexity"
    DEGRADABLE = "degradable"


def is_complexity_error(error) -> bool:
    """Check whether Linear rejected a query for exceeding its complexity budget."""
    texts = [str(error)]
    if isinstance(error, LinearFetchError):
        texts.extend(error.messages)
    return any("complex" in (text or "").lower() for text in texts)


def classify_error(error) -> ErrorKind:
    """Classify an error for the retry ladder and degradation policy.

    Complexity rejections trigger the fallback ladder. Missing credentials,
    malformed responses and auth failures are fatal. Anything else may be
    degraded around (skip a page, skip an issue).
    """
    if is_complexity_error(error):
        return ErrorKind.COMPLEXITY
    if isinstance(error, (MissingCredentialError, LinearDataError)):
        return ErrorKind.FATAL
    if isinstance(error, LinearFetchError) and error.status_code in (401, 403):
        return ErrorKind.FATAL
    return ErrorKind.DEGRADABLE


def _error_list(body) -> list:
    if not isinstance(body, dict):
        return []
    errors = body.get("errors") or []
    if not isinstance(errors, list):
        return []
    return [e if isinstance(e, dict) else {"message": str(e)} for e in errors]


class LinearClient:
    """Authenticated executor for Linear GraphQL queries.

    One requests.Session is kept per client so connections are reused for
    the lifetime of the process.
    """

    def __init__(self, api_key: str, api_url: str = "https://api.linear.app/graphql",
                 timeout: int = 30, session: Optional[requests.Session] = None):
        if not api_key:
            raise MissingCredentialError()
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()
        # Personal API keys go in as-is, without a Bearer prefix
        self.session.headers.update({
            "Authorization": api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    @classmethod
    def from_config(cls, config):
        return cls(config.require_api_key(), api_url=config.api_url, timeout=config.timeout)

    def execute(self, query: str, variables: Optional[dict] = None) -> dict:
        """Execute a query and return its data object.

        Raises:
            LinearNetworkError: No response, or a non-2xx status
            LinearGraphQLError: Linear reported errors for the query
        """
        payload = {"query": query}
        if variables:
            payload["variables"] = variables

        try:
            response = self.session.post(self.api_url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise LinearNetworkError("Connection to Linear timed out")
        except requests.exceptions.RequestException as e:
            raise LinearNetworkError(f"Failed to connect to Linear: {e}")

        try:
            body = response.json()
        except ValueError:
            body = None

        if not 200 <= response.status_code < 300:
            errors = _error_list(body)
            summary = errors[0].get("message") if errors else None
            raise LinearNetworkError(
                summary or f"Linear API error: {response.status_code}",
                status_code=response.status_code,
                errors=errors,
            )

        if not isinstance(body, dict):
            raise LinearDataError("Linear API returned a non-JSON response")

        errors = _error_list(body)
        if errors:
            raise LinearGraphQLError(
                errors[0].get("message") or "Linear API reported query errors",
                status_code=response.status_code,
                errors=errors,
            )

        return body.get("data") or {}
