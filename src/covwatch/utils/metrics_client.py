"""Client for the metrics service that publishes previous coverage values."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit, urlunsplit

import requests

if TYPE_CHECKING:
    from covwatch.config import MetricsConfig

logger = logging.getLogger(__name__)

_MEASURES_PATH = "/api/measures/component"
_LINE_COVERAGE_METRIC = "line_coverage"
_HTTP_NOT_FOUND = 404
_HTTP_SUCCESS_MIN = 200
_HTTP_SUCCESS_MAX = 300


class MetricsClientError(RuntimeError):
    """Raised when a metrics service request fails."""


@dataclass
class MetricsClient:
    """Resolved connection settings for the metrics service."""

    url: str
    token: str = ""
    login: str = ""
    password: str = ""
    timeout: float = 15.0

    @classmethod
    def from_config(cls, config: MetricsConfig) -> MetricsClient:
        """Build a client from the ``metrics`` configuration section.

        Raises:
            MetricsClientError: If no service URL is configured.
        """
        url = normalize_metrics_url(config.url)
        if not url:
            raise MetricsClientError("Metrics service URL is required (metrics.url).")
        return cls(
            url=url,
            token=config.token.strip(),
            login=config.login.strip(),
            password=config.password,
            timeout=config.timeout,
        )

    @property
    def auth(self) -> tuple[str, str] | None:
        """Basic auth credentials; tokens are sent as the login with an empty password."""
        if self.token:
            return (self.token, "")
        if self.login:
            return (self.login, self.password)
        return None


def normalize_metrics_url(url: str) -> str:
    """Normalize and trim a configured metrics service URL."""
    return url.strip().rstrip("/")


def build_measures_url(base_url: str) -> str:
    """Build the component measures API URL."""
    split = urlsplit(normalize_metrics_url(base_url))
    base_path = split.path.rstrip("/")
    target_path = _MEASURES_PATH
    if base_path.endswith("/api"):
        target_path = target_path[len("/api") :]
    return urlunsplit((split.scheme, split.netloc, f"{base_path}{target_path}", "", ""))


def _extract_measure(body: Any, metric: str) -> float | None:
    if not isinstance(body, dict):
        return None
    component = body.get("component")
    if not isinstance(component, dict):
        return None
    for measure in component.get("measures", []):
        if not isinstance(measure, dict) or measure.get("metric") != metric:
            continue
        value = measure.get("value")
        if value is None:
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric %s value: %r", metric, value)
            return None
    return None


def get_line_coverage(client: MetricsClient, resource_key: str) -> float | None:
    """Return the line coverage last published for *resource_key*.

    Returns:
        The coverage percentage, or None when the service has no history for
        the resource (unknown component or no measure).

    Raises:
        MetricsClientError: On transport failures and unexpected HTTP statuses.
    """
    try:
        response = requests.get(
            build_measures_url(client.url),
            params={"component": resource_key, "metricKeys": _LINE_COVERAGE_METRIC},
            auth=client.auth,
            headers={"Accept": "application/json"},
            timeout=client.timeout,
        )
    except requests.RequestException as e:
        raise MetricsClientError(f"Metrics service request failed for {resource_key}: {e}") from e

    if response.status_code == _HTTP_NOT_FOUND:
        logger.debug("No previous analysis found for %s", resource_key)
        return None
    if response.status_code < _HTTP_SUCCESS_MIN or response.status_code >= _HTTP_SUCCESS_MAX:
        message = response.text.strip()[:300]
        raise MetricsClientError(
            f"Metrics lookup failed for {resource_key} (HTTP {response.status_code}): {message}"
        )

    try:
        body = response.json()
    except ValueError as e:
        raise MetricsClientError(f"Metrics service returned invalid JSON for {resource_key}") from e

    coverage = _extract_measure(body, _LINE_COVERAGE_METRIC)
    logger.debug("Previous line coverage of %s: %s", resource_key, coverage)
    return coverage
