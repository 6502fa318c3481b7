"""Best-effort delivery of revenue reports to the EO backend.

Each participant chapter posts to its own endpoint, looked up in a remotely
hosted directory. Apart from the HTTPS check, nothing here may fail the run:
lookup misses and delivery failures are logged and dropped.
"""

from collections.abc import Sequence
from urllib.parse import urlsplit

import httpx
import structlog

from eo_goal import __version__
from eo_goal.clients.eo_backend import EOBackendClient
from eo_goal.models import MonthlyRevenue, ReportPayload, RevenueFigure

logger = structlog.get_logger(__name__)


class InsecureEndpointError(Exception):
    """A directory entry points at a non-HTTPS URL."""


def build_report_payload(
    participant_name: str,
    participant_chapter: str,
    company_name: str,
    twelve_months: Sequence[MonthlyRevenue],
    rolling_twelve: RevenueFigure,
) -> ReportPayload:
    return ReportPayload(
        version=__version__,
        participant_name=participant_name,
        participant_chapter=participant_chapter,
        company_name=company_name,
        twelve_months=tuple(twelve_months),
        rolling_twelve=rolling_twelve,
    )


class Reporter:
    """Resolves a chapter's endpoint and posts report payloads to it."""

    def __init__(self, backend: EOBackendClient, directory_url: str):
        self._backend = backend
        self._directory_url = directory_url
        self._logger = logger.bind(component="reporter")

    async def resolve_endpoint(self, chapter: str) -> str | None:
        """Look up the chapter's endpoint; ``None`` when there is none."""
        try:
            directory = await self._backend.fetch_directory(self._directory_url)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            self._logger.warning("endpoint_directory_unavailable", error=str(e))
            return None

        endpoint = directory.get(chapter, "").strip()
        if not endpoint:
            self._logger.info("no_endpoint_for_chapter", chapter=chapter)
            return None

        try:
            scheme = urlsplit(endpoint).scheme
        except ValueError as e:
            self._logger.warning("malformed_endpoint", chapter=chapter, error=str(e))
            return None

        if scheme != "https":
            raise InsecureEndpointError(f"Endpoint for chapter {chapter!r} must use HTTPS")
        return endpoint

    async def report(self, payload: ReportPayload) -> bool:
        """Post ``payload``; returns whether the backend accepted it."""
        endpoint = await self.resolve_endpoint(payload.participant_chapter)
        if endpoint is None:
            return False

        try:
            response = await self._backend.post_report(endpoint, payload.to_dict())
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self._logger.warning("report_delivery_failed", endpoint=endpoint, error=str(e))
            return False

        if response.status_code != 200:
            self._logger.warning(
                "report_rejected",
                endpoint=endpoint,
                status_code=response.status_code,
                body=response.text[:500],
            )
            return False

        self._logger.info("report_delivered", endpoint=endpoint)
        return True
