"""Client for the EO accelerator endpoint directory and report endpoints."""

from typing import Any

import httpx
import structlog

from eo_goal.config import get_settings

logger = structlog.get_logger(__name__)


class EOBackendClient:
    """Async HTTP client for the aggregation backend.

    The directory is a JSON object mapping participant chapters to the URL
    that chapter's reports are posted to.
    """

    def __init__(self, timeout: float | None = None):
        settings = get_settings()
        self._timeout = timeout or settings.eo_timeout
        self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "EOBackendClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def fetch_directory(self, url: str) -> dict[str, str]:
        """Fetch the chapter -> endpoint directory."""
        response = await self._client.get(url)
        response.raise_for_status()

        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("Endpoint directory must be a JSON object")
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    async def post_report(self, url: str, payload: dict[str, Any]) -> httpx.Response:
        """POST a report payload; the caller decides what a bad status means."""
        return await self._client.post(url, json=payload)
