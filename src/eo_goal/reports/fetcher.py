"""Fetch profit-and-loss reports, waiting out Xero rate limits."""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import date
from typing import Any, Protocol

import structlog

from eo_goal.clients.xero import XeroAPIError, normalize_api_error
from eo_goal.reports.types import Report

logger = structlog.get_logger(__name__)

RATE_LIMIT_STATUS = 429
DEFAULT_BACKOFF_SECONDS = 2.0
# Custom connections are bound to one organisation; the tenant header stays empty.
TENANT_ID = ""


class ProfitAndLossAPI(Protocol):
    """The part of the Xero client the fetcher depends on."""

    async def get_report_profit_and_loss(
        self,
        tenant_id: str,
        from_date: date,
        to_date: date,
        periods: int | None = None,
        timeframe: str | None = None,
    ) -> Any: ...


class ReportFetcher:
    """Calls the P&L report endpoint, retrying on HTTP 429 without limit."""

    def __init__(
        self,
        api: ProfitAndLossAPI,
        backoff: float = DEFAULT_BACKOFF_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._api = api
        self._backoff = backoff
        self._sleep = sleep

    async def fetch_profit_and_loss(
        self,
        start_date: date,
        end_date: date,
        periods: int | None = None,
        timeframe: str | None = None,
    ) -> Report:
        """Fetch the report tree for ``start_date``..``end_date``.

        Rate-limit failures are retried after a fixed delay; every other
        failure is re-raised unchanged. The returned tree is not validated.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                body = await self._api.get_report_profit_and_loss(
                    TENANT_ID, start_date, end_date, periods=periods, timeframe=timeframe
                )
            except Exception as exc:
                if normalize_api_error(exc).status_code != RATE_LIMIT_STATUS:
                    raise
            else:
                # Some clients hand back the error object as a JSON string
                if not isinstance(body, str):
                    return Report.from_response(body)
                error = normalize_api_error(body)
                if error.status_code != RATE_LIMIT_STATUS:
                    raise XeroAPIError(
                        "Unexpected string response from report API",
                        status_code=error.status_code,
                        details=error.details,
                    )

            logger.warning(
                "xero_rate_limited",
                attempt=attempt,
                retry_in_seconds=self._backoff,
                from_date=start_date.isoformat(),
                to_date=end_date.isoformat(),
            )
            await self._sleep(self._backoff)
