"""Xero API client using the client-credentials grant (custom connections)."""

import asyncio
import json
from datetime import UTC, date, datetime, timedelta
from typing import Any, cast

import httpx
import structlog

from eo_goal.config import get_settings

logger = structlog.get_logger(__name__)

IDENTITY_URL = "https://identity.xero.com/connect/token"
API_BASE_URL = "https://api.xero.com/api.xro/2.0"


class XeroAPIError(Exception):
    """Base exception for Xero API errors."""

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class AuthenticationError(XeroAPIError):
    """Authentication failed."""

    pass


class RateLimitError(XeroAPIError):
    """Rate limit exceeded."""

    pass


def _status_from_payload(payload: Any) -> int | None:
    """Dig an HTTP status out of a decoded error object.

    Handles ``{"response": {"statusCode": 429}}`` (or a response object with
    a ``status_code`` attribute) as well as flat ``statusCode`` /
    ``status_code`` / ``status`` keys.
    """
    if not isinstance(payload, dict):
        return None
    response = payload.get("response")
    if isinstance(response, dict):
        nested = _status_from_payload(response)
        if nested is not None:
            return nested
    elif response is not None:
        nested = _status_from_payload(
            {key: getattr(response, key, None) for key in ("statusCode", "status_code")}
        )
        if nested is not None:
            return nested
    for key in ("statusCode", "status_code", "status"):
        value = payload.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str) and value.isdigit():
            return int(value)
    return None


def normalize_api_error(error: BaseException | str) -> XeroAPIError:
    """Normalize any failure from a report call into an ``XeroAPIError``.

    Failures arrive either as raised objects carrying an HTTP status, or as a
    JSON-stringified error object. Both collapse into one error type exposing
    an optional ``status_code``.
    """
    if isinstance(error, XeroAPIError):
        return error
    if isinstance(error, httpx.HTTPStatusError):
        return XeroAPIError(
            str(error), status_code=error.response.status_code, details=error.response.text
        )

    text = error if isinstance(error, str) else str(error)
    try:
        decoded = json.loads(text)
    except (TypeError, ValueError):
        decoded = None

    status_code = _status_from_payload(decoded)
    if status_code is None and not isinstance(error, str):
        status_code = _status_from_payload(getattr(error, "__dict__", None))
    return XeroAPIError(text, status_code=status_code, details=decoded)


class XeroClient:
    """Async client for the Xero accounting API."""

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        scopes: str | None = None,
        timeout: float | None = None,
    ):
        settings = get_settings()
        self._client_id = client_id or settings.xero_client_id.get_secret_value()
        self._client_secret = client_secret or settings.xero_client_secret.get_secret_value()
        self._scopes = scopes or settings.xero_scopes
        self._timeout = timeout or settings.xero_timeout

        self._access_token: str | None = None
        self._token_expires_at: datetime | None = None

        self._client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "XeroClient":
        try:
            await self.get_client_credentials_token()
        except Exception:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # === Authentication ===

    async def get_client_credentials_token(self) -> dict[str, Any]:
        """Request an access token with the client-credentials grant."""
        client = await self._get_client()

        form = {"grant_type": "client_credentials"}
        if self._scopes:
            form["scope"] = self._scopes

        response = await client.post(
            IDENTITY_URL,
            data=form,
            auth=(self._client_id, self._client_secret),
        )

        if response.status_code in (400, 401):
            raise AuthenticationError(
                "Invalid client credentials", status_code=response.status_code
            )
        response.raise_for_status()

        data_raw = response.json()
        if not isinstance(data_raw, dict):
            raise XeroAPIError("Invalid token response format")
        data = cast(dict[str, Any], data_raw)
        self._access_token = data["access_token"]
        # Refresh a minute early
        expires_in = int(data.get("expires_in", 1800))
        self._token_expires_at = datetime.now(UTC) + timedelta(seconds=max(expires_in - 60, 0))

        logger.info("xero_token_acquired", expires_in=expires_in)
        return data

    async def _ensure_authenticated(self) -> None:
        """Ensure we have a valid access token."""
        async with self._lock:
            if (
                not self._access_token
                or (self._token_expires_at and datetime.now(UTC) >= self._token_expires_at)
            ):
                await self.get_client_credentials_token()

    def _get_headers(self, tenant_id: str) -> dict[str, str]:
        """Get request headers with auth token and tenant."""
        headers = {"Accept": "application/json", "xero-tenant-id": tenant_id}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    async def _request(
        self,
        path: str,
        tenant_id: str,
        params: dict[str, Any] | None = None,
        retry_count: int = 0,
    ) -> Any:
        """Make an authenticated GET request."""
        await self._ensure_authenticated()
        client = await self._get_client()

        try:
            response = await client.get(
                f"{API_BASE_URL}{path}",
                params=params,
                headers=self._get_headers(tenant_id),
            )
        except httpx.RequestError as e:
            raise XeroAPIError(f"Request failed: {e}") from e

        if response.status_code == 401 and retry_count < 1:
            # Token expired during request, fetch a new one and retry
            self._access_token = None
            return await self._request(path, tenant_id, params, retry_count + 1)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                "Rate limited",
                status_code=429,
                details={"retry_after": retry_after},
            )

        if response.status_code >= 400:
            try:
                error_detail = response.json() if response.content else {}
            except ValueError:
                error_detail = {"raw": response.text[:500] if response.text else "empty response"}
            raise XeroAPIError(
                f"API error: {response.status_code}",
                status_code=response.status_code,
                details=error_detail,
            )

        return response.json() if response.content else {}

    # === Reports ===

    async def get_report_profit_and_loss(
        self,
        tenant_id: str,
        from_date: date,
        to_date: date,
        periods: int | None = None,
        timeframe: str | None = None,
    ) -> Any:
        """Get the profit and loss report for a date range.

        ``periods`` and ``timeframe`` request comparison columns (e.g. eleven
        prior ``"MONTH"`` periods for a twelve-month breakdown).
        """
        params: dict[str, Any] = {
            "fromDate": from_date.isoformat(),
            "toDate": to_date.isoformat(),
        }
        if periods is not None:
            params["periods"] = periods
        if timeframe is not None:
            params["timeframe"] = timeframe

        return await self._request("/Reports/ProfitAndLoss", tenant_id, params=params)
