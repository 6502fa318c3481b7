"""Tests for EO backend reporting."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from eo_goal import __version__
from eo_goal.clients.eo_backend import EOBackendClient
from eo_goal.models import MonthlyRevenue, RevenueFigure
from eo_goal.reporter import InsecureEndpointError, Reporter, build_report_payload

DIRECTORY_URL = "https://directory.example.com/endpoints.json"
ENDPOINT = "https://sydney.example.com/reports"


@pytest.fixture
def payload():
    months = [
        MonthlyRevenue(year=2026, month=9, amount=Decimal("120000.00")),
        MonthlyRevenue(year=2026, month=8, amount=Decimal("121000.5")),
    ]
    figure = RevenueFigure(
        period_start=date(2025, 10, 19),
        period_end=date(2026, 10, 18),
        amount=Decimal("1534230.5"),
    )
    return build_report_payload(
        participant_name="Jane Founder",
        participant_chapter="sydney",
        company_name="Demo Company (AU)",
        twelve_months=months,
        rolling_twelve=figure,
    )


@pytest.fixture
def backend():
    backend = AsyncMock()
    backend.fetch_directory.return_value = {"sydney": ENDPOINT, "melbourne": "https://m.example.com"}
    backend.post_report.return_value = MagicMock(status_code=200, text="ok")
    return backend


def test_payload_serialization(payload):
    """Test the payload's wire format."""
    assert payload.to_dict() == {
        "version": __version__,
        "participantName": "Jane Founder",
        "participantChapter": "sydney",
        "companyName": "Demo Company (AU)",
        "twelveMonths": [
            {"month": "2026-09", "amount": "120000.00"},
            {"month": "2026-08", "amount": "121000.5"},
        ],
        "rollingTwelve": {"start": "2025-10-19", "end": "2026-10-18", "amount": "1534230.50"},
    }


@pytest.mark.asyncio
async def test_posts_to_chapter_endpoint(backend, payload):
    """Test the payload is posted to the chapter's endpoint."""
    reporter = Reporter(backend, DIRECTORY_URL)

    delivered = await reporter.report(payload)

    assert delivered is True
    backend.fetch_directory.assert_awaited_once_with(DIRECTORY_URL)
    backend.post_report.assert_awaited_once_with(ENDPOINT, payload.to_dict())


@pytest.mark.asyncio
async def test_missing_chapter_is_a_no_op(backend, payload):
    """Test nothing is posted when the chapter has no endpoint."""
    backend.fetch_directory.return_value = {"melbourne": "https://m.example.com"}
    reporter = Reporter(backend, DIRECTORY_URL)

    delivered = await reporter.report(payload)

    assert delivered is False
    backend.post_report.assert_not_awaited()


@pytest.mark.asyncio
async def test_blank_endpoint_is_a_no_op(backend, payload):
    """Test a blank endpoint counts as missing."""
    backend.fetch_directory.return_value = {"sydney": "  "}

    assert await Reporter(backend, DIRECTORY_URL).report(payload) is False
    backend.post_report.assert_not_awaited()


@pytest.mark.asyncio
async def test_non_https_endpoint_is_fatal(backend, payload):
    """Test a plain HTTP endpoint raises."""
    backend.fetch_directory.return_value = {"sydney": "http://sydney.example.com/reports"}

    with pytest.raises(InsecureEndpointError):
        await Reporter(backend, DIRECTORY_URL).report(payload)

    backend.post_report.assert_not_awaited()


@pytest.mark.asyncio
async def test_directory_failure_is_swallowed(backend, payload):
    """Test an unreachable directory is logged, not raised."""
    backend.fetch_directory.side_effect = httpx.ConnectError("unreachable")

    assert await Reporter(backend, DIRECTORY_URL).report(payload) is False
    backend.post_report.assert_not_awaited()


@pytest.mark.asyncio
async def test_malformed_directory_is_swallowed(backend, payload):
    """Test a directory that is not an object is logged, not raised."""
    backend.fetch_directory.side_effect = ValueError("Endpoint directory must be a JSON object")

    assert await Reporter(backend, DIRECTORY_URL).report(payload) is False


@pytest.mark.asyncio
async def test_rejected_report_is_swallowed(backend, payload):
    """Test an error status from the endpoint is logged, not raised."""
    backend.post_report.return_value = MagicMock(status_code=500, text="internal error")

    assert await Reporter(backend, DIRECTORY_URL).report(payload) is False


@pytest.mark.asyncio
async def test_created_status_counts_as_rejected(backend, payload):
    """Test only 200 counts as delivered."""
    backend.post_report.return_value = MagicMock(status_code=201, text="")

    assert await Reporter(backend, DIRECTORY_URL).report(payload) is False


@pytest.mark.asyncio
async def test_delivery_exception_is_swallowed(backend, payload):
    """Test a transport failure on delivery is logged, not raised."""
    backend.post_report.side_effect = httpx.ReadTimeout("timed out")

    assert await Reporter(backend, DIRECTORY_URL).report(payload) is False


@pytest.mark.asyncio
@pytest.mark.parametrize("endpoint", ["https://[::1", "https://sydney.example.com]/reports"])
async def test_unparseable_endpoint_is_a_no_op(backend, payload, endpoint):
    """Test an endpoint urlsplit cannot parse is skipped."""
    backend.fetch_directory.return_value = {"sydney": endpoint}

    assert await Reporter(backend, DIRECTORY_URL).report(payload) is False
    backend.post_report.assert_not_awaited()


@pytest.mark.asyncio
async def test_invalid_url_on_delivery_is_swallowed(payload):
    """Test an endpoint httpx refuses to send to is logged, not raised."""
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"sydney": "https://bad\x00host/reports"})

    backend = EOBackendClient(timeout=5.0)
    backend._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    async with backend:
        delivered = await Reporter(backend, DIRECTORY_URL).report(payload)

    assert delivered is False
    assert [str(request.url) for request in requests] == [DIRECTORY_URL]


@pytest.mark.asyncio
async def test_invalid_directory_url_is_swallowed(backend, payload):
    """Test an invalid directory URL is logged, not raised."""
    backend.fetch_directory.side_effect = httpx.InvalidURL("Invalid non-printable ASCII character in URL")

    assert await Reporter(backend, DIRECTORY_URL).report(payload) is False
    backend.post_report.assert_not_awaited()


class TestEOBackendClient:
    """Tests for EOBackendClient."""

    @pytest.mark.asyncio
    async def test_fetch_directory_keeps_string_entries(self):
        """Test non-string directory entries are dropped."""
        client = EOBackendClient(timeout=5.0)
        response = MagicMock()
        response.raise_for_status = MagicMock()
        response.json.return_value = {"sydney": ENDPOINT, "broken": 42}
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=response)

        directory = await client.fetch_directory(DIRECTORY_URL)

        assert directory == {"sydney": ENDPOINT}

    @pytest.mark.asyncio
    async def test_fetch_directory_rejects_non_object(self):
        """Test a directory that is not an object raises ValueError."""
        client = EOBackendClient(timeout=5.0)
        response = MagicMock()
        response.raise_for_status = MagicMock()
        response.json.return_value = ["not", "a", "map"]
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=response)

        with pytest.raises(ValueError):
            await client.fetch_directory(DIRECTORY_URL)
