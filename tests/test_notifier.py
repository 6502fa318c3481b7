"""Tests for goal notifications and the Pushover client."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from eo_goal.clients.pushover import MESSAGES_URL, PushoverClient, PushoverError
from eo_goal.notifier import Notification, Notifier, build_notification


def test_build_notification_over_goal():
    """Test the notification text above the goal."""
    notification = build_notification(Decimal("1534230.50"), Decimal("1500000"))

    assert notification.title == "102% to EO Goal"
    assert notification.message == "102% · $1,534k of $1,500k goal"


def test_build_notification_under_goal():
    """Test the notification text below the goal."""
    notification = build_notification(Decimal("712500"), Decimal("1500000"))

    assert notification.title == "47% to EO Goal"
    assert notification.message == "47% · $712k of $1,500k goal"


class TestPushoverClient:
    """Tests for PushoverClient."""

    @pytest.fixture
    def client(self):
        client = PushoverClient(token="app-token", user="user-key")
        client._client = AsyncMock()
        return client

    def test_defaults_from_settings(self):
        """Test credentials default to settings."""
        client = PushoverClient()

        assert client._token == "test-pushover-token"
        assert client._user == "test-pushover-user"

    def test_requires_credentials(self):
        """Test a missing token is rejected."""
        with pytest.raises(PushoverError):
            PushoverClient(token="", user="user-key")

    @pytest.mark.asyncio
    async def test_send_message(self, client):
        """Test a message is posted with token and user."""
        response = MagicMock()
        response.status_code = 200
        response.content = b'{"status": 1}'
        response.json.return_value = {"status": 1, "request": "abc"}
        client._client.post = AsyncMock(return_value=response)

        result = await client.send_message(title="Title", message="Body")

        assert result["status"] == 1
        client._client.post.assert_awaited_once_with(
            MESSAGES_URL,
            json={"token": "app-token", "user": "user-key", "title": "Title", "message": "Body"},
        )

    @pytest.mark.asyncio
    async def test_rejected_message_raises(self, client):
        """Test an error status raises PushoverError."""
        response = MagicMock()
        response.status_code = 400
        response.text = '{"user": "invalid"}'
        client._client.post = AsyncMock(return_value=response)

        with pytest.raises(PushoverError) as exc_info:
            await client.send_message(title="Title", message="Body")

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, client):
        """Test a connection failure raises PushoverError."""
        client._client.post = AsyncMock(side_effect=httpx.ConnectError("unreachable"))

        with pytest.raises(PushoverError):
            await client.send_message(title="Title", message="Body")


@pytest.mark.asyncio
async def test_notifier_sends_title_and_message():
    """Test the notifier forwards title and message."""
    pushover = AsyncMock()
    notifier = Notifier(pushover)

    await notifier.send(Notification(title="102% to EO Goal", message="102% · $1,534k of $1,500k goal"))

    pushover.send_message.assert_awaited_once_with(
        title="102% to EO Goal", message="102% · $1,534k of $1,500k goal"
    )


@pytest.mark.asyncio
async def test_notifier_propagates_failures():
    """Test delivery failures reach the caller."""
    pushover = AsyncMock()
    pushover.send_message.side_effect = PushoverError("down", status_code=500)

    with pytest.raises(PushoverError):
        await Notifier(pushover).send(Notification(title="t", message="m"))
