"""Pushover push-notification client."""

from typing import Any

import httpx
import structlog

from eo_goal.config import get_settings

logger = structlog.get_logger(__name__)

MESSAGES_URL = "https://api.pushover.net/1/messages.json"


class PushoverError(Exception):
    """Pushover rejected or failed to accept a message."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PushoverClient:
    """Async client for the Pushover messages API."""

    def __init__(
        self,
        token: str | None = None,
        user: str | None = None,
        timeout: float = 30.0,
    ):
        settings = get_settings()
        if token is None and settings.pushover_token is not None:
            token = settings.pushover_token.get_secret_value()
        if user is None and settings.pushover_user is not None:
            user = settings.pushover_user.get_secret_value()
        if not token or not user:
            raise PushoverError("Pushover token and user are required")

        self._token = token
        self._user = user
        self._client = httpx.AsyncClient(timeout=timeout)
        self._logger = logger.bind(client="pushover")

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "PushoverClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def send_message(self, title: str, message: str) -> dict[str, Any]:
        """Send a notification to the configured user."""
        try:
            response = await self._client.post(
                MESSAGES_URL,
                json={
                    "token": self._token,
                    "user": self._user,
                    "title": title,
                    "message": message,
                },
            )
        except httpx.RequestError as e:
            raise PushoverError(f"Request failed: {e}") from e

        if response.status_code >= 400:
            raise PushoverError(
                f"Pushover error: {response.status_code} {response.text[:200]}",
                status_code=response.status_code,
            )

        self._logger.debug("pushover_message_accepted", status_code=response.status_code)
        return response.json() if response.content else {}
