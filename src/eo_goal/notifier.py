"""Push notification of progress toward the revenue goal."""

from dataclasses import dataclass
from decimal import Decimal

import structlog

from eo_goal.clients.pushover import PushoverClient
from eo_goal.metrics import format_thousands, percentage_of_goal

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Notification:
    title: str
    message: str


def build_notification(total: Decimal, goal: Decimal) -> Notification:
    """E.g. ``"102% to EO Goal"`` / ``"102% · $1,534k of $1,500k goal"``."""
    percentage = percentage_of_goal(total, goal)
    return Notification(
        title=f"{percentage}% to EO Goal",
        message=f"{percentage}% · {format_thousands(total)} of {format_thousands(goal)} goal",
    )


class Notifier:
    """Sends goal notifications through Pushover."""

    def __init__(self, client: PushoverClient):
        self._client = client

    async def send(self, notification: Notification) -> None:
        await self._client.send_message(title=notification.title, message=notification.message)
        logger.info("notification_sent", title=notification.title)
