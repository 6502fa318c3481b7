"""EO Goal Tracker - rolling twelve-month revenue against the EO goal, from Xero."""

__version__ = "0.1.0"

from eo_goal.clients import EOBackendClient, PushoverClient, XeroClient
from eo_goal.config import configure_logging, get_settings
from eo_goal.metrics import format_thousands, percentage_of_goal
from eo_goal.models import MonthlyRevenue, ReportPayload, RevenueFigure
from eo_goal.notifier import Notification, Notifier, build_notification
from eo_goal.pipeline import RunResult, run
from eo_goal.reporter import InsecureEndpointError, Reporter
from eo_goal.reports import ReportFetcher

__all__ = [
    # Version
    "__version__",
    # Clients
    "XeroClient",
    "PushoverClient",
    "EOBackendClient",
    # Pipeline
    "ReportFetcher",
    "Notifier",
    "Notification",
    "build_notification",
    "Reporter",
    "InsecureEndpointError",
    "run",
    "RunResult",
    # Metrics & models
    "percentage_of_goal",
    "format_thousands",
    "RevenueFigure",
    "MonthlyRevenue",
    "ReportPayload",
    # Config
    "get_settings",
    "configure_logging",
]
