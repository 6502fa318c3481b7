"""HTTP clients for the services the EO goal tracker talks to."""

from eo_goal.clients.eo_backend import EOBackendClient
from eo_goal.clients.pushover import PushoverClient, PushoverError
from eo_goal.clients.xero import (
    AuthenticationError,
    RateLimitError,
    XeroAPIError,
    XeroClient,
    normalize_api_error,
)

__all__ = [
    "EOBackendClient",
    "PushoverClient",
    "PushoverError",
    "XeroClient",
    "XeroAPIError",
    "AuthenticationError",
    "RateLimitError",
    "normalize_api_error",
]
