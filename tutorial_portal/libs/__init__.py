"""Shared library helpers."""

from tutorial_portal.libs.webhook_client import (
    DispatchError,
    FulfillmentWebhookClient,
    WebhookClientProtocol,
)

__all__ = [
    "DispatchError",
    "FulfillmentWebhookClient",
    "WebhookClientProtocol",
]
