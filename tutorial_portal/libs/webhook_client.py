"""
HTTP client for the external fulfillment webhook.
"""

from __future__ import annotations

from typing import Any, Protocol

import httpx
import structlog

from tutorial_portal.core.config import get_settings

logger = structlog.get_logger(__name__)


class DispatchError(Exception):
    """Raised when the fulfillment system did not accept a notification."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class WebhookClientProtocol(Protocol):
    """Protocol for webhook senders (allows mocking)."""

    async def post_json(self, payload: dict[str, Any]) -> str:
        """Deliver ``payload`` and return the response body."""
        ...


class FulfillmentWebhookClient:
    """Async client posting release notifications to the fulfillment system."""

    def __init__(
        self,
        url: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.url = url if url is not None else settings.fulfillment_webhook_url
        self.timeout = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.fulfillment_webhook_timeout_seconds
        )
        self.transport = transport

    async def post_json(self, payload: dict[str, Any]) -> str:
        """POST ``payload``; any timeout, transport error or non-2xx raises ``DispatchError``."""
        if not self.url:
            raise DispatchError("FULFILLMENT_WEBHOOK_URL not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.url,
                    headers={"Content-Type": "application/json"},
                    json=payload,
                )
        except httpx.TimeoutException as exc:
            raise DispatchError(f"Webhook timed out after {self.timeout}s") from exc
        except httpx.HTTPError as exc:
            raise DispatchError(f"Webhook transport error: {exc}") from exc
        except httpx.InvalidURL as exc:
            raise DispatchError(f"Webhook URL is invalid: {exc}") from exc

        if not response.is_success:
            raise DispatchError(
                f"Webhook failed with status: {response.status_code}",
                status_code=response.status_code,
            )

        return response.text
