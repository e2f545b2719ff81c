"""Webhook dispatch for encoded notification requests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx

from alert_notifier.notifiers.errors import DispatchError

if TYPE_CHECKING:
    from alert_notifier.notifiers.models import WebhookRequest

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "alert-notifier"


@runtime_checkable
class WebhookSender(Protocol):
    """Protocol for sending webhook requests."""

    async def send(self, request: WebhookRequest) -> None:
        """Send the request. Raises DispatchError on failure."""
        ...


class HttpxWebhookSender:
    """Sends webhook requests with httpx.

    Makes exactly one attempt per request; retry policy belongs to the
    caller.
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialize the sender.

        Args:
            timeout: HTTP request timeout in seconds.
            user_agent: User-Agent header sent with every request.
        """
        self.timeout = timeout
        self.user_agent = user_agent

    async def send(self, request: WebhookRequest) -> None:
        """Send a webhook request.

        Args:
            request: The encoded request.

        Raises:
            DispatchError: On transport errors or a non-2xx response.
        """
        headers = {
            "Content-Type": request.content_type,
            "User-Agent": self.user_agent,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    request.http_method,
                    request.url,
                    content=request.body,
                    headers=headers,
                )
        except httpx.TimeoutException as e:
            raise DispatchError(f"Webhook request timed out: {e}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise DispatchError(f"Webhook request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.debug(f"Webhook response body: {response.text}")
            raise DispatchError(
                f"Webhook response status {response.status_code}",
                status_code=response.status_code,
            )

        logger.debug(f"Webhook delivered with status {response.status_code}")
