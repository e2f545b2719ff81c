"""Discord webhook notifier implementation."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from alert_notifier.config import NotifierConfig
from alert_notifier.notifiers.base import NotifierBase
from alert_notifier.notifiers.encoder import DeliveryEncoder
from alert_notifier.notifiers.errors import NotifierValidationError
from alert_notifier.notifiers.formatter import PayloadBuilder
from alert_notifier.notifiers.models import WebhookRequest

if TYPE_CHECKING:
    from alert_notifier.notifiers.models import AlertEvaluation, AlertNotification
    from alert_notifier.notifiers.webhook import WebhookSender

logger = logging.getLogger(__name__)

NOTIFIER_TYPE = "discord"


class DiscordNotifier(NotifierBase):
    """Discord webhook notifier for alert evaluations.

    Renders each evaluation as a rich embed and posts it to the configured
    webhook, uploading the rendered graph as a file when it has no public
    URL. Sending is delegated to a WebhookSender; failures are raised to
    the caller and never retried here.
    """

    def __init__(
        self,
        notification: AlertNotification,
        config: NotifierConfig,
        *,
        sender: WebhookSender,
        app_url: str,
        build_version: str,
    ) -> None:
        """Initialize Discord notifier.

        Args:
            notification: Persisted notifier record.
            config: Validated notifier settings.
            sender: Collaborator that performs the HTTP request.
            app_url: Public root URL used in rule links.
            build_version: Version shown in the embed footer.
        """
        super().__init__(notification)
        self.config = config
        self.sender = sender
        self.app_url = app_url
        self.builder = PayloadBuilder(build_version)
        self.encoder = DeliveryEncoder()

    @classmethod
    def from_notification(
        cls,
        notification: AlertNotification,
        *,
        sender: WebhookSender,
        app_url: str,
        build_version: str,
    ) -> DiscordNotifier:
        """Create a notifier from a persisted notifier record.

        Raises:
            NotifierValidationError: If the settings are invalid.
        """
        if notification.type != NOTIFIER_TYPE:
            raise NotifierValidationError(
                f"Notification type {notification.type!r} is not {NOTIFIER_TYPE!r}"
            )

        try:
            config = NotifierConfig.from_settings(notification.settings)
        except ValidationError as e:
            reason = "; ".join(
                str(error["ctx"]["error"]) if "ctx" in error else error["msg"]
                for error in e.errors()
            )
            raise NotifierValidationError(reason) from e

        return cls(
            notification,
            config,
            sender=sender,
            app_url=app_url,
            build_version=build_version,
        )

    @property
    def webhook_url(self) -> str:
        """Return the destination webhook URL."""
        return self.config.url

    def build_request(self, evaluation: AlertEvaluation) -> WebhookRequest:
        """Build the webhook request for an evaluation.

        Raises:
            RuleLinkError: If the rule link cannot be resolved.
            AttachmentError: If the image exists but cannot be read.
        """
        message = self.builder.build(evaluation, self.config.content, app_url=self.app_url)
        delivery = self.encoder.encode(
            message,
            message.attachment_required,
            evaluation.image_on_disk_path,
        )
        return WebhookRequest(
            url=self.webhook_url,
            body=delivery.body,
            content_type=delivery.content_type,
        )

    async def notify(self, evaluation: AlertEvaluation) -> None:
        """Send a notification for an evaluation to Discord.

        Args:
            evaluation: The alert evaluation to notify about.

        Raises:
            NotifierError: If building, encoding or sending fails.
        """
        logger.info(f"Sending alert notification to {self.webhook_url}")

        try:
            request = await asyncio.to_thread(self.build_request, evaluation)
        except Exception as e:
            logger.error(f"Failed to build Discord notification for rule {evaluation.rule_id}: {e}")
            raise

        try:
            await self.sender.send(request)
        except Exception as e:
            logger.error(f"Failed to send notification to Discord: {e}")
            raise
