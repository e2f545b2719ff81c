"""Notification layer - Payload building, encoding and webhook delivery."""

from alert_notifier.notifiers.base import Notifier, NotifierBase
from alert_notifier.notifiers.channels.discord import DiscordNotifier
from alert_notifier.notifiers.encoder import DeliveryEncoder
from alert_notifier.notifiers.errors import (
    AttachmentError,
    DispatchError,
    NotifierError,
    NotifierValidationError,
    RuleLinkError,
)
from alert_notifier.notifiers.formatter import PayloadBuilder
from alert_notifier.notifiers.models import (
    AlertEvaluation,
    AlertNotification,
    AlertState,
    DeliveryBody,
    EvalMatch,
    RichEmbed,
    RuleLink,
    WebhookMessage,
    WebhookRequest,
)
from alert_notifier.notifiers.webhook import HttpxWebhookSender, WebhookSender

__all__ = [
    "AlertEvaluation",
    "AlertNotification",
    "AlertState",
    "AttachmentError",
    "DeliveryBody",
    "DeliveryEncoder",
    "DiscordNotifier",
    "DispatchError",
    "EvalMatch",
    "HttpxWebhookSender",
    "Notifier",
    "NotifierBase",
    "NotifierError",
    "NotifierValidationError",
    "PayloadBuilder",
    "RichEmbed",
    "RuleLink",
    "RuleLinkError",
    "WebhookMessage",
    "WebhookRequest",
    "WebhookSender",
]
