"""Notifier capability shared by all notification channels."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from alert_notifier.notifiers.models import AlertEvaluation, AlertNotification


@runtime_checkable
class Notifier(Protocol):
    """Protocol for notification channels."""

    name: str

    async def notify(self, evaluation: AlertEvaluation) -> None:
        """Deliver a notification for an evaluation. Raises on failure."""
        ...


class NotifierBase:
    """Identity of a configured notifier."""

    def __init__(self, notification: AlertNotification) -> None:
        self.name = notification.name
        self.type = notification.type
        self.uid = notification.uid
