"""Notifier implementations for various platforms."""

from alert_notifier.notifiers.channels.discord import DiscordNotifier

__all__ = [
    "DiscordNotifier",
]
