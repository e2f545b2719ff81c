"""Alert Notifier - Rich webhook notifications for alert evaluations."""

__version__ = "0.1.0"
