"""Exceptions raised while building and delivering notifications."""

from __future__ import annotations


class NotifierError(Exception):
    """Base exception for notifier errors."""


class NotifierValidationError(NotifierError):
    """Raised when notifier settings are invalid."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class RuleLinkError(NotifierError):
    """Raised when the link back to an alert rule cannot be resolved."""


class AttachmentError(NotifierError):
    """Raised when an existing image attachment cannot be read."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class DispatchError(NotifierError):
    """Raised when the webhook request fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
