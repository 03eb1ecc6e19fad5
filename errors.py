"""Error types raised by the publisher."""

from __future__ import annotations

CANCELLED_MESSAGE = "Operation cancelled"


class PublishError(RuntimeError):
    """Base class for publisher errors."""


class CredentialError(PublishError):
    """The API key / page id pair could not be used to read the target page."""


class FatalPublishError(PublishError):
    """The Notion database could not be created; nothing was published."""


class PublishAborted(PublishError):
    """Cancellation was observed at a checkpoint."""

    def __init__(self, message: str = CANCELLED_MESSAGE) -> None:
        super().__init__(message)


def is_cancellation(exc: BaseException) -> bool:
    """Return True when ``exc`` carries the cancellation marker message."""
    return str(exc) == CANCELLED_MESSAGE
