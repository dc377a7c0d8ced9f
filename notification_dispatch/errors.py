"""Error taxonomy for dispatch and queueing."""

from __future__ import annotations

from typing import Sequence


class NotificationDispatchError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(NotificationDispatchError, ValueError):
    """A raw request (or a bulk request list) is malformed. Never retried."""


class QueueSubmissionError(NotificationDispatchError, RuntimeError):
    """The queue transport rejected a submission or could not be reached.

    `accepted_ids` lists every envelope id the queue acknowledged before the
    failure; those submissions are not rolled back. `failed_ids` lists the
    ids of the batch that failed.
    """

    def __init__(
        self,
        message: str,
        *,
        accepted_ids: Sequence[str] = (),
        failed_ids: Sequence[str] = (),
    ) -> None:
        super().__init__(message)
        self.accepted_ids = list(accepted_ids)
        self.failed_ids = list(failed_ids)


class ChannelDeliveryFailure(NotificationDispatchError, RuntimeError):
    """A delivery channel adapter could not deliver a message."""

    def __init__(self, message: str, *, channel: str | None = None) -> None:
        super().__init__(message)
        self.channel = channel


class InvariantViolation(NotificationDispatchError, AssertionError):
    """Internal misuse of a component; a programming defect."""
