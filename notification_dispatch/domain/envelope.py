"""Envelope model: the unit of work for dispatch and queueing.

Mental model refresher:
- An envelope is built once per request, by the payload adapter.
- After that it is read-only input to routing, splitting and submission.
- It is never persisted; `queuedAt` is stamped on the serialized queue
  message, not on the envelope itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class ChannelType(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"


class Priority(str, Enum):
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


@dataclass(frozen=True)
class NotificationEnvelope:
    id: str
    channel_type: ChannelType
    recipient: str
    body: str
    subject: str | None = None
    data: Mapping[str, Any] | None = None
    priority: Priority = Priority.NORMAL
    user_id: str | None = None
    metadata: Mapping[str, Any] | None = None


def queue_delay_seconds(priority: Priority) -> int | None:
    """Return the explicit queue delay for a priority.

    Two tiers only: high priority asks for zero delay, everything else leaves
    the queue's default delay in place (`None` means "do not send a delay").
    """
    if priority is Priority.HIGH:
        return 0
    return None


def mask_recipient(recipient: str) -> str:
    """Shorten a recipient for log output."""
    return f"{recipient[:5]}..."
