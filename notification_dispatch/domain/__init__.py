"""Domain layer: envelope model, batching and channel mapping rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..errors import InvariantViolation
from ..types import ChannelResult, SendEmailFn, SendPushFn, SendSMSFn
from .batching import split_batches
from .email import deliver_email
from .envelope import (
    ChannelType,
    NotificationEnvelope,
    Priority,
    mask_recipient,
    queue_delay_seconds,
)
from .push import deliver_push
from .sms import deliver_sms


@dataclass(frozen=True)
class ChannelSenders:
    """One adapter callable per channel, owned by the composition root."""

    send_email: SendEmailFn
    send_sms: SendSMSFn
    send_push: SendPushFn
    default_subject: str = "Notification"
    default_title: str = "Notification"


_Delivery = Callable[[NotificationEnvelope, ChannelSenders], ChannelResult]

_DELIVERIES: dict[ChannelType, _Delivery] = {
    ChannelType.EMAIL: lambda envelope, senders: deliver_email(
        envelope, senders.send_email, default_subject=senders.default_subject
    ),
    ChannelType.SMS: lambda envelope, senders: deliver_sms(envelope, senders.send_sms),
    ChannelType.PUSH: lambda envelope, senders: deliver_push(
        envelope, senders.send_push, default_title=senders.default_title
    ),
}

_missing = set(ChannelType) - set(_DELIVERIES)
if _missing:
    raise InvariantViolation(f"no delivery mapping for channels: {sorted(_missing)}")


def deliver_envelope(envelope: NotificationEnvelope, senders: ChannelSenders) -> ChannelResult:
    """Route one envelope to the adapter matching its channel type."""
    return _DELIVERIES[envelope.channel_type](envelope, senders)


__all__ = [
    "ChannelSenders",
    "ChannelType",
    "NotificationEnvelope",
    "Priority",
    "deliver_email",
    "deliver_envelope",
    "deliver_push",
    "deliver_sms",
    "mask_recipient",
    "queue_delay_seconds",
    "split_batches",
]
