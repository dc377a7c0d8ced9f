"""SMS channel mapping: recipient -> to_phone_e164, body -> message."""

from __future__ import annotations

from ..types import ChannelResult, SendSMSFn
from .envelope import NotificationEnvelope


def deliver_sms(envelope: NotificationEnvelope, send_sms: SendSMSFn) -> ChannelResult:
    try:
        delivered = send_sms(to_phone_e164=envelope.recipient, message=envelope.body)
    except Exception as exc:
        return {"channel": "sms", "success": False, "error": str(exc)}

    if not delivered:
        return {"channel": "sms", "success": False, "error": "sms adapter reported failure"}
    return {"channel": "sms", "success": True, "error": None}
