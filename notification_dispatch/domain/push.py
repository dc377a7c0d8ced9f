"""Push channel mapping.

The recipient of a push envelope is the device token, and the subject doubles
as the notification title. `data` is handed through untouched.
"""

from __future__ import annotations

from ..types import ChannelResult, SendPushFn
from .envelope import NotificationEnvelope


def deliver_push(
    envelope: NotificationEnvelope,
    send_push: SendPushFn,
    *,
    default_title: str,
) -> ChannelResult:
    """Invoke the push adapter for one envelope and return a channel result."""
    title = envelope.subject or default_title
    data = dict(envelope.data) if envelope.data is not None else None

    try:
        delivered = send_push(token=envelope.recipient, title=title, body=envelope.body, data=data)
    except Exception as exc:
        return {"channel": "push", "success": False, "error": str(exc)}

    if not delivered:
        return {"channel": "push", "success": False, "error": "push adapter reported failure"}
    return {"channel": "push", "success": True, "error": None}
