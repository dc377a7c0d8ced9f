"""Email channel mapping.

Mental model refresher:
- Domain modules hold channel rules.
- They decide how envelope fields map onto one adapter call:
  - recipient -> to_email
  - subject (or the service default) -> subject
  - body -> body
- They do not know whether the adapter is Resend, the console or a test fake.
"""

from __future__ import annotations

from ..types import ChannelResult, SendEmailFn
from .envelope import NotificationEnvelope


def deliver_email(
    envelope: NotificationEnvelope,
    send_email: SendEmailFn,
    *,
    default_subject: str,
) -> ChannelResult:
    """Invoke the email adapter for one envelope and return a channel result."""
    subject = envelope.subject or default_subject

    try:
        delivered = send_email(to_email=envelope.recipient, subject=subject, body=envelope.body)
    except Exception as exc:
        return {"channel": "email", "success": False, "error": str(exc)}

    if not delivered:
        return {"channel": "email", "success": False, "error": "email adapter reported failure"}
    return {"channel": "email", "success": True, "error": None}
