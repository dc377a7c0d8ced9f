"""Fake sender adapters for local smoke tests.

Mental model refresher:
- This is outbound adapter code.
- In production, real_senders.py is where provider API calls live
  (Resend, Twilio, Firebase).
- Domain code calls these through injected functions; domain does not know
  which provider implementation is underneath.
"""

from __future__ import annotations

from typing import Any, Mapping


def send_email_via_console(*, to_email: str, subject: str, body: str) -> bool:
    print("[EMAIL]")
    print(f"to={to_email}")
    print(f"subject={subject}")
    print(f"body={body}")
    return True


def send_sms_via_console(*, to_phone_e164: str, message: str) -> bool:
    print("[SMS]")
    print(f"to={to_phone_e164}")
    print(f"message={message}")
    return True


def send_push_via_console(
    *,
    token: str,
    title: str,
    body: str,
    data: Mapping[str, Any] | None = None,
) -> bool:
    print("[PUSH]")
    print(f"token={token}")
    print(f"title={title}")
    print(f"body={body}")
    print(f"data={dict(data or {})}")
    return True
