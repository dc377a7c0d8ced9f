#!/usr/bin/env python3
"""Run the queue consumer flow without a queue.

Sample envelopes are encoded the same way the submitter encodes them, then
fed through the consumer handler with console senders that fail on purpose
for some recipients.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from notification_dispatch.adapters.consumer_handler import handle_batch  # noqa: E402
from notification_dispatch.adapters.fake_senders import (  # noqa: E402
    send_email_via_console,
    send_push_via_console,
    send_sms_via_console,
)
from notification_dispatch.adapters.payload import (  # noqa: E402
    build_envelope,
    encode_message_body,
    envelope_to_message_body,
)
from notification_dispatch.domain import ChannelSenders  # noqa: E402


def main() -> int:
    records = sample_records()
    committed_offsets: list[int] = []
    rejected_offsets: list[tuple[int, str]] = []

    def commit(record: dict[str, Any]) -> None:
        offset = int(record.get("offset", -1))
        committed_offsets.append(offset)
        print(f"[COMMIT] offset={offset}")

    def reject(record: dict[str, Any], reason: str) -> None:
        offset = int(record.get("offset", -1))
        rejected_offsets.append((offset, reason))
        print(f"[NO-COMMIT] offset={offset} reason={reason}")

    senders = ChannelSenders(
        send_email=send_email_via_console,
        send_sms=send_sms_maybe_fail,
        send_push=send_push_via_console,
    )
    results = handle_batch(records, senders=senders, commit=commit, reject=reject)

    print("")
    print("[BATCH SUMMARY]")
    for result in results:
        meta = result["record_meta"]
        print(
            f"offset={meta['offset']} status={result['status']} "
            f"should_commit={result['should_commit']} error={result['error']}"
        )

    print("")
    print("[OFFSETS]")
    print(f"committed={committed_offsets}")
    print(f"rejected={rejected_offsets}")
    return 0


def send_sms_maybe_fail(*, to_phone_e164: str, message: str) -> bool:
    if to_phone_e164 == "+15555559999":
        return False
    return send_sms_via_console(to_phone_e164=to_phone_e164, message=message)


def sample_records() -> list[dict[str, Any]]:
    requests = [
        {"type": "email", "to": "person@example.com", "body": "Receipt attached."},
        {"type": "sms", "to": "+15555550123", "body": "Driver arriving."},
        {"type": "sms", "to": "+15555559999", "body": "This one fails."},
    ]
    records = [
        {
            "topic": "notifications.dispatch",
            "partition": 0,
            "offset": 100 + index,
            "value": encode_message_body(envelope_to_message_body(build_envelope(request))),
        }
        for index, request in enumerate(requests)
    ]
    records.append(
        {
            "topic": "notifications.dispatch",
            "partition": 0,
            "offset": 100 + len(records),
            "value": '{"type":"email","to":"missing-id@example.com","body":"no id"}',
        }
    )
    return records


if __name__ == "__main__":
    sys.exit(main())
