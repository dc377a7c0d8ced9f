"""Consumer-handler adapter functions for queued envelopes.

Mental model refresher:
- This is the controller-like entrypoint on the consuming side of the queue.
- Queue runtimes (SQS, Kafka) call this after receiving a record.
- Flow:
  record -> decode message body -> deliver envelope -> commit/no-commit
- This module owns transport lifecycle behavior (decode errors, commit
  callbacks), not channel rules.
- No commit means the queue redelivers later; that is the only retry.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

from ..domain import ChannelSenders, deliver_envelope
from .payload import parse_message_body

Record = Mapping[str, Any]
CommitFn = Callable[[Record], None]
RejectFn = Callable[[Record, str], None]


def handle_message(
    record: Record,
    *,
    senders: ChannelSenders,
    commit: CommitFn,
    reject: RejectFn | None = None,
) -> dict[str, Any]:
    """Handle one incoming record and decide commit/no-commit.

    Commit policy:
    - Commit only when the channel adapter reported a successful delivery.
    - Do not commit on decode failures or delivery failures.
    """
    try:
        envelope = parse_message_body(_get_record_value(record))
    except Exception as exc:
        error = f"parse_failed: {exc}"
        if reject is not None:
            reject(record, error)
        return {
            "status": "parse_failed",
            "record_meta": _record_meta(record),
            "envelope_id": None,
            "delivery": None,
            "should_commit": False,
            "error": error,
        }

    delivery = deliver_envelope(envelope, senders)
    should_commit = bool(delivery["success"])

    if should_commit:
        commit(record)
        status = "delivered_and_committed"
        error = None
    else:
        status = "delivery_failed_not_committed"
        error = f"delivery_failed: {delivery['error']}"
        if reject is not None:
            reject(record, error)

    return {
        "status": status,
        "record_meta": _record_meta(record),
        "envelope_id": envelope.id,
        "delivery": delivery,
        "should_commit": should_commit,
        "error": error,
    }


def handle_batch(
    records: Sequence[Record],
    *,
    senders: ChannelSenders,
    commit: CommitFn,
    reject: RejectFn | None = None,
) -> list[dict[str, Any]]:
    """Handle a batch of records sequentially using `handle_message`."""
    return [
        handle_message(record, senders=senders, commit=commit, reject=reject)
        for record in records
    ]


def _get_record_value(record: Record) -> bytes | str | Mapping[str, Any]:
    value = record.get("value")
    if not isinstance(value, (bytes, str, Mapping)):
        raise ValueError("record.value must be a message body")
    return value


def _record_meta(record: Record) -> dict[str, Any]:
    return {
        "topic": record.get("topic"),
        "partition": record.get("partition"),
        "offset": record.get("offset"),
    }
