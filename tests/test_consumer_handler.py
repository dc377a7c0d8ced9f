from __future__ import annotations

import unittest
from typing import Any

from notification_dispatch.adapters.consumer_handler import handle_batch, handle_message
from notification_dispatch.adapters.payload import (
    build_envelope,
    encode_message_body,
    envelope_to_message_body,
)

from .fakes import RecordingSenders


def make_record(value: Any, *, offset: int) -> dict[str, Any]:
    return {
        "topic": "notifications.dispatch",
        "partition": 0,
        "offset": offset,
        "value": value,
    }


def make_body(**overrides: Any) -> str:
    raw = {"type": "email", "to": "person@example.com", "body": "hi"} | overrides
    return encode_message_body(envelope_to_message_body(build_envelope(raw)))


class ConsumerHandlerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.committed: list[int] = []
        self.rejected: list[tuple[int, str]] = []

    def commit(self, record: dict[str, Any]) -> None:
        self.committed.append(int(record["offset"]))

    def reject(self, record: dict[str, Any], reason: str) -> None:
        self.rejected.append((int(record["offset"]), reason))

    def test_handle_message_commits_when_delivery_succeeds(self) -> None:
        recorder = RecordingSenders()

        result = handle_message(
            make_record(make_body(), offset=10),
            senders=recorder.bundle(),
            commit=self.commit,
            reject=self.reject,
        )

        self.assertEqual(result["status"], "delivered_and_committed")
        self.assertTrue(result["should_commit"])
        self.assertEqual(self.committed, [10])
        self.assertEqual(self.rejected, [])
        self.assertEqual(recorder.emails[0]["to_email"], "person@example.com")

    def test_handle_message_does_not_commit_when_delivery_fails(self) -> None:
        recorder = RecordingSenders(result=False)

        result = handle_message(
            make_record(make_body(type="sms", to="+15555550123"), offset=11),
            senders=recorder.bundle(),
            commit=self.commit,
            reject=self.reject,
        )

        self.assertEqual(result["status"], "delivery_failed_not_committed")
        self.assertFalse(result["should_commit"])
        self.assertEqual(self.committed, [])
        self.assertEqual([offset for offset, _ in self.rejected], [11])

    def test_handle_message_parse_failure_does_not_commit(self) -> None:
        recorder = RecordingSenders()

        result = handle_message(
            make_record('{"type":"email","to":"a@b.com","body":"no id"}', offset=12),
            senders=recorder.bundle(),
            commit=self.commit,
            reject=self.reject,
        )

        self.assertEqual(result["status"], "parse_failed")
        self.assertIn("parse_failed", result["error"] or "")
        self.assertEqual(self.committed, [])
        self.assertEqual([offset for offset, _ in self.rejected], [12])
        self.assertEqual(recorder.emails, [])

    def test_handle_message_rejects_missing_value(self) -> None:
        result = handle_message(
            make_record(None, offset=13),
            senders=RecordingSenders().bundle(),
            commit=self.commit,
        )

        self.assertEqual(result["status"], "parse_failed")
        self.assertEqual(self.committed, [])

    def test_handle_batch_mixes_commit_and_no_commit(self) -> None:
        records = [
            make_record(make_body(), offset=20),
            make_record(b"not json", offset=21),
            make_record(make_body(type="push", to="device-token"), offset=22),
        ]

        results = handle_batch(
            records,
            senders=RecordingSenders().bundle(),
            commit=self.commit,
            reject=self.reject,
        )

        self.assertEqual(len(results), 3)
        self.assertEqual(self.committed, [20, 22])
        self.assertEqual([offset for offset, _ in self.rejected], [21])


if __name__ == "__main__":
    unittest.main()
