from __future__ import annotations

from datetime import UTC, datetime
import json
import unittest

from notification_dispatch.adapters.payload import (
    build_envelope,
    encode_message_body,
    envelope_to_message_body,
    message_attributes,
    parse_message_body,
)
from notification_dispatch.domain.envelope import ChannelType, Priority
from notification_dispatch.errors import ValidationError


class BuildEnvelopeTests(unittest.TestCase):
    def test_minimal_email_request_leaves_subject_unset(self) -> None:
        envelope = build_envelope({"type": "email", "to": "a@b.com", "body": "hi"})

        self.assertEqual(envelope.channel_type, ChannelType.EMAIL)
        self.assertEqual(envelope.recipient, "a@b.com")
        self.assertEqual(envelope.body, "hi")
        self.assertIsNone(envelope.subject)
        self.assertEqual(envelope.priority, Priority.NORMAL)
        self.assertTrue(envelope.id)

    def test_ids_are_unique_for_identical_input(self) -> None:
        raw = {"type": "sms", "to": "+15555550123", "body": "hi"}

        ids = {build_envelope(raw).id for _ in range(50)}

        self.assertEqual(len(ids), 50)

    def test_optional_fields_are_carried_through(self) -> None:
        envelope = build_envelope(
            {
                "type": "push",
                "to": "device-token",
                "subject": "Title",
                "body": "Body",
                "priority": "high",
                "userId": "user-1",
                "metadata": {"source": "rides"},
                "data": {"ride_id": 7},
            }
        )

        self.assertEqual(envelope.priority, Priority.HIGH)
        self.assertEqual(envelope.subject, "Title")
        self.assertEqual(envelope.user_id, "user-1")
        self.assertEqual(dict(envelope.metadata or {}), {"source": "rides"})
        self.assertEqual(dict(envelope.data or {}), {"ride_id": 7})

    def test_missing_required_fields_raise_validation_error(self) -> None:
        base = {"type": "email", "to": "a@b.com", "body": "hi"}
        for field_name in ("type", "to", "body"):
            raw = {key: value for key, value in base.items() if key != field_name}
            with self.subTest(field=field_name):
                with self.assertRaises(ValidationError):
                    build_envelope(raw)

    def test_non_string_required_fields_raise_validation_error(self) -> None:
        cases = [
            {"type": "email", "to": "a@b.com", "body": False},
            {"type": "email", "to": "a@b.com", "body": 0},
            {"type": "sms", "to": 0, "body": "hi"},
            {"type": 1, "to": "a@b.com", "body": "hi"},
        ]
        for raw in cases:
            with self.subTest(raw=raw):
                with self.assertRaises(ValidationError):
                    build_envelope(raw)

    def test_blank_recipient_is_missing(self) -> None:
        with self.assertRaises(ValidationError):
            build_envelope({"type": "email", "to": "   ", "body": "hi"})

    def test_unknown_type_raises_validation_error(self) -> None:
        for channel in ("fax", "EMAIL ", "webhook"):
            with self.subTest(channel=channel):
                with self.assertRaises(ValidationError):
                    build_envelope({"type": channel, "to": "x", "body": "hi"})

    def test_unknown_priority_raises_validation_error(self) -> None:
        with self.assertRaises(ValidationError):
            build_envelope({"type": "email", "to": "a@b.com", "body": "hi", "priority": "urgent"})

    def test_non_mapping_data_raises_validation_error(self) -> None:
        with self.assertRaises(ValidationError):
            build_envelope({"type": "push", "to": "tok", "body": "hi", "data": ["x"]})

    def test_non_mapping_request_raises_validation_error(self) -> None:
        with self.assertRaises(ValidationError):
            build_envelope(["email", "a@b.com", "hi"])  # type: ignore[arg-type]

    def test_body_whitespace_is_preserved(self) -> None:
        envelope = build_envelope({"type": "email", "to": "a@b.com", "body": "line 1\nline 2\n"})

        self.assertEqual(envelope.body, "line 1\nline 2\n")


class MessageBodyTests(unittest.TestCase):
    def test_message_body_carries_id_type_and_queued_at(self) -> None:
        envelope = build_envelope({"type": "sms", "to": "+15555550123", "body": "hi"})
        queued_at = datetime(2026, 10, 1, 12, 0, tzinfo=UTC)

        body = envelope_to_message_body(envelope, queued_at=queued_at)

        self.assertEqual(body["id"], envelope.id)
        self.assertEqual(body["type"], "sms")
        self.assertEqual(body["to"], "+15555550123")
        self.assertEqual(body["priority"], "normal")
        self.assertEqual(body["queuedAt"], "2026-10-01T12:00:00+00:00")
        self.assertNotIn("subject", body)
        self.assertNotIn("data", body)

    def test_message_attributes_hold_type_and_priority(self) -> None:
        envelope = build_envelope(
            {"type": "push", "to": "tok", "body": "hi", "priority": "low"}
        )

        self.assertEqual(message_attributes(envelope), {"type": "push", "priority": "low"})

    def test_parse_message_body_keeps_envelope_id(self) -> None:
        envelope = build_envelope(
            {"type": "push", "to": "tok", "subject": "T", "body": "hi", "data": {"k": "v"}}
        )
        encoded = encode_message_body(envelope_to_message_body(envelope))

        decoded = parse_message_body(encoded.encode("utf-8"))

        self.assertEqual(decoded, envelope)

    def test_parse_message_body_requires_id(self) -> None:
        raw = json.dumps({"type": "email", "to": "a@b.com", "body": "hi"})

        with self.assertRaises(ValidationError):
            parse_message_body(raw)

    def test_parse_message_body_rejects_non_object_json(self) -> None:
        with self.assertRaises(ValidationError):
            parse_message_body(b'["not","an","object"]')

    def test_parse_message_body_rejects_invalid_json(self) -> None:
        with self.assertRaises(ValidationError):
            parse_message_body("{not json")

    def test_parse_message_body_rejects_invalid_utf8(self) -> None:
        with self.assertRaises(ValidationError):
            parse_message_body(b"\xff\xfe\x00")


if __name__ == "__main__":
    unittest.main()
