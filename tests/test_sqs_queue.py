from __future__ import annotations

import unittest
from unittest import mock

from notification_dispatch.adapters.payload import (
    build_envelope,
    encode_message_body,
    envelope_to_message_body,
)
from notification_dispatch.adapters.sqs_queue import SqsQueueClient, process_sqs_message
from notification_dispatch.application.submitter import QueueSubmitter
from notification_dispatch.errors import QueueSubmissionError

from .fakes import RecordingSenders

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/notifications"


class SqsQueueClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.boto_client = mock.Mock()
        self.client = SqsQueueClient(QUEUE_URL, client=self.boto_client)

    def test_submit_message_sends_attributes_without_delay(self) -> None:
        self.boto_client.send_message.return_value = {"MessageId": "m-1"}

        ack = self.client.submit_message("{}", {"type": "email", "priority": "normal"})

        self.assertEqual(ack["message_id"], "m-1")
        kwargs = self.boto_client.send_message.call_args.kwargs
        self.assertEqual(kwargs["QueueUrl"], QUEUE_URL)
        self.assertNotIn("DelaySeconds", kwargs)
        self.assertEqual(
            kwargs["MessageAttributes"]["type"],
            {"DataType": "String", "StringValue": "email"},
        )

    def test_submit_message_sends_explicit_zero_delay(self) -> None:
        self.boto_client.send_message.return_value = {"MessageId": "m-2"}

        self.client.submit_message("{}", {"type": "sms", "priority": "high"}, delay_seconds=0)

        self.assertEqual(self.boto_client.send_message.call_args.kwargs["DelaySeconds"], 0)

    def test_submit_message_batch_maps_successes_and_failures(self) -> None:
        self.boto_client.send_message_batch.return_value = {
            "Successful": [{"Id": "0", "MessageId": "m-0"}],
            "Failed": [{"Id": "1", "Code": "InternalError", "Message": "boom", "SenderFault": False}],
        }
        entries = [
            {"id": "0", "body": "{}", "attributes": {"type": "email", "priority": "high"}, "delay_seconds": 0},
            {"id": "1", "body": "{}", "attributes": {"type": "email", "priority": "low"}, "delay_seconds": None},
        ]

        acks = self.client.submit_message_batch(entries)

        sqs_entries = self.boto_client.send_message_batch.call_args.kwargs["Entries"]
        self.assertEqual(sqs_entries[0]["DelaySeconds"], 0)
        self.assertNotIn("DelaySeconds", sqs_entries[1])
        self.assertEqual(
            [(ack["id"], ack["success"]) for ack in acks],
            [("0", True), ("1", False)],
        )
        self.assertIn("InternalError", acks[1]["error"])

    @mock.patch("notification_dispatch.adapters.sqs_queue.boto3.client")
    def test_boto3_client_is_created_once(self, client_factory: mock.Mock) -> None:
        client = SqsQueueClient(QUEUE_URL, region_name="eu-west-1")
        client_factory.return_value.send_message.return_value = {"MessageId": "m"}

        client.submit_message("{}", {"type": "email", "priority": "normal"})
        client.submit_message("{}", {"type": "email", "priority": "normal"})

        client_factory.assert_called_once_with("sqs", region_name="eu-west-1")

    def test_submitter_surfaces_sqs_batch_failures(self) -> None:
        self.boto_client.send_message_batch.return_value = {
            "Successful": [{"Id": "0", "MessageId": "m-0"}],
            "Failed": [{"Id": "1", "Code": "InternalError", "Message": "boom"}],
        }
        envelopes = [
            build_envelope({"type": "email", "to": f"u{index}@example.com", "body": "hi"})
            for index in range(2)
        ]

        with self.assertRaises(QueueSubmissionError) as exc:
            QueueSubmitter(self.client).submit_many(envelopes)

        self.assertEqual(exc.exception.accepted_ids, [envelopes[0].id])
        self.assertEqual(exc.exception.failed_ids, [envelopes[1].id])


class SqsConsumerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.boto_client = mock.Mock()
        self.client = SqsQueueClient(QUEUE_URL, client=self.boto_client)

    def make_message(self, body: str) -> dict[str, str]:
        return {"MessageId": "sqs-1", "ReceiptHandle": "rh-1", "Body": body}

    def test_delivered_message_is_deleted(self) -> None:
        envelope = build_envelope({"type": "sms", "to": "+15555550123", "body": "hi"})
        body = encode_message_body(envelope_to_message_body(envelope))

        result = process_sqs_message(self.client, self.make_message(body), RecordingSenders().bundle())

        self.assertEqual(result["envelope_id"], envelope.id)
        self.boto_client.delete_message.assert_called_once_with(
            QueueUrl=QUEUE_URL, ReceiptHandle="rh-1"
        )

    def test_failed_delivery_leaves_message_for_redelivery(self) -> None:
        envelope = build_envelope({"type": "sms", "to": "+15555550123", "body": "hi"})
        body = encode_message_body(envelope_to_message_body(envelope))

        result = process_sqs_message(
            self.client, self.make_message(body), RecordingSenders(result=False).bundle()
        )

        self.assertFalse(result["should_commit"])
        self.boto_client.delete_message.assert_not_called()

    def test_receive_messages_caps_batch_size(self) -> None:
        self.boto_client.receive_message.return_value = {"Messages": [{"MessageId": "a"}]}

        messages = self.client.receive_messages(max_messages=50, wait_time_seconds=5)

        self.assertEqual(messages, [{"MessageId": "a"}])
        kwargs = self.boto_client.receive_message.call_args.kwargs
        self.assertEqual(kwargs["MaxNumberOfMessages"], 10)
        self.assertEqual(kwargs["WaitTimeSeconds"], 5)


if __name__ == "__main__":
    unittest.main()
