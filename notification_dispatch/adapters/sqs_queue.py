"""Amazon SQS transport: queue client for submission, and the consumer loop.

Mental model refresher:
- This module is transport glue to SQS itself.
- `SqsQueueClient` is what the QueueSubmitter talks to. The boto3 client is
  created lazily, once, and reused by every caller.
- `run_sqs_worker_forever` maps received SQS messages into the
  consumer-handler flow; delivery rules still live in the domain layer.
- A message is deleted only after successful delivery. Anything else is left
  for SQS to redeliver once the visibility timeout expires.
"""

from __future__ import annotations

import threading
from typing import Any, Mapping, Sequence

import boto3
import structlog

from ..domain import ChannelSenders
from ..types import QueueAck, QueueAttributes, QueueEntry
from .consumer_handler import handle_message

logger = structlog.get_logger()

# SQS caps ReceiveMessage at 10 messages per call.
SQS_MAX_RECEIVE = 10


class SqsQueueClient:
    def __init__(
        self,
        queue_url: str,
        *,
        region_name: str = "us-east-1",
        client: Any = None,
    ) -> None:
        self._queue_url = queue_url
        self._region_name = region_name
        self._client = client
        self._lock = threading.Lock()

    @property
    def queue_url(self) -> str:
        return self._queue_url

    def get_client(self) -> Any:
        """Return the shared boto3 SQS client; create it on first use."""
        if self._client is None:
            with self._lock:
                if self._client is None:
                    self._client = boto3.client("sqs", region_name=self._region_name)
        return self._client

    def submit_message(
        self,
        body: str,
        attributes: QueueAttributes,
        delay_seconds: int | None = None,
    ) -> QueueAck:
        send_kwargs: dict[str, Any] = {
            "QueueUrl": self._queue_url,
            "MessageBody": body,
            "MessageAttributes": _to_message_attributes(attributes),
        }
        if delay_seconds is not None:
            send_kwargs["DelaySeconds"] = delay_seconds

        result = self.get_client().send_message(**send_kwargs)
        return {"id": "0", "success": True, "message_id": result.get("MessageId"), "error": None}

    def submit_message_batch(self, entries: Sequence[QueueEntry]) -> list[QueueAck]:
        sqs_entries = []
        for entry in entries:
            sqs_entry: dict[str, Any] = {
                "Id": entry["id"],
                "MessageBody": entry["body"],
                "MessageAttributes": _to_message_attributes(entry["attributes"]),
            }
            if entry.get("delay_seconds") is not None:
                sqs_entry["DelaySeconds"] = entry["delay_seconds"]
            sqs_entries.append(sqs_entry)

        result = self.get_client().send_message_batch(QueueUrl=self._queue_url, Entries=sqs_entries)

        acks: list[QueueAck] = [
            {"id": item["Id"], "success": True, "message_id": item.get("MessageId"), "error": None}
            for item in result.get("Successful", [])
        ]
        acks.extend(
            {
                "id": item["Id"],
                "success": False,
                "message_id": None,
                "error": f"{item.get('Code', 'Unknown')}: {item.get('Message', '')}".strip(),
            }
            for item in result.get("Failed", [])
        )
        return acks

    def receive_messages(
        self,
        *,
        max_messages: int = SQS_MAX_RECEIVE,
        wait_time_seconds: int = 20,
        visibility_timeout: int = 60,
    ) -> list[dict[str, Any]]:
        result = self.get_client().receive_message(
            QueueUrl=self._queue_url,
            MaxNumberOfMessages=min(max_messages, SQS_MAX_RECEIVE),
            WaitTimeSeconds=wait_time_seconds,
            VisibilityTimeout=visibility_timeout,
            MessageAttributeNames=["All"],
        )
        return list(result.get("Messages", []))

    def delete_message(self, receipt_handle: str) -> None:
        self.get_client().delete_message(QueueUrl=self._queue_url, ReceiptHandle=receipt_handle)


def run_sqs_worker_forever(
    client: SqsQueueClient,
    senders: ChannelSenders,
    *,
    wait_time_seconds: int = 20,
    visibility_timeout: int = 60,
) -> int:
    """Long-poll the queue and deliver every received envelope."""
    logger.info(
        "worker_start",
        backend="sqs",
        queue_url=client.queue_url,
        wait_time_seconds=wait_time_seconds,
        visibility_timeout=visibility_timeout,
    )

    try:
        while True:
            messages = client.receive_messages(
                wait_time_seconds=wait_time_seconds,
                visibility_timeout=visibility_timeout,
            )
            for message in messages:
                process_sqs_message(client, message, senders)
    except KeyboardInterrupt:
        logger.info("worker_stop", backend="sqs", reason="keyboard_interrupt")
        return 0
    except Exception as exc:
        logger.exception("worker_error", backend="sqs", error=str(exc))
        return 1


def process_sqs_message(
    client: SqsQueueClient,
    message: Mapping[str, Any],
    senders: ChannelSenders,
) -> dict[str, Any]:
    """Run one received SQS message through the consumer handler."""
    record = {
        "topic": client.queue_url,
        "partition": None,
        "offset": message.get("MessageId"),
        "value": message.get("Body"),
    }

    def commit(_record: Mapping[str, Any]) -> None:
        client.delete_message(message["ReceiptHandle"])

    def reject(_record: Mapping[str, Any], reason: str) -> None:
        logger.warning(
            "message_left_for_redelivery",
            sqs_message_id=message.get("MessageId"),
            reason=reason,
        )

    result = handle_message(record, senders=senders, commit=commit, reject=reject)
    logger.info(
        "message_processed",
        sqs_message_id=message.get("MessageId"),
        status=result["status"],
        should_commit=result["should_commit"],
        error=result["error"],
    )
    return result


def _to_message_attributes(attributes: QueueAttributes) -> dict[str, dict[str, str]]:
    return {
        name: {"DataType": "String", "StringValue": value}
        for name, value in attributes.items()
    }
