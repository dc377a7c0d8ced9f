"""Kafka transport: queue client for submission, and the consumer loop.

Mental model refresher:
- This module is transport glue to Kafka itself.
- `KafkaQueueClient` gives the QueueSubmitter the same two calls the SQS
  client offers. Kafka has no message attributes or per-message delay, so
  both travel as record headers for the consumer to honor.
- `run_kafka_worker_forever` maps Kafka records into the consumer-handler
  flow. Rejected records go to a dead-letter topic when one is enabled;
  offsets are committed only once a record is delivered or dead-lettered.
"""

from __future__ import annotations

from datetime import UTC, datetime
import json
import threading
from typing import Any, Mapping, Sequence

from kafka import KafkaConsumer, KafkaProducer, TopicPartition
from kafka.structs import OffsetAndMetadata
import structlog

from ..domain import ChannelSenders
from ..types import QueueAck, QueueAttributes, QueueEntry
from .consumer_handler import handle_message

logger = structlog.get_logger()


class KafkaQueueClient:
    def __init__(
        self,
        bootstrap_servers: Sequence[str],
        topic: str,
        *,
        producer: Any = None,
        send_timeout_seconds: float = 10.0,
        acks: str = "all",
    ) -> None:
        if not bootstrap_servers:
            raise RuntimeError("KAFKA_BOOTSTRAP_SERVERS must include at least one host:port")
        self._bootstrap_servers = list(bootstrap_servers)
        self._topic = topic
        self._producer = producer
        self._send_timeout_seconds = send_timeout_seconds
        self._acks = acks
        self._lock = threading.Lock()

    @property
    def topic(self) -> str:
        return self._topic

    def get_producer(self) -> Any:
        """Return the shared producer; create it on first use."""
        if self._producer is None:
            with self._lock:
                if self._producer is None:
                    self._producer = KafkaProducer(
                        bootstrap_servers=self._bootstrap_servers,
                        acks=self._acks,
                    )
        return self._producer

    def submit_message(
        self,
        body: str,
        attributes: QueueAttributes,
        delay_seconds: int | None = None,
    ) -> QueueAck:
        producer = self.get_producer()
        future = producer.send(
            self._topic,
            value=body.encode("utf-8"),
            headers=_record_headers(attributes, delay_seconds),
        )
        metadata = future.get(timeout=self._send_timeout_seconds)
        return {
            "id": "0",
            "success": True,
            "message_id": f"{metadata.partition}:{metadata.offset}",
            "error": None,
        }

    def submit_message_batch(self, entries: Sequence[QueueEntry]) -> list[QueueAck]:
        producer = self.get_producer()
        pending = [
            (
                entry["id"],
                producer.send(
                    self._topic,
                    value=entry["body"].encode("utf-8"),
                    headers=_record_headers(entry["attributes"], entry.get("delay_seconds")),
                ),
            )
            for entry in entries
        ]
        producer.flush(timeout=self._send_timeout_seconds)

        acks: list[QueueAck] = []
        for entry_id, future in pending:
            try:
                metadata = future.get(timeout=self._send_timeout_seconds)
            except Exception as exc:
                acks.append({"id": entry_id, "success": False, "message_id": None, "error": str(exc)})
                continue
            acks.append(
                {
                    "id": entry_id,
                    "success": True,
                    "message_id": f"{metadata.partition}:{metadata.offset}",
                    "error": None,
                }
            )
        return acks

    def close(self) -> None:
        if self._producer is not None:
            self._producer.flush(timeout=self._send_timeout_seconds)
            self._producer.close()
            self._producer = None


def run_kafka_worker_forever(
    senders: ChannelSenders,
    *,
    bootstrap_servers: Sequence[str],
    topic: str,
    group_id: str = "notifications-dispatch-worker",
    dlq_enabled: bool = True,
    dlq_topic: str | None = None,
    poll_timeout_ms: int = 1000,
    max_records: int = 50,
    send_timeout_seconds: float = 10.0,
) -> int:
    """Run the Kafka consumer loop that delivers queued envelopes."""
    dlq_topic_name = dlq_topic or f"{topic}.dlq"
    consumer = KafkaConsumer(
        topic,
        bootstrap_servers=list(bootstrap_servers),
        group_id=group_id,
        enable_auto_commit=False,
        auto_offset_reset="earliest",
    )
    dlq_producer = (
        KafkaProducer(
            bootstrap_servers=list(bootstrap_servers),
            value_serializer=_serialize_json_object,
            acks="all",
        )
        if dlq_enabled
        else None
    )
    logger.info(
        "worker_start",
        backend="kafka",
        topic=topic,
        group_id=group_id,
        dlq_enabled=dlq_enabled,
        dlq_topic=dlq_topic_name,
    )

    try:
        while True:
            batches = consumer.poll(timeout_ms=poll_timeout_ms, max_records=max_records)
            for _topic_partition, records in batches.items():
                for message in records:
                    _process_kafka_message(
                        consumer,
                        dlq_producer,
                        message,
                        senders=senders,
                        dlq_topic=dlq_topic_name,
                        send_timeout_seconds=send_timeout_seconds,
                    )
    except KeyboardInterrupt:
        logger.info("worker_stop", backend="kafka", reason="keyboard_interrupt")
        return 0
    except Exception as exc:
        logger.exception("worker_error", backend="kafka", error=str(exc))
        return 1
    finally:
        consumer.close()
        if dlq_producer is not None:
            dlq_producer.flush(timeout=send_timeout_seconds)
            dlq_producer.close()


def _process_kafka_message(
    consumer: Any,
    dlq_producer: Any,
    message: Any,
    *,
    senders: ChannelSenders,
    dlq_topic: str,
    send_timeout_seconds: float,
) -> dict[str, Any]:
    message_topic = message.topic
    message_partition = int(message.partition)
    message_offset = int(message.offset)

    def commit_current_offset() -> None:
        offsets = {
            TopicPartition(message_topic, message_partition): _offset_and_metadata(
                OffsetAndMetadata, message_offset + 1
            )
        }
        consumer.commit(offsets=offsets)
        logger.info(
            "offset_committed",
            topic=message_topic,
            partition=message_partition,
            offset=message_offset,
        )

    def commit_callback(_record: Mapping[str, Any]) -> None:
        commit_current_offset()

    def reject_callback(_record: Mapping[str, Any], reason: str) -> None:
        if dlq_producer is None:
            logger.warning(
                "offset_not_committed",
                topic=message_topic,
                partition=message_partition,
                offset=message_offset,
                reason=reason,
            )
            return

        dlq_payload = _build_dlq_payload(
            source_topic=message_topic,
            source_partition=message_partition,
            source_offset=message_offset,
            source_payload=_record.get("value"),
            failure_reason=reason,
        )
        try:
            future = dlq_producer.send(dlq_topic, value=dlq_payload)
            future.get(timeout=send_timeout_seconds)
        except Exception as exc:
            logger.error(
                "dlq_publish_failed",
                topic=message_topic,
                partition=message_partition,
                offset=message_offset,
                reason=reason,
                error=str(exc),
            )
            return

        logger.warning("dead_lettered", dlq_topic=dlq_topic, offset=message_offset, reason=reason)
        commit_current_offset()

    record = {
        "topic": message_topic,
        "partition": message_partition,
        "offset": message_offset,
        "value": message.value,
    }
    result = handle_message(record, senders=senders, commit=commit_callback, reject=reject_callback)
    logger.info(
        "message_processed",
        topic=message_topic,
        partition=message_partition,
        offset=message_offset,
        status=result["status"],
        should_commit=result["should_commit"],
        error=result["error"],
    )
    return result


def _record_headers(
    attributes: QueueAttributes,
    delay_seconds: int | None,
) -> list[tuple[str, bytes]]:
    headers = [(name, value.encode("utf-8")) for name, value in attributes.items()]
    if delay_seconds is not None:
        headers.append(("delay_seconds", str(delay_seconds).encode("utf-8")))
    return headers


def _serialize_json_object(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def _build_dlq_payload(
    *,
    source_topic: str,
    source_partition: int,
    source_offset: int,
    source_payload: Any,
    failure_reason: str,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "event_type": f"{source_topic}.dlq",
        "failed_at": datetime.now(tz=UTC).isoformat(),
        "failure_reason": failure_reason,
        "source": {
            "topic": source_topic,
            "partition": source_partition,
            "offset": source_offset,
        },
        "payload": _to_json_compatible(source_payload),
    }

    envelope_id = _source_envelope_id(source_payload)
    if envelope_id is not None:
        payload["source_envelope_id"] = envelope_id
    return payload


def _source_envelope_id(source_payload: Any) -> str | None:
    if isinstance(source_payload, (bytes, str)):
        try:
            source_payload = json.loads(source_payload)
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None
    if not isinstance(source_payload, Mapping):
        return None
    envelope_id = source_payload.get("id")
    if isinstance(envelope_id, str) and envelope_id.strip():
        return envelope_id.strip()
    return None


def _to_json_compatible(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, Mapping):
        return {str(key): _to_json_compatible(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_json_compatible(item) for item in value]
    return repr(value)


def _offset_and_metadata(offset_and_metadata_type: Any, offset: int) -> Any:
    """Build kafka-python OffsetAndMetadata across version signatures."""
    try:
        return offset_and_metadata_type(offset, "", -1)
    except TypeError:
        return offset_and_metadata_type(offset, "")
