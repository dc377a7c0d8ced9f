"""Queue submission: serialize envelopes onto a durable at-least-once queue.

Mental model refresher:
- Acceptance by the queue is not delivery; a consumer delivers later.
- Every message carries `type` and `priority` attributes so consumers can
  filter without decoding the body.
- Bulk submission is split into physical batches of at most
  QUEUE_BATCH_CEILING entries, sent strictly one after another.
- Fail-fast: the first failing batch stops the run. Batches already
  acknowledged stay accepted; the error says which ids those were.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Callable, Protocol, Sequence

import structlog

from ..adapters.payload import encode_message_body, envelope_to_message_body, message_attributes
from ..domain.batching import split_batches
from ..domain.envelope import NotificationEnvelope, queue_delay_seconds
from ..errors import QueueSubmissionError
from ..types import QueueAck, QueueAttributes, QueueEntry

logger = structlog.get_logger()

# Hard limit of the queue transport (SQS SendMessageBatch accepts 10 entries).
QUEUE_BATCH_CEILING = 10


class QueueClient(Protocol):
    def submit_message(
        self,
        body: str,
        attributes: QueueAttributes,
        delay_seconds: int | None = None,
    ) -> QueueAck: ...

    def submit_message_batch(self, entries: Sequence[QueueEntry]) -> list[QueueAck]: ...


class QueueSubmitter:
    def __init__(
        self,
        client: QueueClient,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    def submit_one(self, envelope: NotificationEnvelope) -> str:
        """Queue one envelope and return its id once the queue acknowledged it."""
        entry = self._build_entry(envelope, entry_id="0")
        try:
            ack = self._client.submit_message(
                entry["body"],
                entry["attributes"],
                delay_seconds=entry["delay_seconds"],
            )
        except Exception as exc:
            logger.error(
                "notification_queue_failed",
                message_id=envelope.id,
                type=envelope.channel_type.value,
                error=str(exc),
            )
            raise QueueSubmissionError(
                f"Failed to queue notification {envelope.id}: {exc}",
                failed_ids=[envelope.id],
            ) from exc

        logger.info(
            "notification_queued",
            message_id=envelope.id,
            queue_message_id=(ack or {}).get("message_id"),
            type=envelope.channel_type.value,
            priority=envelope.priority.value,
        )
        return envelope.id

    def submit_many(self, envelopes: Sequence[NotificationEnvelope]) -> list[str]:
        """Queue envelopes in ceiling-sized batches, in input order.

        Returns every envelope id in input order when all batches succeed.
        Raises QueueSubmissionError on the first failing batch; its
        `accepted_ids` holds the ids acknowledged up to that point.
        """
        accepted_ids: list[str] = []

        for batch_number, batch in enumerate(split_batches(envelopes, QUEUE_BATCH_CEILING)):
            entries = [
                self._build_entry(envelope, entry_id=str(index))
                for index, envelope in enumerate(batch)
            ]
            try:
                acks = self._client.submit_message_batch(entries)
            except Exception as exc:
                self._log_batch_failure(batch_number, batch, accepted_ids, exc)
                raise QueueSubmissionError(
                    f"Queue batch {batch_number} failed: {exc}",
                    accepted_ids=accepted_ids,
                    failed_ids=[envelope.id for envelope in batch],
                ) from exc

            failed_ids = _failed_envelope_ids(batch, acks)
            accepted_ids.extend(envelope.id for envelope in batch if envelope.id not in failed_ids)
            if failed_ids:
                self._log_batch_failure(batch_number, batch, accepted_ids, None)
                raise QueueSubmissionError(
                    f"Queue batch {batch_number} rejected {len(failed_ids)} of {len(batch)} entries",
                    accepted_ids=accepted_ids,
                    failed_ids=failed_ids,
                )

        logger.info(
            "notification_batch_queued",
            count=len(envelopes),
            message_ids=accepted_ids,
        )
        return accepted_ids

    def _build_entry(self, envelope: NotificationEnvelope, *, entry_id: str) -> QueueEntry:
        body = envelope_to_message_body(envelope, queued_at=self._clock())
        return {
            "id": entry_id,
            "body": encode_message_body(body),
            "attributes": message_attributes(envelope),
            "delay_seconds": queue_delay_seconds(envelope.priority),
        }

    def _log_batch_failure(
        self,
        batch_number: int,
        batch: Sequence[NotificationEnvelope],
        accepted_ids: Sequence[str],
        exc: Exception | None,
    ) -> None:
        logger.error(
            "notification_batch_queue_failed",
            batch_number=batch_number,
            batch_size=len(batch),
            accepted_count=len(accepted_ids),
            error=str(exc) if exc is not None else "entries_rejected",
        )


def _failed_envelope_ids(batch: Sequence[NotificationEnvelope], acks: Sequence[Any]) -> list[str]:
    """Ids of batch entries without a successful ack, missing acks included."""
    acknowledged = {str(ack["id"]) for ack in acks or [] if ack.get("success", False)}
    return [
        envelope.id
        for index, envelope in enumerate(batch)
        if str(index) not in acknowledged
    ]
