"""Dispatch routing: queue the envelope, or deliver it right away.

Mental model refresher:
- The choice is made once, when the composition root builds the router:
  a QueueSubmitter is passed in only when a queue endpoint is configured.
- Queue mode is authoritative: transport errors propagate as
  QueueSubmissionError, because "accepted for queueing" is the contract.
- Direct mode is best-effort: adapter failures are logged and recorded on
  the result, never raised. The caller still gets the envelope id.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Sequence

import structlog

from ..domain import ChannelSenders, deliver_envelope
from ..domain.envelope import NotificationEnvelope, mask_recipient
from .submitter import QueueSubmitter

logger = structlog.get_logger()

MODE_QUEUED = "queued"
MODE_DIRECT = "direct"


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of accepting one envelope.

    `delivered` is None for queued envelopes (delivery happens later) and the
    adapter outcome for direct ones. Either way the envelope was accepted.
    """

    id: str
    mode: str
    delivered: bool | None = None
    error: str | None = None


class DispatchRouter:
    def __init__(
        self,
        senders: ChannelSenders,
        *,
        submitter: QueueSubmitter | None = None,
        max_workers: int = 10,
    ) -> None:
        self._senders = senders
        self._submitter = submitter
        self._max_workers = max_workers

    @property
    def queue_enabled(self) -> bool:
        return self._submitter is not None

    def dispatch(self, envelope: NotificationEnvelope) -> DispatchResult:
        if self._submitter is not None:
            envelope_id = self._submitter.submit_one(envelope)
            return DispatchResult(id=envelope_id, mode=MODE_QUEUED)
        return self._deliver_direct(envelope)

    def dispatch_batch(self, envelopes: Sequence[NotificationEnvelope]) -> list[DispatchResult]:
        """Dispatch many envelopes; results follow input order."""
        if not envelopes:
            return []

        if self._submitter is not None:
            envelope_ids = self._submitter.submit_many(envelopes)
            return [DispatchResult(id=envelope_id, mode=MODE_QUEUED) for envelope_id in envelope_ids]

        workers = max(1, min(self._max_workers, len(envelopes)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dispatch") as executor:
            return list(executor.map(self._deliver_direct, envelopes))

    def _deliver_direct(self, envelope: NotificationEnvelope) -> DispatchResult:
        logger.info(
            "notification_processing_sync",
            message_id=envelope.id,
            type=envelope.channel_type.value,
            to=mask_recipient(envelope.recipient),
        )

        try:
            result = deliver_envelope(envelope, self._senders)
        except Exception as exc:
            result = {"channel": envelope.channel_type.value, "success": False, "error": str(exc)}

        if not result["success"]:
            logger.error(
                "channel_delivery_failed",
                message_id=envelope.id,
                type=envelope.channel_type.value,
                error=result["error"],
            )
            return DispatchResult(
                id=envelope.id,
                mode=MODE_DIRECT,
                delivered=False,
                error=result["error"],
            )

        return DispatchResult(id=envelope.id, mode=MODE_DIRECT, delivered=True)
