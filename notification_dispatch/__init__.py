"""Multi-channel notification dispatch: envelopes, routing and queueing.

Module layout by abstraction layer:
- domain: envelope model, batch splitting, channel mapping rules
- application: queue submission, routing, request entry points
- adapters: payload mapping, provider senders, queue transports
- bootstrap: composition root wiring adapters into the application layer
"""

from .adapters.payload import build_envelope
from .application.process import dispatch_request, dispatch_requests
from .application.router import DispatchResult, DispatchRouter
from .application.submitter import QUEUE_BATCH_CEILING, QueueSubmitter
from .bootstrap import build_queue_client, build_router, build_senders
from .config import Settings, load_settings
from .domain import ChannelSenders, ChannelType, NotificationEnvelope, Priority, split_batches
from .errors import (
    ChannelDeliveryFailure,
    InvariantViolation,
    NotificationDispatchError,
    QueueSubmissionError,
    ValidationError,
)

__all__ = [
    "QUEUE_BATCH_CEILING",
    "ChannelDeliveryFailure",
    "ChannelSenders",
    "ChannelType",
    "DispatchResult",
    "DispatchRouter",
    "InvariantViolation",
    "NotificationDispatchError",
    "NotificationEnvelope",
    "Priority",
    "QueueSubmissionError",
    "QueueSubmitter",
    "Settings",
    "ValidationError",
    "build_envelope",
    "build_queue_client",
    "build_router",
    "build_senders",
    "dispatch_request",
    "dispatch_requests",
    "load_settings",
    "split_batches",
]
