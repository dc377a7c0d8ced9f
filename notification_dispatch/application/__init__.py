"""Application layer: submission, routing and request entry points."""

from .process import dispatch_request, dispatch_requests
from .router import DispatchResult, DispatchRouter
from .submitter import QUEUE_BATCH_CEILING, QueueSubmitter

__all__ = [
    "QUEUE_BATCH_CEILING",
    "DispatchResult",
    "DispatchRouter",
    "QueueSubmitter",
    "dispatch_request",
    "dispatch_requests",
]
