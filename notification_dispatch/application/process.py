"""Application entry points used by the outer layer (CLI, HTTP, workers).

Mental model refresher:
- These functions turn raw request mappings into envelopes and hand them to
  the router.
- Every request is validated before any network call happens, so a bad
  request in a bulk list never leaves half of the list submitted.
- Bulk admission control (how many requests one call may carry) is
  separate from the queue transport's batch ceiling.
"""

from __future__ import annotations

from typing import Sequence

from ..adapters.payload import build_envelope
from ..errors import ValidationError
from ..types import RawRequest
from .router import DispatchResult, DispatchRouter

DEFAULT_MAX_BATCH_SIZE = 100


def dispatch_request(router: DispatchRouter, raw: RawRequest) -> DispatchResult:
    """Build and dispatch one notification request."""
    envelope = build_envelope(raw)
    return router.dispatch(envelope)


def dispatch_requests(
    router: DispatchRouter,
    raws: Sequence[RawRequest],
    *,
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
) -> list[DispatchResult]:
    """Build and dispatch a bulk list of notification requests."""
    if isinstance(raws, (str, bytes)) or not isinstance(raws, Sequence) or not raws:
        raise ValidationError("notifications array is required")
    if len(raws) > max_batch_size:
        raise ValidationError(f"Maximum {max_batch_size} notifications per batch")

    envelopes = []
    for index, raw in enumerate(raws):
        try:
            envelopes.append(build_envelope(raw))
        except ValidationError as exc:
            raise ValidationError(f"notifications[{index}]: {exc}") from exc

    return router.dispatch_batch(envelopes)
