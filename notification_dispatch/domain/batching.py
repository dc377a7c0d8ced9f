"""Batch splitting for bulk queue submission."""

from __future__ import annotations

from typing import Sequence, TypeVar

from ..errors import InvariantViolation

T = TypeVar("T")


def split_batches(items: Sequence[T], limit: int) -> list[list[T]]:
    """Partition `items` into consecutive chunks of at most `limit` items.

    Order is preserved within and across chunks; only the last chunk may be
    shorter. An empty input yields no chunks.
    """
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvariantViolation(f"batch limit must be a positive integer, got {limit!r}")

    return [list(items[start : start + limit]) for start in range(0, len(items), limit)]
