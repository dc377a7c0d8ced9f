from __future__ import annotations

import unittest

from notification_dispatch.domain.batching import split_batches
from notification_dispatch.errors import InvariantViolation


class SplitBatchesTests(unittest.TestCase):
    def test_concatenated_chunks_reproduce_input(self) -> None:
        items = list(range(23))

        chunks = split_batches(items, 10)

        self.assertEqual([len(chunk) for chunk in chunks], [10, 10, 3])
        self.assertEqual([item for chunk in chunks for item in chunk], items)

    def test_exact_multiple_has_no_short_chunk(self) -> None:
        chunks = split_batches(list("abcdef"), 3)

        self.assertEqual(chunks, [["a", "b", "c"], ["d", "e", "f"]])

    def test_empty_input_yields_no_chunks(self) -> None:
        self.assertEqual(split_batches([], 10), [])

    def test_input_not_larger_than_limit_yields_one_chunk(self) -> None:
        self.assertEqual(split_batches([1, 2, 3], 3), [[1, 2, 3]])
        self.assertEqual(split_batches([1], 10), [[1]])

    def test_non_positive_limit_is_invariant_violation(self) -> None:
        for limit in (0, -1):
            with self.subTest(limit=limit):
                with self.assertRaises(InvariantViolation):
                    split_batches([1, 2], limit)

    def test_non_integer_limit_is_invariant_violation(self) -> None:
        with self.assertRaises(InvariantViolation):
            split_batches([1, 2], 2.5)  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
