"""
Sliding window multiset over k-mer codes.
"""

from collections import deque
from typing import Deque, Dict, Iterator

from .genomic_types import KmerCode
from .kmers import KmerStream


class SlidingWindowMultiset:
    """
    Bounded FIFO of the last `capacity` k-mer codes with a frequency table.

    The frequency table maps each code to its number of occurrences inside
    the window. A code is a key only while its count is positive, so the
    number of distinct codes is the size of the table and never requires a
    rescan of the window.

    Attributes:
        capacity (int): Maximum number of codes held by the window.
    """

    def __init__(self, capacity: int) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise TypeError(f"capacity must be an integer, got {type(capacity).__name__}.")
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}.")
        self.capacity: int = capacity
        self._window: Deque[KmerCode] = deque()
        self._counts: Dict[KmerCode, int] = {}

    def fill(self, stream: KmerStream) -> int:
        """
        Admit codes from `stream` until the window is full or the stream ends.

        Returns:
            The number of codes admitted. Fewer than the free capacity means
            the stream was exhausted.
        """
        admitted = 0
        while len(self._window) < self.capacity:
            code = stream.pull()
            if code is None:
                break
            self._admit(code)
            admitted += 1
        return admitted

    def advance(self, next_code: KmerCode) -> KmerCode:
        """
        Slide the window one position: evict the oldest code, admit `next_code`.

        Returns:
            The evicted code.

        Raises:
            IndexError: If the window is empty.
        """
        if not self._window:
            raise IndexError("cannot advance an empty window.")
        evicted = self._window.popleft()
        remaining = self._counts[evicted] - 1
        if remaining:
            self._counts[evicted] = remaining
        else:
            del self._counts[evicted]
        self._admit(next_code)
        return evicted

    def _admit(self, code: KmerCode) -> None:
        self._window.append(code)
        self._counts[code] = self._counts.get(code, 0) + 1

    def distinct_count(self) -> int:
        """Number of distinct codes currently in the window."""
        return len(self._counts)

    def count(self, code: KmerCode) -> int:
        return self._counts.get(code, 0)

    def complexity_ratio(self) -> float:
        """Distinct codes divided by current occupancy; 0.0 for an empty window."""
        if not self._window:
            return 0.0
        return len(self._counts) / len(self._window)

    @property
    def is_full(self) -> bool:
        return len(self._window) == self.capacity

    def __len__(self) -> int:
        return len(self._window)

    def __iter__(self) -> Iterator[KmerCode]:
        return iter(self._window)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(capacity={self.capacity}, "
            f"size={len(self._window)}, distinct={len(self._counts)})"
        )
