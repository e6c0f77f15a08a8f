"""
Half-open sequence intervals and the merge sweep applied to detector output.
"""

from typing import List, NamedTuple, Set

from .genomic_types import IntervalSource


class Interval(NamedTuple):
    """Half-open byte range ``[start, end)``."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "Interval") -> bool:
        """True when `other` starts strictly before this interval ends."""
        return other.start < self.end and self.start < other.end


def merge_intervals(intervals: IntervalSource) -> List[Interval]:
    """
    Collapse intervals sorted by start into maximal spans.

    The running interval absorbs the next one only when
    ``next.start < current.end``. Intervals that merely touch
    (``next.start == current.end``) are kept separate.

    Args:
        intervals: Intervals in non-decreasing start order, as emitted by
            the low-complexity detector.

    Returns:
        Merged intervals sorted by start, where every consecutive pair
        satisfies ``next.start >= current.end``.

    Raises:
        ValueError: If the input is not sorted by start.
    """
    merged: List[Interval] = []
    current = None
    for interval in intervals:
        interval = Interval(*interval)
        if current is None:
            current = interval
            continue
        if interval.start < current.start:
            raise ValueError(
                f"intervals must be sorted by start: {interval} follows {current}."
            )
        if interval.start < current.end:
            current = Interval(current.start, max(current.end, interval.end))
        else:
            merged.append(current)
            current = interval
    if current is not None:
        merged.append(current)
    return merged


def covered_positions(intervals: IntervalSource) -> Set[int]:
    """Set of byte positions covered by any of `intervals`."""
    positions: Set[int] = set()
    for start, end in intervals:
        positions.update(range(start, end))
    return positions
