"""
Low-complexity interval detection.

A window of `window_size` consecutive k-mers slides across the k-mer stream
of a sequence. Whenever the fraction of distinct k-mers in the window drops
below `threshold`, the bytes spanned by the window's k-mers are reported as
a raw interval. Raw intervals come out sorted by start and are merged with
`complexr.intervals.merge_intervals`.
"""

import logging
from typing import Iterator, List

from .alphabet import IUPAC_RANKS, RankTransform
from .exceptions import InvalidParameterError
from .intervals import Interval, merge_intervals
from .kmers import KmerStream, validate_kmer_length
from .window import SlidingWindowMultiset

logger = logging.getLogger(__name__)

DEFAULT_KMER_LENGTH = 4
DEFAULT_WINDOW_SIZE = 32
DEFAULT_COMPLEXITY_THRESHOLD = 0.55


def validate_threshold(threshold: float) -> float:
    """Complexity thresholds are ratios and must lie in ``[0, 1]``."""
    try:
        value = float(threshold)
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(
            f"complexity threshold must be numeric, got {threshold!r}."
        ) from e
    if not 0.0 <= value <= 1.0:
        raise InvalidParameterError(
            "complexity threshold must be between 0 and 1.",
            details={"threshold": threshold},
        )
    return value


def validate_window_size(window_size: int) -> int:
    if isinstance(window_size, bool) or not isinstance(window_size, int):
        raise InvalidParameterError(
            f"window size must be an integer, got {type(window_size).__name__}."
        )
    if window_size < 1:
        raise InvalidParameterError(
            "window size must be at least 1.", details={"window_size": window_size}
        )
    return window_size


class LowComplexityDetector:
    """
    Finds low-complexity spans of a sequence.

    Attributes:
        kmer_length (int): k-mer length ``q`` (1 to 12).
        window_size (int): Number of consecutive k-mers per window ``W``.
        threshold (float): Windows with ``distinct / occupancy < threshold``
            are flagged.
        rank (RankTransform): Encoder used to turn k-mers into codes.
    """

    def __init__(
        self,
        kmer_length: int = DEFAULT_KMER_LENGTH,
        window_size: int = DEFAULT_WINDOW_SIZE,
        threshold: float = DEFAULT_COMPLEXITY_THRESHOLD,
        rank: RankTransform = IUPAC_RANKS,
    ) -> None:
        self.kmer_length: int = validate_kmer_length(kmer_length, rank)
        self.window_size: int = validate_window_size(window_size)
        self.threshold: float = validate_threshold(threshold)
        self.rank: RankTransform = rank

    def detect(self, sequence: bytes) -> Iterator[Interval]:
        """
        Yield raw flagged intervals in byte coordinates, sorted by start.

        Window ``idx`` covers k-mers ``idx .. idx + n - 1`` where ``n`` is the
        current occupancy, so its bytes are ``[idx, idx + n - 1 + q)``. If the
        stream holds fewer than `window_size` codes, only that one short
        window is evaluated. An empty stream yields nothing.
        """
        q = self.kmer_length
        stream = KmerStream.from_sequence(sequence, q, self.rank)
        window = SlidingWindowMultiset(self.window_size)
        window.fill(stream)

        idx = 0
        while len(window):
            occupancy = len(window)
            if window.distinct_count() / occupancy < self.threshold:
                yield Interval(idx, idx + occupancy - 1 + q)
            next_code = stream.pull()
            if next_code is None:
                break
            window.advance(next_code)
            idx += 1

    def find_intervals(self, sequence: bytes) -> List[Interval]:
        """Merged low-complexity intervals of `sequence`."""
        merged = merge_intervals(self.detect(sequence))
        logger.debug(
            f"Found {len(merged)} low-complexity interval(s) in {len(sequence)} bp"
        )
        return merged

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kmer_length={self.kmer_length}, "
            f"window_size={self.window_size}, threshold={self.threshold})"
        )


def detect_low_complexity(
    sequence: bytes,
    kmer_length: int = DEFAULT_KMER_LENGTH,
    window_size: int = DEFAULT_WINDOW_SIZE,
    threshold: float = DEFAULT_COMPLEXITY_THRESHOLD,
) -> List[Interval]:
    """Raw (unmerged) low-complexity intervals of `sequence`."""
    detector = LowComplexityDetector(kmer_length, window_size, threshold)
    return list(detector.detect(sequence))
