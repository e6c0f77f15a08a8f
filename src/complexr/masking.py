"""
Masking of low-complexity spans.

Masked spans are either overwritten with a sentinel symbol or soft-masked by
lower-casing IUPAC symbols. Bytes outside the masked spans are copied as-is
and the masked sequence always has the length of the input.
"""

from typing import List, NamedTuple, Optional, Union

from .alphabet import IUPAC_SYMBOLS
from .detector import LowComplexityDetector
from .exceptions import InvalidParameterError
from .genomic_types import IntervalSource
from .intervals import Interval

DEFAULT_MASK_SYMBOL = b"N"

# Upper-case IUPAC codes map to lower case; every other byte maps to itself.
LOWER_CASE_TABLE = bytes.maketrans(IUPAC_SYMBOLS, IUPAC_SYMBOLS.lower())


def normalize_mask_symbol(mask_symbol: Union[str, bytes, int]) -> bytes:
    """Return `mask_symbol` as a single byte."""
    if isinstance(mask_symbol, int) and not isinstance(mask_symbol, bool):
        if not 0 <= mask_symbol < 256:
            raise InvalidParameterError(
                "mask symbol must be a byte value.", details={"mask_symbol": mask_symbol}
            )
        return bytes([mask_symbol])
    if isinstance(mask_symbol, str):
        try:
            mask_symbol = mask_symbol.encode("ascii")
        except UnicodeEncodeError as e:
            raise InvalidParameterError(
                f"mask symbol must be ASCII, got {mask_symbol!r}."
            ) from e
    if not isinstance(mask_symbol, (bytes, bytearray)) or len(mask_symbol) != 1:
        raise InvalidParameterError(
            f"mask symbol must be exactly one character, got {mask_symbol!r}."
        )
    return bytes(mask_symbol)


def mask_sequence(
    sequence: bytes,
    intervals: IntervalSource,
    lower_case: bool = False,
    mask_symbol: Union[str, bytes] = DEFAULT_MASK_SYMBOL,
) -> bytes:
    """
    Apply a mask to `sequence` over merged `intervals`.

    Args:
        sequence: Input sequence bytes.
        intervals: Sorted, non-overlapping half-open intervals inside the
            sequence, as returned by `merge_intervals`.
        lower_case: Soft-mask by lower-casing instead of writing `mask_symbol`.
        mask_symbol: Sentinel written over masked bytes when `lower_case` is
            False.

    Returns:
        A new bytes object of the same length as `sequence`.

    Raises:
        ValueError: If the intervals are unsorted, overlapping or out of bounds.
    """
    sentinel = normalize_mask_symbol(mask_symbol)
    sequence = bytes(sequence)
    pieces: List[bytes] = []
    cursor = 0
    for start, end in intervals:
        if start < cursor or end < start or end > len(sequence):
            raise ValueError(
                f"interval [{start}, {end}) is unsorted, overlapping or outside "
                f"a sequence of length {len(sequence)}."
            )
        pieces.append(sequence[cursor:start])
        if lower_case:
            pieces.append(sequence[start:end].translate(LOWER_CASE_TABLE))
        else:
            pieces.append(sentinel * (end - start))
        cursor = end
    pieces.append(sequence[cursor:])
    return b"".join(pieces)


class MaskResult(NamedTuple):
    sequence: bytes
    intervals: List[Interval]

    @property
    def masked_bases(self) -> int:
        return sum(interval.length for interval in self.intervals)


class SequenceMasker:
    """
    Detects and masks low-complexity regions of one sequence at a time.

    Attributes:
        detector (LowComplexityDetector): Interval detector.
        lower_case (bool): Soft-mask instead of writing the sentinel.
        mask_symbol (bytes): Sentinel byte for hard masking.
    """

    def __init__(
        self,
        detector: Optional[LowComplexityDetector] = None,
        lower_case: bool = False,
        mask_symbol: Union[str, bytes] = DEFAULT_MASK_SYMBOL,
    ) -> None:
        self.detector = detector or LowComplexityDetector()
        self.lower_case = lower_case
        self.mask_symbol = normalize_mask_symbol(mask_symbol)

    def mask(self, sequence: bytes) -> MaskResult:
        intervals = self.detector.find_intervals(sequence)
        masked = mask_sequence(
            sequence, intervals, lower_case=self.lower_case, mask_symbol=self.mask_symbol
        )
        return MaskResult(masked, intervals)
