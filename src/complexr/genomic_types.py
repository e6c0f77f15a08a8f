"""
Type definitions for the complexr package.

This module centralizes common type aliases used throughout complexr
to ensure consistency and improve code readability.
"""

from typing import Iterable, Iterator, List, Tuple

import numpy as np
import numpy.typing as npt

# Type aliases for clarity
KmerCode = int  # Integer code of one k-mer under the rank transform.
RecordId = str  # Identifier of a sequence record (first word of its header).
RecordIndex = int  # Zero-based position of a record in its input stream.
RankTable = npt.NDArray[np.uint8]  # 256-entry byte -> rank lookup table.
RankArray = npt.NDArray[np.uint8]  # Ranks of every byte of one sequence.
KmerCodeArray = npt.NDArray[np.uint64]  # Buffered k-mer codes of one sequence.
KmerCodeStream = Iterator[KmerCode]  # Lazily pulled k-mer codes.
IntervalSource = Iterable[Tuple[int, int]]  # Half-open (start, end) byte ranges.
ScoreTable = List[Tuple[RecordId, float]]  # (id, score) pairs read by the filter.
