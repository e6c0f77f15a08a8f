"""
K-mer encoding and the pull-based k-mer stream consumed by the detector.

Two producers share one contract: `iter_kmer_codes` yields codes lazily with a
rolling update, `kmer_code_array` materializes all codes as a numpy array.
Both return one code per position ``0..len(sequence) - k`` and give the same
code for the same k-mer text regardless of position.
"""

from typing import Iterable, List, Optional

import numpy as np

from .alphabet import IUPAC_RANKS, RankTransform
from .exceptions import InvalidParameterError
from .genomic_types import KmerCode, KmerCodeArray, KmerCodeStream

MAX_KMER_LENGTH = 12


def validate_kmer_length(k: int, rank: RankTransform = IUPAC_RANKS) -> int:
    """
    Check that `k` is a usable k-mer length for `rank`.

    Raises:
        InvalidParameterError: If `k` is not an integer in ``1..12`` or its
            packed code would not fit the rank transform's code width.
    """
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
        raise InvalidParameterError(
            f"k-mer length must be an integer, got {type(k).__name__}."
        )
    upper = min(MAX_KMER_LENGTH, rank.max_kmer_length)
    if not 1 <= k <= upper:
        raise InvalidParameterError(
            f"k-mer length must be between 1 and {upper}.", details={"k": k}
        )
    return int(k)


def iter_kmer_codes(
    sequence: bytes, k: int, rank: RankTransform = IUPAC_RANKS
) -> KmerCodeStream:
    """
    Lazily yield the code of every k-mer in `sequence`.

    The whole sequence is ranked before the first code is produced, so an
    invalid symbol fails the call instead of surfacing halfway through a pass.

    Args:
        sequence: Sequence bytes over `rank`'s alphabet.
        k: K-mer length.
        rank: Rank transform used to pack symbols.

    Returns:
        An iterator over ``max(0, len(sequence) - k + 1)`` codes.
    """
    k = validate_kmer_length(k, rank)
    ranks = rank.transform(sequence).tolist()
    return _rolling_codes(ranks, k, rank.bits)


def _rolling_codes(ranks: List[int], k: int, bits: int) -> KmerCodeStream:
    mask = (1 << (bits * k)) - 1
    code = 0
    for position, symbol_rank in enumerate(ranks):
        code = ((code << bits) | symbol_rank) & mask
        if position >= k - 1:
            yield code


def kmer_code_array(
    sequence: bytes, k: int, rank: RankTransform = IUPAC_RANKS
) -> KmerCodeArray:
    """Return all k-mer codes of `sequence` as a uint64 numpy array."""
    k = validate_kmer_length(k, rank)
    ranks = rank.transform(sequence).astype(np.uint64)
    num_kmers = len(ranks) - k + 1
    if num_kmers <= 0:
        return np.empty(0, dtype=np.uint64)

    shift = np.uint64(rank.bits)
    codes = np.zeros(num_kmers, dtype=np.uint64)
    for offset in range(k):
        codes <<= shift
        codes |= ranks[offset : offset + num_kmers]
    return codes


class KmerStream:
    """
    Pull-based view over a finite sequence of k-mer codes.

    Wraps any iterable of codes so a consumer can take one element at a time
    and learn when the stream is exhausted without catching StopIteration.
    """

    def __init__(self, codes: Iterable[KmerCode]) -> None:
        self._codes = iter(codes)
        self.consumed = 0
        self.exhausted = False

    @classmethod
    def from_sequence(
        cls, sequence: bytes, k: int, rank: RankTransform = IUPAC_RANKS
    ) -> "KmerStream":
        return cls(iter_kmer_codes(sequence, k, rank))

    def pull(self) -> Optional[KmerCode]:
        """Return the next code, or None once the stream is exhausted."""
        if self.exhausted:
            return None
        try:
            code = next(self._codes)
        except StopIteration:
            self.exhausted = True
            return None
        self.consumed += 1
        return code

    def take(self, count: int) -> List[KmerCode]:
        """Pull up to `count` codes."""
        taken: List[KmerCode] = []
        while len(taken) < count:
            code = self.pull()
            if code is None:
                break
            taken.append(code)
        return taken

    def __iter__(self) -> "KmerStream":
        return self

    def __next__(self) -> KmerCode:
        code = self.pull()
        if code is None:
            raise StopIteration
        return code
