"""
Symbol-to-rank encoding for nucleotide alphabets.

A `RankTransform` maps every symbol of a fixed alphabet to a small integer
rank so that k-mers can be packed into integers. Ranks are assigned in byte
order, upper and lower case are distinct symbols, and the lookup table is a
read-only numpy array that is safe to share between worker processes.
"""

import math

import numpy as np

from .exceptions import InvalidSymbolError
from .genomic_types import RankArray, RankTable

# IUPAC nucleotide codes, including U and the ambiguity codes.
IUPAC_SYMBOLS: bytes = b"ACGTURYSWKMBDHVN"
IUPAC_ALPHABET: bytes = IUPAC_SYMBOLS + IUPAC_SYMBOLS.lower()

# Packed codes must fit an unsigned 64-bit word.
CODE_WIDTH_BITS = 64

UNRANKED = 255


class RankTransform:
    """
    Bijective mapping from alphabet symbols to ranks ``0..n-1``.

    Attributes:
        alphabet (bytes): The symbols, deduplicated and sorted by byte value.
        ranks (RankTable): 256-entry lookup table; bytes outside the alphabet
            map to ``UNRANKED``.
        bits (int): Number of bits needed to store one rank.
        max_kmer_length (int): Longest k-mer whose packed code fits
            ``CODE_WIDTH_BITS``.
    """

    def __init__(self, alphabet: bytes) -> None:
        if not isinstance(alphabet, (bytes, bytearray)):
            raise TypeError(f"alphabet must be bytes, got {type(alphabet).__name__}.")
        symbols = sorted(set(alphabet))
        if not symbols:
            raise ValueError("alphabet must contain at least one symbol.")
        if len(symbols) >= UNRANKED:
            raise ValueError("alphabet is too large to rank in one byte.")

        table = np.full(256, UNRANKED, dtype=np.uint8)
        for rank, symbol in enumerate(symbols):
            table[symbol] = rank
        table.setflags(write=False)

        self.alphabet: bytes = bytes(symbols)
        self.ranks: RankTable = table
        self.bits: int = max(1, math.ceil(math.log2(len(symbols))))
        self.max_kmer_length: int = CODE_WIDTH_BITS // self.bits

    def __len__(self) -> int:
        return len(self.alphabet)

    def __contains__(self, symbol: int) -> bool:
        return 0 <= symbol < 256 and self.ranks[symbol] != UNRANKED

    def rank_of(self, symbol: int) -> int:
        """Return the rank of a single byte value."""
        if symbol not in self:
            raise InvalidSymbolError(
                "Symbol is not part of the alphabet.",
                details={"symbol": repr(bytes([symbol])) if 0 <= symbol < 256 else symbol},
            )
        return int(self.ranks[symbol])

    def transform(self, sequence: bytes) -> RankArray:
        """
        Map every byte of `sequence` to its rank.

        Args:
            sequence: Raw sequence bytes.

        Returns:
            A uint8 numpy array with one rank per input byte.

        Raises:
            InvalidSymbolError: If any byte is outside the alphabet.
        """
        raw = np.frombuffer(bytes(sequence), dtype=np.uint8)
        ranked = self.ranks[raw]
        invalid = np.flatnonzero(ranked == UNRANKED)
        if invalid.size:
            position = int(invalid[0])
            raise InvalidSymbolError(
                "Sequence contains a symbol outside the alphabet.",
                details={
                    "position": position,
                    "symbol": repr(bytes([raw[position]])),
                    "invalid_count": int(invalid.size),
                },
            )
        return ranked


# Built once per process and never mutated.
IUPAC_RANKS = RankTransform(IUPAC_ALPHABET)
