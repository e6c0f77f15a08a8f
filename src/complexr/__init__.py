"""
complexr: k-mer based sequence complexity measurement and masking.

This package scores DNA sequences by their number of distinct k-mers, finds
low-complexity regions with a sliding window over the k-mer stream, masks
those regions, and filters records by the z-score of their complexity.
"""

__version__ = "0.1.0"

# Core classes and functions for easier access
from .alphabet import IUPAC_RANKS, RankTransform
from .detector import LowComplexityDetector, detect_low_complexity
from .intervals import Interval, merge_intervals
from .kmers import KmerStream, iter_kmer_codes, kmer_code_array
from .masking import SequenceMasker, mask_sequence
from .scoring import ComplexityScore, ZScoreFilter, score_sequence
from .sequence import SequenceFileProcessor, SequenceRecord
from .window import SlidingWindowMultiset
from .running import main

__all__ = [
    "IUPAC_RANKS",
    "RankTransform",
    "LowComplexityDetector",
    "detect_low_complexity",
    "Interval",
    "merge_intervals",
    "KmerStream",
    "iter_kmer_codes",
    "kmer_code_array",
    "SequenceMasker",
    "mask_sequence",
    "ComplexityScore",
    "ZScoreFilter",
    "score_sequence",
    "SequenceFileProcessor",
    "SequenceRecord",
    "SlidingWindowMultiset",
    "main",
    "__version__",
]
