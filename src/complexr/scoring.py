"""
Whole-sequence complexity scores and the z-score filter applied to them.

`score_sequence` counts the distinct k-mers of a whole sequence; the ratio of
that count to the sequence length is the score reported by ``measure``. The
``filter`` workflow reads such scores back and keeps the records whose
z-score within the batch crosses a threshold.
"""

import csv
import logging
from dataclasses import dataclass
from typing import List, Sequence, TextIO, Tuple

import numpy as np
import pandas as pd

from .alphabet import IUPAC_RANKS, RankTransform
from .exceptions import InsufficientDataError, InvalidParameterError, RecordReadError
from .genomic_types import RecordId, ScoreTable
from .kmers import kmer_code_array

logger = logging.getLogger(__name__)

DEFAULT_ZSCORE_THRESHOLD = -1.5


@dataclass(frozen=True)
class ComplexityScore:
    """Distinct k-mer count of a sequence relative to its length."""

    distinct_kmers: int
    length: int

    @property
    def ratio(self) -> float:
        return self.distinct_kmers / self.length


def score_sequence(
    sequence: bytes, kmer_length: int, rank: RankTransform = IUPAC_RANKS
) -> ComplexityScore:
    """
    Count the distinct k-mers of `sequence`.

    Args:
        sequence: Non-empty sequence bytes.
        kmer_length: k-mer length (1 to 12).
        rank: Rank transform used to encode k-mers.

    Returns:
        The distinct k-mer count and sequence length. Sequences shorter than
        the k-mer length have zero distinct k-mers.

    Raises:
        InvalidParameterError: If `sequence` is empty; its ratio is undefined.
    """
    if len(sequence) == 0:
        raise InvalidParameterError("cannot score an empty sequence.")
    codes = kmer_code_array(sequence, kmer_length, rank)
    return ComplexityScore(distinct_kmers=int(np.unique(codes).size), length=len(sequence))


def read_score_table(handle: TextIO) -> ScoreTable:
    """
    Read tab-separated score lines.

    The first column is the record id and the last column is the score, so
    both ``id<TAB>score`` lines and the four-column output of ``measure`` are
    accepted.

    Raises:
        RecordReadError: If a line lacks a score or the score is not numeric.
    """
    try:
        table = pd.read_csv(
            handle,
            sep="\t",
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            # Ids are written verbatim by `measure` and may contain quotes.
            quoting=csv.QUOTE_NONE,
            comment=None,
        )
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as e:
        raise RecordReadError(f"Malformed score table: {e}") from e

    if table.shape[1] < 2:
        raise RecordReadError(
            "Score lines need an id and a score separated by a tab.",
            details={"columns": table.shape[1]},
        )

    ids = table.iloc[:, 0].str.strip()
    raw_scores = table.iloc[:, -1].str.strip()
    scores = pd.to_numeric(raw_scores, errors="coerce")
    bad = scores.isna()
    if bad.any():
        row = int(np.flatnonzero(bad.to_numpy())[0])
        raise RecordReadError(
            "Error reading score.",
            details={"line": row + 1, "id": ids.iloc[row], "value": raw_scores.iloc[row]},
        )
    return list(zip(ids.tolist(), scores.astype(float).tolist()))


class ZScoreFilter:
    """
    Keeps records whose score is unusual relative to the whole batch.

    Attributes:
        threshold (float): z-score cut-off. Records with a z-score strictly
            above it are kept, or strictly below it when `invert` is set.
        invert (bool): Keep the low tail instead of the high one.
    """

    def __init__(self, threshold: float = DEFAULT_ZSCORE_THRESHOLD, invert: bool = False) -> None:
        if not np.isfinite(threshold):
            raise InvalidParameterError(
                "z-score threshold must be finite.", details={"threshold": threshold}
            )
        self.threshold = float(threshold)
        self.invert = invert

    def zscores(self, scores: Sequence[float]) -> np.ndarray:
        """
        Standardize `scores` with the batch mean and sample standard deviation.

        Raises:
            InsufficientDataError: With fewer than two scores.
        """
        values = np.asarray(scores, dtype=float)
        if values.size < 2:
            raise InsufficientDataError(
                "At least two scores are needed to compute a standard deviation.",
                details={"scores": int(values.size)},
            )
        mean = values.mean()
        sd = values.std(ddof=1)
        if sd == 0:
            logger.warning("All scores are identical; z-scores are undefined.")
            return np.full(values.shape, np.nan)
        logger.debug(f"Score mean={mean:.4f} sd={sd:.4f} over {values.size} records")
        return (values - mean) / sd

    def apply(self, scores: Sequence[Tuple[RecordId, float]]) -> List[RecordId]:
        """Return the ids that pass the filter, in input order."""
        z = self.zscores([score for _, score in scores])
        # NaN comparisons are False, so undefined z-scores keep nothing.
        keep = z < self.threshold if self.invert else z > self.threshold
        return [record_id for (record_id, _), kept in zip(scores, keep) if kept]
