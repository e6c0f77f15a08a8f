"""
Sequence records and FASTA/FASTQ reading and writing.
"""

import dataclasses
import logging
import pathlib
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, TextIO, Union

from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqIO.QualityIO import FastqGeneralIterator
from Bio.SeqRecord import SeqRecord

from .exceptions import RecordReadError
from .utils import is_stdio, open_input

logger = logging.getLogger(__name__)

FASTA = "fasta"
FASTQ = "fastq"
SUPPORTED_FORMATS = (FASTA, FASTQ)


@dataclass(slots=True, frozen=True)
class SequenceRecord:
    """
    Immutable sequence record as read from a FASTA or FASTQ file.

    Attributes:
        record_id: First word of the record header.
        sequence: Raw sequence bytes.
        description: Remainder of the header after the id, if any.
        quality: FASTQ quality string; None for FASTA records.

    Example:
        >>> rec = SequenceRecord(record_id='read_001', sequence=b'ACGTN')
        >>> len(rec)
        5
        >>> rec.title
        'read_001'
    """

    record_id: str
    sequence: bytes
    description: Optional[str] = None
    quality: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.sequence, bytes):
            raise TypeError(
                f"Sequence data must be bytes, got {type(self.sequence).__name__}."
            )
        if self.quality is not None and len(self.quality) != len(self.sequence):
            raise RecordReadError(
                "Sequence and quality lengths differ.",
                details={
                    "id": self.record_id,
                    "sequence": len(self.sequence),
                    "quality": len(self.quality),
                },
            )

    def __len__(self) -> int:
        return len(self.sequence)

    @property
    def title(self) -> str:
        """Full header line without the leading '>' or '@'."""
        if self.description:
            return f"{self.record_id} {self.description}"
        return self.record_id

    def with_sequence(self, sequence: bytes) -> "SequenceRecord":
        """Copy of this record carrying a new sequence of the same length."""
        return dataclasses.replace(self, sequence=sequence)


def _split_title(title: str) -> tuple:
    parts = title.strip().split(None, 1)
    if not parts:
        return "", None
    return parts[0], parts[1] if len(parts) > 1 else None


class SequenceFileProcessor:
    """Handles sequence file parsing, format detection and record output."""

    @staticmethod
    def detect_file_format(file_path: Union[str, pathlib.Path]) -> str:
        """Detects sequence file format (FASTA or FASTQ) based on the first line."""
        with open_input(file_path) as f:
            for line in f:
                first_line = line.strip()
                if not first_line:
                    continue
                if first_line.startswith(">"):
                    return FASTA
                if first_line.startswith("@"):
                    return FASTQ
                break
        raise RecordReadError(f"Unknown file format for file: {file_path}")

    @staticmethod
    def iter_records(handle: TextIO, file_format: str) -> Iterator[SequenceRecord]:
        """
        Yield records from an open text handle.

        Raises:
            RecordReadError: On the first malformed record. Reading stops
                there; records are never skipped.
        """
        if file_format not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported format: {file_format}")

        index = -1
        try:
            if file_format == FASTA:
                for index, seq_record in enumerate(SeqIO.parse(handle, FASTA)):
                    _, description = _split_title(seq_record.description)
                    yield SequenceRecord(
                        record_id=seq_record.id,
                        sequence=str(seq_record.seq).encode("ascii"),
                        description=description,
                    )
            else:
                for index, (title, seq, qual) in enumerate(FastqGeneralIterator(handle)):
                    record_id, description = _split_title(title)
                    yield SequenceRecord(
                        record_id=record_id,
                        sequence=seq.encode("ascii"),
                        description=description,
                        quality=qual,
                    )
        except RecordReadError:
            raise
        except ValueError as e:
            raise RecordReadError(
                f"Error reading {file_format.upper()} record: {e}",
                details={"record_index": index + 1},
            ) from e

    @staticmethod
    def parse_sequence_file(
        file_path: Union[str, pathlib.Path], file_format: Optional[str] = None
    ) -> Iterator[SequenceRecord]:
        """
        Parses a sequence file (or stdin for ``-``) and yields records.

        When `file_format` is None the format is detected from the first line
        of a file; standard input defaults to FASTQ.
        """
        if file_format is None:
            file_format = (
                FASTQ if is_stdio(file_path)
                else SequenceFileProcessor.detect_file_format(file_path)
            )
        logger.info(f"Reading {file_format.upper()} records from {file_path}")
        with open_input(file_path) as handle:
            yield from SequenceFileProcessor.iter_records(handle, file_format)

    @staticmethod
    def format_record(record: SequenceRecord, file_format: str) -> str:
        """Render `record` in the given format."""
        if file_format == FASTA:
            seq_record = SeqRecord(
                Seq(record.sequence.decode("ascii")),
                id=record.record_id,
                description=record.title,
            )
            return seq_record.format(FASTA)
        if file_format == FASTQ:
            if record.quality is None:
                raise ValueError(f"Record {record.record_id} has no quality string.")
            return f"@{record.title}\n{record.sequence.decode('ascii')}\n+\n{record.quality}\n"
        raise ValueError(f"Unsupported format: {file_format}")

    @staticmethod
    def write_records(
        records: Iterable[SequenceRecord], handle: TextIO, file_format: str
    ) -> int:
        """Write records to `handle`; returns the number written."""
        written = 0
        for record in records:
            handle.write(SequenceFileProcessor.format_record(record, file_format))
            written += 1
        return written
