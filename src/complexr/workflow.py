"""
Workflows behind the ``measure``, ``mask`` and ``filter`` sub-commands.

Record-level work is dispatched to a fixed-size process pool. Each worker
runs the full per-record pipeline and returns its result tagged with the
record's index; results arrive in any order and are re-sorted before output.
Workers hold only their processor's immutable configuration and the
module-level rank table. An exception raised in a worker, or while reading
records, is re-raised in the collecting process by the pool.
"""

import logging
import multiprocessing as mp
import pathlib
import sys
from functools import cached_property
from typing import Any, Iterable, Iterator, List, Optional, TextIO, Tuple

from tqdm import tqdm

from .genomic_types import RecordIndex
from .logging_config import PerformanceLogger
from .masking import MaskResult, SequenceMasker
from .parameter_config import FilterArgs, MaskArgs, MeasureArgs, RecordInputArgs
from .scoring import ComplexityScore, read_score_table, score_sequence
from .sequence import FASTQ, SequenceFileProcessor, SequenceRecord
from .utils import is_stdio, open_input

logger = logging.getLogger(__name__)

IndexedRecord = Tuple[RecordIndex, SequenceRecord]


class MeasureProcessor:
    """Scores one record: distinct k-mers relative to its length."""

    def __init__(self, kmer_length: int) -> None:
        self.kmer_length = kmer_length

    def __call__(self, record: SequenceRecord) -> Optional[ComplexityScore]:
        if len(record) == 0:
            return None
        return score_sequence(record.sequence, self.kmer_length)


class MaskProcessor:
    """Masks the low-complexity regions of one record."""

    def __init__(self, args: MaskArgs) -> None:
        self.args = args

    @cached_property
    def masker(self) -> SequenceMasker:
        return self.args.build_masker()

    def __call__(self, record: SequenceRecord) -> MaskResult:
        return self.masker.mask(record.sequence)


# Set once per worker process by the pool initializer.
_WORKER_PROCESSOR: Any = None


def _init_worker(processor: Any) -> None:
    global _WORKER_PROCESSOR
    _WORKER_PROCESSOR = processor


def _run_worker(item: IndexedRecord) -> Tuple[RecordIndex, SequenceRecord, Any]:
    index, record = item
    return index, record, _WORKER_PROCESSOR(record)


def process_records(
    records: Iterable[SequenceRecord],
    processor: Any,
    num_processes: int = 1,
    chunk_size: int = 256,
    show_progress: bool = False,
) -> Iterator[Tuple[RecordIndex, SequenceRecord, Any]]:
    """
    Run `processor` over every record and yield results in input order.

    With one process the records are handled lazily in the calling process.
    Otherwise a `multiprocessing.Pool` consumes the records, results are
    collected as they complete and re-sorted by record index.

    Yields:
        ``(index, record, result)`` tuples in input order.
    """
    indexed = enumerate(records)
    progress = tqdm(
        desc="records", unit="rec", disable=not show_progress, file=sys.stderr
    )
    try:
        if num_processes <= 1:
            for index, record in indexed:
                result = processor(record)
                progress.update(1)
                yield index, record, result
            return

        collected: List[Tuple[RecordIndex, SequenceRecord, Any]] = []
        with mp.Pool(
            processes=num_processes, initializer=_init_worker, initargs=(processor,)
        ) as pool:
            for result in pool.imap_unordered(_run_worker, indexed, chunksize=chunk_size):
                collected.append(result)
                progress.update(1)
        logger.debug(f"Collected {len(collected)} results from {num_processes} workers")
        collected.sort(key=lambda item: item[0])
        yield from collected
    finally:
        progress.close()


class RecordWorkflow:
    """Shared driver for the sub-commands that read sequence records."""

    name = "records"

    def __init__(self, args: RecordInputArgs, out: Optional[TextIO] = None) -> None:
        self.args = args
        self.out = out if out is not None else sys.stdout
        self.logger = logging.getLogger(__name__)

    def _input_format(self, path: pathlib.Path) -> str:
        if self.args.file_format:
            return self.args.file_format
        if is_stdio(path):
            return FASTQ
        return SequenceFileProcessor.detect_file_format(path)

    def _results(
        self, path: pathlib.Path, file_format: str, processor: Any
    ) -> Iterator[Tuple[RecordIndex, SequenceRecord, Any]]:
        records = SequenceFileProcessor.parse_sequence_file(path, file_format)
        return process_records(
            records,
            processor,
            num_processes=self.args.num_processes,
            chunk_size=self.args.chunk_size,
            show_progress=self.args.show_progress,
        )

    def run_file(self, path: pathlib.Path, file_format: str, perf: PerformanceLogger) -> None:
        raise NotImplementedError

    def run(self) -> int:
        """Process every input file; returns the number of records handled."""
        with PerformanceLogger(self.name) as perf:
            for path in self.args.inputs:
                file_format = self._input_format(path)
                self.logger.info(f"Processing {path} as {file_format.upper()}")
                self.run_file(path, file_format, perf)
        return perf.items


class MeasureWorkflow(RecordWorkflow):
    """Writes ``id, length, distinct k-mers, ratio`` for every record."""

    name = "measure"

    def __init__(self, args: MeasureArgs, out: Optional[TextIO] = None) -> None:
        super().__init__(args, out)
        self.processor = MeasureProcessor(args.kmer_length)

    def run_file(self, path: pathlib.Path, file_format: str, perf: PerformanceLogger) -> None:
        for _, record, score in self._results(path, file_format, self.processor):
            perf.add_items()
            if score is None:
                self.logger.warning(
                    f"Skipping empty record {record.record_id}: no complexity ratio"
                )
                continue
            self.out.write(
                f"{record.record_id}\t{score.length}\t{score.distinct_kmers}\t{score.ratio:.4f}\n"
            )


class MaskWorkflow(RecordWorkflow):
    """Writes every record with its low-complexity regions masked."""

    name = "mask"

    def __init__(self, args: MaskArgs, out: Optional[TextIO] = None) -> None:
        super().__init__(args, out)
        self.processor = MaskProcessor(args)
        self.masked_bases = 0
        self.masked_records = 0

    def _masked_records(
        self, path: pathlib.Path, file_format: str, perf: PerformanceLogger
    ) -> Iterator[SequenceRecord]:
        for _, record, result in self._results(path, file_format, self.processor):
            perf.add_items()
            intervals = result.intervals
            if intervals:
                self.masked_records += 1
                self.masked_bases += result.masked_bases
                self.logger.debug(
                    f"{record.record_id}: masked {len(intervals)} interval(s) {intervals}"
                )
            yield record.with_sequence(result.sequence)

    def run_file(self, path: pathlib.Path, file_format: str, perf: PerformanceLogger) -> None:
        SequenceFileProcessor.write_records(
            self._masked_records(path, file_format, perf), self.out, file_format
        )

    def run(self) -> int:
        handled = super().run()
        self.logger.info(
            f"Masked {self.masked_bases} bases in {self.masked_records} of {handled} records"
        )
        return handled


class FilterWorkflow:
    """Writes the ids whose score z-score crosses the configured threshold."""

    def __init__(self, args: FilterArgs, out: Optional[TextIO] = None) -> None:
        self.args = args
        self.out = out if out is not None else sys.stdout
        self.logger = logging.getLogger(__name__)

    def run(self) -> int:
        """Returns the number of ids kept."""
        with PerformanceLogger("filter") as perf:
            with open_input(self.args.input) as handle:
                scores = read_score_table(handle)
            perf.add_items(len(scores))
            kept = self.args.build_filter().apply(scores)
            for record_id in kept:
                self.out.write(f"{record_id}\n")
        direction = "below" if self.args.invert else "above"
        self.logger.info(
            f"Kept {len(kept)} of {len(scores)} records with z-score {direction} "
            f"{self.args.threshold}"
        )
        return len(kept)
