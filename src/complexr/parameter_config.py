"""
Command-line parsing and validated run configuration.

argparse handles the command-line surface; the parsed values are then loaded
into pydantic models, which own every range and consistency check. A
`pydantic.ValidationError` is turned into `InvalidParameterError` so the
entry point can report it and exit before any record is read.
"""

import argparse
import pathlib
from typing import List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import __version__
from .detector import (
    DEFAULT_COMPLEXITY_THRESHOLD,
    DEFAULT_KMER_LENGTH,
    DEFAULT_WINDOW_SIZE,
    LowComplexityDetector,
)
from .exceptions import InvalidParameterError
from .kmers import MAX_KMER_LENGTH
from .masking import DEFAULT_MASK_SYMBOL, SequenceMasker
from .scoring import DEFAULT_ZSCORE_THRESHOLD, ZScoreFilter
from .utils import STDIO_PATH, is_stdio

DEFAULT_NUM_PROCESSES = 1
DEFAULT_CHUNK_SIZE = 256


class LoggingArgs(BaseModel):
    """Logging options shared by every sub-command."""

    verbose: bool = False
    log_file: Optional[pathlib.Path] = None
    log_json: bool = False


class DetectorConfig(BaseModel):
    """Parameters of the low-complexity interval detector."""

    model_config = ConfigDict(frozen=True)

    kmer_length: int = Field(
        default=DEFAULT_KMER_LENGTH,
        ge=1,
        le=MAX_KMER_LENGTH,
        description="Length of the k-mers counted inside each window.",
    )
    window_size: int = Field(
        default=DEFAULT_WINDOW_SIZE,
        ge=1,
        description="Number of consecutive k-mers in one window.",
    )
    threshold: float = Field(
        default=DEFAULT_COMPLEXITY_THRESHOLD,
        ge=0.0,
        le=1.0,
        description="Windows whose distinct k-mer fraction is below this are masked.",
    )

    def build_detector(self) -> LowComplexityDetector:
        return LowComplexityDetector(
            kmer_length=self.kmer_length,
            window_size=self.window_size,
            threshold=self.threshold,
        )


class RecordInputArgs(BaseModel):
    """Options of the sub-commands that read sequence records."""

    inputs: List[pathlib.Path] = Field(
        default_factory=lambda: [pathlib.Path(STDIO_PATH)],
        description="Input FASTA/FASTQ files (possibly gzipped); '-' is stdin.",
    )
    file_format: Optional[str] = Field(
        default=None,
        pattern="^(fasta|fastq)$",
        description="Input format; detected from each file when not given.",
    )
    num_processes: int = Field(default=DEFAULT_NUM_PROCESSES, ge=1)
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, ge=1)
    show_progress: bool = False

    @field_validator("inputs")
    @classmethod
    def validate_paths_exist(cls, v: List[pathlib.Path]) -> List[pathlib.Path]:
        """Ensures input files exist; '-' may appear at most once."""
        if not v:
            return [pathlib.Path(STDIO_PATH)]
        if sum(1 for path in v if is_stdio(path)) > 1:
            raise ValueError("Standard input ('-') can only be read once.")
        for path in v:
            if is_stdio(path):
                continue
            if not path.exists():
                raise ValueError(f"File does not exist: {path}")
            if not path.is_file():
                raise ValueError(f"Path is not a file: {path}")
        return v


class MeasureArgs(RecordInputArgs):
    """Configuration of the ``measure`` sub-command."""

    kmer_length: int = Field(default=DEFAULT_KMER_LENGTH, ge=1, le=MAX_KMER_LENGTH)


class MaskArgs(RecordInputArgs):
    """Configuration of the ``mask`` sub-command."""

    detector: DetectorConfig = Field(default_factory=DetectorConfig)
    lower_case: bool = Field(
        default=False, description="Soft-mask by lower-casing instead of a sentinel."
    )
    mask_symbol: str = Field(
        default=DEFAULT_MASK_SYMBOL.decode("ascii"), min_length=1, max_length=1
    )

    @field_validator("mask_symbol")
    @classmethod
    def validate_mask_symbol(cls, v: str) -> str:
        if not v.isascii() or not v.isprintable() or v.isspace():
            raise ValueError(f"Mask symbol must be a printable ASCII character, got {v!r}.")
        return v

    def build_masker(self) -> SequenceMasker:
        return SequenceMasker(
            detector=self.detector.build_detector(),
            lower_case=self.lower_case,
            mask_symbol=self.mask_symbol,
        )


class FilterArgs(BaseModel):
    """Configuration of the ``filter`` sub-command."""

    input: pathlib.Path = pathlib.Path(STDIO_PATH)
    threshold: float = Field(default=DEFAULT_ZSCORE_THRESHOLD, allow_inf_nan=False)
    invert: bool = False

    @field_validator("input")
    @classmethod
    def validate_input(cls, v: pathlib.Path) -> pathlib.Path:
        if not is_stdio(v) and not v.is_file():
            raise ValueError(f"File does not exist: {v}")
        return v

    def build_filter(self) -> ZScoreFilter:
        return ZScoreFilter(threshold=self.threshold, invert=self.invert)


CommandArgs = Union[MeasureArgs, MaskArgs, FilterArgs]


class CliArgs(BaseModel):
    """Parsed command line: the sub-command, its options and logging setup."""

    command: str = Field(pattern="^(measure|mask|filter)$")
    options: CommandArgs
    logging: LoggingArgs = Field(default_factory=LoggingArgs)


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--verbose", help="Enable verbose logging", action="store_true", default=False
    )
    parser.add_argument(
        "--log-file", help="Also write the log to this file", type=pathlib.Path, default=None
    )
    parser.add_argument(
        "--log-json", help="Emit log records as JSON", action="store_true", default=False
    )


def _add_record_input_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "inputs",
        help="Input FASTA/FASTQ file(s), possibly gzipped; '-' reads stdin",
        nargs="*",
        type=pathlib.Path,
        default=[pathlib.Path(STDIO_PATH)],
    )
    fmt = parser.add_mutually_exclusive_group()
    fmt.add_argument(
        "--fasta", dest="file_format", action="store_const", const="fasta",
        help="Input is FASTA",
    )
    fmt.add_argument(
        "--fastq", dest="file_format", action="store_const", const="fastq",
        help="Input is FASTQ (default for stdin)",
    )
    parser.add_argument(
        "-k",
        "--kmer-length",
        help=f"Length of k-mer to use (1-{MAX_KMER_LENGTH})",
        type=int,
        default=DEFAULT_KMER_LENGTH,
    )
    parser.add_argument(
        "-p",
        "--procs",
        help="Number of worker processes",
        type=int,
        default=DEFAULT_NUM_PROCESSES,
    )
    parser.add_argument(
        "--chunk-size",
        help="Records handed to a worker at a time",
        type=int,
        default=DEFAULT_CHUNK_SIZE,
    )
    parser.add_argument(
        "--progress", help="Show a progress bar on stderr", action="store_true", default=False
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the ``complexr`` argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    _add_common_options(common)

    parser = argparse.ArgumentParser(
        prog="complexr",
        description="Measure, mask and filter sequence complexity based on unique k-mers.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    measure = subparsers.add_parser(
        "measure",
        aliases=["calculate"],
        help="Report the distinct k-mer ratio of every record",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        parents=[common],
    )
    _add_record_input_options(measure)

    mask = subparsers.add_parser(
        "mask",
        help="Mask low-complexity regions of every record",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        parents=[common],
    )
    _add_record_input_options(mask)
    mask.add_argument(
        "-w",
        "--window-size",
        help="Window size in k-mers",
        type=int,
        default=DEFAULT_WINDOW_SIZE,
    )
    mask.add_argument(
        "-t",
        "--threshold",
        help="Distinct k-mer fraction below which a window is masked (0-1)",
        type=float,
        default=DEFAULT_COMPLEXITY_THRESHOLD,
    )
    mask.add_argument(
        "--lower-case",
        help="Soft-mask by lower-casing instead of writing the mask symbol",
        action="store_true",
        default=False,
    )
    mask.add_argument(
        "--mask-symbol",
        help="Symbol written over masked bases",
        type=str,
        default=DEFAULT_MASK_SYMBOL.decode("ascii"),
    )

    filter_ = subparsers.add_parser(
        "filter",
        help="Keep ids whose score z-score crosses a threshold",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        parents=[common],
    )
    filter_.add_argument(
        "input",
        help="Tab-separated 'id<TAB>score' lines; '-' reads stdin",
        nargs="?",
        type=pathlib.Path,
        default=pathlib.Path(STDIO_PATH),
    )
    filter_.add_argument(
        "-t",
        "--threshold",
        help="Minimum z-score to keep",
        type=float,
        default=DEFAULT_ZSCORE_THRESHOLD,
    )
    filter_.add_argument(
        "--invert",
        help="Keep records with a z-score below the threshold instead",
        action="store_true",
        default=False,
    )
    return parser


def parse_cli_arguments(argv: Optional[Sequence[str]] = None) -> CliArgs:
    """
    Parses and validates command-line arguments.

    Args:
        argv: Arguments without the program name; defaults to ``sys.argv[1:]``.

    Returns:
        The validated configuration.

    Raises:
        SystemExit: On usage errors (argparse exits with status 2).
        InvalidParameterError: If a value fails validation.
    """
    args = build_parser().parse_args(argv)
    command = "measure" if args.command == "calculate" else args.command

    try:
        options: CommandArgs
        if command == "filter":
            options = FilterArgs(
                input=args.input, threshold=args.threshold, invert=args.invert
            )
        else:
            record_options = dict(
                inputs=args.inputs,
                file_format=args.file_format,
                num_processes=args.procs,
                chunk_size=args.chunk_size,
                show_progress=args.progress,
            )
            if command == "measure":
                options = MeasureArgs(kmer_length=args.kmer_length, **record_options)
            else:
                options = MaskArgs(
                    detector=DetectorConfig(
                        kmer_length=args.kmer_length,
                        window_size=args.window_size,
                        threshold=args.threshold,
                    ),
                    lower_case=args.lower_case,
                    mask_symbol=args.mask_symbol,
                    **record_options,
                )
        return CliArgs(
            command=command,
            options=options,
            logging=LoggingArgs(
                verbose=args.verbose, log_file=args.log_file, log_json=args.log_json
            ),
        )
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'value'}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidParameterError(f"Invalid arguments: {problems}") from e
