"""
Entry point for the ``complexr`` command.

Exit status is 0 on success and 1 when the configuration is invalid, an
input record cannot be read, or the filter has too little data. argparse
exits with status 2 on usage errors.
"""

import logging
import sys
from typing import Optional, Sequence

from .exceptions import ComplexrException, ValidationException
from .logging_config import setup_logging
from .parameter_config import CliArgs, parse_cli_arguments
from .workflow import FilterWorkflow, MaskWorkflow, MeasureWorkflow

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def run_command(cli_args: CliArgs) -> int:
    """Run the selected sub-command; returns the number of records or ids emitted."""
    if cli_args.command == "measure":
        return MeasureWorkflow(cli_args.options).run()
    if cli_args.command == "mask":
        return MaskWorkflow(cli_args.options).run()
    return FilterWorkflow(cli_args.options).run()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse arguments, run the sub-command and map failures to an exit status."""
    setup_logging()
    logger = logging.getLogger(__name__)

    try:
        cli_args = parse_cli_arguments(argv)
    except ValidationException as e:
        logger.error(f"Argument validation error: {e}")
        return EXIT_FAILURE

    setup_logging(
        verbose=cli_args.logging.verbose,
        log_file=cli_args.logging.log_file,
        enable_json=cli_args.logging.log_json,
    )
    logger.debug(f"Running {cli_args.command} with {cli_args.options!r}")

    try:
        run_command(cli_args)
    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        return EXIT_INTERRUPTED
    except ComplexrException as e:
        logger.error(f"{type(e).__name__}: {e}")
        return EXIT_FAILURE
    except Exception as e:
        logger.critical(f"Critical error: {e}", exc_info=True)
        return EXIT_FAILURE
    return EXIT_OK


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
