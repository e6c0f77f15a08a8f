#!/usr/bin/env python

import contextlib
import gzip
import mimetypes
import pathlib
import sys
from typing import Iterator, TextIO, Union

STDIO_PATH = "-"


def open_file_transparently(
    file_path: Union[str, pathlib.Path], mode: str = "rt"
) -> TextIO:
    """Opens a file, transparently handling gzip compression.

    Infers compression from file extension. Defaults to text read mode.

    Args:
        file_path: Path to the file.
        mode: Text file open mode ("rt" or "wt"). Defaults to "rt".

    Returns:
        A text file object.

    Raises:
        FileNotFoundError: If the file is opened for reading and does not exist.
        IOError: If an I/O error occurs during opening.
        TypeError: If file_path is not a str or pathlib.Path.
    """
    if not isinstance(file_path, (str, pathlib.Path)):
        raise TypeError(
            f"file_path must be a string or pathlib.Path, not {type(file_path)}"
        )

    file_path = pathlib.Path(file_path)

    if "r" in mode and not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    _, encoding = mimetypes.guess_type(str(file_path))

    try:
        if encoding == "gzip":
            return gzip.open(file_path, mode=mode)  # type: ignore # text mode returns TextIO
        return open(file_path, mode=mode)
    except (IOError, OSError) as e:
        raise IOError(f"Error opening file {file_path} with mode '{mode}': {e}") from e


@contextlib.contextmanager
def open_input(file_path: Union[str, pathlib.Path]) -> Iterator[TextIO]:
    """Yield a text handle for `file_path`, or stdin for ``-``; stdin is left open."""
    if str(file_path) == STDIO_PATH:
        yield sys.stdin
        return
    with open_file_transparently(file_path, mode="rt") as handle:
        yield handle


def is_stdio(file_path: Union[str, pathlib.Path]) -> bool:
    return str(file_path) == STDIO_PATH
