"""
Pytest unit tests for the file helpers in complexr.utils.
"""

import gzip
import io
import pathlib
from unittest.mock import MagicMock, patch

import pytest

from complexr.utils import is_stdio, open_file_transparently, open_input

# --- Fixtures ---


@pytest.fixture
def sample_text_content_fixture() -> str:
    return ">r1\nACGT\n>r2\nGGCC\n"


@pytest.fixture
def plain_text_file_fixture(
    tmp_path: pathlib.Path, sample_text_content_fixture: str
) -> pathlib.Path:
    file_path = tmp_path / "plain.fa"
    file_path.write_text(sample_text_content_fixture)
    return file_path


@pytest.fixture
def gzipped_text_file_fixture(
    tmp_path: pathlib.Path, sample_text_content_fixture: str
) -> pathlib.Path:
    file_path = tmp_path / "compressed.fa.gz"
    with gzip.open(file_path, "wt") as f:
        f.write(sample_text_content_fixture)
    return file_path


# --- Tests for open_file_transparently ---


def test_open_plain_text_file(
    plain_text_file_fixture: pathlib.Path, sample_text_content_fixture: str
):
    with open_file_transparently(plain_text_file_fixture, mode="rt") as f:
        assert f.read() == sample_text_content_fixture
        assert isinstance(f, io.TextIOWrapper)


def test_open_gzipped_text_file(
    gzipped_text_file_fixture: pathlib.Path, sample_text_content_fixture: str
):
    with open_file_transparently(gzipped_text_file_fixture, mode="rt") as f:
        assert f.read() == sample_text_content_fixture


def test_write_gzipped_text_file(tmp_path: pathlib.Path):
    path = tmp_path / "out.fa.gz"
    with open_file_transparently(path, mode="wt") as f:
        f.write(">r\nNNNN\n")
    with gzip.open(path, "rt") as f:
        assert f.read() == ">r\nNNNN\n"


def test_open_file_not_found_error():
    with pytest.raises(FileNotFoundError, match="File not found:"):
        open_file_transparently("non_existent_complexr_file.fa")


@patch("gzip.open", side_effect=IOError("Gzip processing error for test"))
def test_open_gzipped_io_error_mocked(
    mock_gzip_open: MagicMock, gzipped_text_file_fixture: pathlib.Path
):
    with pytest.raises(IOError, match="Gzip processing error for test"):
        open_file_transparently(gzipped_text_file_fixture)


def test_open_file_invalid_path_type_error():
    with pytest.raises(TypeError, match="file_path must be a string or pathlib.Path"):
        open_file_transparently(12345)  # type: ignore


# --- Tests for open_input ---


def test_open_input_reads_file(
    plain_text_file_fixture: pathlib.Path, sample_text_content_fixture: str
):
    with open_input(plain_text_file_fixture) as f:
        assert f.read() == sample_text_content_fixture
    assert f.closed


def test_open_input_stdin_is_left_open(monkeypatch: pytest.MonkeyPatch):
    stdin = io.StringIO("@r\nA\n+\nI\n")
    monkeypatch.setattr("sys.stdin", stdin)
    with open_input(pathlib.Path("-")) as f:
        assert f is stdin
        assert f.readline() == "@r\n"
    assert not stdin.closed


@pytest.mark.parametrize("path,expected", [
    ("-", True),
    (pathlib.Path("-"), True),
    ("reads.fq", False),
    (pathlib.Path("./-/reads.fq"), False),
])
def test_is_stdio(path, expected: bool):
    assert is_stdio(path) is expected
