import gzip
import pathlib
from typing import List

import pytest


def de_bruijn(alphabet: str, order: int) -> str:
    """Cyclic de Bruijn sequence: every `order`-mer over `alphabet` appears once."""
    size = len(alphabet)
    a = [0] * size * order
    sequence: List[int] = []

    def db(t: int, p: int) -> None:
        if t > order:
            if order % p == 0:
                sequence.extend(a[1 : p + 1])
        else:
            a[t] = a[t - p]
            db(t + 1, p)
            for j in range(a[t - p] + 1, size):
                a[t] = j
                db(t + 1, t)

    db(1, 1)
    return "".join(alphabet[i] for i in sequence)


@pytest.fixture
def repeat_sequence() -> bytes:
    """ACGT repeated nine times: every window of 4-mers has 4 distinct codes."""
    return b"ACGT" * 9


@pytest.fixture
def distinct_sequence() -> bytes:
    """40 bases whose 37 overlapping 4-mers are all distinct."""
    return de_bruijn("ACGT", 4)[:40].encode("ascii")


@pytest.fixture
def fasta_file(tmp_path: pathlib.Path, repeat_sequence: bytes, distinct_sequence: bytes) -> pathlib.Path:
    path = tmp_path / "records.fa"
    path.write_text(
        f">repeat first record\n{repeat_sequence.decode()}\n"
        f">distinct\n{distinct_sequence.decode()}\n"
    )
    return path


@pytest.fixture
def fastq_file(tmp_path: pathlib.Path, repeat_sequence: bytes, distinct_sequence: bytes) -> pathlib.Path:
    path = tmp_path / "reads.fastq"
    path.write_text(
        f"@repeat lane=1\n{repeat_sequence.decode()}\n+\n{'I' * len(repeat_sequence)}\n"
        f"@distinct\n{distinct_sequence.decode()}\n+\n{'#' * len(distinct_sequence)}\n"
    )
    return path


@pytest.fixture
def gzipped_fasta_file(tmp_path: pathlib.Path, repeat_sequence: bytes) -> pathlib.Path:
    path = tmp_path / "records.fa.gz"
    with gzip.open(path, "wt") as f:
        f.write(f">repeat\n{repeat_sequence.decode()}\n")
    return path
