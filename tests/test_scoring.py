"""
Pytest unit tests for whole-sequence scoring, the score table reader and the
z-score filter.
"""

import io

import numpy as np
import pytest

from complexr.exceptions import InsufficientDataError, InvalidParameterError, RecordReadError
from complexr.scoring import ComplexityScore, ZScoreFilter, read_score_table, score_sequence

# --- score_sequence ---


def test_homopolymer_single_base_kmers():
    score = score_sequence(b"AAAA", 1)
    assert score == ComplexityScore(distinct_kmers=1, length=4)
    assert score.ratio == pytest.approx(0.25)


def test_repeat_sequence_score(repeat_sequence: bytes):
    score = score_sequence(repeat_sequence, 4)
    assert score.distinct_kmers == 4
    assert score.length == 36
    assert score.ratio == pytest.approx(4 / 36)


def test_distinct_sequence_score(distinct_sequence: bytes):
    assert score_sequence(distinct_sequence, 4).distinct_kmers == 37


def test_sequence_shorter_than_k_has_no_kmers():
    score = score_sequence(b"ACG", 4)
    assert score.distinct_kmers == 0
    assert score.ratio == 0.0


def test_case_sensitive_kmers():
    assert score_sequence(b"AAaa", 1).distinct_kmers == 2


def test_empty_sequence_is_rejected():
    with pytest.raises(InvalidParameterError, match="empty sequence"):
        score_sequence(b"", 4)


def test_invalid_kmer_length():
    with pytest.raises(InvalidParameterError):
        score_sequence(b"ACGT", 13)


# --- read_score_table ---


def test_read_two_column_scores():
    table = read_score_table(io.StringIO("r1\t0.5\nr2\t0.25\n"))
    assert table == [("r1", 0.5), ("r2", 0.25)]


def test_read_measure_output_uses_last_column():
    table = read_score_table(io.StringIO("r1\t36\t4\t0.1111\nr2\t40\t37\t0.9250\n"))
    assert table == [("r1", pytest.approx(0.1111)), ("r2", pytest.approx(0.925))]


def test_read_strips_whitespace():
    assert read_score_table(io.StringIO(" r1 \t 0.5 \n")) == [("r1", 0.5)]


def test_read_keeps_na_like_ids():
    assert read_score_table(io.StringIO("NA\t1.0\n")) == [("NA", 1.0)]


def test_read_ids_with_quote_characters():
    table = read_score_table(io.StringIO('"a\t1\nb\t2\nc"\t3\nd\t4\ne\t5\n'))
    assert table == [('"a', 1.0), ("b", 2.0), ('c"', 3.0), ("d", 4.0), ("e", 5.0)]


def test_read_unbalanced_quote_in_id():
    assert read_score_table(io.StringIO('"a\t0.5\nb\t0.7\n')) == [('"a', 0.5), ("b", 0.7)]


def test_read_ids_with_comment_characters():
    assert read_score_table(io.StringIO("#r1\t0.5\nr#2\t0.7\n")) == [("#r1", 0.5), ("r#2", 0.7)]


def test_read_empty_input():
    assert read_score_table(io.StringIO("")) == []


def test_read_non_numeric_score():
    with pytest.raises(RecordReadError) as excinfo:
        read_score_table(io.StringIO("r1\t0.5\nr2\tabc\n"))
    assert excinfo.value.details["line"] == 2
    assert excinfo.value.details["id"] == "r2"


def test_read_missing_score_column():
    with pytest.raises(RecordReadError, match="id and a score"):
        read_score_table(io.StringIO("r1\nr2\n"))


# --- ZScoreFilter ---


@pytest.fixture
def scores_fixture():
    # mean 4, sample sd sqrt(50 / 3); z ~ -0.73, -0.49, -0.24, 1.47
    return [("a", 1.0), ("b", 2.0), ("c", 3.0), ("d", 10.0)]


def test_zscores(scores_fixture):
    z = ZScoreFilter().zscores([s for _, s in scores_fixture])
    sd = np.sqrt(50 / 3)
    np.testing.assert_allclose(z, [-3 / sd, -2 / sd, -1 / sd, 6 / sd])


def test_default_threshold_keeps_all_above(scores_fixture):
    assert ZScoreFilter().apply(scores_fixture) == ["a", "b", "c", "d"]


def test_high_threshold(scores_fixture):
    assert ZScoreFilter(threshold=1.0).apply(scores_fixture) == ["d"]


def test_inverted_filter(scores_fixture):
    assert ZScoreFilter(threshold=-0.5, invert=True).apply(scores_fixture) == ["a"]


def test_threshold_comparison_is_strict():
    scores = [("low", 0.0), ("high", 2.0)]
    # z-scores are exactly -1/sqrt(2) and +1/sqrt(2).
    z_high = 1 / np.sqrt(2)
    assert ZScoreFilter(threshold=z_high).apply(scores) == []
    assert ZScoreFilter(threshold=-z_high, invert=True).apply(scores) == []


@pytest.mark.parametrize("scores", [[], [("only", 0.5)]])
def test_fewer_than_two_scores(scores):
    with pytest.raises(InsufficientDataError):
        ZScoreFilter().apply(scores)


def test_identical_scores_keep_nothing():
    scores = [("a", 0.5), ("b", 0.5), ("c", 0.5)]
    assert ZScoreFilter().apply(scores) == []
    assert ZScoreFilter(invert=True).apply(scores) == []


def test_non_finite_threshold():
    with pytest.raises(InvalidParameterError):
        ZScoreFilter(threshold=float("nan"))
