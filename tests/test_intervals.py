"""
Pytest unit tests for Interval and merge_intervals.
"""

import random

import pytest

from complexr.detector import LowComplexityDetector
from complexr.intervals import Interval, covered_positions, merge_intervals


def test_interval_length_and_overlap():
    interval = Interval(3, 8)
    assert interval.length == 5
    assert interval.overlaps(Interval(7, 9))
    assert not interval.overlaps(Interval(8, 9))


def test_merge_empty():
    assert merge_intervals([]) == []


def test_merge_single():
    assert merge_intervals([Interval(2, 5)]) == [Interval(2, 5)]


def test_merge_overlapping():
    assert merge_intervals([Interval(0, 5), Interval(3, 8)]) == [Interval(0, 8)]


def test_touching_intervals_stay_separate():
    merged = merge_intervals([Interval(0, 5), Interval(5, 8)])
    assert merged == [Interval(0, 5), Interval(5, 8)]


def test_merge_contained_interval():
    assert merge_intervals([Interval(0, 10), Interval(2, 4), Interval(9, 12)]) == [
        Interval(0, 12)
    ]


def test_merge_same_start():
    assert merge_intervals([Interval(4, 6), Interval(4, 9)]) == [Interval(4, 9)]


def test_merge_accepts_plain_tuples():
    merged = merge_intervals([(0, 3), (1, 4), (6, 7)])
    assert merged == [Interval(0, 4), Interval(6, 7)]
    assert all(isinstance(interval, Interval) for interval in merged)


def test_merge_rejects_unsorted_input():
    with pytest.raises(ValueError, match="sorted by start"):
        merge_intervals([Interval(5, 8), Interval(1, 3)])


def test_covered_positions():
    assert covered_positions([Interval(0, 2), Interval(5, 6)]) == {0, 1, 5}


def test_merged_detector_output_is_non_adjacent_with_equal_coverage():
    rng = random.Random(11)
    detector = LowComplexityDetector(kmer_length=3, window_size=6, threshold=0.7)
    for _ in range(50):
        sequence = "".join(rng.choice("AC") for _ in range(rng.randrange(0, 60)))
        raw = list(detector.detect(sequence.encode()))
        merged = merge_intervals(raw)
        for current, following in zip(merged, merged[1:]):
            assert following.start >= current.end
        assert covered_positions(merged) == covered_positions(raw)
