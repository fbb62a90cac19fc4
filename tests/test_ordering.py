import os
import sys

import numpy as np
import pytest

# Add the parent directory to the path to import the module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from certified_transfer_operators.exceptions import UnsortedSequenceError
from certified_transfer_operators.ordering import (
    WeaklySortedSequence,
    first_overlapping,
    last_match,
    last_overlapping,
    precedes,
    skip_count,
)
from certified_transfer_operators.translators import Interval


class TestPrecedes:
    def test_precedes(self):
        assert precedes(Interval(0.0, 0.1), Interval(0.2, 0.3))
        assert not precedes(Interval(0.2, 0.3), Interval(0.0, 0.1))
        # overlapping intervals are undecided
        assert not precedes(Interval(0.0, 0.25), Interval(0.2, 0.3))
        assert not precedes(Interval(0.2, 0.3), Interval(0.0, 0.25))
        # equal thin values are not strictly ordered
        assert not precedes(0.5, 0.5)


class TestWeaklySortedSequence:
    def test_sorted(self):
        S = WeaklySortedSequence([0.0, Interval(0.1, 0.3), Interval(0.2, 0.3), 1.0])
        assert len(S) == 4
        assert S[1] == Interval(0.1, 0.3)
        assert np.array_equal(S.lo, [0.0, 0.1, 0.2, 1.0])
        assert np.array_equal(S.hi, [0.0, 0.3, 0.3, 1.0])

    def test_unsorted(self):
        with pytest.raises(UnsortedSequenceError):
            WeaklySortedSequence([0.5, 0.2])
        # the upper bounds decrease
        with pytest.raises(UnsortedSequenceError):
            WeaklySortedSequence([Interval(0.0, 1.0), Interval(0.5, 0.6)])
        with pytest.raises(UnsortedSequenceError):
            WeaklySortedSequence([0.2, 0.5], increasing=False)

    def test_of_reuses_sequence(self):
        S = WeaklySortedSequence([0.0, 1.0])
        assert WeaklySortedSequence.of(S) is S
        assert WeaklySortedSequence.of([0.0, 1.0]) is not S


class TestScans:
    def setup_method(self):
        """Set up test fixtures."""
        self.a1 = list(np.linspace(0.0, 1.0, 12))
        self.a2 = [
            Interval(0.0, 0.1),
            Interval(0.05, 0.3),
            Interval(0.2, 0.3),
            Interval(0.25, 0.9),
            Interval(0.8, 1.0),
        ]
        self.a3 = [Interval(0.0, 1.0)] * 10

    def test_equispaced(self):
        assert skip_count(self.a1, 0.25) == 3
        assert last_match(self.a1, 0.25) == 3
        assert skip_count(self.a1, Interval(0.1, 0.8)) == 2
        assert last_match(self.a1, Interval(0.1, 0.8)) == 9
        assert skip_count(self.a1, 2.0) == 12
        assert last_match(self.a1, 2.0) == 12
        assert skip_count(self.a1, -1.0) == 0
        assert last_match(self.a1, -1.0) == 0
        assert skip_count(self.a1, 0.0) == 0
        assert last_match(self.a1, 0.0) == 1

    def test_overlapping_entries(self):
        assert skip_count(self.a2, 0.25) == 1
        assert last_match(self.a2, 0.25) == 4
        assert skip_count(self.a2, Interval(0.1, 0.8)) == 0
        assert last_match(self.a2, Interval(0.1, 0.8)) == 5
        assert skip_count(self.a2, 0.3) == 1
        assert last_match(self.a2, 0.3) == 4
        assert skip_count(self.a2, 2.0) == 5
        assert last_match(self.a2, -1.0) == 0

    def test_wide_entries(self):
        assert skip_count(self.a3, 0.25) == 0
        assert last_match(self.a3, 0.25) == 10
        assert skip_count(self.a3, 2.0) == 10
        assert last_match(self.a3, 2.0) == 10
        assert skip_count(self.a3, -1.0) == 0
        assert last_match(self.a3, -1.0) == 0

    def test_decreasing(self):
        reversed_a1 = self.a1[::-1]
        assert skip_count(reversed_a1, 0.25, increasing=False) == 9
        assert last_match(reversed_a1, 0.25, increasing=False) == 9
        assert skip_count(reversed_a1, Interval(0.1, 0.8), increasing=False) == 3
        assert last_match(reversed_a1, Interval(0.1, 0.8), increasing=False) == 10
        assert skip_count(reversed_a1, -1.0, increasing=False) == 12
        assert last_match(reversed_a1, 2.0, increasing=False) == 0

        reversed_a2 = self.a2[::-1]
        # entries certainly after 0.25: [0.8, 1.0]
        assert skip_count(reversed_a2, 0.25, increasing=False) == 1
        # entries that may reach 0.25: all but [0.0, 0.1]
        assert last_match(reversed_a2, 0.25, increasing=False) == 4

    def test_scans_are_consistent(self):
        for S in (self.a1, self.a2, self.a3):
            for x in (0.25, Interval(0.1, 0.8), 2.0, -1.0, 0.0, 0.3):
                assert 0 <= skip_count(S, x) <= last_match(S, x) <= len(S)

    def test_scan_bounds(self):
        # neighbouring entries overlap, some of them only partially
        tricky = [
            Interval(0.0, 0.1),
            Interval(0.0, 0.2),
            Interval(0.1, 0.3),
            Interval(0.2, 0.4),
            Interval(0.3, 0.5),
            Interval(0.3, 0.6),
            Interval(0.6, 0.8),
            Interval(0.8, 1.0),
            Interval(1.0, 1.0),
        ]
        queries = (Interval(0.25), Interval(0.1, 0.8), 2, -1, 0, 0.3)
        for S in (self.a1, tricky, self.a3):
            for x in queries:
                s = skip_count(S, x)
                assert s == 0 or precedes(S[s - 1], x)
                assert s == len(S) or not precedes(S[s], x)
                e = last_match(S, x)
                assert e == 0 or not precedes(x, S[e - 1])
                assert e == len(S) or precedes(x, S[e])

            reversed_S = S[::-1]
            for x in queries:
                s = skip_count(reversed_S, x, increasing=False)
                assert s == 0 or precedes(x, reversed_S[s - 1])
                assert s == len(reversed_S) or not precedes(x, reversed_S[s])
                e = last_match(reversed_S, x, increasing=False)
                assert e == 0 or not precedes(reversed_S[e - 1], x)
                assert e == len(reversed_S) or precedes(reversed_S[e], x)


class TestOverlapSearch:
    def setup_method(self):
        self.y = [0.0, 0.25, 0.5, 0.75, 1.0]

    def test_first_overlapping(self):
        assert first_overlapping(self.y, 0.3) == 1
        assert first_overlapping(self.y, 0.25) == 1
        assert first_overlapping(self.y, 0.0) == 0
        assert first_overlapping(self.y, 1.0) == 4
        assert first_overlapping(self.y, -1.0) == -1
        assert first_overlapping(self.y, Interval(0.2, 0.3)) == 0

    def test_last_overlapping(self):
        # 0.25 - ε is in the cell [0, 0.25)
        assert last_overlapping(self.y, 0.25) == 0
        assert last_overlapping(self.y, 0.3) == 1
        assert last_overlapping(self.y, 1.0) == 3
        assert last_overlapping(self.y, Interval(0.2, 0.3)) == 1

    def test_wide_partition(self):
        y = [Interval(0.0), Interval(0.2, 0.3), Interval(0.6, 0.7), Interval(1.0)]
        # 0.25 may be before or after y[1]
        assert first_overlapping(y, 0.25) == 0
        assert last_overlapping(y, 0.25) == 1
