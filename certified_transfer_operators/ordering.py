"""
Conservative ordering of interval valued quantities.

A relation between two intervals is often undecided (the intervals overlap). The
predicates and searches below never answer incorrectly: when the relation is
uncertain they return the answer that keeps every admissible realization.
"""
from collections.abc import Sequence

import numpy as np

from .exceptions import UnsortedSequenceError
from .translators import Interval


def precedes(u, v):
    """
    True iff every value in u is strictly smaller than every value in v.
    False both when u is certainly not before v and when the relation is undecided.
    """
    return Interval(u).hi < Interval(v).lo


class WeaklySortedSequence(Sequence):
    """
    A sequence of intervals whose lower bounds and upper bounds are both monotone
    (non-decreasing, or non-increasing when increasing=False). Neighbouring entries
    may overlap.

    The order is validated once at construction; the bound arrays are kept for the
    binary searches.
    """

    def __init__(self, items, increasing=True):
        self._items = [Interval(v) for v in items]
        self.increasing = increasing
        self.lo = np.array([v.lo for v in self._items], dtype=np.float64)
        self.hi = np.array([v.hi for v in self._items], dtype=np.float64)

        sign = 1 if increasing else -1
        if np.any(sign * np.diff(self.lo) < 0) or np.any(sign * np.diff(self.hi) < 0):
            direction = "non-decreasing" if increasing else "non-increasing"
            raise UnsortedSequenceError(
                f"Sequence is not weakly sorted: lower and upper bounds must both be {direction}"
            )

    @classmethod
    def of(cls, items, increasing=True):
        if isinstance(items, cls) and items.increasing == increasing:
            return items
        return cls(items, increasing)

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self):
        return len(self._items)

    def __repr__(self):
        return f"WeaklySortedSequence({self._items!r}, increasing={self.increasing})"


def skip_count(S, x, increasing=True):
    """
    Largest s such that every element of S[:s] is certainly before x (certainly
    after x for a non-increasing S). 0 if no prefix qualifies.
    """
    S = WeaklySortedSequence.of(S, increasing)
    x = Interval(x)
    if increasing:
        # S[k].hi < x.lo
        return int(np.searchsorted(S.hi, x.lo, side="left"))
    # S[k].lo > x.hi
    return int(np.searchsorted(-S.lo, -x.hi, side="left"))


def last_match(S, x, increasing=True):
    """
    Largest e such that x is not certainly before S[e-1] (S[e-1] is not certainly
    before x for a non-increasing S), i.e. S[e-1] could overlap or follow x.
    0 if there is no such element.
    """
    S = WeaklySortedSequence.of(S, increasing)
    x = Interval(x)
    if increasing:
        # S[k].lo <= x.hi
        return int(np.searchsorted(S.lo, x.hi, side="right"))
    # S[k].hi >= x.lo
    return int(np.searchsorted(-S.hi, -x.lo, side="right"))


def first_overlapping(y, a):
    """
    Smallest possible i such that a is in the semi-open cell [y[i], y[i+1]).

    Works when a and the entries of y are intervals: it returns the smallest i over
    all realizations of a and y inside their intervals. The result is -1 when a
    may lie before y[0]. An exact zero is always +0.0 (see Interval).
    """
    y = WeaklySortedSequence.of(y)
    a = Interval(a)
    return int(np.searchsorted(y.hi, a.lo, side="right")) - 1


def last_overlapping(y, a):
    """
    Largest possible j such that a - ε is in the semi-open cell [y[j], y[j+1]).

    Works when a and the entries of y are intervals: it returns the largest j over
    all realizations of a and y inside their intervals.
    """
    y = WeaklySortedSequence.of(y)
    a = Interval(a)
    return int(np.searchsorted(y.lo, a.hi, side="left")) - 1
