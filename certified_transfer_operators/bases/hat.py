import math
from dataclasses import dataclass

import numpy as np

from ..duals import JacobianDual
from ..exceptions import CertificationError
from ..preimages import preimages_and_derivatives
from ..translators import Interval, imax, imin
from .basis import Basis


class IntervalOnTorus:
    """
    An interval on the torus [0, 1), normalized at construction so that
    0 <= I.lo < 1 and either I.hi < I.lo + 1 or I == [0, 1].
    """

    def __init__(self, x):
        x = Interval(x)
        if x.diam() >= 1.0:
            # may expand intervals such as [1e-30, 1] to [0, 1]
            self.I = Interval(0.0, 1.0)
        else:
            # x - floor(x.lo) may end up slightly below zero after rounding
            self.I = imax(x - math.floor(x.lo), 0.0)

    def __repr__(self):
        return f"IntervalOnTorus({self.I!r})"


def _hat(x, lo, mi, hi):
    left_branch = (x - lo) / (mi - lo)
    right_branch = (hi - x) / (hi - mi)
    # clipping to 1 avoids spurious values from rounding
    return imax(imin(imin(left_branch, right_branch), 1.0), 0.0)


@dataclass(frozen=True)
class HatFunctionOnTorus:
    """
    Piecewise linear function on the torus that vanishes outside (lo, hi) and has
    its peak, 1, at mi. Either mi == 0, hi == 0, or lo < mi < hi.
    """
    lo: Interval
    mi: Interval
    hi: Interval

    def __call__(self, x):
        if not isinstance(x, IntervalOnTorus):
            x = IntervalOnTorus(x)
        lo, mi, hi = self.lo, self.mi, self.hi
        # endpoints of the hat centered in mi, also when it crosses 0
        if mi == 0:
            lo = lo - 1
        if hi == 0:
            hi = Interval(1.0)

        # x is normalized, so only the hats centered in mi and mi + 1 matter
        first_hat = _hat(x.I, lo, mi, hi)
        second_hat = _hat(x.I - 1, lo, mi, hi)
        return imax(first_hat, second_hat)


class Hat(Basis):
    """
    Hat functions on the torus [0, 1): the j-th element is the piecewise linear
    function peaked at p[j], supported on (p[j-1], p[j+1]) with indices taken
    modulo n = len(p) - 1 (p[n] = 1 is identified with p[0] = 0).

    Coefficients are the values at the nodes p[0], ..., p[n-1].
    """

    def __init__(self, partition):
        super().__init__(partition)
        if len(self) < 2:
            raise ValueError("A hat basis on the torus needs at least two elements")

    def __len__(self):
        return len(self.p) - 1

    def __getitem__(self, j):
        n = len(self)
        if not -n <= j < n:
            raise IndexError(f"Hat basis index {j} out of range for size {n}")
        j = j % n
        return HatFunctionOnTorus(self.p[(j - 1) % n], self.p[j], self.p[(j + 1) % n])

    def __iter__(self):
        for j in range(len(self)):
            yield self[j]

    def dual(self, dynamic, epsilon=0.0, executor=None):
        """
        Pairs (i, (x, |T'(x)|)) with x ranging over the preimages of p[i].

        The point x[k] returned for the cell [p[l], p[l+1]) is the preimage of p[l]
        on increasing branches and of p[l+1] on decreasing ones; the orientation is
        read from the sign of T'(x[k]).
        """
        n = len(self)
        x, xlabel, x_prime = preimages_and_derivatives(self.p, dynamic, range(n), epsilon, executor)
        labels = []
        for point, label, point_prime in zip(x, xlabel, x_prime):
            if point_prime.lo > 0:
                labels.append(label)
            elif point_prime.hi < 0:
                labels.append((label + 1) % n)
            else:
                raise CertificationError(
                    f"Cannot certify the orientation of the dynamic at {point}: derivative {point_prime}"
                )
        return JacobianDual(x, labels, x_prime)

    def nonzero_on(self, dual_element):
        """
        The range of indices of the hats whose support may intersect the point
        y of the dual element. It may end with n, to be read modulo n: the hat
        peaked in 0 also covers points close to 1.
        """
        y, _ = dual_element
        y = Interval(y)
        n = len(self)
        lo = min(max(int(np.searchsorted(self.p.hi, y.lo, side="right")) - 1, 0), n - 1)
        hi = min(int(np.searchsorted(self.p.lo, y.hi, side="right")) - 1, n - 1) + 1
        if lo == 0:
            # 0..n would count the hat peaked in 0 twice
            hi = min(hi, n - 1)
        return lo, max(hi, lo)

    def project_dual_element(self, dual_element):
        """
        Yield (j, φ_j(y) / |T'(y)|).
        """
        y, absder = dual_element
        x = IntervalOnTorus(y)
        j_min, j_max = self.nonzero_on(dual_element)
        for j in range(j_min, j_max + 1):
            yield j, self[j % len(self)](x) / absder

    def is_integral_preserving(self):
        return False

    def evaluate_integral(self, i):
        # trapezoidal weight (p[i+1] - p[i-1]) / 2, wrapping around 0
        n = len(self)
        left = self.p[i - 1] if i > 0 else self.p[n - 1] - 1
        return (self.p[i + 1] - left) / 2

    def __repr__(self):
        return f"Hat basis of size {len(self)}"
