from ..duals import UlamDual
from ..ordering import first_overlapping, last_overlapping
from ..preimages import preimages
from ..translators import Interval, imax, imin
from .basis import Basis


class Ulam(Basis):
    """
    Piecewise constant basis (Ulam's method) on the cells I_j = [p[j], p[j+1]).

    The j-th element is χ_{I_j} / |I_j|, so it has unit integral and the
    coefficients of a density are the masses of its cells. The entry L[i, j] is the
    fraction of I_j that is mapped into I_i, hence every column of L sums to 1.
    """

    def __len__(self):
        return len(self.p) - 1

    def dual(self, dynamic, epsilon=0.0, executor=None):
        x, xlabel = preimages(self.p, dynamic, range(len(self)), epsilon, executor)
        return UlamDual(x, xlabel, dynamic.domain()[1])

    def nonzero_on(self, dual_element):
        a, b = dual_element
        n = len(self)
        j_min = min(max(first_overlapping(self.p, a), 0), n - 1)
        j_max = min(max(last_overlapping(self.p, b), j_min), n - 1)
        return j_min, j_max

    def project_dual_element(self, dual_element):
        """
        Yield (j, |[a, b] ∩ I_j| / |I_j|) for the cells I_j met by the dual element.
        """
        a, b = dual_element
        j_min, j_max = self.nonzero_on(dual_element)
        for j in range(j_min, j_max + 1):
            left, right = self.p[j], self.p[j + 1]
            overlap = imin(b, right) - imax(a, left)
            ratio = imax(overlap, 0.0) / (right - left)
            yield j, imin(ratio, 1.0)

    def is_dual_element_empty(self, dual_element):
        # the cell [a, b) has certainly zero length
        a, b = dual_element
        return b.hi <= a.lo

    def is_integral_preserving(self):
        return True

    def evaluate_integral(self, i):
        return Interval(1.0)

    def one_vector(self):
        # the constant 1 has mass |I_j| on each cell
        return [self.p[j + 1] - self.p[j] for j in range(len(self))]

    def __repr__(self):
        return f"Ulam basis of size {len(self)}"
