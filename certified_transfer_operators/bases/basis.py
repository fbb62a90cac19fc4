from abc import ABC, abstractmethod

from ..exceptions import UnsortedSequenceError
from ..ordering import WeaklySortedSequence
from ..translators import Interval


class Basis(ABC):
    """
    A finite basis on [0, 1] defined by a weakly sorted partition p with
    p[0] = 0 and p[-1] = 1.
    """

    def __init__(self, partition):
        self.p = WeaklySortedSequence.of(partition)
        if len(self.p) < 2:
            raise ValueError("A partition needs at least two points")
        if not (self.p[0].contains(0.0) and self.p[-1].contains(1.0)):
            raise UnsortedSequenceError(f"The partition must start at 0 and end at 1, got {self.p[0]} and {self.p[-1]}")

    @classmethod
    def equispaced(cls, n):
        """
        Basis on the equispaced partition of [0, 1] in n cells.
        """
        return cls([Interval.fraction(i, n) for i in range(n + 1)])

    @abstractmethod
    def __len__(self):
        pass

    @abstractmethod
    def dual(self, dynamic, epsilon=0.0, executor=None):
        """
        The dual of the basis composed with the dynamic.
        """
        raise NotImplementedError(
            "This method should be overridden by subclasses."
        )

    @abstractmethod
    def nonzero_on(self, dual_element):
        """
        (j_min, j_max): range of indices of the basis elements whose support may
        intersect the dual element. Indices are to be read modulo len(self).
        """

    @abstractmethod
    def project_dual_element(self, dual_element):
        """
        Yield (j, value) for j in nonzero_on(dual_element).
        """

    def is_dual_element_empty(self, dual_element) -> bool:
        return False

    def dual_rows_to_coefficients(self, entries):
        """
        Map the entries accumulated over the dual labels, a dict (label, j) -> Interval,
        to entries over the coefficients of the basis. The dual labels of Ulam and Hat
        bases are coefficient indices already.
        """
        return entries

    @abstractmethod
    def is_integral_preserving(self) -> bool:
        pass

    @abstractmethod
    def evaluate_integral(self, i):
        """
        Integral of the i-th basis element.
        """

    def integral_covector(self):
        return [self.evaluate_integral(i) for i in range(len(self))]

    def one_vector(self):
        """
        Coefficients of the constant function 1.
        """
        return [Interval(1.0)] * len(self)
