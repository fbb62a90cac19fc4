"""
Dual representations of a basis composed with a dynamic.

A dual is the sequence of pairs (label, cell data) from which the rows of the
discretized operator are computed; each basis kind supplies its own cell data
behind the same iteration contract.
"""
from abc import ABC, abstractmethod


class Dual(ABC):
    @abstractmethod
    def __len__(self):
        pass

    @abstractmethod
    def __iter__(self):
        """Iterate over (label, cell_data) pairs."""


class UlamDual(Dual):
    """
    Dual of a piecewise constant basis: the cell data of element k is the pair of
    consecutive preimages (x[k], x[k+1]); the last cell ends at lastpoint, the end
    of the domain.
    """

    def __init__(self, x, xlabel, lastpoint):
        if len(x) != len(xlabel):
            raise ValueError("x and xlabel must have the same length")
        self.x = list(x)
        self.xlabel = list(xlabel)
        self.lastpoint = lastpoint

    def __len__(self):
        return len(self.x)

    def __iter__(self):
        n = len(self.x)
        for k in range(n):
            end = self.x[k + 1] if k + 1 < n else self.lastpoint
            yield self.xlabel[k], (self.x[k], end)


class JacobianDual(Dual):
    """
    Dual of a basis evaluated at points (hat functions, polynomials): the cell data
    of element k is the preimage x[k] with the Jacobian weight |T'(x[k])|.
    """

    def __init__(self, x, xlabel, x_prime):
        if not len(x) == len(xlabel) == len(x_prime):
            raise ValueError("x, xlabel and x_prime must have the same length")
        self.x = list(x)
        self.xlabel = list(xlabel)
        self.x_prime = list(x_prime)

    def __len__(self):
        return len(self.x)

    def __iter__(self):
        for label, point, point_prime in zip(self.xlabel, self.x, self.x_prime):
            yield label, (point, abs(point_prime))
