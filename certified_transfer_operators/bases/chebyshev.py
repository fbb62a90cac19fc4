from dataclasses import dataclass
from functools import partial
from typing import Tuple

import numpy as np

from ..duals import JacobianDual
from ..dynamics import ComposedDynamic
from ..exceptions import IncompleteBranchError
from ..executors import SinglethreadExecutor
from ..preimages import branch_derivatives, branch_preimages
from ..translators import Interval, IntervalTranslator
from .basis import Basis


def chebyshev_points(n):
    """
    The n + 1 Chebyshev-Lobatto points (1 - cos(kπ/n)) / 2 on [0, 1], increasing,
    with exact endpoints 0 and 1.
    """
    translator = IntervalTranslator()
    interior = [(1 - translator.cos(Interval.pi() * k / n)) / 2 for k in range(1, n)]
    return [Interval(0.0)] + interior + [Interval(1.0)]


def clenshaw(coeff, x):
    """
    Floating point value of Σ coeff[k] T_k(x), for floats or arrays of floats in [-1, 1].
    """
    x = np.asarray(x, dtype=np.float64)
    b1 = np.zeros_like(x)
    b2 = np.zeros_like(x)
    for c in reversed(coeff[1:]):
        b1, b2 = c + 2 * x * b1 - b2, b1
    result = coeff[0] + x * b1 - b2
    return float(result) if result.ndim == 0 else result


def _radius(value, center):
    # smallest float r with value ⊂ [center - r, center + r]
    return max((Interval(value.hi) - center).hi, (Interval(center) - value.lo).hi)


def clenshaw_backward(coeff, x):
    """
    Enclosure of Σ coeff[k] T_k(x) for an Interval x ⊂ [-1, 1], in ball arithmetic,
    following V. Ledoux, G. Moroz, "Evaluation of Chebyshev polynomials on intervals
    and application to root finding".

    The Clenshaw recurrence runs on the midpoint a of x with floats u[k]; each step is
    evaluated in interval arithmetic and its radius bounds the local error. The
    computed u[0] is the exact Clenshaw sum for coefficients perturbed by at most
    these errors, and |T_k(a)| <= 1, so their sum bounds the rounding error. The
    radius r of x adds at most r * Σ k² |coeff[k]| (Markov's inequality).
    """
    x = Interval(x)
    if x.lo < -1.0 or x.hi > 1.0:
        raise ValueError(f"{x} is not contained in [-1, 1]")
    a = x.mid()
    n = len(coeff)

    u = [0.0] * (n + 2)
    error = Interval(0.0)
    markov = Interval(0.0)
    for k in range(n - 1, -1, -1):
        scale = a if k == 0 else 2 * a
        step = Interval(coeff[k]) + scale * Interval(u[k + 1]) - u[k + 2]
        u[k] = step.mid()
        error = error + _radius(step, u[k])
        markov = markov + abs(Interval(coeff[k])) * (k * k)

    radius = (error + markov * _radius(x, a)).hi
    return Interval(u[0]) + Interval(-radius, radius)


@dataclass(frozen=True)
class ChebyshevSeries:
    """
    The function x -> Σ coefficients[k] T_k(2x - 1) on [0, 1].
    """
    coefficients: Tuple

    def __call__(self, x):
        if isinstance(x, Interval):
            t = (2 * x - 1).intersect(Interval(-1.0, 1.0))
            if t is None:
                raise ValueError(f"{x} does not intersect [0, 1]")
            return clenshaw_backward(self.coefficients, t)
        return clenshaw(self.coefficients, 2 * np.asarray(x, dtype=np.float64) - 1)


class Chebyshev(Basis):
    """
    Chebyshev polynomials T_0, ..., T_n of the variable 2x - 1 on [0, 1], with the
    n + 1 Chebyshev-Lobatto points as nodes.

    The dual evaluates the transfer operator at the nodes: the row of the node p[k]
    collects (L T_j)(p[k]) = Σ T_j(x) / |T'(x)| over the preimages x of p[k]. These
    values are turned into Chebyshev coefficients by the discrete orthogonality of
    the T_j on the nodes, so L is the interpolant of the operator on polynomials
    of degree n.
    """

    def __init__(self, n):
        if n < 1:
            raise ValueError(f"A Chebyshev basis needs degree at least 1, got {n}")
        super().__init__(chebyshev_points(n))
        self.degree = n
        self._interpolation = self._interpolation_matrix()

    @classmethod
    def equispaced(cls, n):
        raise NotImplementedError("Chebyshev bases are defined on Chebyshev points, use Chebyshev(n)")

    def __len__(self):
        return self.degree + 1

    def __getitem__(self, j):
        n = len(self)
        if not 0 <= j < n:
            raise IndexError(f"Chebyshev basis index {j} out of range for size {n}")
        coefficients = [0.0] * n
        coefficients[j] = 1.0
        return ChebyshevSeries(tuple(coefficients))

    def __iter__(self):
        for j in range(len(self)):
            yield self[j]

    def _interpolation_matrix(self):
        # C[j][k] = 2 T_j(2p[k] - 1) / (n γ_j γ_k), with γ = 2 at the ends and 1 inside
        n = self.degree
        translator = IntervalTranslator()
        gamma = [2 if k in (0, n) else 1 for k in range(n + 1)]
        return [
            [
                2 * translator.cos(Interval.pi() * (j * (n - k)) / n) / (n * gamma[j] * gamma[k])
                for k in range(n + 1)
            ]
            for j in range(n + 1)
        ]

    def dual(self, dynamic, epsilon=0.0, executor=None):
        """
        Pairs (k, (x, |T'(x)|)) with x ranging over the preimages of the node p[k].

        Each full branch contributes one preimage for every node: the points found by
        the preimage engine and the end of the branch domain, which is the preimage
        of 1 on increasing branches and of 0 on decreasing ones.
        """
        if executor is None:
            executor = SinglethreadExecutor()
        if isinstance(dynamic, ComposedDynamic) or not dynamic.is_full_branch():
            raise IncompleteBranchError(
                f"Chebyshev duals need the full branches of the dynamic, got {dynamic}"
            )
        results = executor.map(partial(self._branch_dual, epsilon=epsilon), dynamic.branches(), desc="Preimages")
        x = [point for result in results for point in result[0]]
        labels = [label for result in results for label in result[1]]
        x_prime = [p for result in results for p in result[2]]
        return JacobianDual(x, labels, x_prime)

    def _branch_dual(self, branch, epsilon):
        n = self.degree
        x, xlabel = branch_preimages(self.p, branch, range(n), epsilon)
        x = x + [branch.domain[1]]
        if branch.increasing:
            nodes = list(xlabel) + [n]
        else:
            # the cell with label l starts at the preimage of p[l + 1]
            nodes = [label + 1 for label in xlabel] + [0]
        return x, nodes, branch_derivatives(branch, x)

    def nonzero_on(self, dual_element):
        return 0, len(self) - 1

    def project_dual_element(self, dual_element):
        """
        Yield (j, T_j(y) / |T'(y)|) for every polynomial.
        """
        y, absder = dual_element
        for j in range(len(self)):
            yield j, self[j](y) / absder

    def dual_rows_to_coefficients(self, entries):
        coefficients = {}
        for (k, j), value in sorted(entries.items()):
            for i, row in enumerate(self._interpolation):
                product = row[k] * value
                previous = coefficients.get((i, j))
                coefficients[(i, j)] = product if previous is None else previous + product
        return coefficients

    def is_integral_preserving(self):
        return False

    def evaluate_integral(self, i):
        # ∫_0^1 T_i(2x - 1) dx = 1 / (1 - i²) for even i, 0 for odd i
        if i % 2:
            return Interval(0.0)
        return Interval(1.0) / (1 - i * i)

    def one_vector(self):
        return [Interval(1.0)] + [Interval(0.0)] * self.degree

    def __repr__(self):
        return f"Chebyshev basis of size {len(self)}"
