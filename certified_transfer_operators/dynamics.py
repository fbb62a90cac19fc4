from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Tuple

import numpy as np

from .ordering import WeaklySortedSequence, precedes
from .translators import Interval, IntervalTranslator, NumpyTranslator, derivative


def unique_increasing(a, b):
    """
    Orientation of a monotone branch from the enclosures of its endpoint values:
    True if a certainly precedes b, False if b certainly precedes a, None if undecided.
    """
    if precedes(a, b):
        return True
    if precedes(b, a):
        return False
    return None


@dataclass(frozen=True)
class Branch:
    """
    A monotone piece of a dynamic.

    The branch is a monotone map ``f(x, translator)`` with domain X = (a, b), a <= b
    (typically intervals). The image Y = (f(a), f(b)) and the orientation are
    computed from f when they are not given (for instance when we know that Y=(0,1)).
    """
    f: Callable
    domain: Tuple[Interval, Interval]
    image: Tuple[Interval, Interval] = None
    increasing: bool = None

    def __post_init__(self):
        a, b = Interval(self.domain[0]), Interval(self.domain[1])
        if precedes(b, a):
            raise ValueError(f"Empty branch domain ({a}, {b})")
        object.__setattr__(self, "domain", (a, b))

        if self.image is None:
            translator = IntervalTranslator()
            image = (Interval(self.f(a, translator)), Interval(self.f(b, translator)))
        else:
            image = (Interval(self.image[0]), Interval(self.image[1]))
        object.__setattr__(self, "image", image)

        if self.increasing is None:
            increasing = unique_increasing(*image)
            if increasing is None:
                # endpoint values overlap, fall back to the sign of f' on the whole domain
                f_prime = derivative(self.f)(a.hull(b))
                if f_prime.lo > 0:
                    increasing = True
                elif f_prime.hi < 0:
                    increasing = False
                else:
                    raise ValueError(
                        f"Cannot certify the orientation of the branch on ({a}, {b}): "
                        f"image {image}, derivative {f_prime}"
                    )
            object.__setattr__(self, "increasing", increasing)

    def __call__(self, x, translator=None):
        if translator is None:
            translator = IntervalTranslator() if isinstance(x, Interval) else NumpyTranslator()
        return self.f(x, translator)


class Dynamic(ABC):
    """Base class for one dimensional dynamics."""

    system_name = None

    def __call__(self, x, translator=None):
        """
        Evaluate the dynamic.

        Args:
            x: a float, an np.ndarray of floats or an Interval
            translator: The translator for mathematical operations; chosen from the type of x if None

        Returns:
            T(x), an Interval enclosure when x is an Interval
        """
        if translator is None:
            if isinstance(x, Interval):
                translator = IntervalTranslator()
            else:
                translator = NumpyTranslator()
        return self.compute_dynamics(x, translator)

    @abstractmethod
    def compute_dynamics(self, x, translator):
        raise NotImplementedError("Subclasses must implement compute_dynamics")

    @abstractmethod
    def domain(self):
        """(start, end) of the domain, as Intervals"""

    @abstractmethod
    def is_full_branch(self) -> bool:
        pass


class PiecewiseMap(Dynamic):
    """
    Dynamic based on a piecewise defined map.

    The map is defined as T(x) = functions[k](x) if x ∈ [endpoints[k], endpoints[k+1]).

    The image endpoints of each branch are computed in interval arithmetic; when
    y_endpoints are given (e.g. known exact values such as (0, 1)) they must be
    consistent with the computed enclosures, and the intersection is used.

    Branch k is full if its image endpoints are exactly the endpoints of the
    codomain. is_full may be passed to restrict this, but asserting a full branch
    that cannot be derived is an error.
    """

    def __init__(self, functions, endpoints, y_endpoints=None, is_full=None, codomain=(0.0, 1.0)):
        if len(endpoints) != len(functions) + 1:
            raise ValueError(
                f"Expected {len(functions) + 1} endpoints for {len(functions)} branches, got {len(endpoints)}"
            )
        self.functions = list(functions)
        self.endpoints = list(WeaklySortedSequence(endpoints))
        self.codomain = (Interval(codomain[0]), Interval(codomain[1]))

        translator = IntervalTranslator()
        self._branches = []
        for k, f in enumerate(self.functions):
            a, b = self.endpoints[k], self.endpoints[k + 1]
            image = (Interval(f(a, translator)), Interval(f(b, translator)))
            if y_endpoints is not None:
                image = tuple(
                    self._consistent_image(k, computed, declared) for computed, declared in zip(image, y_endpoints[k])
                )
            self._branches.append(Branch(f, (a, b), image))

        derivable = [self._derive_full(branch) for branch in self._branches]
        if is_full is None:
            self.is_full = derivable
        else:
            if len(is_full) != len(self._branches):
                raise ValueError("is_full must have one entry per branch")
            for k, (asserted, derived) in enumerate(zip(is_full, derivable)):
                if asserted and not derived:
                    raise ValueError(
                        f"Branch {k} is declared full, but its image {self._branches[k].image} "
                        f"is not provably the codomain {self.codomain}"
                    )
            self.is_full = [bool(flag) for flag in is_full]

    @staticmethod
    def _consistent_image(k, computed, declared):
        declared = Interval(declared)
        image = computed.intersect(declared)
        if image is None:
            raise ValueError(
                f"Declared image endpoint {declared} of branch {k} is inconsistent with the computed enclosure {computed}"
            )
        return image

    def _derive_full(self, branch):
        start, end = self.codomain
        if not all(v.isthin() for v in branch.image):
            return False
        if branch.increasing:
            return branch.image == (start, end)
        return branch.image == (end, start)

    def branches(self):
        return list(self._branches)

    def nbranches(self):
        return len(self._branches)

    def domain(self):
        return (self.endpoints[0], self.endpoints[-1])

    def is_full_branch(self):
        return all(self.is_full)

    def compute_dynamics(self, x, translator):
        if isinstance(x, Interval):
            return self._evaluate_interval(x, translator)

        scalar = np.ndim(x) == 0
        x = np.atleast_1d(np.asarray(x, dtype=np.float64))
        y = np.full(x.shape, np.nan)
        for k, branch in enumerate(self._branches):
            a, b = branch.domain
            mask = (x >= a.mid()) & ((x < b.mid()) if k < len(self._branches) - 1 else (x <= b.mid()))
            if np.any(mask):
                y[mask] = branch.f(x[mask], translator)
        return float(y[0]) if scalar else y

    def _evaluate_interval(self, x, translator):
        """
        Hull of the branch images over all the branch domains that x intersects.
        Note that this ignores discontinuities between branches.
        """
        values = []
        for branch in self._branches:
            restricted = x.intersect(branch.domain[0].hull(branch.domain[1]))
            if restricted is not None:
                values.append(branch.f(restricted, translator))
        if not values:
            raise ValueError(f"{x} does not intersect the domain of {self}")
        return Interval.hull_of(values)

    def __repr__(self):
        return f"Piecewise-defined dynamic with {self.nbranches()} branches"


def _affine(slope, offset):
    def f(x, translator):
        return slope * x + offset
    return f


class MultiplicationMap(PiecewiseMap):
    """The map x -> k x mod 1 on [0, 1], with k full branches."""

    def __init__(self, k=2):
        if k < 1:
            raise ValueError("k must be a positive integer")
        self.k = k
        self.system_name = f"MultiplicationMap{k}"
        endpoints = [Interval.fraction(j, k) for j in range(k + 1)]
        functions = [_affine(k, -j) for j in range(k)]
        super().__init__(functions, endpoints, y_endpoints=[(0.0, 1.0)] * k)


class LanfordMap(PiecewiseMap):
    """
    The map x -> 2x + x(1-x)/2 mod 1 on [0, 1].

    It has two full increasing branches, separated at the root of x^2 - 5x + 2,
    c = (5 - sqrt(17)) / 2.
    """

    def __init__(self):
        self.system_name = "LanfordMap"
        translator = IntervalTranslator()
        c = (5 - translator.sqrt(Interval(17.0))) / 2

        def lanford(offset):
            def f(x, translator):
                return 2 * x + x * (1 - x) / 2 - offset
            return f

        super().__init__([lanford(0), lanford(1)], [0.0, c, 1.0], y_endpoints=[(0.0, 1.0), (0.0, 1.0)])


class TentMap(PiecewiseMap):
    """
    The tent map x -> slope * min(x, 1 - x) on [0, 1]. Both branches are full
    only for slope == 2.
    """

    def __init__(self, slope=2.0):
        if not 0 < slope <= 2:
            raise ValueError("slope must be in (0, 2]")
        self.slope = slope
        self.system_name = "TentMap"

        def left(x, translator):
            return slope * x

        def right(x, translator):
            return slope * (1 - x)

        super().__init__([left, right], [0.0, 0.5, 1.0])


class ComposedDynamic(Dynamic):
    """
    Composed map D1 ∘ D2 ∘ D3, stored as (D1, D2, D3) in this order.
    """

    def __init__(self, *dyns):
        self.dyns = tuple(dyns)

    def compute_dynamics(self, x, translator):
        for dynamic in reversed(self.dyns):
            x = dynamic.compute_dynamics(x, translator)
        return x

    def domain(self):
        if not self.dyns:
            raise ValueError("The empty composition has no domain")
        return self.dyns[-1].domain()

    def is_full_branch(self):
        return all(dynamic.is_full_branch() for dynamic in self.dyns)

    def __repr__(self):
        return f"ComposedDynamic({', '.join(repr(d) for d in self.dyns)})"


def compose(*dyns):
    """
    D1 ∘ D2 ∘ ... ; flattens nested compositions.
    """
    flat = []
    for dynamic in dyns:
        if isinstance(dynamic, ComposedDynamic):
            flat.extend(dynamic.dyns)
        else:
            flat.append(dynamic)
    return ComposedDynamic(*flat)
