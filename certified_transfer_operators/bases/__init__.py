from .basis import Basis
from .chebyshev import Chebyshev, ChebyshevSeries, chebyshev_points, clenshaw, clenshaw_backward
from .hat import Hat, HatFunctionOnTorus, IntervalOnTorus
from .ulam import Ulam

__all__ = [
    "Basis",
    "Chebyshev",
    "ChebyshevSeries",
    "chebyshev_points",
    "clenshaw",
    "clenshaw_backward",
    "Hat",
    "HatFunctionOnTorus",
    "IntervalOnTorus",
    "Ulam",
]
