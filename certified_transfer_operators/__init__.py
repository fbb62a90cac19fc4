from .assembly import IntervalSparseMatrix, assemble, discretized_operator
from .bases import Chebyshev, Hat, Ulam
from .discretize import discretize
from .discretized_operator import IntegralPreservingDiscretizedOperator, NonIntegralPreservingDiscretizedOperator
from .dynamics import Branch, ComposedDynamic, Dynamic, LanfordMap, MultiplicationMap, PiecewiseMap, TentMap, compose
from .exceptions import CertificationError, IncompleteBranchError, UnsortedSequenceError
from .preimages import preimages, preimages_and_derivatives
from .translators import Interval

__all__ = [
    "IntervalSparseMatrix",
    "assemble",
    "discretized_operator",
    "Chebyshev",
    "Hat",
    "Ulam",
    "discretize",
    "IntegralPreservingDiscretizedOperator",
    "NonIntegralPreservingDiscretizedOperator",
    "Branch",
    "ComposedDynamic",
    "Dynamic",
    "LanfordMap",
    "MultiplicationMap",
    "PiecewiseMap",
    "TentMap",
    "compose",
    "CertificationError",
    "IncompleteBranchError",
    "UnsortedSequenceError",
    "preimages",
    "preimages_and_derivatives",
    "Interval",
]
