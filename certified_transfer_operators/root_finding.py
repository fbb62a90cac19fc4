"""
Guaranteed preimages of a level under a monotone function.
"""
import logging

from .exceptions import CertificationError
from .ordering import precedes
from .translators import Interval, IntervalTranslator

logger = logging.getLogger(__name__)


def _bisect(lo, hi, moves_right, epsilon):
    """
    Monotone bisection on the floats of [lo, hi]: keep [mid, hi] where
    moves_right(mid) holds, [lo, mid] otherwise. Stops when the bracket is not wider
    than epsilon or lo and hi are adjacent floats.
    """
    while hi - lo > epsilon:
        mid = lo + (hi - lo) / 2
        if not lo < mid < hi:
            break
        if moves_right(mid):
            lo = mid
        else:
            hi = mid
    return lo, hi


def preimage(y, f, search_range, epsilon=0.0, increasing=None, translator=None):
    """
    Enclosure of the point where the monotone function f crosses the level y inside
    search_range.

    The lower end is the largest point where f is certainly on the near side of y,
    the upper end the smallest point where f is certainly on the far side; both are
    found by independent bisections, so the result is correct for wide y and for
    interval valued evaluations of f. Levels that only partially overlap the image
    of search_range are clamped to its endpoints.

    :param y: the level (float or Interval)
    :param f: monotone function ``f(x, translator)``
    :param search_range: Interval bracketing the crossing
    :param epsilon: stop once the enclosure is not wider than epsilon (0 for maximal precision)
    :param increasing: orientation of f; inferred from the endpoint values if None
    :param translator: translator used to evaluate f, IntervalTranslator by default

    :return: Interval enclosing the crossing

    :raises CertificationError: when y certainly lies outside f(search_range), or the
        orientation cannot be certified
    """
    if translator is None:
        translator = IntervalTranslator()
    y = Interval(y)
    search_range = Interval(search_range)
    a, b = search_range.lo, search_range.hi

    def evaluate(point):
        return Interval(f(Interval(point), translator))

    f_a, f_b = evaluate(a), evaluate(b)
    if increasing is None:
        if precedes(f_a, f_b):
            increasing = True
        elif precedes(f_b, f_a):
            increasing = False
        else:
            raise CertificationError(
                f"Cannot certify the orientation of the function on {search_range}: f(a)={f_a}, f(b)={f_b}"
            )

    if increasing:
        def before(v):
            return precedes(v, y)

        def after(v):
            return precedes(y, v)
    else:
        def before(v):
            return precedes(y, v)

        def after(v):
            return precedes(v, y)

    if after(f_a) or before(f_b):
        raise CertificationError(
            f"Level {y} is certainly outside the image [{f_a}, {f_b}] of the search range {search_range}"
        )

    lower, _ = _bisect(a, b, lambda p: before(evaluate(p)), epsilon)
    _, upper = _bisect(lower, b, lambda p: not after(evaluate(p)), epsilon)

    logger.debug("preimage of %s in %s: [%r, %r]", y, search_range, lower, upper)
    return Interval(lower, upper)
