import math
import numpy as np


_SPLITTER = 134217729.0  # 2^27 + 1, Veltkamp splitting constant for float64
_MAX_FLOAT = np.finfo(np.float64).max

# Outside of this range the error-free transformations below may overflow or lose
# the error term to underflow, so we fall back to widening by one ulp on each side.
_SAFE_HIGH = 1e300
_SAFE_LOW = 1e-290


def _prev(a):
    return float(np.nextafter(a, -np.inf))


def _next(a):
    return float(np.nextafter(a, np.inf))


def _two_sum(a, b):
    """
    Knuth's TwoSum: s = fl(a + b) and the exact error e, so that a + b = s + e.
    """
    s = a + b
    bb = s - a
    err = (a - (s - bb)) + (b - bb)
    return s, err


def _split(a):
    c = _SPLITTER * a
    high = c - (c - a)
    return high, a - high


def _two_product(a, b):
    """
    Dekker's TwoProduct: p = fl(a * b) and the exact error e, so that a * b = p + e.
    """
    p = a * b
    a_high, a_low = _split(a)
    b_high, b_low = _split(b)
    err = ((a_high * b_high - p) + a_high * b_low + a_low * b_high) + a_low * b_low
    return p, err


def _is_safe(*values):
    for v in values:
        if v != 0.0 and not (_SAFE_LOW < abs(v) < _SAFE_HIGH):
            return False
    return True


def _directed(value, err, direction):
    """
    Round the exact quantity value + err (with |err| <= ulp(value) / 2) towards
    -inf (direction < 0) or +inf (direction > 0).
    """
    if direction < 0:
        return value if err >= 0 else _prev(value)
    return value if err <= 0 else _next(value)


def add_rounded(a, b, direction):
    if not (math.isfinite(a) and math.isfinite(b)):
        s = a + b
        if math.isnan(s):
            return -math.inf if direction < 0 else math.inf
        return s
    s, err = _two_sum(a, b)
    if math.isinf(s):
        # Overflow of two finite numbers
        if direction < 0 and s > 0:
            return float(_MAX_FLOAT)
        if direction > 0 and s < 0:
            return -float(_MAX_FLOAT)
        return s
    return _directed(s, err, direction)


def mul_rounded(a, b, direction):
    if a == 0.0 or b == 0.0:
        # Interval convention: 0 * inf = 0
        return 0.0
    if not (math.isfinite(a) and math.isfinite(b)):
        return a * b
    p = a * b
    if not _is_safe(a, b, p) or p == 0.0:
        return _prev(p) if direction < 0 else _next(p)
    p, err = _two_product(a, b)
    return _directed(p, err, direction)


def div_rounded(a, b, direction):
    if b == 0.0:
        raise ZeroDivisionError("Division by an exact zero endpoint.")
    if a == 0.0:
        return 0.0
    if not (math.isfinite(a) and math.isfinite(b)):
        return a / b
    q = a / b
    if _is_safe(a, b, q) and q != 0.0:
        p, err = _two_product(q, b)
        if p == a and err == 0.0:
            return q
    return _prev(q) if direction < 0 else _next(q)


def sqrt_rounded(a, direction):
    r = math.sqrt(a)
    if r == 0.0 or math.isinf(r):
        return r
    if _is_safe(r, a):
        p, err = _two_product(r, r)
        if p == a and err == 0.0:
            return r
    return _prev(r) if direction < 0 else _next(r)


def _widen(lo, hi, ulps=2):
    """
    Outward widening for libm functions, which are faithful but not correctly rounded.
    """
    for _ in range(ulps):
        lo, hi = _prev(lo), _next(hi)
    return lo, hi


class Interval:
    """
    A closed interval [lo, hi] of real numbers with outward rounded arithmetic.

    Every arithmetic operation returns an enclosure of the exact result set: sums,
    products, quotients and square roots are rounded in the outward direction
    using error-free transformations, so results that are representable stay thin.

    Comparison operators other than == are deliberately not defined; use the
    ordering predicates of :mod:`certified_transfer_operators.ordering`.
    ``==`` is set equality of the endpoints.
    """

    __slots__ = ("lo", "hi")

    def __init__(self, lo, hi=None):
        if isinstance(lo, Interval):
            if hi is None:
                lo, hi = lo.lo, lo.hi
            else:
                lo = lo.lo
        if isinstance(hi, Interval):
            hi = hi.hi
        if hi is None:
            hi = lo
        lo, hi = float(lo), float(hi)
        if math.isnan(lo) or math.isnan(hi) or lo > hi:
            raise ValueError(f"Invalid interval: [{lo}, {hi}]")
        # avoid signed zero issues in searches and comparisons
        if lo == 0.0:
            lo = 0.0
        if hi == 0.0:
            hi = 0.0
        object.__setattr__(self, "lo", lo)
        object.__setattr__(self, "hi", hi)

    def __setattr__(self, name, value):
        raise AttributeError("Interval is immutable")

    def __reduce__(self):
        return (Interval, (self.lo, self.hi))

    @staticmethod
    def convert(value):
        if isinstance(value, Interval):
            return value
        if isinstance(value, (int, float, np.integer, np.floating)):
            return Interval(value)
        return None

    @staticmethod
    def hull_of(values):
        values = [Interval(v) for v in values]
        return Interval(min(v.lo for v in values), max(v.hi for v in values))

    @staticmethod
    def fraction(numerator, denominator):
        """
        Enclosure of numerator / denominator; thin whenever the quotient is a float.
        """
        return Interval(numerator) / Interval(denominator)

    @staticmethod
    def pi():
        # math.pi is the float just below pi
        return Interval(math.pi, _next(math.pi))

    @staticmethod
    def entire():
        return Interval(-math.inf, math.inf)

    def mid(self):
        if math.isinf(self.lo) or math.isinf(self.hi):
            if self.lo == -math.inf and self.hi == math.inf:
                return 0.0
            return self.lo if math.isinf(self.hi) else self.hi
        m = self.lo + (self.hi - self.lo) / 2
        return min(max(m, self.lo), self.hi)

    def diam(self):
        return add_rounded(self.hi, -self.lo, 1)

    def isthin(self):
        return self.lo == self.hi

    def contains(self, value):
        if isinstance(value, Interval):
            return self.lo <= value.lo and value.hi <= self.hi
        return self.lo <= value <= self.hi

    def contains_zero(self):
        return self.lo <= 0.0 <= self.hi

    def intersects(self, other):
        other = Interval(other)
        return max(self.lo, other.lo) <= min(self.hi, other.hi)

    def intersect(self, other):
        """
        Intersection of two intervals; None if it is empty.
        """
        other = Interval(other)
        lo, hi = max(self.lo, other.lo), min(self.hi, other.hi)
        if lo > hi:
            return None
        return Interval(lo, hi)

    def hull(self, other):
        other = Interval(other)
        return Interval(min(self.lo, other.lo), max(self.hi, other.hi))

    def __eq__(self, other):
        other = Interval.convert(other)
        if other is None:
            return NotImplemented
        return self.lo == other.lo and self.hi == other.hi

    def __hash__(self):
        return hash((self.lo, self.hi))

    def __repr__(self):
        return f"Interval({self.lo!r}, {self.hi!r})"

    def __str__(self):
        return f"[{self.lo}, {self.hi}]"

    def __neg__(self):
        return Interval(-self.hi, -self.lo)

    def __pos__(self):
        return self

    def __abs__(self):
        if self.lo >= 0:
            return self
        if self.hi <= 0:
            return -self
        return Interval(0.0, max(-self.lo, self.hi))

    def __add__(self, other):
        other = Interval.convert(other)
        if other is None:
            return NotImplemented
        return Interval(add_rounded(self.lo, other.lo, -1), add_rounded(self.hi, other.hi, 1))

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        other = Interval.convert(other)
        if other is None:
            return NotImplemented
        return Interval(add_rounded(self.lo, -other.hi, -1), add_rounded(self.hi, -other.lo, 1))

    def __rsub__(self, other):
        other = Interval.convert(other)
        if other is None:
            return NotImplemented
        return other.__sub__(self)

    def __mul__(self, other):
        other = Interval.convert(other)
        if other is None:
            return NotImplemented
        pairs = [(self.lo, other.lo), (self.lo, other.hi), (self.hi, other.lo), (self.hi, other.hi)]
        lo = min(mul_rounded(a, b, -1) for a, b in pairs)
        hi = max(mul_rounded(a, b, 1) for a, b in pairs)
        return Interval(lo, hi)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        other = Interval.convert(other)
        if other is None:
            return NotImplemented
        if other.contains_zero():
            return Interval.entire()
        pairs = [(self.lo, other.lo), (self.lo, other.hi), (self.hi, other.lo), (self.hi, other.hi)]
        lo = min(div_rounded(a, b, -1) for a, b in pairs)
        hi = max(div_rounded(a, b, 1) for a, b in pairs)
        return Interval(lo, hi)

    def __rtruediv__(self, other):
        other = Interval.convert(other)
        if other is None:
            return NotImplemented
        return other.__truediv__(self)

    def __pow__(self, exponent):
        if not isinstance(exponent, (int, np.integer)):
            raise TypeError("Only integer powers of intervals are supported")
        exponent = int(exponent)
        if exponent == 0:
            return Interval(1.0)
        if exponent < 0:
            return Interval(1.0) / (self ** (-exponent))
        if exponent % 2 == 1:
            return Interval(_thin_power(self.lo, exponent).lo, _thin_power(self.hi, exponent).hi)
        magnitude = abs(self)
        return Interval(_thin_power(magnitude.lo, exponent).lo, _thin_power(magnitude.hi, exponent).hi)


def _thin_power(value, exponent):
    result = Interval(value)
    base = Interval(value)
    for _ in range(exponent - 1):
        result = result * base
    return result


def imin(a, b):
    a, b = Interval(a), Interval(b)
    return Interval(min(a.lo, b.lo), min(a.hi, b.hi))


def imax(a, b):
    a, b = Interval(a), Interval(b)
    return Interval(max(a.lo, b.lo), max(a.hi, b.hi))


class IntervalTranslator:
    """
    Evaluates a map written as ``f(x, translator)`` over intervals, returning
    guaranteed enclosures of the image.
    """

    def sin(self, a):
        """
        Element-wise sine

        :param a: Interval

        :return: Interval enclosing sin(a)
        """
        a = Interval(a)
        two_pi = 2 * math.pi
        if a.diam() >= two_pi:
            return Interval(-1.0, 1.0)
        lo, hi = sorted((math.sin(a.lo), math.sin(a.hi)))
        lo, hi = _widen(lo, hi)

        # A crest (sin = 1) lies in [a.lo, a.hi] if an integer k satisfies
        # a.lo <= pi/2 + 2k pi <= a.hi. The slack makes the test conservative.
        slack = 1e-12
        k_low = math.ceil((a.lo - math.pi / 2) / two_pi - slack)
        k_high = math.floor((a.hi - math.pi / 2) / two_pi + slack)
        if k_low <= k_high:
            hi = 1.0
        k_low = math.ceil((a.lo + math.pi / 2) / two_pi - slack)
        k_high = math.floor((a.hi + math.pi / 2) / two_pi + slack)
        if k_low <= k_high:
            lo = -1.0
        return Interval(max(lo, -1.0), min(hi, 1.0))

    def cos(self, a):
        """
        Element-wise cosine

        :param a: Interval

        :return: Interval enclosing cos(a)
        """
        a = Interval(a)
        two_pi = 2 * math.pi
        if a.diam() >= two_pi:
            return Interval(-1.0, 1.0)
        lo, hi = sorted((math.cos(a.lo), math.cos(a.hi)))
        lo, hi = _widen(lo, hi)

        slack = 1e-12
        # crest at 2k pi
        k_low = math.ceil(a.lo / two_pi - slack)
        k_high = math.floor(a.hi / two_pi + slack)
        if k_low <= k_high:
            hi = 1.0
        # trough at pi + 2k pi
        k_low = math.ceil((a.lo - math.pi) / two_pi - slack)
        k_high = math.floor((a.hi - math.pi) / two_pi + slack)
        if k_low <= k_high:
            lo = -1.0
        return Interval(max(lo, -1.0), min(hi, 1.0))

    def exp(self, a):
        a = Interval(a)
        lo, hi = _widen(_safe_exp(a.lo), _safe_exp(a.hi))
        return Interval(max(lo, 0.0), hi)

    def log(self, a):
        a = Interval(a)
        if a.hi <= 0:
            raise ValueError("Logarithm domain error: the interval must contain positive numbers")
        lo = math.log(a.lo) if a.lo > 0 else -math.inf
        hi = math.log(a.hi) if math.isfinite(a.hi) else math.inf
        return Interval(*_widen(lo, hi))

    def sqrt(self, a):
        a = Interval(a)
        if a.hi < 0:
            raise ValueError("Square root domain error: the interval must contain non-negative numbers")
        return Interval(sqrt_rounded(max(a.lo, 0.0), -1), sqrt_rounded(a.hi, 1))

    def pow(self, a, exponent):
        return Interval(a) ** exponent

    def abs(self, a):
        return abs(Interval(a))

    def min(self, a, b):
        return imin(a, b)

    def max(self, a, b):
        return imax(a, b)

    def to_format(self, a):
        return Interval(a)


def _safe_exp(value):
    try:
        return math.exp(value)
    except OverflowError:
        return math.inf
