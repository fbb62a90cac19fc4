import numpy as np

from .interval_translator import Interval, IntervalTranslator, imin, imax


class CertifiedDerivative:
    """
    Represents a first-order expansion of a scalar map with certified enclosures.

    For a function f: R -> R evaluated over an interval X, the expansion holds
        value ⊇ f(X)
        derivative ⊇ f'(X)

    Operations follow the chain rule, with every quantity computed in outward
    rounded interval arithmetic, so the derivative of a branch at a preimage
    enclosure is itself a guaranteed enclosure.

    Attributes:
        value (Interval): enclosure of the function values
        derivative (Interval): enclosure of the derivative values
    """

    __slots__ = ("value", "derivative")

    def __init__(self, value, derivative=None):
        self.value = Interval(value)
        self.derivative = Interval(0.0) if derivative is None else Interval(derivative)

    @staticmethod
    def _lift(other):
        if isinstance(other, CertifiedDerivative):
            return other
        if isinstance(other, (Interval, int, float, np.integer, np.floating)):
            # constants have zero derivative
            return CertifiedDerivative(other)
        return None

    def __add__(self, other):
        """
        For f(x) = g(x) + h(x): f' = g' + h'
        """
        other = self._lift(other)
        if other is None:
            return NotImplemented
        return CertifiedDerivative(self.value + other.value, self.derivative + other.derivative)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        return CertifiedDerivative(self.value - other.value, self.derivative - other.derivative)

    def __rsub__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        return other.__sub__(self)

    def __mul__(self, other):
        """
        Product rule: (gh)' = g'h + gh'
        """
        other = self._lift(other)
        if other is None:
            return NotImplemented
        return CertifiedDerivative(
            self.value * other.value,
            self.derivative * other.value + self.value * other.derivative,
        )

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        """
        Quotient rule: (g/h)' = (g'h - gh') / h^2

        Raises:
            ZeroDivisionError: if the range of h contains zero
        """
        other = self._lift(other)
        if other is None:
            return NotImplemented
        if other.value.contains_zero():
            raise ZeroDivisionError("Division by an expansion whose range contains zero.")
        return CertifiedDerivative(
            self.value / other.value,
            (self.derivative * other.value - self.value * other.derivative) / (other.value ** 2),
        )

    def __rtruediv__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        return other.__truediv__(self)

    def __neg__(self):
        return CertifiedDerivative(-self.value, -self.derivative)

    def __pow__(self, exponent):
        return DerivativeTranslator().pow(self, exponent)

    def __repr__(self):
        return f"CertifiedDerivative(value={self.value}, derivative={self.derivative})"


class DerivativeTranslator:
    def __init__(self):
        self._intervals = IntervalTranslator()

    def sin(self, a: CertifiedDerivative):
        return CertifiedDerivative(self._intervals.sin(a.value), self._intervals.cos(a.value) * a.derivative)

    def cos(self, a: CertifiedDerivative):
        return CertifiedDerivative(self._intervals.cos(a.value), -self._intervals.sin(a.value) * a.derivative)

    def exp(self, a: CertifiedDerivative):
        exp_a = self._intervals.exp(a.value)
        return CertifiedDerivative(exp_a, exp_a * a.derivative)

    def log(self, a: CertifiedDerivative):
        if a.value.lo <= 0:
            raise ValueError("Logarithm domain error: range[0] must be greater than 0")
        return CertifiedDerivative(self._intervals.log(a.value), a.derivative / a.value)

    def sqrt(self, a: CertifiedDerivative):
        if a.value.lo <= 0:
            raise ValueError("Square root domain error: range[0] must be positive to differentiate")
        root = self._intervals.sqrt(a.value)
        return CertifiedDerivative(root, a.derivative / (2 * root))

    def pow(self, a, exponent_b):
        """
        Element-wise power with an integer exponent: (g^n)' = n g^(n-1) g'
        """
        assert isinstance(exponent_b, (int, np.integer)), "Exponent must be an integer"
        a = CertifiedDerivative._lift(a)
        if exponent_b == 0:
            return CertifiedDerivative(1.0)
        if exponent_b == 1:
            return a
        return CertifiedDerivative(
            a.value ** exponent_b,
            exponent_b * (a.value ** (exponent_b - 1)) * a.derivative,
        )

    def abs(self, a: CertifiedDerivative):
        if a.value.lo >= 0:
            return a
        if a.value.hi <= 0:
            return -a
        # not differentiable at 0: enclose both one-sided derivatives
        return CertifiedDerivative(abs(a.value), a.derivative.hull(-a.derivative))

    def min(self, a, b):
        a, b = CertifiedDerivative._lift(a), CertifiedDerivative._lift(b)
        if a.value.hi < b.value.lo:
            return a
        if b.value.hi < a.value.lo:
            return b
        return CertifiedDerivative(imin(a.value, b.value), a.derivative.hull(b.derivative))

    def max(self, a, b):
        a, b = CertifiedDerivative._lift(a), CertifiedDerivative._lift(b)
        if a.value.hi < b.value.lo:
            return b
        if b.value.hi < a.value.lo:
            return a
        return CertifiedDerivative(imax(a.value, b.value), a.derivative.hull(b.derivative))

    def to_format(self, x):
        """
        Initialize the computation with the expansion of the identity f(x) = x
        over the interval x.
        """
        return CertifiedDerivative(x, 1.0)


def derivative(f):
    """
    Return a function computing an enclosure of f' over an interval, where f is
    written as ``f(x, translator)``.
    """
    translator = DerivativeTranslator()

    def f_prime(x):
        result = f(translator.to_format(Interval(x)), translator)
        if isinstance(result, CertifiedDerivative):
            return result.derivative
        # f does not depend on x
        return Interval(0.0)

    return f_prime
