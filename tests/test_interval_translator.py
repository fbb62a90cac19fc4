import math
import os
import sys

import numpy as np
import pytest

# Add the parent directory to the path to import the module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from certified_transfer_operators.translators import Interval, IntervalTranslator, imax, imin
from certified_transfer_operators.translators.derivative_translator import (
    CertifiedDerivative,
    DerivativeTranslator,
    derivative,
)
from certified_transfer_operators.translators.numpy_translator import NumpyTranslator


class TestInterval:
    def test_initialization(self):
        """Test construction from floats, pairs and other intervals."""
        a = Interval(0.5)
        assert a.lo == 0.5 and a.hi == 0.5
        assert a.isthin()

        b = Interval(0.25, 0.75)
        assert b.lo == 0.25 and b.hi == 0.75
        assert Interval(b) == b

        # negative zero is normalized
        assert math.copysign(1.0, Interval(-0.0).lo) == 1.0

    def test_invalid(self):
        with pytest.raises(ValueError):
            Interval(1.0, 0.0)
        with pytest.raises(ValueError):
            Interval(float("nan"))

    def test_immutable(self):
        a = Interval(0.5)
        with pytest.raises(AttributeError):
            a.lo = 0.0

    def test_exact_operations_stay_thin(self):
        assert Interval(2.0) * Interval(3.0) == Interval(6.0)
        assert Interval(0.5) + Interval(0.25) == Interval(0.75)
        assert Interval.fraction(1, 4) == Interval(0.25)
        assert Interval.fraction(3, 8).isthin()

    def test_inexact_operations_are_enclosures(self):
        s = Interval(0.1) + Interval(0.2)
        assert not s.isthin()
        assert s.contains(0.1 + 0.2)
        assert s.diam() < 1e-15

        third = Interval.fraction(1, 3)
        assert not third.isthin()
        assert third.contains(1 / 3)
        assert (third * 3).contains(1.0)

    def test_multiplication(self):
        result = Interval(-1.0, 2.0) * Interval(3.0, 4.0)
        assert result == Interval(-4.0, 8.0)

        result = 2 * Interval(0.25, 0.5)
        assert result == Interval(0.5, 1.0)

    def test_subtraction(self):
        result = 1 - Interval(0.25, 0.5)
        assert result == Interval(0.5, 0.75)

        result = Interval(0.0, 1.0) - Interval(0.0, 1.0)
        assert result == Interval(-1.0, 1.0)

    def test_division(self):
        result = Interval(1.0, 2.0) / Interval(4.0)
        assert result == Interval(0.25, 0.5)

        # division by an interval containing zero gives the whole line
        result = 1 / Interval(-1.0, 1.0)
        assert result.lo == -math.inf and result.hi == math.inf

    def test_power(self):
        assert Interval(-2.0, 1.0) ** 2 == Interval(0.0, 4.0)
        assert Interval(-2.0, 1.0) ** 3 == Interval(-8.0, 1.0)
        assert Interval(3.0) ** 0 == Interval(1.0)
        with pytest.raises(TypeError):
            Interval(2.0) ** 0.5

    def test_set_operations(self):
        a = Interval(0.0, 0.5)
        b = Interval(0.25, 1.0)
        assert a.intersects(b)
        assert a.intersect(b) == Interval(0.25, 0.5)
        assert a.hull(b) == Interval(0.0, 1.0)
        assert Interval(0.0, 0.1).intersect(Interval(0.2, 0.3)) is None
        assert Interval.hull_of([0.3, Interval(0.1, 0.2), 0.5]) == Interval(0.1, 0.5)

    def test_imin_imax(self):
        a = Interval(0.0, 0.5)
        b = Interval(0.25, 1.0)
        assert imin(a, b) == Interval(0.0, 0.5)
        assert imax(a, b) == Interval(0.25, 1.0)
        assert imax(Interval(-1.0, 0.5), 0.0) == Interval(0.0, 0.5)

    def test_mid(self):
        assert Interval(0.0, 1.0).mid() == 0.5
        assert Interval(0.25, 0.25).mid() == 0.25


class TestIntervalTranslator:
    def setup_method(self):
        """Set up test fixtures."""
        self.translator = IntervalTranslator()

    def test_sqrt(self):
        assert self.translator.sqrt(Interval(4.0)) == Interval(2.0)

        root = self.translator.sqrt(Interval(2.0))
        assert root.contains(math.sqrt(2.0))
        assert (root * root).contains(2.0)

        with pytest.raises(ValueError):
            self.translator.sqrt(Interval(-2.0, -1.0))

    def test_sin(self):
        result = self.translator.sin(Interval(0.0, 3.0))
        assert result.hi == 1.0
        assert result.contains(math.sin(3.0))
        assert result.contains(0.0)

        result = self.translator.sin(Interval(0.0, 10.0))
        assert result == Interval(-1.0, 1.0)

    def test_cos(self):
        result = self.translator.cos(Interval(-0.1, 0.1))
        assert result.hi == 1.0
        assert result.contains(math.cos(0.1))

        result = self.translator.cos(Interval(3.0, 3.5))
        assert result.lo == -1.0

    def test_exp_log(self):
        result = self.translator.exp(Interval(0.0, 1.0))
        assert result.contains(1.0)
        assert result.contains(math.e)

        result = self.translator.log(Interval(1.0, math.e))
        assert result.contains(0.0)
        assert result.contains(1.0)

    def test_min_max(self):
        result = self.translator.min(Interval(0.0, 2.0), Interval(1.0))
        assert result == Interval(0.0, 1.0)
        result = self.translator.max(Interval(0.0, 2.0), Interval(1.0))
        assert result == Interval(1.0, 2.0)


class TestNumpyTranslator:
    def setup_method(self):
        self.translator = NumpyTranslator()

    def test_operations(self):
        x = self.translator.to_format([0.0, 0.25, 1.0])
        assert x.dtype == np.float64
        assert np.allclose(self.translator.sqrt(x), [0.0, 0.5, 1.0])
        assert np.allclose(self.translator.min(x, 0.5), [0.0, 0.25, 0.5])
        assert np.allclose(self.translator.max(x, 0.5), [0.5, 0.5, 1.0])


class TestCertifiedDerivative:
    def setup_method(self):
        """Set up test fixtures."""
        self.translator = DerivativeTranslator()
        self.x = self.translator.to_format(Interval(3.0))

    def test_initialization(self):
        assert self.x.value == Interval(3.0)
        assert self.x.derivative == Interval(1.0)

        constant = CertifiedDerivative(2.0)
        assert constant.derivative == Interval(0.0)

    def test_arithmetic(self):
        result = 2 * self.x + 1
        assert result.value == Interval(7.0)
        assert result.derivative == Interval(2.0)

        result = self.x * self.x
        assert result.value == Interval(9.0)
        assert result.derivative == Interval(6.0)

        result = 1 - self.x
        assert result.derivative == Interval(-1.0)

        result = 1 / self.x
        assert result.derivative.contains(-1 / 9)

    def test_chain_rule(self):
        result = self.translator.sin(self.translator.pow(self.x, 2))
        # d/dx sin(x^2) = 2x cos(x^2)
        assert result.derivative.contains(6 * math.cos(9.0))

        result = self.translator.exp(-self.x)
        assert result.derivative.contains(-math.exp(-3.0))

    def test_division_by_zero(self):
        zero = self.translator.to_format(Interval(-1.0, 1.0))
        with pytest.raises(ZeroDivisionError):
            self.x / zero


class TestDerivative:
    def test_derivative_of_maps(self):
        def square(x, translator):
            return translator.pow(x, 2)

        def lanford(x, translator):
            return 2 * x + x * (1 - x) / 2

        assert derivative(square)(Interval(3.0)) == Interval(6.0)
        # 2 + 1/2 - x
        assert derivative(lanford)(Interval(0.5)).contains(2.0)
        assert derivative(lanford)(Interval(0.0, 1.0)).contains(Interval(1.5, 2.5))

    def test_derivative_of_constant(self):
        def constant(x, translator):
            return 0.5

        assert derivative(constant)(Interval(0.3)) == Interval(0.0)
