import logging
import os
import sys

import pytest

# Add the parent directory to the path to import the module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from certified_transfer_operators import (
    Chebyshev,
    Hat,
    IncompleteBranchError,
    LanfordMap,
    MultiplicationMap,
    TentMap,
    Ulam,
    discretize,
)


class TestDiscretize:
    def test_single_thread(self):
        operator = discretize(Ulam.equispaced(32), LanfordMap())
        assert operator.is_integral_preserving()
        assert operator.size() == 32
        assert all(s.contains(1.0) for s in operator.L.column_sums())

    def test_multithread(self):
        single = discretize(Ulam.equispaced(32), MultiplicationMap(3))
        multi = discretize(Ulam.equispaced(32), MultiplicationMap(3), num_workers=2)
        assert list(multi.L) == list(single.L)

    def test_hat(self):
        operator = discretize(Hat.equispaced(16), LanfordMap(), num_workers=2)
        assert not operator.is_integral_preserving()
        e, w = operator.correction()
        assert len(e) == len(w) == 16
        assert operator.L.max_width() < 1e-10

    def test_chebyshev(self):
        operator = discretize(Chebyshev(8), TentMap(), num_workers=2)
        assert not operator.is_integral_preserving()
        assert operator.size() == 9
        assert all(value.contains(0.0) for value in operator.w)

    def test_tolerance(self):
        exact = discretize(Ulam.equispaced(16), LanfordMap())
        coarse = discretize(Ulam.equispaced(16), LanfordMap(), epsilon=1e-6)
        assert coarse.L.max_width() > exact.L.max_width()
        assert all(s.contains(1.0) for s in coarse.L.column_sums())

    def test_incomplete_branches(self):
        # Ulam's method does not need derivatives
        operator = discretize(Ulam.equispaced(16), TentMap(1.5))
        assert all(s.contains(1.0) for s in operator.L.column_sums())
        with pytest.raises(IncompleteBranchError):
            discretize(Hat.equispaced(16), TentMap(1.5))

    def test_invalid_workers(self):
        with pytest.raises(ValueError):
            discretize(Ulam.equispaced(4), LanfordMap(), num_workers=-1)

    def test_logging(self, caplog):
        caplog.set_level(logging.INFO, logger="certified_transfer_operators.discretize")
        discretize(Ulam.equispaced(8), MultiplicationMap(2))
        assert "non-zeros" in caplog.text
