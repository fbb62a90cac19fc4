from .numpy_translator import NumpyTranslator
from .interval_translator import Interval, IntervalTranslator, imax, imin
from .derivative_translator import CertifiedDerivative, DerivativeTranslator, derivative

__all__ = [
    "NumpyTranslator",
    "Interval",
    "IntervalTranslator",
    "imax",
    "imin",
    "CertifiedDerivative",
    "DerivativeTranslator",
    "derivative",
]
