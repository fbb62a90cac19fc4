import numpy as np


class NumpyTranslator:
    """
    Plain floating point evaluation of a map written as ``f(x, translator)``.
    Results carry no guarantee; this is used for pointwise evaluation only, e.g.
    ``Dynamic.__call__`` on floats and arrays.
    """

    def sin(self, a):
        return np.sin(a)

    def cos(self, a):
        return np.cos(a)

    def exp(self, a):
        return np.exp(a)

    def log(self, a):
        return np.log(a)

    def sqrt(self, a):
        return np.sqrt(a)

    def pow(self, a, b):
        """
        Element-wise power

        :param a: np.ndarray of floats
        :param b: int

        :return: np.ndarray of floats
        """
        return np.power(a, b)

    def abs(self, a):
        return np.abs(a)

    def min(self, a, b):
        """Element-wise minimum, broadcasting scalars."""
        return np.minimum(a, b)

    def max(self, a, b):
        """Element-wise maximum, broadcasting scalars."""
        return np.maximum(a, b)

    def to_format(self, a):
        return np.asarray(a, dtype=np.float64)
