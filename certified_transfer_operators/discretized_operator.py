import abc


class DiscretizedOperator(abc.ABC):
    def __init__(self, L):
        self.L = L

    @abc.abstractmethod
    def is_integral_preserving(self) -> bool:
        pass

    def size(self):
        return self.L.shape[0]

    def correction(self):
        raise ValueError("No integral correction for an integral preserving operator.")


class IntegralPreservingDiscretizedOperator(DiscretizedOperator):
    def is_integral_preserving(self) -> bool:
        return True

    def __repr__(self):
        return f"Integral preserving operator: {self.L}"


class NonIntegralPreservingDiscretizedOperator(DiscretizedOperator):
    """
    The operator L + e w, which preserves the integral f, is represented lazily by
    the triple (L, e, w).
    """

    def __init__(self, L, e, w):
        super().__init__(L)
        if not len(e) == len(w) == L.shape[0]:
            raise ValueError("e and w must have one entry per basis element")
        self.e = e
        self.w = w

    def is_integral_preserving(self) -> bool:
        return False

    def correction(self):
        return self.e, self.w

    def __repr__(self):
        return f"Non integral preserving operator: {self.L}"
