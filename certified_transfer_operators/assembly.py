"""
Assembly of the discretized transfer operator from the dual of a basis.
"""
import logging
from functools import partial

import numpy as np
from scipy import sparse

from .discretized_operator import IntegralPreservingDiscretizedOperator, NonIntegralPreservingDiscretizedOperator
from .executors import SinglethreadExecutor
from .translators import Interval

logger = logging.getLogger(__name__)


class IntervalSparseMatrix:
    """
    A sparse matrix with interval entries, stored as two scipy.sparse CSR matrices
    holding the lower and upper bounds of the entries. Entries that are not stored
    are exactly zero.
    """

    def __init__(self, entries, shape):
        """
        :param entries: dict mapping (i, j) to an Interval
        :param shape: (rows, columns)
        """
        self.shape = tuple(shape)
        keys = sorted(entries)
        self.rows = np.array([i for i, _ in keys], dtype=np.int64)
        self.cols = np.array([j for _, j in keys], dtype=np.int64)
        self.entries = [entries[key] for key in keys]

        lo = np.array([v.lo for v in self.entries], dtype=np.float64)
        hi = np.array([v.hi for v in self.entries], dtype=np.float64)
        self.lower = sparse.csr_matrix((lo, (self.rows, self.cols)), shape=self.shape)
        self.upper = sparse.csr_matrix((hi, (self.rows, self.cols)), shape=self.shape)
        self._index = {key: k for k, key in enumerate(keys)}

    @property
    def nnz(self):
        return len(self.entries)

    def __getitem__(self, index):
        i, j = index
        k = self._index.get((i, j))
        if k is None:
            return Interval(0.0)
        return self.entries[k]

    def __iter__(self):
        """Iterate over the stored (i, j, value) triples in row-major order."""
        return zip(self.rows.tolist(), self.cols.tolist(), self.entries)

    def todense(self):
        """(lower, upper) dense numpy arrays."""
        return self.lower.toarray(), self.upper.toarray()

    def contains(self, M):
        """True if every entry of the dense matrix M lies in the corresponding entry."""
        M = np.asarray(M, dtype=np.float64)
        if M.shape != self.shape:
            raise ValueError(f"Shape mismatch: {M.shape} != {self.shape}")
        lower, upper = self.todense()
        return bool(np.all(lower <= M) and np.all(M <= upper))

    def row_sums(self):
        sums = [Interval(0.0)] * self.shape[0]
        for i, _, value in self:
            sums[i] = sums[i] + value
        return sums

    def column_sums(self):
        sums = [Interval(0.0)] * self.shape[1]
        for _, j, value in self:
            sums[j] = sums[j] + value
        return sums

    def rmatvec(self, covector):
        """
        The covector-matrix product f·L, in interval arithmetic.
        """
        if len(covector) != self.shape[0]:
            raise ValueError(f"Covector of length {len(covector)} for a matrix of shape {self.shape}")
        result = [Interval(0.0)] * self.shape[1]
        for i, j, value in self:
            result[j] = result[j] + covector[i] * value
        return result

    def max_width(self):
        if not self.entries:
            return 0.0
        return max(value.diam() for value in self.entries)

    def __repr__(self):
        return f"IntervalSparseMatrix(shape={self.shape}, nnz={self.nnz})"


def _accumulate(entries, i, j, value):
    previous = entries.get((i, j))
    entries[(i, j)] = value if previous is None else previous + value


def _assemble_shard(shard, basis):
    n = len(basis)
    entries = {}
    for i, dual_element in shard:
        if basis.is_dual_element_empty(dual_element):
            continue
        for j, value in basis.project_dual_element(dual_element):
            _accumulate(entries, i, j % n, value)
    return entries


def _shards(items, num_shards):
    bounds = np.linspace(0, len(items), num_shards + 1).astype(int)
    return [items[start:stop] for start, stop in zip(bounds[:-1], bounds[1:]) if stop > start]


def assemble(basis, dynamic, epsilon=0.0, executor=None):
    """
    Assemble the matrix L of the transfer operator of the dynamic in the basis.

    For each element (i, cell data) of the dual, the contributions (j, value) of
    the basis elements whose support meets the cell are accumulated into L[i, j mod n],
    then the basis maps the rows from dual labels to coefficients.

    L acts on coefficient vectors v as L v, so integral preservation reads f·L = f
    for the integral covector f: for Ulam every column of L sums to 1, while the
    rows sum to 1 only for maps preserving the Lebesgue measure.

    :return: IntervalSparseMatrix of shape (n, n)
    """
    if executor is None:
        executor = SinglethreadExecutor()
    n = len(basis)

    dual = list(basis.dual(dynamic, epsilon, executor))
    shards = _shards(dual, max(1, min(executor.num_shards, len(dual))))
    results = executor.map(partial(_assemble_shard, basis=basis), shards, desc="Assembly")

    entries = {}
    for shard_entries in results:
        for (i, j), value in shard_entries.items():
            _accumulate(entries, i, j, value)

    L = IntervalSparseMatrix(basis.dual_rows_to_coefficients(entries), (n, n))
    logger.debug("assembled %s from %d dual elements", L, len(dual))
    return L


def discretized_operator(basis, dynamic, epsilon=0.0, executor=None):
    """
    Discretize the transfer operator of the dynamic in the basis.

    If the basis does not preserve the integral, the result carries the integral
    covector f, the coefficients e of the constant function and the defect
    w = f - f·L, which restores integral preservation downstream.
    """
    L = assemble(basis, dynamic, epsilon, executor)
    if basis.is_integral_preserving():
        return IntegralPreservingDiscretizedOperator(L)

    f = basis.integral_covector()
    e = basis.one_vector()
    fL = L.rmatvec(f)
    w = [f_j - fL_j for f_j, fL_j in zip(f, fL)]
    return NonIntegralPreservingDiscretizedOperator(L, e, w)
