"""
Compute preimages of monotonic sequences
"""
import logging
from functools import partial

from .dynamics import Branch, ComposedDynamic, Dynamic
from .exceptions import CertificationError, IncompleteBranchError
from .executors import SinglethreadExecutor
from .ordering import WeaklySortedSequence, first_overlapping, last_overlapping
from .root_finding import preimage
from .translators import Interval, derivative

logger = logging.getLogger(__name__)


def _clamp(index, ncells):
    return min(max(index, 0), ncells - 1)


def branch_preimages(y, branch, ylabel=None, epsilon=0.0, root_finder=preimage):
    """
    Construct preimages of an increasing sequence y under a monotonic branch defined
    on X = (a, b), propagating the labels ylabel.

    The sequence y subdivides the y-axis into semi-open cells [y[l], y[l+1]); each of
    them is identified by ylabel[l], and there are len(ylabel) cells (the last one
    ends at y[len(ylabel)] if it exists, at the end of the codomain otherwise). We
    construct an increasing sequence x that splits X into semi-open cells, with
    f([x[k], x[k+1])) ⊂ [y[l], y[l+1]) for a certain l, and set xlabel[k] = ylabel[l].

    In the simplest case where the branch is full, the points in x are preimages of
    the points in y, but in general x[0] is the start of the domain: points of y
    outside the range R = [f(a), f(b)] have no preimage. In the worst case no point
    has a preimage, because y[i] < R < y[i+1], and we return x = [a], xlabel = [ylabel[i]].

    x[0] always coincides with branch.domain[0], while branch.domain[1] is "the
    point after x[-1]" and is not stored, for easier composing. In this way x and
    xlabel have the same length.

    The array is filled with a bisection strategy that saves computations: if
    y ∈ [u, v], then f⁻¹(y) ∈ [f⁻¹(u), f⁻¹(v)] (paying attention to orientation), so
    we fill first the entries x[k] with higher dyadic valuation of k, and each root
    search is bracketed by already computed neighbours.

    :param y: weakly sorted sequence of floats or Intervals
    :param branch: Branch
    :param ylabel: labels of the cells of y, range(len(y)) by default
    :param epsilon: tolerance passed to the root finder
    :param root_finder: guaranteed root finder, see root_finding.preimage

    :return: (x, xlabel) lists of Intervals and labels
    """
    y = WeaklySortedSequence.of(y)
    ylabel = list(range(len(y)) if ylabel is None else ylabel)
    ncells = len(ylabel)
    if ncells == 0 or len(y) < ncells:
        raise ValueError(f"Need at least one cell and one point per label, got {len(y)} points and {ncells} labels")

    if branch.increasing:
        # smallest possible i such that f(a) is in the semi-open interval [y[i], y[i+1])
        i = _clamp(first_overlapping(y, branch.image[0]), ncells)
        # largest possible j such that f(b)-ε is in the semi-open interval [y[j], y[j+1])
        j = max(_clamp(last_overlapping(y, branch.image[1]), ncells), i)
        xlabel = ylabel[i:j + 1]

        def target(k):
            return y[i + k]
    else:
        i = _clamp(last_overlapping(y, branch.image[0]), ncells)
        j = min(_clamp(first_overlapping(y, branch.image[1]), ncells), i)
        xlabel = ylabel[j:i + 1][::-1]

        def target(k):
            return y[i + 1 - k]

    n = len(xlabel)
    x = [None] * n
    x[0] = branch.domain[0]
    if n == 1:
        return x, xlabel

    # The bisection strategy: fill the array in "strides" of length `stride`, then halve the stride and repeat.
    # For instance, if the array is 0..12 (with x[0] filled in already), we first take stride=8 and fill in x[8],
    # then stride=4 and fill in x[4], x[12] (the distance is 2*stride, since x[8], and in general all the
    # even multiples of `stride`, are already filled in),
    # then stride=2 and fill in x[2], x[6], x[10],
    # then stride=1 and fill in x[1], x[3], x[5], x[7], x[9], x[11].
    # At each step the preimage is bracketed by the already computed x[k-stride] and x[k+stride].
    stride = 1 << ((n - 1).bit_length() - 1)
    while stride >= 1:
        for k in range(stride, n, 2 * stride):
            right = x[k + stride] if k + stride < n else branch.domain[1]
            search_range = Interval(x[k - stride].lo, right.hi)
            try:
                x[k] = root_finder(target(k), branch.f, search_range, epsilon, increasing=branch.increasing)
            except CertificationError as e:
                raise CertificationError(
                    f"Cannot certify the preimage of y[{i + k if branch.increasing else i + 1 - k}] = {target(k)} "
                    f"(target cell label {xlabel[k]}) under the branch on {branch.domain}"
                ) from e
        stride //= 2

    return x, xlabel


def branch_derivatives(branch, x):
    """
    Enclosures of f'(x[k]) for the preimages x of a branch.
    """
    f_prime = derivative(branch.f)
    return [f_prime(point) for point in x]


def _sorted_envelope(x):
    """
    Tighten enclosures of an ordered sequence of points so that their bounds are
    weakly sorted: the true points satisfy x[k-1] <= x[k] <= x[k+1], so the lower
    bounds may be raised to a running maximum and the upper bounds lowered to a
    running minimum without losing any of them. Independent bisections with
    interval evaluations do not guarantee this order by themselves.
    """
    lo = [point.lo for point in x]
    hi = [point.hi for point in x]
    for k in range(1, len(x)):
        lo[k] = max(lo[k], lo[k - 1])
    for k in range(len(x) - 2, -1, -1):
        hi[k] = min(hi[k], hi[k + 1])
    return [Interval(a, b) for a, b in zip(lo, hi)]


def _branches(dynamic):
    if isinstance(dynamic, Branch):
        return [dynamic]
    return dynamic.branches()


def _fold_branch(branch, y, ylabel, epsilon, derivative_step, root_finder):
    x, xlabel = branch_preimages(y, branch, ylabel, epsilon, root_finder)
    x_prime = derivative_step(branch, x) if derivative_step is not None else None
    logger.debug("branch on %s: %d preimages", branch.domain, len(x))
    return x, xlabel, x_prime


def _fold(y, dynamic, ylabel, epsilon, derivative_step, executor, root_finder):
    """
    Preimages (and optionally derivatives) of y under a dynamic.

    A piecewise dynamic is the concatenation, in branch order, of the per-branch
    results; these still form an increasing sequence splitting the domain into
    cells, each mapped into a cell of y.

    A composed dynamic D1 ∘ D2 ∘ ... is handled stage by stage, outer map first:
    each stage is labelled with range(len(z)), so the returned index selects the
    accumulated labels and derivatives of the previous stage.
    """
    if isinstance(dynamic, ComposedDynamic):
        z = y
        zlabel = list(range(len(y)) if ylabel is None else ylabel)
        z_prime = [Interval(1.0)] * len(zlabel) if derivative_step is not None else None
        for stage in dynamic.dyns:
            z, zindex, stage_prime = _fold(z, stage, None, epsilon, derivative_step, executor, root_finder)
            zlabel = [zlabel[k] for k in zindex]
            if derivative_step is not None:
                z_prime = [z_prime[k] * p for k, p in zip(zindex, stage_prime)]
        return z, zlabel, z_prime

    if not isinstance(dynamic, (Branch, Dynamic)):
        raise TypeError(f"Cannot compute preimages under {type(dynamic).__name__}")
    if derivative_step is not None and isinstance(dynamic, Dynamic) and not dynamic.is_full_branch():
        raise IncompleteBranchError(
            "Preimages with derivatives are implemented only for full-branch dynamics"
        )

    y = WeaklySortedSequence.of(y)
    process = partial(
        _fold_branch,
        y=y,
        ylabel=ylabel,
        epsilon=epsilon,
        derivative_step=derivative_step,
        root_finder=root_finder,
    )
    results = executor.map(process, _branches(dynamic), desc="Preimages")

    x = _sorted_envelope([point for result in results for point in result[0]])
    xlabel = [label for result in results for label in result[1]]
    x_prime = [p for result in results for p in result[2]] if derivative_step is not None else None
    return x, xlabel, x_prime


def preimages(y, dynamic, ylabel=None, epsilon=0.0, executor=None, root_finder=preimage):
    """
    Preimages of the weakly sorted sequence y under a Branch or a Dynamic.

    :return: (x, xlabel)
    """
    if executor is None:
        executor = SinglethreadExecutor()
    x, xlabel, _ = _fold(y, dynamic, ylabel, epsilon, None, executor, root_finder)
    return x, xlabel


def preimages_and_derivatives(y, dynamic, ylabel=None, epsilon=0.0, executor=None, root_finder=preimage):
    """
    Compute preimages of a dynamic *and* enclosures of the derivatives T'(x) at
    each preimage.

    Assumes that the dynamic is full-branch, because otherwise the labels may
    compose the wrong way; incomplete branches raise IncompleteBranchError.

    :return: (x, xlabel, x′)
    """
    if executor is None:
        executor = SinglethreadExecutor()
    return _fold(y, dynamic, ylabel, epsilon, branch_derivatives, executor, root_finder)
