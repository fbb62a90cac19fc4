import logging
import time

from .assembly import discretized_operator
from .executors import MultithreadExecutor, SinglethreadExecutor

logger = logging.getLogger(__name__)


def discretize(basis, dynamic, epsilon=0.0, num_workers=0, progress=False):
    """
    Certified discretization of the transfer operator of a dynamic.

    :param basis: Ulam or Hat basis
    :param dynamic: Dynamic whose transfer operator is discretized
    :param epsilon: tolerance of the root finder, 0.0 bisects down to adjacent floats
    :param num_workers: 0 runs in the calling thread, otherwise the number of threads
    :param progress: show tqdm progress bars
    """
    if num_workers < 0:
        raise ValueError(f"num_workers must be non-negative, got {num_workers}")

    if num_workers == 0:
        executor = SinglethreadExecutor(progress=progress)
    else:
        executor = MultithreadExecutor(num_workers, progress=progress)

    start_time = time.time()
    operator = discretized_operator(basis, dynamic, epsilon, executor)
    computation_time = time.time() - start_time

    logger.info(
        "Discretized %s in %s: %d non-zeros, max entry width %.3e, computation time: %.2f seconds",
        dynamic, basis, operator.L.nnz, operator.L.max_width(), computation_time
    )
    return operator
