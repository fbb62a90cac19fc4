import os
from concurrent.futures import ThreadPoolExecutor

from tqdm import tqdm


class MultithreadExecutor:
    """
    Runs independent work items (branches of a dynamic, shards of a dual) on a
    thread pool. Results are returned in the order of the items, since the callers
    concatenate them and rely on the ordering of the preimages.

    Note: the global interpreter lock (GIL) limits the speed-up for pure Python
    evaluations of the branches; the executor pays off when the branch functions
    release the GIL (e.g. vectorized numpy code).
    """

    def __init__(self, num_workers=None, progress=False):
        # If num_workers is not provided, use the default of ThreadPoolExecutor min(32, os.cpu_count() + 4)
        self.num_workers = num_workers
        self.progress = progress

    @property
    def num_shards(self):
        return self.num_workers or min(32, (os.cpu_count() or 1) + 4)

    def map(self, process, items, desc="Progress"):
        items = list(items)
        with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
            with tqdm(total=len(items), desc=desc, smoothing=0.1, disable=not self.progress) as pbar:
                futures = []
                for item in items:
                    future = executor.submit(process, item)
                    future.add_done_callback(lambda p: pbar.update())
                    futures.append(future)

                # Collect in submission order; result() re-raises exceptions of the workers
                return [future.result() for future in futures]
