from tqdm import tqdm


class SinglethreadExecutor:
    """
    Runs the work items one after the other, in order.
    """

    num_shards = 1

    def __init__(self, progress=False):
        self.progress = progress

    def map(self, process, items, desc="Progress"):
        items = list(items)
        results = []
        with tqdm(total=len(items), desc=desc, smoothing=0.1, disable=not self.progress) as pbar:
            for item in items:
                results.append(process(item))
                pbar.update(1)
        return results
