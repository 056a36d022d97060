"""Thread-pool helpers for the two fan-out policies used by the dashboard.

run_all: one worker per item, join all, results in input order. Used for
the per-team pipeline.

run_in_batches: fixed-size batches run one after another, each item isolated
so a failure yields None instead of aborting the batch. Used to bound the
number of in-flight issue history requests.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

logger = logging.getLogger(__name__)


def run_all(fn, items: list) -> list:
    """Run fn over every item concurrently and return results in input order.

    Exceptions raised by fn propagate to the caller.
    """
    if not items:
        return []

    with ThreadPoolExecutor(max_workers=len(items)) as executor:
        futures = [executor.submit(fn, item) for item in items]
        return [future.result() for future in futures]


def run_in_batches(fn, items: list, batch_size: int) -> list:
    """Run fn over items in sequential batches of at most batch_size.

    Returns a list aligned with items; entries whose call raised are None.
    """
    results = []
    batch_size = max(1, batch_size)

    with ThreadPoolExecutor(max_workers=batch_size) as executor:
        for start in range(0, len(items), batch_size):
            batch = items[start:start + batch_size]
            futures = [executor.submit(fn, item) for item in batch]
            for future in futures:
                try:
                    results.append(future.result())
                except Exception as e:
                    logger.debug(f"Batch item failed: {e}")
                    results.append(None)

    return results
