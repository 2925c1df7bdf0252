import logging
import time
from contextlib import contextmanager
from typing import Optional


@contextmanager
def performance_logging(
    description: str, logger: logging.Logger, counter: Optional[int] = None
):
    """Log how long the block took at INFO, with a throughput when `counter` is given."""
    start = time.perf_counter()
    try:
        yield
    finally:
        took = (time.perf_counter() - start) * 1000
        rate = ""
        if counter is not None and took > 0:
            rate = f" ({int(counter / took * 1000)} items/sec)"
        if took < 0.1:
            logger.info("%s took: %.2fus%s", description, took * 1000, rate)
        else:
            logger.info("%s took: %.2fms%s", description, took, rate)
