import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Sequence, TypeVar

from . import settings
from .errors import UpstreamError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class FanOutCancelled(Exception):
    """Raised inside a worker that was still queued when a sibling failed."""


def resolve_all(
    items: Sequence[T],
    resolver: Callable[[T], R],
    max_workers: int | None = settings.MAX_WORKERS,
    describe: Callable[[T], str] = repr,
) -> list[tuple[T, R]]:
    """
    Runs `resolver` once per item on a thread pool and pairs each item with its result.

    Every call is submitted up front. Output position i always belongs to input
    position i, whatever order the calls finish in. `max_workers` of None or 0
    means one thread per item.

    All-or-nothing: the first failure to be observed is raised as UpstreamError
    (chained to the original). Calls still queued are cancelled, and calls already
    running are waited for before raising, so no worker outlives this function
    (and the caller can safely close a shared HTTP session). No partial result
    is returned.
    """
    if max_workers is not None and max_workers < 0:
        raise ValueError(f"max_workers must be 0 (one per item) or positive, got {max_workers}")
    if not items:
        return []

    workers = max_workers or len(items)
    workers = min(workers, len(items))
    cancelled = threading.Event()

    def run(item: T) -> R:
        if cancelled.is_set():
            raise FanOutCancelled()
        return resolver(item)

    results: list[R | None] = [None] * len(items)
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="line-items")
    try:
        futures: dict[Future, int] = {
            executor.submit(run, item): index for index, item in enumerate(items)
        }
        logger.debug(f"Submitted {len(futures)} calls to {workers} worker(s).")

        for future in as_completed(futures):
            index = futures[future]
            error = future.exception()
            if error is None:
                results[index] = future.result()
                continue

            cancelled.set()
            for pending in futures:
                pending.cancel()
            logger.error(f"❌ Call for {describe(items[index])} failed: {error}")
            if isinstance(error, UpstreamError):
                raise UpstreamError(
                    str(error), url=error.url, status_code=error.status_code
                ) from error
            raise UpstreamError(f"Call for {describe(items[index])} failed: {error}") from error
    finally:
        # Queued calls are dropped; in-flight ones finish under the transport timeout
        executor.shutdown(wait=True, cancel_futures=True)

    return [(item, result) for item, result in zip(items, results)]
