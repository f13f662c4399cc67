from __future__ import annotations

import queue
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Generic, Iterable, Optional, TypeVar

from loguru import logger

T = TypeVar("T")
R = TypeVar("R")


def _never() -> bool:
    return False


class BoundedTaskPool(Generic[T, R]):
    """
    Fixed number of workers draining one shared work queue.

    Each worker calls ``worker_setup`` once to build its private resource
    (an HTTP client, say), then feeds that resource and each job to
    ``handler`` until the queue is empty. ``drain`` returns only after
    every worker has exited and always runs the queue to completion unless
    the ``cancelled`` hook says otherwise. Nothing in grater passes a real
    cancellation hook yet.
    """

    def __init__(
        self,
        width: int,
        worker_setup: Callable[[], R],
        handler: Callable[[R, T], None],
        worker_teardown: Optional[Callable[[R], None]] = None,
        cancelled: Callable[[], bool] = _never,
    ) -> None:
        self.width = max(1, int(width))
        self.worker_setup = worker_setup
        self.handler = handler
        self.worker_teardown = worker_teardown
        self.cancelled = cancelled

    def _work(self, worker_id: int, jobs: "queue.Queue[T]") -> None:
        resource = self.worker_setup()
        try:
            while not self.cancelled():
                try:
                    job = jobs.get_nowait()
                except queue.Empty:
                    break
                self.handler(resource, job)
        finally:
            if self.worker_teardown is not None:
                self.worker_teardown(resource)
            logger.debug("Worker {} drained", worker_id)

    def drain(self, items: Iterable[T]) -> None:
        jobs: "queue.Queue[T]" = queue.Queue()
        for item in items:
            jobs.put(item)
        if jobs.empty():
            return

        width = min(self.width, jobs.qsize())
        with ThreadPoolExecutor(max_workers=width) as executor:
            futures = [executor.submit(self._work, w, jobs) for w in range(width)]
            for fut in futures:
                # re-raise anything a handler let escape
                fut.result()
