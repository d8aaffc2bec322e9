"""
Parallel runner for per-channel work.

Container parsing is sequential, but once every channel payload is known the
channels are independent, so decoding and encoding run as separate tasks on
a thread pool that is joined before the document is used.
"""

import logging
import threading
from concurrent.futures import CancelledError, ThreadPoolExecutor
from typing import Any, Callable, Optional, Sequence

logger = logging.getLogger(__name__)


class ProgressCounter:
    """
    Monotonic counter of completed tasks shared by the workers.

    :param total: number of tasks.
    :param callback: called as ``callback(done, total)`` while the lock is
        held, once per completed task.
    """

    def __init__(
        self, total: int, callback: Optional[Callable[[int, int], Any]] = None
    ) -> None:
        self.total = total
        self.done = 0
        self._callback = callback
        self._lock = threading.Lock()

    def increment(self) -> int:
        with self._lock:
            self.done += 1
            if self._callback is not None:
                self._callback(self.done, self.total)
            return self.done


def run_tasks(
    tasks: Sequence[Callable[[], Any]],
    max_workers: Optional[int] = None,
    progress: Optional[Callable[[int, int], Any]] = None,
    abort: Optional[Callable[[], bool]] = None,
) -> list:
    """
    Runs independent tasks on a thread pool and waits for all of them.

    :param tasks: callables without arguments.
    :param max_workers: pool size, defaults to the executor's choice.
    :param progress: see :py:class:`ProgressCounter`.
    :param abort: checked before each task starts; when it returns true the
        run stops.
    :return: task results in the order of ``tasks``.
    :raise concurrent.futures.CancelledError: when ``abort`` fired.
    """
    counter = ProgressCounter(len(tasks), progress)
    if not tasks:
        return []
    logger.debug("running %d tasks" % len(tasks))

    def wrap(task: Callable[[], Any]) -> Callable[[], Any]:
        def run() -> Any:
            if abort is not None and abort():
                raise CancelledError("Aborted before task started")
            result = task()
            counter.increment()
            return result

        return run

    executor = ThreadPoolExecutor(max_workers=max_workers)
    try:
        futures = [executor.submit(wrap(task)) for task in tasks]
        return [f.result() for f in futures]
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
