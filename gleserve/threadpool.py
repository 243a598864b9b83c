"""A fixed-size pool of worker threads fed from a task queue."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable

_log = logging.getLogger(__name__)

Task = Callable[[], object]


class ThreadPool:
    """Runs dispatched callables on a fixed number of worker threads.

    Workers stop picking up tasks once the pool is shut down; tasks still
    queued at that point are run one after another by ``shutdown``.
    """

    def __init__(self, num_threads: int) -> None:
        if num_threads < 0:
            raise ValueError("num_threads must not be negative")
        self._queue: deque[Task] = deque()
        self._cond = threading.Condition()
        self._terminating = False
        self._running = 0
        self._threads = [
            threading.Thread(target=self._work, name=f"pool-worker-{i}", daemon=True)
            for i in range(num_threads)
        ]
        for thread in self._threads:
            thread.start()
        with self._cond:
            self._cond.wait_for(lambda: self._running == num_threads)

    @property
    def num_threads(self) -> int:
        """Number of worker threads the pool was created with."""
        return len(self._threads)

    def dispatch(self, task: Task) -> None:
        """Queue ``task`` to be called with no arguments by a worker.

        Raises RuntimeError if the pool has been shut down.
        """
        with self._cond:
            if self._terminating:
                raise RuntimeError("cannot dispatch to a pool that has shut down")
            self._queue.append(task)
            self._cond.notify()

    def shutdown(self) -> None:
        """Stop the workers, wait for them, then run any queued tasks here."""
        with self._cond:
            if self._terminating and not self._threads:
                return
            self._terminating = True
            self._cond.notify_all()
        for thread in self._threads:
            thread.join()
        self._threads = []
        while True:
            with self._cond:
                if not self._queue:
                    break
                task = self._queue.popleft()
            self._run(task)

    def _work(self) -> None:
        with self._cond:
            self._running += 1
            self._cond.notify_all()
            while not self._terminating:
                self._cond.wait_for(lambda: self._queue or self._terminating)
                while self._queue and not self._terminating:
                    task = self._queue.popleft()
                    self._cond.release()
                    try:
                        self._run(task)
                    finally:
                        self._cond.acquire()
            self._running -= 1

    @staticmethod
    def _run(task: Task) -> None:
        try:
            task()
        except Exception:
            _log.exception("task %r failed", task)

    def __enter__(self) -> ThreadPool:
        return self

    def __exit__(self, *args) -> None:
        self.shutdown()