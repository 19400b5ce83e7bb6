"""
Fan-in Barrier

Runs continuations once a set of lazy futures has resolved.
"""

import logging
from contextlib import nullcontext
from typing import Callable, List, Any, ContextManager, Optional

from .future import Lazy

logger = logging.getLogger(__name__)


class Wait:
    """
    Join over lazy futures.

    Counts outstanding futures; continuations queued with run() fire once,
    in queue order, when the count drops to zero. A continuation queued
    while nothing is outstanding runs immediately.

    A watched future that fails short-circuits the barrier: queued
    continuations are dropped and on_fail() callbacks fire instead.

    The two mutation points run under `lock`, a no-op by default. Pass a
    real lock (e.g. threading.Lock()) to share a barrier across threads;
    continuations always run outside it.

    Example:
        Wait(a, b).run(lambda: print(a.get() + b.get()))
    """

    def __init__(self, *futures: Lazy, lock: Optional[ContextManager] = None):
        self._lock = lock if lock is not None else nullcontext()
        self._counter = 0
        self._failed = False
        self._jobs: List[Callable[[], Any]] = []
        self._fail_jobs: List[Callable[[], Any]] = []

        for future in futures:
            self.watch(future)

    def __repr__(self) -> str:
        state = "failed" if self._failed else f"pending={self._counter}"
        return f"<Wait {state} jobs={len(self._jobs)}>"

    @property
    def pending(self) -> int:
        """Number of watched futures not yet resolved."""
        return self._counter

    def failed(self) -> bool:
        return self._failed

    def watch(self, future: Lazy) -> 'Wait':
        """
        Add a future to wait for.

        Args:
            future: Lazy future the barrier must see resolved

        Returns:
            This barrier (allows chaining)
        """
        with self._lock:
            self._counter += 1
        future.on_ready(self._one_ready)
        future.on_fail(self._one_failed)
        return self

    __call__ = watch

    def run(self, job: Callable[[], Any]) -> 'Wait':
        """
        Queue a continuation.

        Runs immediately if nothing is outstanding. Dropped if the barrier
        has failed.

        Returns:
            This barrier
        """
        with self._lock:
            if self._failed:
                logger.warning(f"Dropping continuation {job!r}: barrier failed")
                return self
            run_now = self._counter == 0
            if not run_now:
                self._jobs.append(job)

        if run_now:
            job()
        return self

    def on_fail(self, job: Callable[[], Any]) -> 'Wait':
        """Register a callback for a watched future failing (immediately if one has)."""
        with self._lock:
            run_now = self._failed
            if not run_now:
                self._fail_jobs.append(job)

        if run_now:
            job()
        return self

    def _one_ready(self, _value: Any) -> None:
        with self._lock:
            if self._failed:
                return
            self._counter -= 1
            if self._counter != 0:
                return
            jobs, self._jobs = self._jobs, []

        for job in jobs:
            job()

    def _one_failed(self) -> None:
        with self._lock:
            if self._failed:
                return
            self._failed = True
            dropped = len(self._jobs)
            self._jobs = []
            fail_jobs, self._fail_jobs = self._fail_jobs, []

        logger.debug(f"Barrier failed, dropped {dropped} continuations")
        for job in fail_jobs:
            job()
