"""Run blocking external calls off the control thread.

Work runs on a small thread pool. Its completion is handed to a dispatcher,
which decides where the completion callback executes. The default dispatcher
runs it inline on the worker thread; :class:`CallbackQueue` instead parks it
until the control thread calls :meth:`CallbackQueue.drain`.
"""

from __future__ import annotations

import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, TypeVar

__all__ = ["BackgroundRunner", "CallbackQueue", "Dispatcher"]

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
Dispatcher = Callable[[Callable[[], None]], None]
Completion = Callable[[Any, "BaseException | None"], None]


def _run_inline(callback: Callable[[], None]) -> None:
    callback()


class CallbackQueue:
    """Dispatcher that queues callbacks for the control thread to run."""

    def __init__(self) -> None:
        self._pending: queue.Queue[Callable[[], None]] = queue.Queue()

    def __call__(self, callback: Callable[[], None]) -> None:
        self._pending.put(callback)

    def drain(self, *, timeout: float | None = None) -> int:
        """Run queued callbacks on the calling thread and return how many ran.

        With a ``timeout`` the call first waits up to that long for one
        callback to arrive.
        """

        ran = 0
        if timeout is not None:
            try:
                callback = self._pending.get(timeout=timeout)
            except queue.Empty:
                return 0
            callback()
            ran += 1
        while True:
            try:
                callback = self._pending.get_nowait()
            except queue.Empty:
                return ran
            callback()
            ran += 1


class BackgroundRunner:
    """Thread pool wrapper whose completions go through a dispatcher."""

    def __init__(self, *, max_workers: int = 1, dispatcher: Dispatcher | None = None) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="workbench")
        self._dispatch = dispatcher or _run_inline

    def submit(self, work: Callable[[], T], on_done: Completion) -> Future[T]:
        """Run ``work`` on the pool, then dispatch ``on_done(result, error)``."""

        future = self._executor.submit(work)

        def _completed(done: Future[T]) -> None:
            error = done.exception()
            result = None if error is not None else done.result()
            if error is not None:
                LOGGER.debug("Background work failed: %s", error)
            self._dispatch(partial(on_done, result, error))

        future.add_done_callback(_completed)
        return future

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> BackgroundRunner:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.shutdown()
