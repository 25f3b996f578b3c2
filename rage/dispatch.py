"""Background/foreground hand-off for enqueued requests.

Blocking work (network I/O, delayed stubs) runs on a background thread
pool. Completions run on a single foreground thread, one at a time, so
callers observe them the way they would on a UI main loop.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _log_failure(future: Future) -> None:
    exc = future.exception()
    if exc is not None:
        logger.error("Enqueued work failed", exc_info=(type(exc), exc, exc.__traceback__))


class Dispatcher:
    """Two execution contexts: a background pool and a foreground thread.

    Usage:
        dispatcher = Dispatcher()
        dispatcher.dispatch(lambda: request.execute(), on_result)
        ...
        dispatcher.shutdown()
    """

    def __init__(self, max_workers: int | None = None) -> None:
        self._background = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="rage-background"
        )
        self._foreground = ThreadPoolExecutor(max_workers=1, thread_name_prefix="rage-main")

    def dispatch(self, work: Callable[[], T], completion: Callable[[T], None]) -> Future:
        """Run work in the background, then completion(result) on the foreground thread.

        Returns the background future; it resolves to the future of the
        completion call.
        """

        def run() -> Future:
            result = work()
            completion_future = self._foreground.submit(completion, result)
            completion_future.add_done_callback(_log_failure)
            return completion_future

        future = self._background.submit(run)
        future.add_done_callback(_log_failure)
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Stop both executors.

        With wait=True, pending background work hands its completion to the
        foreground thread before that thread stops.
        """
        try:
            self._background.shutdown(wait=wait)
        finally:
            self._foreground.shutdown(wait=wait)


_default_dispatcher: Dispatcher | None = None
_default_lock = threading.Lock()


def default_dispatcher() -> Dispatcher:
    """Process-wide dispatcher, created on first use."""
    global _default_dispatcher
    with _default_lock:
        if _default_dispatcher is None:
            _default_dispatcher = Dispatcher()
        return _default_dispatcher
