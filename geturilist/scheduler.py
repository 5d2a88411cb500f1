"""Bounded scheduler: run at most N tasks at once, then join them all."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)


class BoundedScheduler:
    """Admit tasks onto worker threads up to a fixed concurrency ceiling.

    ``submit`` blocks the caller while ``concurrency`` tasks are in flight.
    Each task releases its slot when it finishes, whether it returned or
    raised. ``drain`` waits for every submitted task.
    """

    def __init__(self, concurrency: int, *, thread_name_prefix: str = "fetch") -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be positive, got {concurrency}")
        self.concurrency = concurrency
        self._slots = threading.BoundedSemaphore(concurrency)
        self._lock = threading.Lock()
        self._in_flight = 0
        self._futures: List[Future] = []
        self._executor: Optional[ThreadPoolExecutor] = ThreadPoolExecutor(
            max_workers=concurrency, thread_name_prefix=thread_name_prefix
        )

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def submitted(self) -> int:
        return len(self._futures)

    def admit(self) -> None:
        """Block until a slot is free, then take it."""
        self._slots.acquire()
        with self._lock:
            self._in_flight += 1

    def release(self) -> None:
        """Return a slot taken by :meth:`admit`."""
        with self._lock:
            self._in_flight -= 1
        self._slots.release()

    def _run(self, fn: Callable[..., Any], args: tuple) -> Any:
        try:
            return fn(*args)
        finally:
            self.release()

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        """Admit one task and start it on a worker thread."""
        if self._executor is None:
            raise RuntimeError("scheduler is closed")
        self.admit()
        try:
            future = self._executor.submit(self._run, fn, args)
        except BaseException:
            self.release()
            raise
        self._futures.append(future)
        return future

    def drain(self) -> List[Any]:
        """Wait for every submitted task and return results in submission order.

        Raises:
            Exception: The first exception raised by a task, after all tasks
                have finished.
        """
        wait(self._futures)
        logger.debug("Drained %d task(s)", len(self._futures))
        for future in self._futures:
            exc = future.exception()
            if exc is not None:
                raise exc
        return [f.result() for f in self._futures]

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "BoundedScheduler":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
