"""Bounded queue that a producer can close once it has emitted everything."""

import queue
import threading
from typing import Generic, Iterator, Optional, TypeVar

from .exceptions import CacheControlPipelineError

T = TypeVar("T")


class QueueClosed(CacheControlPipelineError):
    """Raised by get() on a closed, drained queue and by put() after close()."""


_CLOSED = object()


class ClosableQueue(Generic[T]):
    """
    ``queue.Queue`` with close semantics.

    ``put`` blocks while the queue is full and ``get`` blocks while it is
    empty. After ``close()`` every consumer drains the remaining items and
    then gets ``QueueClosed``. A consumer that sees the close marker puts it
    back so the other consumers see it too.
    """

    def __init__(self, maxsize: int = 0):
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize)
        self._closed = threading.Event()

    def put(self, item: T) -> None:
        if self._closed.is_set():
            raise QueueClosed("put() on a closed queue")
        self._queue.put(item)

    def get(self, timeout: Optional[float] = None) -> T:
        """Next item; ``queue.Empty`` on timeout, ``QueueClosed`` once drained."""
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            self._queue.put(_CLOSED)
            raise QueueClosed("queue is closed")
        return item  # type: ignore[return-value]

    def close(self) -> None:
        if self._closed.is_set():
            raise QueueClosed("queue already closed")
        self._closed.set()
        self._queue.put(_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize

    def qsize(self) -> int:
        return self._queue.qsize()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except QueueClosed:
                return
