"""Multithreaded worker pool - fixed number of threads draining the key queue."""

from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional

from ..core import ClosableQueue, CompletionGroup, CopyResult, CopyStatus, get_logger
from ..core.protocols import DecisionEngine

logger = get_logger("worker-pool")


def cp_worker(
    engine: DecisionEngine,
    names: ClosableQueue,
    results: ClosableQueue,
    workers: CompletionGroup,
) -> int:
    """
    Worker loop: take a key, process it, push the result.

    Runs until ``names`` is closed and drained, then marks itself done in
    ``workers``. Pushing onto a full ``results`` queue blocks.

    Returns:
        Number of keys this worker processed
    """
    processed = 0
    try:
        for name in names:
            try:
                result = engine.process(name)
            except Exception as e:
                result = CopyResult(status=CopyStatus.FAILURE, key=name, error=str(e))
            results.put(result)
            processed += 1
    finally:
        workers.done()
    return processed


class WorkerPool:
    """
    Fixed-width pool of copy workers.

    Keep ``width`` below the file descriptor limit (each worker holds a
    connection) and below the request rate S3 tolerates before answering
    "503 SlowDown".
    """

    def __init__(self, engine: DecisionEngine, width: int, workers: Optional[CompletionGroup] = None):
        if width < 1:
            raise ValueError("pool width must be at least 1")
        self._engine = engine
        self._width = width
        self._workers = workers or CompletionGroup()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._futures: List[Future] = []
        self._results: Optional[ClosableQueue] = None

    @property
    def width(self) -> int:
        return self._width

    def start(self, names: ClosableQueue, results: ClosableQueue) -> None:
        """Spawn ``width`` workers reading ``names`` and writing ``results``."""
        self._results = results
        self._executor = ThreadPoolExecutor(
            max_workers=self._width, thread_name_prefix="cp-worker"
        )
        self._workers.add(self._width)
        self._futures = [
            self._executor.submit(cp_worker, self._engine, names, results, self._workers)
            for _ in range(self._width)
        ]
        logger.info(f"Started {self._width} workers")

    def wait(self) -> int:
        """
        Block until every worker exited, then close the result queue.

        Returns:
            Total number of keys processed by the pool
        """
        if self._executor is None or self._results is None:
            raise RuntimeError("pool was not started")
        self._workers.wait()
        self._results.close()
        self._executor.shutdown(wait=True)
        total = sum(future.result() for future in self._futures)
        logger.info(f"All {self._width} workers finished, {total} keys processed")
        return total
