"""Pipeline driver: source -> key queue -> worker pool -> result queue -> stats."""

import threading
import time
from typing import Iterable, Optional, TextIO

from ..core import ClosableQueue, CopyConfig, CopyContext, get_logger
from ..core.models import RESULT_QUEUE_SIZE
from ..core.protocols import BucketSizeEstimator, DecisionEngine
from ..core.sources import ObjectSource
from ..core.stats import RunStatistics, StatsAggregator
from .worker_pool import WorkerPool

logger = get_logger("pipeline")


def log_configuration(config: CopyConfig) -> None:
    """Log run configuration."""
    logger.info("=" * 80)
    logger.info("PUT CACHE-CONTROL")
    logger.info("=" * 80)
    logger.info(f"Copying   to {config.target_bucket}")
    logger.info(f"Copying from {config.from_bucket}")
    logger.info(f"  Cache-Control: {config.cache_control}")
    logger.info(f"  Workers:       {config.parallelism}")
    logger.info(f"  Batch size:    {config.batch_size}")
    if config.exclude_pattern:
        logger.info(f"  Exclude pictures matching: {config.exclude_pattern}")
    if config.continue_from:
        logger.info(f"  Continue after: {config.continue_from}")
    if config.dry_run:
        logger.info("  Dry run: no objects will be changed")
    logger.info("=" * 80)


def log_final_statistics(total_time: float, stats: RunStatistics, copied: int) -> None:
    """Log final processing statistics."""
    overall_rate = stats.processed / total_time if total_time > 0 else 0
    logger.info("=" * 80)
    logger.info("PROCESSING COMPLETED")
    logger.info("=" * 80)
    logger.info(f"Total execution time: {total_time:.1f}s")
    logger.info(f"Overall processing rate: {overall_rate:.1f} objects/sec")
    logger.info(f"Objects processed: {stats.processed}")
    logger.info(f"Objects copied: {copied}")
    logger.info(f"Errors encountered: {stats.failed}")
    if stats.last_key:
        logger.info(f"Last processed key: {stats.last_key}")
    logger.info("=" * 80)


class CopyPipeline:
    """Runs one copy job over the injected context, engine and estimator."""

    def __init__(
        self,
        context: CopyContext,
        engine: DecisionEngine,
        estimator: BucketSizeEstimator,
        stream: Optional[TextIO] = None,
        run_name: Optional[str] = None,
    ):
        self._context = context
        self._engine = engine
        self._estimator = estimator
        self._stream = stream
        self._run_name = run_name
        self.aggregator: Optional[StatsAggregator] = None

    @property
    def context(self) -> CopyContext:
        return self._context

    def run(self, lines: Optional[Iterable[str]] = None) -> RunStatistics:
        """
        Process every key of the run.

        Args:
            lines: Names to process (interactive-list mode); ``None`` lists
                the source bucket, resuming after ``continue_from``.

        Returns:
            Final statistics of the run
        """
        config = self._context.config
        log_configuration(config)
        start_time = time.time()

        names: ClosableQueue = ClosableQueue(config.key_queue_size)
        results: ClosableQueue = ClosableQueue(RESULT_QUEUE_SIZE)

        self.aggregator = StatsAggregator(
            results,
            expected=0,
            log_dir=config.log_dir,
            report_interval=config.report_interval,
            stream=self._stream,
            run_name=self._run_name,
        )
        # setup errors surface here, before any thread starts
        self.aggregator.open()

        source = ObjectSource(self._context, lines)
        producer = threading.Thread(
            target=self._produce, args=(source, names), name="object-source", daemon=True
        )
        producer.start()

        # Written once here, read-only once the workers run
        self._context.expected_objects = self._estimator.estimate(config.from_bucket)

        self.aggregator.expected = self._context.expected_objects
        self.aggregator.start()

        pool = WorkerPool(self._engine, config.parallelism, workers=self._context.workers)
        pool.start(names, results)

        producer.join()
        pool.wait()
        stats = self.aggregator.join()

        log_final_statistics(
            time.time() - start_time, stats, self._context.copied_objects.value
        )
        logger.info("Done.")
        return stats

    @staticmethod
    def _produce(source: ObjectSource, names: ClosableQueue) -> None:
        try:
            source.produce(names)
        except Exception as e:
            logger.error(f"Listing objects failed: {e}", exc_info=True)
