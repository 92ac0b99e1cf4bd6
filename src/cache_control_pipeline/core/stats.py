"""Run statistics: audit logs, periodic progress reports with ETA, final summary."""

import os
import queue
import sys
import threading
import time
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, TextIO

from .exceptions import ConfigurationError
from .logging_config import get_logger
from .models import CopyResult
from .queues import ClosableQueue, QueueClosed

logger = get_logger("stats")

ETA_UNKNOWN = "-"
RUN_NAME_FORMAT = "%Y-%m-%d-%H%M%S"


def format_eta(expected: int, processed: int, elapsed_seconds: float) -> str:
    """
    Remaining time at the observed rate.

    Rendered as ``"<d>d <h.h>h"`` when at least a day is left, otherwise
    ``"<h>h <m.m>m"``. ``ETA_UNKNOWN`` when the estimate is already exceeded
    or no rate is known yet.
    """
    if expected < processed or processed <= 0 or elapsed_seconds <= 0:
        return ETA_UNKNOWN
    rate = processed / elapsed_seconds
    remaining = int((expected - processed) / rate)  # whole seconds
    hours = remaining / 3600
    days = int(hours / 24)
    if days > 0:
        return f"{days}d {hours - days * 24:.1f}h"
    minutes = remaining / 60
    whole_hours = int(minutes / 60)
    return f"{whole_hours}h {minutes - whole_hours * 60:.1f}m"


def normalize_content_type(content_type: str) -> str:
    """Drop parameters such as ``; boundary=...``."""
    return content_type.split(";")[0]


@dataclass
class RunStatistics:
    """Counters owned by the aggregator."""

    start_time: float
    processed: int = 0
    status_counts: Counter = field(default_factory=Counter)
    type_counts: Counter = field(default_factory=Counter)
    failed: int = 0
    last_key: str = ""

    def record(self, result: CopyResult) -> None:
        self.status_counts[result.status.value] += 1
        self.type_counts[normalize_content_type(result.content_type)] += 1
        self.processed += 1
        if result.failed:
            self.failed += 1
        self.last_key = result.key

    def rate(self, now: float) -> float:
        elapsed = now - self.start_time
        return self.processed / elapsed if elapsed > 0 else 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "processed_count": self.processed,
            "error_count": self.failed,
            "status_counts": dict(self.status_counts),
            "type_counts": dict(self.type_counts),
            "last_key": self.last_key,
        }


class StatsAggregator:
    """
    Single consumer of the result queue.

    Every result is appended to ``<run>-objects.log`` as
    ``status<TAB>content-type<TAB>key``; failed keys also go to
    ``<run>-error-keys.log``. A one-character status code per result is
    written to ``stream``. A progress report is logged every
    ``report_interval`` seconds and once more when the queue closes.

    ``expected`` may be set after construction, before ``start()``.
    """

    def __init__(
        self,
        results: ClosableQueue,
        expected: int,
        log_dir: str = ".",
        report_interval: float = 12.0,
        stream: Optional[TextIO] = None,
        clock: Callable[[], float] = time.monotonic,
        run_name: Optional[str] = None,
    ):
        self._results = results
        self.expected = expected
        self._report_interval = report_interval
        self._stream = stream
        self._clock = clock
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._objects_log: Optional[TextIO] = None
        self._error_log: Optional[TextIO] = None

        run_name = run_name or datetime.now().strftime(RUN_NAME_FORMAT)
        self.objects_log_path = os.path.join(log_dir, f"{run_name}-objects.log")
        self.error_log_path = os.path.join(log_dir, f"{run_name}-error-keys.log")
        self.stats = RunStatistics(start_time=clock())

    def open(self) -> None:
        """Open both logs for appending; ``ConfigurationError`` if either can not be opened."""
        try:
            self._objects_log = open(self.objects_log_path, "a", buffering=1)
            self._error_log = open(self.error_log_path, "a", buffering=1)
        except OSError as e:
            self.close()
            log_dir = os.path.dirname(self.objects_log_path)
            raise ConfigurationError(f"Can not open run logs in '{log_dir}': {e}") from e

    def close(self) -> None:
        for log in (self._objects_log, self._error_log):
            if log is not None:
                log.close()
        self._objects_log = self._error_log = None

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(target=self.run, name="stats-aggregator", daemon=True)
        self._thread.start()
        return self._thread

    def join(self, timeout: Optional[float] = None) -> RunStatistics:
        if self._thread is not None:
            self._thread.join(timeout)
        return self.stats

    def run(self) -> RunStatistics:
        """Consume results until the queue closes; opens the logs unless ``open()`` already did."""
        stream = self._stream or sys.stdout
        if self._objects_log is None:
            self.open()
        objects_log, error_log = self._objects_log, self._error_log
        next_report = self._clock() + self._report_interval
        try:
            while True:
                timeout = max(0.0, next_report - self._clock())
                try:
                    result = self._results.get(timeout=timeout)
                except queue.Empty:
                    result = None
                except QueueClosed:
                    break

                if result is not None:
                    self._record(result, objects_log, error_log, stream)
                if self._clock() >= next_report:
                    self.report()
                    next_report = self._clock() + self._report_interval
        finally:
            self.close()

        stream.write("\n")
        logger.info("## Result queue closed. Final statistics:")
        self.report()
        return self.stats

    def _record(
        self, result: CopyResult, objects_log: TextIO, error_log: TextIO, stream: TextIO
    ) -> None:
        with self._lock:
            objects_log.write(f"{result.status.value}\t{result.content_type}\t{result.key}\n")
            if result.failed:
                logger.error(f"==> Failed processing '{result.key}': {result.error}")
                error_log.write(f"{result.key}\n")
            self.stats.record(result)
        stream.write(result.status.code)
        stream.flush()

    def report(self) -> List[str]:
        """Log (and return) the current progress report."""
        with self._lock:
            now = self._clock()
            stats = self.stats
            eta = format_eta(self.expected, stats.processed, now - stats.start_time)
            lines = [
                f"{stats.last_key:<30} Totals: {stats.processed}/{self.expected} objects. "
                f"Avg: {stats.rate(now):.2f} obj/s. ETA: {eta}",
                "Content-Type stats:",
            ]
            lines.extend(f"  {name} {count}" for name, count in sorted(stats.type_counts.items()))
            lines.append("Copy status stats:")
            lines.extend(f"  {name} {count}" for name, count in sorted(stats.status_counts.items()))
        for line in lines:
            logger.info(line)
        return lines
