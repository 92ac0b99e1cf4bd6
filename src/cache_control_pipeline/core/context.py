"""Shared run context: configuration plus the few counters workers contend on."""

import re
import threading
from dataclasses import dataclass, field
from typing import Any, Optional, Pattern

from .models import CopyConfig


class AtomicCounter:
    """Monotonic integer counter safe to share between threads."""

    def __init__(self, initial: int = 0):
        self._value = initial
        self._lock = threading.Lock()

    def increment(self) -> int:
        """Add one and return the new value."""
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        return self._value


class CompletionGroup:
    """Wait-group: ``add`` members, each calls ``done`` once, ``wait`` blocks until all did."""

    def __init__(self) -> None:
        self._pending = 0
        self._condition = threading.Condition()

    def add(self, count: int = 1) -> None:
        with self._condition:
            self._pending += count

    def done(self) -> None:
        with self._condition:
            if self._pending <= 0:
                raise ValueError("done() called more often than add()")
            self._pending -= 1
            if self._pending == 0:
                self._condition.notify_all()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until every member is done; False if ``timeout`` expired first."""
        with self._condition:
            return self._condition.wait_for(lambda: self._pending == 0, timeout)

    @property
    def pending(self) -> int:
        return self._pending


@dataclass
class CopyContext:
    """Context shared by the source, the workers and the aggregator for one run."""

    config: CopyConfig
    s3_client: Any
    copied_objects: AtomicCounter = field(default_factory=AtomicCounter)
    expected_objects: int = 0
    workers: CompletionGroup = field(default_factory=CompletionGroup)
    exclude: Optional[Pattern[str]] = None

    def __post_init__(self) -> None:
        if self.exclude is None and self.config.exclude_pattern:
            self.exclude = re.compile(self.config.exclude_pattern)

    def is_excluded(self, key: str) -> bool:
        return self.exclude is not None and self.exclude.search(key) is not None

    @property
    def budget_exhausted(self) -> bool:
        """Soft check; workers already past it may still copy."""
        return self.copied_objects.value >= self.config.max_objects
