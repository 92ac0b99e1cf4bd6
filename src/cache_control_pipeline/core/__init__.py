"""Core utilities and shared components for the cache-control pipeline."""

from .logging_config import (
    get_logger,
    set_log_level,
    setup_logger,
)
from .exceptions import (
    CacheControlPipelineError,
    S3Error,
    ConfigurationError,
    EstimationError,
)
from .error_handling import with_error_handling
from .models import (
    CopyConfig,
    CopyResult,
    CopyStatus,
    ObjectMetadata,
)
from .context import AtomicCounter, CompletionGroup, CopyContext
from .queues import ClosableQueue, QueueClosed

__all__ = [
    "CopyConfig",
    "CopyResult",
    "CopyStatus",
    "ObjectMetadata",
    "AtomicCounter",
    "CompletionGroup",
    "CopyContext",
    "ClosableQueue",
    "QueueClosed",
    "setup_logger",
    "get_logger",
    "set_log_level",
    "CacheControlPipelineError",
    "S3Error",
    "ConfigurationError",
    "EstimationError",
    "with_error_handling",
]
