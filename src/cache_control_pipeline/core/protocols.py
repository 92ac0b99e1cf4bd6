"""Protocol definitions for dependency injection and testability."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Optional, Protocol

from .models import CopyResult


class S3ClientProtocol(Protocol):
    """Protocol for the S3 operations the pipeline uses."""

    def head_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Fetch object metadata without the body."""
        ...

    def copy_object(self, **kwargs: Any) -> Dict[str, Any]:
        """Server-side copy, here always with MetadataDirective=REPLACE."""
        ...

    def get_paginator(self, operation_name: str) -> Any:
        """Get paginator for S3 operations."""
        ...


class CloudWatchClientProtocol(Protocol):
    """Protocol for the CloudWatch metric query used to size the bucket."""

    def get_metric_statistics(self, **kwargs: Any) -> Dict[str, Any]:
        ...


class STSClientProtocol(Protocol):
    """Protocol for the temporary-credential exchange."""

    def assume_role(self, **kwargs: Any) -> Dict[str, Any]:
        ...


class ClientFactoryProtocol(Protocol):
    """Protocol for building the AWS clients the estimator needs."""

    def create_cloudwatch_client(
        self, credentials: Optional[Dict[str, str]] = None
    ) -> CloudWatchClientProtocol:
        ...

    def create_sts_client(self) -> STSClientProtocol:
        ...


class KeySource(ABC):
    """Abstract producer of object keys to process."""

    @abstractmethod
    def keys(self) -> Iterator[str]:
        """Yield keys lazily, in listing order."""
        ...


class DecisionEngine(ABC):
    """Abstract per-key decision and copy step."""

    @abstractmethod
    def process(self, key: str) -> CopyResult:
        """Process one key; always returns a result."""
        ...


class BucketSizeEstimator(ABC):
    """Abstract best-effort object count lookup."""

    @abstractmethod
    def estimate(self, bucket: str) -> int:
        """Approximate object count, 0 when unknown."""
        ...

