"""Custom exceptions for the cache-control pipeline."""

from __future__ import annotations

from typing import Optional


class CacheControlPipelineError(Exception):
    """Base exception for all cache-control pipeline errors."""


class S3Error(CacheControlPipelineError):
    """Error raised for S3 related failures.

    ``code`` holds the AWS error code (e.g. ``"404"`` or ``"AccessDenied"``)
    when the underlying client reported one.
    """

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class ConfigurationError(CacheControlPipelineError):
    """Error raised for invalid configuration options or client setup."""


class EstimationError(CacheControlPipelineError):
    """Error raised when the bucket size can not be estimated."""
