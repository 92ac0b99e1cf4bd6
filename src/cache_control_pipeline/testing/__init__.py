"""Testing utilities and fakes for the cache-control pipeline."""

from .fakes import (
    FakeClientFactory,
    FakeCloudWatchClient,
    FakeS3Client,
    FakeS3Paginator,
    FakeSTSClient,
    S3Bucket,
    S3Object,
    client_error,
    setup_test_s3_environment,
)

__all__ = [
    "FakeClientFactory",
    "FakeCloudWatchClient",
    "FakeS3Client",
    "FakeS3Paginator",
    "FakeSTSClient",
    "S3Bucket",
    "S3Object",
    "client_error",
    "setup_test_s3_environment",
]
