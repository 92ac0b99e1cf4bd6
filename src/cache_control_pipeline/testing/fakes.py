"""Fake implementations for testing purposes."""

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple
from urllib.parse import unquote

from botocore.exceptions import ClientError


def client_error(code: str, message: str, operation: str) -> ClientError:
    """Build a botocore ClientError the way the real client raises it."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@dataclass
class S3Object:
    """Fake S3 object for testing."""

    key: str
    body: bytes = b""
    content_type: Optional[str] = None
    cache_control: Optional[str] = None
    size: int = 0

    def __post_init__(self):
        if self.size == 0:
            self.size = len(self.body)


@dataclass
class S3Bucket:
    """Fake S3 bucket for testing."""

    name: str
    objects: Dict[str, S3Object] = field(default_factory=dict)

    def add_object(
        self,
        key: str,
        body: bytes = b"data",
        content_type: Optional[str] = None,
        cache_control: Optional[str] = None,
    ) -> S3Object:
        """Add object to bucket."""
        obj = S3Object(
            key=key, body=body, content_type=content_type, cache_control=cache_control
        )
        self.objects[key] = obj
        return obj

    def get_object(self, key: str) -> Optional[S3Object]:
        """Get object from bucket."""
        return self.objects.get(key)

    def list_keys(self, prefix: str = "", start_after: str = "") -> List[str]:
        """Keys in lexicographic order, filtered by prefix, strictly after ``start_after``."""
        return sorted(
            key
            for key in self.objects
            if key.startswith(prefix) and (not start_after or key > start_after)
        )


class FakeS3Client:
    """Fake S3 client for testing; safe to share between worker threads."""

    def __init__(self):
        self.buckets: Dict[str, S3Bucket] = {}
        self.operation_count = 0
        self.should_fail = False
        self.failure_message = "Simulated S3 failure"
        self.delay_seconds = 0.0
        self.failures: Dict[Tuple[str, Optional[str], Optional[str]], BaseException] = {}
        self.head_calls: List[Tuple[str, str]] = []
        self.copy_calls: List[Dict[str, Any]] = []
        self.list_page_calls = 0
        self._lock = threading.Lock()

    def create_bucket(self, name: str) -> S3Bucket:
        """Create a new bucket."""
        bucket = S3Bucket(name=name)
        self.buckets[name] = bucket
        return bucket

    def get_bucket(self, name: str) -> Optional[S3Bucket]:
        """Get bucket by name."""
        return self.buckets.get(name)

    def set_failure_mode(
        self, should_fail: bool, message: str = "Simulated failure"
    ) -> None:
        """Make every operation raise a plain (unclassifiable) exception."""
        self.should_fail = should_fail
        self.failure_message = message

    def fail_operation(
        self,
        operation: str,
        error: BaseException,
        key: Optional[str] = None,
        bucket: Optional[str] = None,
    ) -> None:
        """Raise ``error`` from ``operation``, narrowed to ``key`` and/or ``bucket`` if given."""
        self.failures[(operation, bucket, key)] = error

    def set_delay(self, seconds: float) -> None:
        """Set artificial delay to widen race windows between workers."""
        self.delay_seconds = seconds

    def _before(
        self, operation: str, bucket: Optional[str] = None, key: Optional[str] = None
    ) -> None:
        with self._lock:
            self.operation_count += 1
        if self.delay_seconds > 0:
            time.sleep(self.delay_seconds)
        if self.should_fail:
            raise Exception(self.failure_message)
        for candidate in (
            (operation, bucket, key),
            (operation, None, key),
            (operation, bucket, None),
            (operation, None, None),
        ):
            error = self.failures.get(candidate)
            if error is not None:
                raise error

    def head_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Object metadata; 404 ClientError when missing."""
        with self._lock:
            self.head_calls.append((Bucket, Key))
        self._before("head_object", Bucket, Key)

        bucket = self.buckets.get(Bucket)
        obj = bucket.get_object(Key) if bucket else None
        if obj is None:
            raise client_error("404", "Not Found", "HeadObject")

        response: Dict[str, Any] = {"ContentLength": obj.size}
        if obj.content_type is not None:
            response["ContentType"] = obj.content_type
        if obj.cache_control is not None:
            response["CacheControl"] = obj.cache_control
        return response

    def copy_object(
        self,
        Bucket: str,
        Key: str,
        CopySource: Any,
        MetadataDirective: str = "COPY",
        CacheControl: Optional[str] = None,
        ContentType: Optional[str] = None,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """Server side copy honoring MetadataDirective."""
        call = {
            "Bucket": Bucket,
            "Key": Key,
            "CopySource": CopySource,
            "MetadataDirective": MetadataDirective,
            "CacheControl": CacheControl,
            "ContentType": ContentType,
            **kwargs,
        }
        self._before("copy_object", Bucket, Key)

        if isinstance(CopySource, dict):
            source_bucket_name, source_key = CopySource["Bucket"], CopySource["Key"]
        else:
            source_bucket_name, _, source_key = unquote(CopySource).partition("/")

        with self._lock:
            source_bucket = self.buckets.get(source_bucket_name)
            source = source_bucket.get_object(source_key) if source_bucket else None
            if source is None:
                raise client_error("NoSuchKey", "The specified key does not exist.", "CopyObject")
            dest_bucket = self.buckets.get(Bucket)
            if dest_bucket is None:
                raise client_error("NoSuchBucket", "The specified bucket does not exist", "CopyObject")

            if MetadataDirective == "REPLACE":
                content_type, cache_control = ContentType, CacheControl
            else:
                content_type, cache_control = source.content_type, source.cache_control
            dest_bucket.add_object(Key, source.body, content_type, cache_control)
            self.copy_calls.append(call)

        return {
            "CopyObjectResult": {"ETag": f'"fake-etag-{Key}"'},
            "ResponseMetadata": {"HTTPStatusCode": 200},
        }

    def get_paginator(self, operation_name: str) -> "FakeS3Paginator":
        """Get paginator for S3 operations."""
        return FakeS3Paginator(self, operation_name)


class FakeS3Paginator:
    """Fake list_objects_v2 paginator; pages are fetched lazily like botocore's."""

    def __init__(self, s3_client: FakeS3Client, operation_name: str):
        self.s3_client = s3_client
        self.operation_name = operation_name

    def paginate(
        self,
        Bucket: str,
        Prefix: str = "",
        StartAfter: str = "",
        PaginationConfig: Optional[Dict[str, Any]] = None,
    ) -> Iterator[Dict[str, Any]]:
        """Yield pages of at most PageSize keys."""
        page_size = (PaginationConfig or {}).get("PageSize", 1000)
        client = self.s3_client
        last_key = StartAfter
        while True:
            with client._lock:
                client.list_page_calls += 1
            client._before(self.operation_name, Bucket)

            bucket = client.buckets.get(Bucket)
            if bucket is None:
                raise client_error(
                    "NoSuchBucket", "The specified bucket does not exist", "ListObjectsV2"
                )
            with client._lock:
                keys = bucket.list_keys(Prefix, last_key)
            page_keys = keys[:page_size]
            page: Dict[str, Any] = {"KeyCount": len(page_keys), "IsTruncated": len(keys) > page_size}
            if page_keys:
                page["Contents"] = [
                    {"Key": key, "Size": bucket.objects[key].size} for key in page_keys
                ]
            yield page
            if not page["IsTruncated"]:
                return
            last_key = page_keys[-1]


class FakeCloudWatchClient:
    """Fake CloudWatch client returning fixed datapoints."""

    def __init__(
        self,
        datapoints: Optional[List[float]] = None,
        error: Optional[BaseException] = None,
    ):
        self.datapoints = datapoints or []
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def get_metric_statistics(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return {
            "Label": kwargs.get("MetricName", ""),
            "Datapoints": [{"Maximum": value, "Unit": "Count"} for value in self.datapoints],
        }


class FakeSTSClient:
    """Fake STS client handing out static temporary credentials."""

    def __init__(self, error: Optional[BaseException] = None):
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def assume_role(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return {
            "Credentials": {
                "AccessKeyId": "AKIAFAKE",
                "SecretAccessKey": "fake-secret",
                "SessionToken": "fake-token",
            }
        }


class FakeClientFactory:
    """Client factory handing out fakes; credentials select the cross-account client."""

    def __init__(
        self,
        s3: Optional[FakeS3Client] = None,
        cloudwatch: Optional[FakeCloudWatchClient] = None,
        cross_account_cloudwatch: Optional[FakeCloudWatchClient] = None,
        sts: Optional[FakeSTSClient] = None,
    ):
        self.s3 = s3 or FakeS3Client()
        self.cloudwatch = cloudwatch or FakeCloudWatchClient()
        self.cross_account_cloudwatch = cross_account_cloudwatch or FakeCloudWatchClient()
        self.sts = sts or FakeSTSClient()
        self.credentials_used: List[Optional[Dict[str, str]]] = []

    def create_s3_client(self, **kwargs: Any) -> FakeS3Client:
        return self.s3

    def create_cloudwatch_client(
        self, credentials: Optional[Dict[str, str]] = None
    ) -> FakeCloudWatchClient:
        self.credentials_used.append(credentials)
        if credentials is None:
            return self.cloudwatch
        return self.cross_account_cloudwatch

    def create_sts_client(self) -> FakeSTSClient:
        return self.sts


def setup_test_s3_environment() -> FakeS3Client:
    """Set up a test S3 environment with sample data."""
    s3_client = FakeS3Client()

    source_bucket = s3_client.create_bucket("test-source")
    source_bucket.add_object("images/2020/cat.png", content_type="image/png")
    source_bucket.add_object("images/2020/dog.jpg", content_type="image/jpeg")
    source_bucket.add_object("images/2021/bird.jpg", content_type="image/jpeg")
    source_bucket.add_object("docs/report.pdf", content_type="application/pdf")
    source_bucket.add_object("docs/readme.txt", content_type="text/plain; charset=utf-8")
    source_bucket.add_object("legacy/untyped", content_type=None)

    s3_client.create_bucket("test-target")

    return s3_client
