"""Shared data models for the cache-control pipeline."""

import re
import sys
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_CACHE_CONTROL = "max-age=31536000,public"
DEFAULT_EXTERNAL_ID = "123ABC"
DEFAULT_CONTENT_TYPE = "image/png"
PICTURE_CONTENT_TYPES = ("image/jpeg", "image/png")

MIN_BATCH_SIZE = 10
MAX_BATCH_SIZE = 1000
RESULT_QUEUE_SIZE = 10000


class CopyStatus(str, Enum):
    """Outcome of processing one object key."""

    EXCLUDED = "excluded"
    SKIP_ALREADY_SET = "skip-already-set"
    SKIP_OVER_BUDGET = "skip-over-budget"
    CONTENT_TYPE_DEFAULTED = "content-type-defaulted"
    PNG = "png"
    JPEG = "jpeg"
    PDF = "pdf"
    OTHER = "other"
    FAILURE = "failure"

    @property
    def code(self) -> str:
        """Single character printed per key for live progress."""
        return _STATUS_CODES[self]

    @property
    def copies(self) -> bool:
        """Whether this status means a (possibly dry-run) copy was issued."""
        return self in _COPY_STATUSES


_STATUS_CODES = {
    CopyStatus.EXCLUDED: "E",
    CopyStatus.SKIP_ALREADY_SET: ".",
    CopyStatus.SKIP_OVER_BUDGET: ",",
    CopyStatus.CONTENT_TYPE_DEFAULTED: "X",
    CopyStatus.PNG: "g",
    CopyStatus.JPEG: "j",
    CopyStatus.PDF: "P",
    CopyStatus.OTHER: "Y",
    CopyStatus.FAILURE: "!",
}

_COPY_STATUSES = frozenset(
    {
        CopyStatus.CONTENT_TYPE_DEFAULTED,
        CopyStatus.PNG,
        CopyStatus.JPEG,
        CopyStatus.PDF,
        CopyStatus.OTHER,
    }
)


class CopyConfig(BaseModel):
    """Configuration for one copy run."""

    model_config = ConfigDict(frozen=True)

    target_bucket: str
    from_bucket: str = ""
    cache_control: str = DEFAULT_CACHE_CONTROL
    parallelism: int = Field(default=200, gt=0)
    dry_run: bool = False
    exclude_pattern: Optional[str] = None
    max_objects: int = Field(default=sys.maxsize, ge=0)
    continue_from: str = ""
    from_stdin: bool = False
    cloudwatch_role: Optional[str] = None
    external_id: str = DEFAULT_EXTERNAL_ID
    log_dir: str = "."
    report_interval: float = Field(default=12.0, gt=0)
    metric_window_hours: int = Field(default=72, gt=0)
    debug: bool = False

    @field_validator("target_bucket")
    @classmethod
    def _target_required(cls, value: str) -> str:
        if not value:
            raise ValueError("target bucket is required")
        return value

    @field_validator("exclude_pattern")
    @classmethod
    def _valid_pattern(cls, value: Optional[str]) -> Optional[str]:
        if value:
            try:
                re.compile(value)
            except re.error as exc:
                raise ValueError(f"invalid exclude pattern {value!r}: {exc}") from exc
        return value or None

    @model_validator(mode="before")
    @classmethod
    def _default_from_bucket(cls, data: Any) -> Any:
        # in-place rewrite when no source bucket is given
        if isinstance(data, dict) and not data.get("from_bucket"):
            data = {**data, "from_bucket": data.get("target_bucket", "")}
        return data

    @property
    def in_place(self) -> bool:
        return self.from_bucket == self.target_bucket

    @property
    def batch_size(self) -> int:
        """Listing page size derived from the copy budget."""
        return max(MIN_BATCH_SIZE, min(MAX_BATCH_SIZE, self.max_objects // 2))

    @property
    def key_queue_size(self) -> int:
        return self.batch_size * 3


class ObjectMetadata(BaseModel):
    """Metadata snapshot returned by a head request."""

    content_type: Optional[str] = None
    cache_control: Optional[str] = None

    @classmethod
    def from_head_response(cls, response: Dict[str, Any]) -> "ObjectMetadata":
        return cls(
            content_type=response.get("ContentType"),
            cache_control=response.get("CacheControl"),
        )

    @property
    def is_picture(self) -> bool:
        return self.content_type in PICTURE_CONTENT_TYPES


class CopyResult(BaseModel):
    """Result of processing a single object key."""

    status: CopyStatus
    key: str
    content_type: str = ""
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None
