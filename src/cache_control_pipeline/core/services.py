"""Per-object decision and metadata-replace copy."""

from typing import Any, Dict, Optional, Tuple

from .context import CopyContext
from .error_handling import is_not_found, with_error_handling
from .exceptions import S3Error
from .logging_config import get_logger
from .models import DEFAULT_CONTENT_TYPE, CopyResult, CopyStatus, ObjectMetadata
from .protocols import DecisionEngine, S3ClientProtocol

logger = get_logger("copy-engine")

_TYPE_STATUSES = {
    "image/png": CopyStatus.PNG,
    "image/jpeg": CopyStatus.JPEG,
    "application/pdf": CopyStatus.PDF,
}


@with_error_handling
def head_object(s3_client: S3ClientProtocol, bucket: str, key: str) -> ObjectMetadata:
    response = s3_client.head_object(Bucket=bucket, Key=key)
    return ObjectMetadata.from_head_response(response)


@with_error_handling
def copy_with_metadata(
    s3_client: S3ClientProtocol,
    from_bucket: str,
    target_bucket: str,
    key: str,
    cache_control: str,
    content_type: str,
) -> Dict[str, Any]:
    # botocore path-escapes the key of a dict CopySource
    return s3_client.copy_object(
        Bucket=target_bucket,
        Key=key,
        CopySource={"Bucket": from_bucket, "Key": key},
        CacheControl=cache_control,
        ContentType=content_type,
        MetadataDirective="REPLACE",
    )


def classify_content_type(content_type: Optional[str]) -> Tuple[CopyStatus, str]:
    """Map a source content type to its copy status and the type to write."""
    if content_type is None:
        return CopyStatus.CONTENT_TYPE_DEFAULTED, DEFAULT_CONTENT_TYPE
    return _TYPE_STATUSES.get(content_type, CopyStatus.OTHER), content_type


class CopyDecisionEngine(DecisionEngine):
    """Decides skip / exclude / rewrite for one key and performs the rewrite."""

    def __init__(self, context: CopyContext):
        self._context = context
        self._config = context.config
        self._s3_client = context.s3_client

    def process(self, key: str) -> CopyResult:
        """Process one key. Never raises; failures come back as results."""
        try:
            return self._process(key)
        except Exception as e:
            logger.error(f"[{key}] Unexpected failure: {e}", exc_info=True)
            return CopyResult(status=CopyStatus.FAILURE, key=key, error=str(e))

    def _process(self, key: str) -> CopyResult:
        try:
            source = head_object(self._s3_client, self._config.from_bucket, key)
        except Exception as e:
            return CopyResult(
                status=CopyStatus.FAILURE,
                key=key,
                error=f"Head for '{key}' failed: {e}",
            )

        try:
            target = self._target_metadata(key)
        except Exception as e:
            return CopyResult(
                status=CopyStatus.FAILURE,
                key=key,
                error=f"Head for target '{key}' failed, unrecognized error: {e}",
            )

        if self._context.is_excluded(key) and source.is_picture:
            return self._result(CopyStatus.EXCLUDED, key, source.content_type)

        if (
            target is not None
            and target.cache_control == self._config.cache_control
            and target.content_type
        ):
            return self._result(CopyStatus.SKIP_ALREADY_SET, key, source.content_type)

        if self._context.budget_exhausted:
            return self._result(CopyStatus.SKIP_OVER_BUDGET, key, source.content_type)

        status, content_type = classify_content_type(source.content_type)
        if not self._config.dry_run:
            try:
                copy_with_metadata(
                    self._s3_client,
                    self._config.from_bucket,
                    self._config.target_bucket,
                    key,
                    self._config.cache_control,
                    content_type,
                )
            except Exception as e:
                return CopyResult(
                    status=CopyStatus.FAILURE,
                    key=key,
                    error=f"Failed changing (copying) object: {e}",
                )
        self._context.copied_objects.increment()
        logger.debug(f"[{key}] Copied with {content_type}")
        return self._result(status, key, content_type)

    def _target_metadata(self, key: str) -> Optional[ObjectMetadata]:
        """Target snapshot, or None when missing or not classifiably readable."""
        try:
            return head_object(self._s3_client, self._config.target_bucket, key)
        except S3Error as e:
            if not is_not_found(e.code):
                logger.warning(
                    f"Missing target head for '{key}' (code {e.code}): {e}"
                )
            return None

    @staticmethod
    def _result(status: CopyStatus, key: str, content_type: Optional[str]) -> CopyResult:
        return CopyResult(status=status, key=key, content_type=content_type or "")
