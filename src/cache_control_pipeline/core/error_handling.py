# src/cache_control_pipeline/core/error_handling.py

import functools
import logging
from typing import Any, Callable, Optional, TypeVar

from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import S3Error

NOT_FOUND_CODES = ("404", "NotFound", "NoSuchKey")

F = TypeVar("F", bound=Callable[..., Any])


def error_code(exc: BaseException) -> Optional[str]:
    """Return the AWS error code carried by ``exc``, if any."""
    if isinstance(exc, S3Error):
        return exc.code
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None


def is_not_found(code: Optional[str]) -> bool:
    return code in NOT_FOUND_CODES


def with_error_handling(func: F) -> F:
    """
    A decorator to wrap boto3 calls with standardized error handling.

    botocore errors become ``S3Error`` (keeping the AWS error code). Any
    other exception is logged and re-raised unchanged, so callers can tell
    a classified S3 failure from one the transport could not classify.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__ + '.' + func.__name__)
        try:
            return func(*args, **kwargs)
        except ClientError as e:
            code = error_code(e)
            logger.debug(f"S3 operation '{func.__name__}' failed with code {code}: {e}")
            raise S3Error(f"S3 operation failed in {func.__name__}: {e}", code=code) from e
        except BotoCoreError as e:
            logger.debug(f"S3 operation '{func.__name__}' failed: {e}")
            raise S3Error(f"S3 operation failed in {func.__name__}: {e}") from e
        except Exception as e:
            logger.error(
                f"Error in '{func.__name__}': {e}",
                exc_info=True
            )
            raise
    return wrapper  # type: ignore[return-value]
