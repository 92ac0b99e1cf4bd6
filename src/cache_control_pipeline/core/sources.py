"""Producers of object keys: paginated bucket listing or a list of names."""

from typing import Iterable, Iterator, Optional

from .context import CopyContext
from .error_handling import with_error_handling
from .exceptions import S3Error
from .logging_config import get_logger
from .protocols import KeySource
from .queues import ClosableQueue

logger = get_logger("object-source")


@with_error_handling
def _next_page(pages: Iterator[dict]) -> Optional[dict]:
    return next(pages, None)


def iter_bucket_keys(
    context: CopyContext, bucket: str, start_after: str = "", prefix: str = ""
) -> Iterator[str]:
    """
    Lazily list keys of ``bucket``, page by page.

    Keys strictly after ``start_after`` are listed, optionally scoped to
    ``prefix``. No further page is requested once the shared copied
    counter has reached the budget. A listing error stops this listing
    and is logged.
    """
    params = {
        "Bucket": bucket,
        "PaginationConfig": {"PageSize": context.config.batch_size},
    }
    if start_after:
        params["StartAfter"] = start_after
    if prefix:
        params["Prefix"] = prefix

    logger.debug(f"Listing s3://{bucket}/{prefix} after '{start_after}'")
    paginator = context.s3_client.get_paginator("list_objects_v2")
    pages = iter(paginator.paginate(**params))
    while True:
        try:
            page = _next_page(pages)
        except S3Error as e:
            logger.error(f"Listing s3://{bucket}/{prefix} failed: {e}")
            return
        if page is None:
            return
        for obj in page.get("Contents", []):
            yield obj["Key"]
        # stop pumping names once we have copied enough
        if context.budget_exhausted:
            logger.info("Copy budget reached, listing stopped")
            return


def iter_listed_keys(context: CopyContext, lines: Iterable[str]) -> Iterator[str]:
    """
    Keys from newline separated names, one per line.

    Blank lines and ``#`` comments are skipped. A trailing ``*`` turns the
    line into a prefix (one leading ``/`` dropped) expanded by listing the
    source bucket.
    """
    for line in lines:
        name = line.strip()
        if not name or name.startswith("#"):
            continue
        if name.endswith("*"):
            prefix = name[:-1]
            if prefix.startswith("/"):
                prefix = prefix[1:]
            yield from iter_bucket_keys(context, context.config.from_bucket, prefix=prefix)
        else:
            yield name


class ObjectSource(KeySource):
    """Emits the keys of one run into the bounded key queue."""

    def __init__(self, context: CopyContext, lines: Optional[Iterable[str]] = None):
        self._context = context
        self._lines = lines

    def keys(self) -> Iterator[str]:
        config = self._context.config
        if self._lines is not None:
            return iter_listed_keys(self._context, self._lines)
        return iter_bucket_keys(
            self._context, config.from_bucket, start_after=config.continue_from
        )

    def produce(self, names: ClosableQueue) -> int:
        """Put every key on ``names`` and close it. Returns the number emitted."""
        emitted = 0
        try:
            for key in self.keys():
                names.put(key)
                emitted += 1
        finally:
            names.close()
        logger.info(f"Listed {emitted} objects")
        return emitted
