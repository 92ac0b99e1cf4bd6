#!/usr/bin/env python3
"""
Put Cache-Control CLI

Sets the Cache-Control header on every object of an S3 bucket by copying
each object onto itself (or from another bucket) with replaced metadata.
"""

import sys
import argparse
from typing import List, Optional

from pydantic import ValidationError

from .core import (
    CacheControlPipelineError,
    ConfigurationError,
    CopyConfig,
    get_logger,
    set_log_level,
)
from .core.factories import PipelineFactory
from .core.models import DEFAULT_CACHE_CONTROL, DEFAULT_EXTERNAL_ID

CROSS_ACCOUNT_HELP = """
Sometimes you need to copy objects between buckets of different accounts
(e.g. prod vs. nonprod). The running identity needs write permission on the
target bucket and read permission on the 'from' bucket. For a correct
progress estimate it also needs CloudWatch metric access for the 'from'
bucket; this role is assumed to read the metric when direct access fails.
"""


def add_arguments(parser: argparse.ArgumentParser) -> None:
    """Register the copy options on ``parser``."""
    parser.add_argument(
        "-t",
        "--target-bucket",
        required=True,
        help="where changes will happen: objects added or metadata changed",
    )
    parser.add_argument(
        "-f",
        "--from-bucket",
        default="",
        help="if omitted, copy in place (target-bucket = from-bucket)",
    )
    parser.add_argument(
        "-c",
        "--cache-control",
        default=DEFAULT_CACHE_CONTROL,
        help="Cache-Control value to set (default: cache for one year)",
    )
    parser.add_argument(
        "-p",
        "--parallelism",
        "--parallelity",
        type=int,
        default=200,
        help="number of workers; keep below the open file limit (default: 200)",
    )
    parser.add_argument(
        "--noop",
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="make no changes, just gather statistics",
    )
    parser.add_argument(
        "-e",
        "--exclude-pictures",
        default=None,
        help="do not process pictures whose key matches this regex",
    )
    parser.add_argument(
        "-n",
        "--first-n",
        type=int,
        default=sys.maxsize,
        help="stop roughly after copying n objects; skipped and excluded do not count",
    )
    parser.add_argument(
        "-u",
        "--continue",
        dest="continue_from",
        default="",
        help="do not start over, continue after the given key",
    )
    parser.add_argument(
        "--stdin",
        action="store_true",
        help="read keys to copy from stdin, one per line; a trailing * lists a prefix",
    )
    parser.add_argument(
        "-r",
        "--cross-account-cloudwatch-role",
        default=None,
        help=CROSS_ACCOUNT_HELP,
    )
    parser.add_argument(
        "--external-id",
        default=DEFAULT_EXTERNAL_ID,
        help="external id used when assuming the cross-account role",
    )
    parser.add_argument(
        "--log-dir", default=".", help="directory for the objects and error-keys logs"
    )
    parser.add_argument(
        "--report-interval",
        type=float,
        default=12.0,
        help="seconds between progress reports (default: 12)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the cache-control copy.

    Returns:
        An `argparse.Namespace` object containing the parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description=(
            "Set Cache-Control header for all objects in a S3 bucket. "
            "Optionally copies objects from another bucket."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    add_arguments(parser)
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> CopyConfig:
    """Turn parsed arguments into a validated configuration."""
    try:
        return CopyConfig(
            target_bucket=args.target_bucket,
            from_bucket=args.from_bucket,
            cache_control=args.cache_control,
            parallelism=args.parallelism,
            dry_run=args.dry_run,
            exclude_pattern=args.exclude_pictures,
            max_objects=args.first_n,
            continue_from=args.continue_from,
            from_stdin=args.stdin,
            cloudwatch_role=args.cross_account_cloudwatch_role,
            external_id=args.external_id,
            log_dir=args.log_dir,
            report_interval=args.report_interval,
            debug=args.debug,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def run(args: argparse.Namespace) -> None:
    """Build the pipeline from parsed arguments and run it."""
    config = build_config(args)
    if config.debug:
        set_log_level("DEBUG")

    pipeline = PipelineFactory.create_pipeline(config)
    lines = sys.stdin if config.from_stdin else None
    pipeline.run(lines)


def execute(args: argparse.Namespace) -> None:
    """
    Run with parsed arguments and map failures to the exit status.

    Exits with status 1 on setup errors; per-object failures are reported
    in the error-keys log and do not change the exit status.
    """
    logger = get_logger("processor")
    try:
        run(args)
    except KeyboardInterrupt:
        logger.warning("Processing interrupted by user.")
    except CacheControlPipelineError as e:
        logger.error(f"Processing failed: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Processing failed: {e}", exc_info=True)
        sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the put-cache-control script."""
    execute(parse_args(argv))


if __name__ == "__main__":
    main()
