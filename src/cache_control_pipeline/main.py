"""Main module for the cache-control pipeline CLI."""

import sys
import argparse

from .put_cache_control import add_arguments, execute

VERSION = "0.1.0"


def main() -> None:
    """
    Entry point for the unified command-line interface (CLI).

    Commands are "run" (set Cache-Control on a bucket) and "version".
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="cache-control-pipeline",
        description="Set Cache-Control metadata on all objects of an S3 bucket",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Rewrite a bucket in place with the default one-year caching
  cache-control-pipeline run --target-bucket my-bucket

  # Copy from another bucket, at most 1000 objects, 50 workers
  cache-control-pipeline run -t my-bucket -f old-bucket -n 1000 -p 50

  # Re-drive the keys that failed in a previous run
  cache-control-pipeline run -t my-bucket --stdin < 2024-01-01-120000-error-keys.log

  # Show version
  cache-control-pipeline version
        """,
    )

    subparsers: argparse._SubParsersAction = parser.add_subparsers(
        dest="command", help="Available commands"
    )
    run_parser: argparse.ArgumentParser = subparsers.add_parser(
        "run", help="Set Cache-Control on the objects of a bucket"
    )
    add_arguments(run_parser)
    subparsers.add_parser("version", help="Show version information")

    args: argparse.Namespace = parser.parse_args()

    if args.command == "run":
        execute(args)

    elif args.command == "version":
        print("Cache-Control Pipeline CLI")
        print(f"Version {VERSION}")
        print("Bulk S3 Cache-Control and Content-Type rewrite")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
