# formstore/cli/cleanup.py
"""
CLI commands for bucket cleanup.

Usage:
    python -m formstore.cli.cleanup list-buckets
    python -m formstore.cli.cleanup cleanup-configured-buckets
    python -m formstore.cli.cleanup cleanup-all-buckets --interval P30D
    python -m formstore.cli.cleanup cleanup-all-buckets --interval P1Y --remove-files --include-configured-buckets
"""

import argparse
import sys

from dotenv import load_dotenv

load_dotenv()


def _setup_logging():
    from formstore.config import get_settings
    from formstore.logging_config import configure_logging

    settings = get_settings()
    configure_logging(json_format=settings.LOG_JSON, level=settings.LOG_LEVEL)
    return settings


def print_results(results) -> None:
    """Print a bucket | message table."""
    if not results:
        print("No buckets to clean up.")
        return

    width = max(len("Bucket"), *(len(bucket) for bucket in results))
    print(f"{'Bucket'.ljust(width)} | Message")
    print(f"{'-' * width}-+-{'-' * 40}")
    for bucket, result in results.items():
        print(f"{bucket.ljust(width)} | {result.message}")


def cmd_cleanup_configured_buckets(args):
    """Clean up every configured bucket with its own interval."""
    from formstore.database import session_scope
    from formstore.logging_config import log_operation
    from formstore.services.retention import run_configured_cleanup

    settings = _setup_logging()

    with session_scope() as db, log_operation("cleanup-configured-buckets"):
        results = run_configured_cleanup(db, settings.CLEANUP)

    print_results(results)


def cmd_cleanup_all_buckets(args):
    """Clean up every bucket with one interval."""
    from formstore.services.intervals import InvalidIntervalError, parse_interval

    try:
        interval = parse_interval(args.interval)
    except InvalidIntervalError as e:
        print(f"Error: {e}")
        print("Provide an ISO 8601 interval, e.g. --interval P30D or --interval P1Y2M")
        sys.exit(1)

    from formstore.database import session_scope
    from formstore.logging_config import log_operation
    from formstore.services.retention import run_all_buckets_cleanup

    settings = _setup_logging()

    with session_scope() as db, log_operation("cleanup-all-buckets"):
        results = run_all_buckets_cleanup(
            db,
            interval,
            remove_attached_resources=args.remove_files,
            include_configured_buckets=args.include_configured_buckets,
            configured=settings.CLEANUP.keys(),
        )

    print_results(results)


def cmd_list_buckets(args):
    """List buckets with their entry counts."""
    from formstore.database import session_scope
    from formstore.services.entries import bucket_counts

    _setup_logging()

    with session_scope() as db:
        counts = bucket_counts(db)

    if not counts:
        print("No buckets found.")
        return

    print("\n=== Buckets ===\n")
    for bucket, count in counts.items():
        print(f"{bucket}: {count}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Form storage cleanup CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show buckets and entry counts
  python -m formstore.cli.cleanup list-buckets

  # Apply the CLEANUP rules from settings
  python -m formstore.cli.cleanup cleanup-configured-buckets

  # Remove entries older than 30 days from all unconfigured buckets
  python -m formstore.cli.cleanup cleanup-all-buckets --interval P30D

  # Same for every bucket, uploaded files included
  python -m formstore.cli.cleanup cleanup-all-buckets --interval P30D --remove-files --include-configured-buckets
        """,
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # cleanup-configured-buckets command
    configured_parser = subparsers.add_parser(
        "cleanup-configured-buckets",
        help="Clean up configured buckets with their own intervals",
    )
    configured_parser.set_defaults(func=cmd_cleanup_configured_buckets)

    # cleanup-all-buckets command
    all_parser = subparsers.add_parser("cleanup-all-buckets", help="Clean up all buckets with one interval")
    all_parser.add_argument("--interval", default="", help="ISO 8601 interval, e.g. P30D")
    all_parser.add_argument("--remove-files", action="store_true", help="Also delete uploaded files")
    all_parser.add_argument(
        "--include-configured-buckets",
        action="store_true",
        help="Also clean up buckets that have their own rule",
    )
    all_parser.set_defaults(func=cmd_cleanup_all_buckets)

    # list-buckets command
    list_parser = subparsers.add_parser("list-buckets", help="List buckets with entry counts")
    list_parser.set_defaults(func=cmd_list_buckets)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
