# formstore/services/retention/cleanup_service.py
"""
Cleanup service for age-based removal of stored entries.

Handles:
- Resolving a bucket's retention interval from configuration
- Converting calendar intervals to whole days to keep
- Per-entry deletion with optional removal of uploaded files
- Batch runs over configured buckets or all buckets, with per-bucket reporting

A problem with one bucket (missing or invalid rule, storage error) is
reported for that bucket and never stops the rest of the run.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from formstore.config import CleanupRule
from formstore.models import utcnow
from formstore.services.entries import count_entries, delete_by_bucket, list_buckets
from formstore.services.intervals import InvalidIntervalError, cutoff_for, days_to_keep, parse_interval
from formstore.storage.base import ResourceStore

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when a bucket has no usable retention rule."""

    def __init__(self, bucket: str, message: str):
        super().__init__(message)
        self.bucket = bucket


@dataclass
class CleanupResult:
    """Outcome of cleaning up one bucket."""

    bucket: str
    message: str
    removed: int = 0
    total: int = 0
    days_to_keep: Optional[int] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


def resolve_interval(bucket: str, config: Mapping[str, CleanupRule]) -> relativedelta:
    """Interval configured for bucket. Raises ConfigurationError if missing or invalid."""
    rule = config.get(bucket)
    if rule is None:
        raise ConfigurationError(bucket, f"No cleanup rule configured for bucket '{bucket}'")
    if not rule.interval:
        raise ConfigurationError(bucket, f"No interval configured for bucket '{bucket}'")
    try:
        return parse_interval(rule.interval)
    except InvalidIntervalError as e:
        raise ConfigurationError(bucket, f"Invalid interval '{rule.interval}' for bucket '{bucket}': {e}") from e


def cleanup(
    db: Session,
    bucket: str,
    interval: Optional[relativedelta],
    remove_attached_resources: bool = False,
    resources: Optional[ResourceStore] = None,
    now: Optional[datetime] = None,
) -> int:
    """
    Delete entries of bucket that are at least days_to_keep(interval) whole days old.

    Without an interval every entry of the bucket is deleted. Returns the
    number of deleted entries.
    """
    cutoff = None
    if interval is not None:
        cutoff = cutoff_for(interval, now)

    removed = delete_by_bucket(
        db,
        bucket,
        cutoff=cutoff,
        remove_resources=remove_attached_resources,
        resources=resources,
    )
    logger.info(
        f"Removed {removed} entries from bucket '{bucket}'" + (f" created before {cutoff}" if cutoff else ""),
        extra={"bucket": bucket, "removed": removed},
    )
    return removed


def _cleanup_bucket(
    db: Session,
    bucket: str,
    interval: relativedelta,
    remove_attached_resources: bool,
    resources: Optional[ResourceStore],
    now: datetime,
) -> CleanupResult:
    days = days_to_keep(interval, now)
    total = count_entries(db, bucket)
    if total == 0:
        return CleanupResult(bucket=bucket, message="No entries found.", days_to_keep=days)

    try:
        removed = cleanup(db, bucket, interval, remove_attached_resources, resources=resources, now=now)
    except Exception as e:
        db.rollback()
        logger.error(f"Cleanup of bucket '{bucket}' failed: {e}", extra={"bucket": bucket})
        return CleanupResult(
            bucket=bucket,
            message=f"Cleanup failed: {e}",
            total=total,
            days_to_keep=days,
            error=str(e),
        )

    logger.info(
        f"Bucket '{bucket}': removed {removed} of {total} entries older than {days} days",
        extra={"bucket": bucket, "removed": removed, "total": total, "days_to_keep": days},
    )
    return CleanupResult(
        bucket=bucket,
        message=f"removed {removed} of {total} entries older than {days} days",
        removed=removed,
        total=total,
        days_to_keep=days,
    )


def run_configured_cleanup(
    db: Session,
    config: Mapping[str, CleanupRule],
    resources: Optional[ResourceStore] = None,
    now: Optional[datetime] = None,
) -> dict[str, CleanupResult]:
    """
    Clean up every configured bucket with its own interval and removeFiles flag.

    Configuration errors are recorded against their bucket.
    """
    now = now or utcnow()
    results: dict[str, CleanupResult] = {}

    for bucket, rule in config.items():
        try:
            interval = resolve_interval(bucket, config)
        except ConfigurationError as e:
            logger.warning(str(e), extra={"bucket": bucket})
            results[bucket] = CleanupResult(bucket=bucket, message=str(e), error=str(e))
            continue

        results[bucket] = _cleanup_bucket(db, bucket, interval, rule.remove_files, resources, now)

    return results


def run_all_buckets_cleanup(
    db: Session,
    interval: relativedelta,
    remove_attached_resources: bool = False,
    include_configured_buckets: bool = False,
    configured: Iterable[str] = (),
    resources: Optional[ResourceStore] = None,
    now: Optional[datetime] = None,
) -> dict[str, CleanupResult]:
    """
    Clean up every bucket in storage with one interval.

    Buckets with their own configured rule are left alone unless
    include_configured_buckets is set.
    """
    now = now or utcnow()
    excluded = [] if include_configured_buckets else list(configured)

    results: dict[str, CleanupResult] = {}
    for bucket in list_buckets(db, excluding=excluded):
        results[bucket] = _cleanup_bucket(db, bucket, interval, remove_attached_resources, resources, now)
    return results
