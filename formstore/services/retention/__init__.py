# formstore/services/retention/__init__.py
"""
Retention management for stored form entries.

Buckets are cleaned up by age:
- Configured buckets: each with its own calendar interval and removeFiles flag
- All buckets: one interval for every bucket, optionally skipping configured ones

Services:
- cleanup_service: interval resolution, per-bucket deletion, batch runs
"""

from formstore.services.retention.cleanup_service import (
    CleanupResult,
    ConfigurationError,
    cleanup,
    resolve_interval,
    run_all_buckets_cleanup,
    run_configured_cleanup,
)
from formstore.services.entries import count_entries, list_buckets
from formstore.services.intervals import days_to_keep

__all__ = [
    "CleanupResult",
    "ConfigurationError",
    "cleanup",
    "resolve_interval",
    "run_configured_cleanup",
    "run_all_buckets_cleanup",
    "list_buckets",
    "count_entries",
    "days_to_keep",
]
