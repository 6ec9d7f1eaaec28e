# formstore/services/__init__.py
"""
Business logic services.

- entries: storing, reading and deleting form entries
- schema / fields / values: column labels and value rendering
- export: bucket listing and file export
- retention: age-based cleanup of buckets
"""
