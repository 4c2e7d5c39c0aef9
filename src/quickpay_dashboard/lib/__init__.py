"""
Small local libraries shared across the dashboard.

Modules:
    logs: Logging utilities
    objects: JSON serialization for log output
    paths: Path utilities
    caches: Disk-backed cache and UI preference persistence
    clients: Databricks client factories (Spark, Workspace), imported
        lazily by the live services only
"""

from quickpay_dashboard.lib import caches, logs, objects, paths

__all__ = ["caches", "logs", "objects", "paths"]
