"""
Utilities package for the catalog administration tool.

Exports shared helpers for logging and profiling. Keep this package
lightweight and free of catalog-specific logic.
"""

from catalog_admin.utils.logging import configure_logging, get_logger
from catalog_admin.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
