"""
Common utilities package for the roster admin backend.
"""

from app.utils.logger import cleanup_old_logs, setup_logger

__all__ = [
    "setup_logger",
    "cleanup_old_logs",
]
