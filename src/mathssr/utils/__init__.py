"""Utility modules for mathssr.

Provides:
- logger: get_logger for namespaced logging
"""

from mathssr.utils.logger import get_logger

__all__ = [
    "get_logger",
]
