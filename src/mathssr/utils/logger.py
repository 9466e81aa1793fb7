"""Logging helper for mathssr.

Wraps the standard library logging so every module logs under the
``mathssr`` namespace. Applications (and the CLI) configure handlers on
that namespace; the library itself never installs handlers.

Example:
    >>> from mathssr.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.warning("Error rendering: %s", r"\\frac{1}{")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance under the "mathssr." prefix

    Example:
        >>> get_logger("engine").name
        'mathssr.engine'
        >>> get_logger("mathssr.engine").name
        'mathssr.engine'
    """
    if not (name == "mathssr" or name.startswith("mathssr.")):
        name = f"mathssr.{name}"
    return logging.getLogger(name)
