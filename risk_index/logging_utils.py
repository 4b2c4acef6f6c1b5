"""
Risk Index Engine - Logging Setup.
"""

import json
import logging
import sys
from typing import Optional, TextIO


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Install a single stream handler on the ``risk_index`` logger.

    Args:
        level: Log level name
        log_format: Output format (json or text)
        stream: Destination stream (default: stderr)

    Returns:
        The package logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "message": "%(message)s",
            })
        )
    else:
        formatter = logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)

    package_logger = logging.getLogger("risk_index")
    package_logger.setLevel(log_level)
    package_logger.handlers = [handler]

    return package_logger
