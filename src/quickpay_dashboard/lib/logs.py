"""
Logging utilities for the QuickPay dashboard.

Provides a small logger factory so every module logs with the same
format and level, configured once from the LOG_LEVEL environment variable.
"""

import logging
import os
from pathlib import Path

_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def logger(name: str) -> logging.Logger:
    """
    Create and configure a logger for the given name.

    Module paths (``__file__``) are reduced to their stem so log lines read
    ``invoice_store`` rather than a full filesystem path.

    Args:
        name: Logger name or __file__ path.

    Returns:
        Configured logging.Logger instance.
    """
    if "/" in name or "\\" in name:
        name = f"quickpay.{Path(name).stem}"

    log = logging.getLogger(name)

    if not log.handlers:
        log.setLevel(getattr(logging, _LOG_LEVEL, logging.INFO))
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        log.addHandler(handler)

    return log


def set_level(level: str) -> None:
    """Apply a level to every logger created through this module."""
    resolved = getattr(logging, level.upper(), logging.INFO)
    for name, log in logging.root.manager.loggerDict.items():
        if name.startswith("quickpay.") and isinstance(log, logging.Logger):
            log.setLevel(resolved)
