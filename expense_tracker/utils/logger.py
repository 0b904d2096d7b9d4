"""
Centralized logging setup for the application.

Modules log through ``logging.getLogger(__name__)``; this module only installs
the handler and format once at startup.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configures the root logger to write to stdout.

    Safe to call more than once: handlers are only added the first time.

    Returns:
        logging.Logger: The package logger ("expense_tracker").
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    if not any(getattr(h, "_expense_tracker", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._expense_tracker = True
        root.addHandler(handler)

    return logging.getLogger("expense_tracker")
