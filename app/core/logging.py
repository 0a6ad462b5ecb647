# app/core/logging.py
import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Send the app's log lines to stdout. Safe to call more than once."""
    root = logging.getLogger("app")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(getattr(h, "_app_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._app_handler = True
        root.addHandler(handler)
