"""Logging setup for the tanksearch MCP server and scripts.

Library modules only create loggers with ``logging.getLogger(__name__)``;
handlers are installed here, once, by the process entry point.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging with a single stderr handler.

    Parameters
    ----------
    level:
        DEBUG, INFO, WARNING, ERROR or CRITICAL. Unknown names fall back to INFO.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates on repeated calls
    for h in root.handlers[:]:
        root.removeHandler(h)

    # stdout is reserved for the MCP stdio transport
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(console)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
