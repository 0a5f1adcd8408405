"""
Logging utilities for the storage layer and the processes hosting it.

Provides a consistent logging format and configuration.
"""

import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with the shared pipe-delimited format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    # httpx logs every request at INFO; keep it out of the task logs.
    logging.getLogger("httpx").setLevel(max(logging.WARNING, logging.getLogger().level))


__all__ = ["configure_logging"]
