"""
Logging setup for taskdock.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


# Global console for pretty output
console = Console(stderr=True)


def setup_logging(log_level: str = "INFO", pretty: bool = True) -> logging.Logger:
    """
    Set up logging for the taskdock package.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        pretty: Use rich console output instead of plain text

    Returns:
        Configured logger
    """
    logger = logging.getLogger("taskdock")
    logger.setLevel(getattr(logging, log_level.upper()))
    logger.handlers = []  # Clear existing handlers

    if pretty:
        handler: logging.Handler = RichHandler(
            console=console, rich_tracebacks=True, show_time=False, show_path=False
        )
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    logger.addHandler(handler)
    return logger
