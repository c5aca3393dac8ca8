"""
Task file discovery.

When the default task file name is requested, the search starts in the
working directory and walks up through the parents, so a task file at a
project root is found from any subdirectory. Any other name is used as-is.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Optional

from taskdock.config import DEFAULT_TASK_FILE
from taskdock.errors import TaskFileNotFoundError

logger = logging.getLogger(__name__)


def find_task_file(
    filename: str = DEFAULT_TASK_FILE,
    start: Optional[Path | str] = None,
    exists: Optional[Callable[[str], bool]] = None,
) -> str:
    """
    Locate the task file.

    Args:
        filename: Requested task file; anything but the default name is
                  returned unchanged without searching
        start: Directory to start searching from (default: working directory)
        exists: File existence predicate (default: os.path.isfile)

    Returns:
        Path to the task file

    Raises:
        TaskFileNotFoundError: If no directory up to the root holds the file
    """
    if filename != DEFAULT_TASK_FILE:
        return filename

    exists = exists or os.path.isfile
    current = os.path.abspath(start if start is not None else os.getcwd())

    while True:
        candidate = os.path.join(current, DEFAULT_TASK_FILE)
        logger.debug("Looking for task file at %s", candidate)
        if exists(candidate):
            return candidate

        parent = os.path.dirname(current)
        # dirname of the root is the root itself
        if not current or parent == current:
            raise TaskFileNotFoundError(
                f"failed to find task file '{DEFAULT_TASK_FILE}' in {start or os.getcwd()} or any parent directory"
            )
        current = parent
