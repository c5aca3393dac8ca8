"""
taskdock.schemas - Data structures for task files.

Configs -> Task -> Step, plus the MountDescriptor produced when a step's
mount strings are decoded for container creation.
"""

from .manifest import (
    Configs,
    Task,
    Step,
    ENVS_KEY,
)
from .mount import MountDescriptor

__all__ = [
    "Configs",
    "Task",
    "Step",
    "ENVS_KEY",
    "MountDescriptor",
]
