"""
taskdock - Docker based task runner

Loads task files, resolves environment variables referenced from them and
validates the result before any container is started.
"""

__version__ = "0.1.0"


__all__ = [
    "Configs",
    "Task",
    "Step",
    "MountDescriptor",
    "EnvResolver",
    "find_task_file",
    "load_manifest",
    "load_and_validate",
    "validate",
    "decode_mounts",
    "plan_task",
]

from .schemas import Configs, Task, Step, MountDescriptor
from .env import EnvResolver
from .locator import find_task_file
from .loader import load_manifest, load_and_validate
from .validation import validate
from .mounts import decode_mounts
from .plan import plan_task
