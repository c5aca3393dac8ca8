"""
Manifest schema - the in-memory form of a task file.

A task file is a YAML mapping. The reserved top-level key `envs` holds
assignments shared by every task; every other top-level key is a task name:

    envs:
      - GREETING=hello
    build:
      envs:
        - NODE_ENV=production
      steps:
        - name: version
          image: node
          command: ["node", "--version"]
          mounts:
            - "`$SRC_DIR`:/app:w"
    release:
      steps:
        - follow: build

The model is built once at load time and never mutated afterwards; resolving
variables produces new objects (see taskdock.directives).
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from taskdock.errors import ManifestDecodeError

ENVS_KEY = "envs"


def _string_list(value: Any, where: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ManifestDecodeError(f"{where}: expected a list, got {type(value).__name__}")
    return tuple(str(item) for item in value)


def _command(value: Any, where: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return _string_list(value, where)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class Step:
    """
    One containerized step of a task.

    Attributes:
        image: Container image; required unless `follow` is set
        command: Argument vector run in the container
        commands: Additional argument vectors, run in order after `command`
        envs: Step-scoped NAME=VALUE assignments
        dir: Working directory, may contain `$NAME` directives
        mounts: Raw `source:target[:mode]` strings
        user: Container user, may contain directives
        follow: Name of another task of the manifest to chain to
        name: Optional label for log output
    """
    image: Optional[str] = None
    command: tuple[str, ...] = ()
    commands: tuple[tuple[str, ...], ...] = ()
    envs: tuple[str, ...] = ()
    dir: Optional[str] = None
    mounts: tuple[str, ...] = ()
    user: Optional[str] = None
    follow: Optional[str] = None
    name: Optional[str] = None

    @property
    def all_commands(self) -> tuple[tuple[str, ...], ...]:
        """`command` followed by `commands`, skipping an empty `command`."""
        if self.command:
            return (self.command,) + self.commands
        return self.commands

    @classmethod
    def from_dict(cls, data: Any, where: str = "step") -> "Step":
        """Deserialize from the YAML mapping of one step."""
        if not isinstance(data, dict):
            raise ManifestDecodeError(f"{where}: expected a mapping, got {type(data).__name__}")

        raw_commands = data.get("commands")
        if raw_commands is None:
            commands: tuple[tuple[str, ...], ...] = ()
        elif isinstance(raw_commands, list):
            commands = tuple(
                _command(c, f"{where}.commands[{i}]") for i, c in enumerate(raw_commands)
            )
        else:
            raise ManifestDecodeError(f"{where}.commands: expected a list of commands")

        return cls(
            image=_optional_str(data.get("image")),
            command=_command(data.get("command"), f"{where}.command"),
            commands=commands,
            envs=_string_list(data.get("envs"), f"{where}.envs"),
            dir=_optional_str(data.get("dir")),
            mounts=_string_list(data.get("mounts"), f"{where}.mounts"),
            user=_optional_str(data.get("user")),
            follow=_optional_str(data.get("follow")),
            name=_optional_str(data.get("name")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the YAML step mapping, omitting empty fields."""
        data: dict[str, Any] = {}
        if self.name:
            data["name"] = self.name
        if self.image:
            data["image"] = self.image
        if self.command:
            data["command"] = list(self.command)
        if self.commands:
            data["commands"] = [list(c) for c in self.commands]
        if self.envs:
            data["envs"] = list(self.envs)
        if self.dir:
            data["dir"] = self.dir
        if self.mounts:
            data["mounts"] = list(self.mounts)
        if self.user:
            data["user"] = self.user
        if self.follow:
            data["follow"] = self.follow
        return data


@dataclass(frozen=True)
class Task:
    """
    A named, ordered list of steps.

    Attributes:
        name: Task name (the top-level key in the task file)
        envs: Assignments shared by every step of the task
        steps: Ordered steps
    """
    name: str
    envs: tuple[str, ...] = ()
    steps: tuple[Step, ...] = ()

    @classmethod
    def from_dict(cls, name: str, data: Any) -> "Task":
        """Deserialize from the YAML mapping of one task."""
        where = f"task '{name}'"
        if data is None:
            return cls(name=name)
        if not isinstance(data, dict):
            raise ManifestDecodeError(f"{where}: expected a mapping, got {type(data).__name__}")

        raw_steps = data.get("steps")
        if raw_steps is None:
            raw_steps = []
        if not isinstance(raw_steps, list):
            raise ManifestDecodeError(f"{where}.steps: expected a list, got {type(raw_steps).__name__}")

        return cls(
            name=name,
            envs=_string_list(data.get("envs"), f"{where}.envs"),
            steps=tuple(
                Step.from_dict(s, f"{where}.steps[{i}]") for i, s in enumerate(raw_steps)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.envs:
            data["envs"] = list(self.envs)
        data["steps"] = [s.to_dict() for s in self.steps]
        return data


@dataclass(frozen=True)
class Configs:
    """
    The whole task file.

    Attributes:
        envs: Assignments shared by every task
        tasks: Tasks by name, in file order
    """
    envs: tuple[str, ...] = ()
    tasks: Mapping[str, Task] = field(default_factory=dict)

    def __post_init__(self):
        # Read-only view over a private copy
        object.__setattr__(self, "tasks", MappingProxyType(dict(self.tasks)))

    def get_task(self, name: str) -> Optional[Task]:
        """Get a task by name."""
        return self.tasks.get(name)

    @property
    def task_names(self) -> list[str]:
        return list(self.tasks)

    @classmethod
    def from_dict(cls, data: Any) -> "Configs":
        """
        Deserialize from the decoded YAML document.

        Raises:
            ManifestDecodeError: If the document shape is not a manifest
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ManifestDecodeError(
                f"task file: expected a mapping of tasks, got {type(data).__name__}"
            )

        tasks = {}
        for key, value in data.items():
            if key == ENVS_KEY:
                continue
            name = "" if key is None else str(key)
            tasks[name] = Task.from_dict(name, value)

        return cls(
            envs=_string_list(data.get(ENVS_KEY), ENVS_KEY),
            tasks=tasks,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the task file layout."""
        data: dict[str, Any] = {}
        if self.envs:
            data[ENVS_KEY] = list(self.envs)
        for name, task in self.tasks.items():
            data[name] = task.to_dict()
        return data
