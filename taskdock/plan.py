"""
Step planning - turn a validated manifest into per-step run plans.

A StepPlan carries everything the container runner needs for one step:
image, commands, merged environment, resolved working directory, decoded
bind mounts and resolved user. Planning happens after validation; directive
failures here still raise EnvResolutionError.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from taskdock.directives import resolve_step_fields
from taskdock.env import EnvResolver
from taskdock.errors import FollowCycleError, TaskNotFoundError
from taskdock.mounts import decode_mounts
from taskdock.schemas import Configs, MountDescriptor


@dataclass(frozen=True)
class StepPlan:
    """
    A fully resolved step.

    Attributes:
        task: Name of the task the step is defined in
        name: Step label (defaults to "<task>[<index>]")
        image: Container image
        commands: Argument vectors, run in order
        env: Environment, global < task < step
        workdir: Resolved working directory, if any
        mounts: Decoded bind mounts
        user: Resolved container user, if any
    """
    task: str
    name: str
    image: str
    commands: tuple[tuple[str, ...], ...] = ()
    env: dict[str, str] = field(default_factory=dict)
    workdir: Optional[str] = None
    mounts: tuple[MountDescriptor, ...] = ()
    user: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "task": self.task,
            "name": self.name,
            "image": self.image,
            "commands": [list(c) for c in self.commands],
            "env": dict(self.env),
            "workdir": self.workdir,
            "mounts": [m.to_dict() for m in self.mounts],
            "user": self.user,
        }


def _merge_envs(*assignment_lists: tuple[str, ...]) -> dict[str, str]:
    env: dict[str, str] = {}
    for assignments in assignment_lists:
        for assignment in assignments:
            key, _, value = assignment.partition("=")
            env[key] = value
    return env


def plan_task(
    configs: Configs,
    task_name: str,
    resolver: EnvResolver,
    home: Optional[str] = None,
) -> list[StepPlan]:
    """
    Build the run plans of a task, expanding `follow` steps in place.

    Args:
        configs: A validated manifest with resolved assignments
        task_name: Task to plan
        resolver: Variable source for `dir`, `mounts` and `user` directives
        home: Home directory for `~` in mount sources (default: user home)

    Returns:
        StepPlans in execution order

    Raises:
        TaskNotFoundError: If the task (or a followed task) does not exist
        FollowCycleError: If tasks follow each other in a cycle
        EnvResolutionError: If a directive cannot be resolved
    """
    return _plan(configs, task_name.strip(), resolver, home, chain=())


def _plan(
    configs: Configs,
    task_name: str,
    resolver: EnvResolver,
    home: Optional[str],
    chain: tuple[str, ...],
) -> list[StepPlan]:
    if task_name in chain:
        cycle = " -> ".join(chain + (task_name,))
        raise FollowCycleError(f"follow cycle detected: {cycle}")

    task = configs.get_task(task_name)
    if task is None:
        raise TaskNotFoundError(f"task '{task_name}' does not exist")

    chain = chain + (task_name,)
    plans: list[StepPlan] = []
    for index, step in enumerate(task.steps):
        if step.follow:
            plans.extend(_plan(configs, step.follow.strip(), resolver, home, chain))
            continue

        step = resolve_step_fields(step, resolver)
        plans.append(StepPlan(
            task=task_name,
            name=step.name or f"{task_name}[{index}]",
            image=step.image or "",
            commands=step.all_commands,
            env=_merge_envs(configs.envs, task.envs, step.envs),
            workdir=step.dir or None,
            mounts=tuple(decode_mounts(step.mounts, home)),
            user=step.user or None,
        ))
    return plans
