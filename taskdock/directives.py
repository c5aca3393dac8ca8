"""
Directive interpolation.

A directive is a backtick-quoted variable reference, `$NAME`, written inside
a task file string. Two forms are supported:

- Embedded: in `dir`, `mounts` and `user`, every directive anywhere in the
  string is replaced, e.g. "`$HOME`/src:/app".
- Whole value: in `envs` assignments, substitution only happens when the
  entire value is a directive, e.g. "API_KEY=`$SECRET`". Any other value is
  passed through literally.

Resolution never returns partial results: one unresolved name aborts the
whole field with EnvResolutionError.
"""

import re
from dataclasses import replace
from typing import Optional

from taskdock.env import EnvResolver
from taskdock.errors import AssignmentFormatError
from taskdock.schemas import Configs, Step

DIRECTIVE_PATTERN = re.compile(r"`\$(?P<name>[^`]+)`")


def find_directives(text: Optional[str]) -> list[str]:
    """Return the variable names referenced by directives in text, in order."""
    if not text:
        return []
    return [m.group("name") for m in DIRECTIVE_PATTERN.finditer(text)]


def interpolate(text: Optional[str], resolver: EnvResolver) -> Optional[str]:
    """
    Replace every `$NAME` directive in text with its resolved value.

    Strings without directives are returned unchanged.

    Raises:
        EnvResolutionError: If any referenced name is unresolvable
    """
    if not text:
        return text

    # Resolve everything first so a failure never leaves a half-substituted string
    values = {name: resolver.require(name) for name in find_directives(text)}
    if not values:
        return text
    return DIRECTIVE_PATTERN.sub(lambda m: values[m.group("name")], text)


def resolve_assignment(assignment: str, resolver: EnvResolver) -> str:
    """
    Resolve a NAME=VALUE assignment whose value is exactly `$ENV_NAME`.

    Raises:
        AssignmentFormatError: If the assignment does not have exactly one `=`
        EnvResolutionError: If the referenced variable is unresolvable
    """
    parts = assignment.split("=")
    if len(parts) != 2:
        raise AssignmentFormatError(assignment)

    key, value = parts
    match = DIRECTIVE_PATTERN.fullmatch(value)
    if match is None:
        return assignment
    return f"{key}={resolver.require(match.group('name'))}"


def _resolve_assignments(assignments: tuple[str, ...], resolver: EnvResolver) -> tuple[str, ...]:
    return tuple(resolve_assignment(a, resolver) for a in assignments)


def resolve_manifest_envs(configs: Configs, resolver: EnvResolver) -> Configs:
    """
    Resolve global, task and step assignments of a manifest.

    Returns:
        A new Configs; the input is not modified
    """
    tasks = {}
    for name, task in configs.tasks.items():
        steps = tuple(
            replace(step, envs=_resolve_assignments(step.envs, resolver))
            for step in task.steps
        )
        tasks[name] = replace(task, envs=_resolve_assignments(task.envs, resolver), steps=steps)

    return replace(configs, envs=_resolve_assignments(configs.envs, resolver), tasks=tasks)


def resolve_step_fields(step: Step, resolver: EnvResolver) -> Step:
    """Interpolate directives in a step's `dir`, `mounts` and `user` fields."""
    return replace(
        step,
        dir=interpolate(step.dir, resolver),
        mounts=tuple(interpolate(m, resolver) for m in step.mounts),
        user=interpolate(step.user, resolver),
    )
