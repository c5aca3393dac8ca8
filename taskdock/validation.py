"""
Task file validation.

Rules are registered per field: each field of a step maps to an ordered
list of rules, and each rule pairs a tag with a predicate and a message
template. Validation runs two passes:

1. Manifest pass: there is at least one task and every task has steps.
2. Step pass, per task, so messages can say which task a step belongs to:
   "task 'build': mount directory './src:/app:x' is invalid. ..."

`dir`, `user` and mount strings must also resolve: a directive naming an
undefined variable is reported here rather than at planning time.

All failures are collected; nothing short-circuits except that, like a
chain of tags on one field, the rules for a single value stop at the first
one that fails (a malformed mount is not also reported as missing).
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Optional

from taskdock.directives import interpolate
from taskdock.env import EnvResolver
from taskdock.errors import EnvResolutionError, ManifestValidationError
from taskdock.mounts import DEFAULT_MODE, VALID_MODES, join_path_rel_to_home
from taskdock.schemas import Configs, Step

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleContext:
    """What a rule may look at besides the value under test."""
    configs: Configs
    resolver: EnvResolver
    dir_exists: Callable[[str], bool]
    step: Optional[Step] = None


@dataclass(frozen=True)
class Rule:
    """
    A validation rule.

    Attributes:
        tag: Short rule name, e.g. "mountdir"
        template: Message template; `{field}` is the YAML field name and
                  `{value}` the offending value
        predicate: Returns True when the value is valid
    """
    tag: str
    template: str
    predicate: Callable[[Any, RuleContext], bool]

    def message(self, field: str, value: Any) -> str:
        return self.template.format(field=field, value=value)


@dataclass(frozen=True)
class FieldRules:
    """
    Ordered rules for one step field.

    Attributes:
        field: External (YAML) name used in messages
        get: Extracts the value from a step
        rules: Rules applied in order, stopping at the first failure
        each: Apply the rules to every item of a sequence value
        omitempty: Skip empty values
    """
    field: str
    get: Callable[[Step], Any]
    rules: tuple[Rule, ...]
    each: bool = False
    omitempty: bool = False


# ---------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------

def _mount_segments(value: str) -> list[str]:
    return [segment for segment in value.split(":") if segment]


def validate_mount_dir(value: str) -> bool:
    """
    Check that a mount string has the form <source>:<target>[:<mode>].

    The mode is optional and defaults to read-only; when present it must be
    one of r, wr, rw, w.
    """
    segments = _mount_segments(value)
    if len(segments) != 3:
        segments.append(DEFAULT_MODE)
    if len(segments) != 3:
        return False
    return segments[-1] in VALID_MODES


def parse_mount_dir(
    value: str,
    resolver: EnvResolver,
    dir_exists: Callable[[str], bool],
) -> bool:
    """Check that the source segment of a mount names an existing directory."""
    segments = _mount_segments(value)
    if not segments:
        return False
    try:
        source = interpolate(segments[0], resolver)
    except EnvResolutionError as e:
        logger.debug("Mount source %r is unresolvable: %s", segments[0], e)
        return False
    return dir_exists(join_path_rel_to_home(source))


def follow_task_exists(configs: Configs, task_name: str) -> bool:
    """Check that a follow reference names a task of the same manifest."""
    return task_name.strip() in configs.tasks


def _required_without_follow(value: Any, ctx: RuleContext) -> bool:
    if ctx.step is not None and ctx.step.follow:
        return True
    return bool(value)


def is_resolvable(value: str, resolver: EnvResolver) -> bool:
    """Check that every `$NAME` directive in value names a defined variable."""
    try:
        interpolate(value, resolver)
    except EnvResolutionError as e:
        logger.debug("Unresolvable value %r: %s", value, e)
        return False
    return True


def _non_empty_command(value: tuple[str, ...], ctx: RuleContext) -> bool:
    return bool(value) and all(arg != "" for arg in value)


# ---------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------

MOUNT_DIR = Rule(
    tag="mountdir",
    template=(
        "mount directory '{value}' is invalid. Check format is "
        "'<valid_src_dir>:<valid_dest_dir>:<optional_mode>' and has right permission level"
    ),
    predicate=lambda value, ctx: validate_mount_dir(value),
)

PARSE_DIR = Rule(
    tag="parsedir",
    template="mount directory '{value}' is invalid. Check if source directory path exists.",
    predicate=lambda value, ctx: parse_mount_dir(value, ctx.resolver, ctx.dir_exists),
)

FOLLOW_EXIST = Rule(
    tag="follow_exist",
    template="follow task '{value}' does not exist",
    predicate=lambda value, ctx: follow_task_exists(ctx.configs, value),
)

REQUIRED_WITHOUT_FOLLOW = Rule(
    tag="required_without",
    template="{field} is required, unless the task has a `follow` field",
    predicate=_required_without_follow,
)

NON_EMPTY_COMMAND = Rule(
    tag="required",
    template="{field} '{value}' must be a non-empty list of non-empty arguments",
    predicate=_non_empty_command,
)

RESOLVABLE = Rule(
    tag="resolvable",
    template="{field} '{value}' references an undefined environment variable",
    predicate=lambda value, ctx: is_resolvable(value, ctx.resolver),
)

STEP_RULES: tuple[FieldRules, ...] = (
    FieldRules("image", lambda s: s.image, (REQUIRED_WITHOUT_FOLLOW,)),
    FieldRules("commands", lambda s: s.all_commands, (NON_EMPTY_COMMAND,), each=True),
    FieldRules("dir", lambda s: s.dir, (RESOLVABLE,), omitempty=True),
    FieldRules("user", lambda s: s.user, (RESOLVABLE,), omitempty=True),
    FieldRules("mounts", lambda s: s.mounts, (MOUNT_DIR, RESOLVABLE, PARSE_DIR), each=True),
    FieldRules("follow", lambda s: s.follow, (FOLLOW_EXIST,), omitempty=True),
)


# ---------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------

def _check_value(field_rules: FieldRules, value: Any, ctx: RuleContext) -> Optional[str]:
    for rule in field_rules.rules:
        if not rule.predicate(value, ctx):
            return rule.message(field_rules.field, _display(value))
    return None


def _display(value: Any) -> Any:
    if isinstance(value, tuple):
        return " ".join(value)
    return value


def validate_step(step: Step, ctx: RuleContext) -> list[str]:
    """Apply STEP_RULES to one step; returns unprefixed messages."""
    ctx = RuleContext(ctx.configs, ctx.resolver, ctx.dir_exists, step)
    errors = []
    for field_rules in STEP_RULES:
        value = field_rules.get(step)
        if field_rules.omitempty and not value:
            continue
        values = value if field_rules.each else [value]
        for item in values:
            message = _check_value(field_rules, item, ctx)
            if message:
                errors.append(message)
    return errors


def validate_manifest(configs: Configs) -> list[str]:
    """Manifest-level structural checks."""
    errors = []
    if not configs.tasks:
        errors.append("tasks is a required field, the task file defines no tasks")
    for name, task in configs.tasks.items():
        if not name.strip():
            errors.append("task name is a required field")
        if not task.steps:
            errors.append(f"tasks[{name}].steps is a required field")
    return errors


def validate(
    configs: Configs,
    resolver: EnvResolver,
    dir_exists: Optional[Callable[[str], bool]] = None,
) -> list[str]:
    """
    Validate a manifest and return every error message.

    Args:
        configs: The manifest to validate
        resolver: Variable source for directives in mount sources
        dir_exists: Directory existence predicate (default: os.path.isdir)

    Returns:
        Human-readable messages; empty when the manifest is valid
    """
    ctx = RuleContext(configs=configs, resolver=resolver, dir_exists=dir_exists or os.path.isdir)

    errors = validate_manifest(configs)
    for task_name, task in configs.tasks.items():
        for step in task.steps:
            errors.extend(f"task '{task_name}': {e}" for e in validate_step(step, ctx))

    if errors:
        logger.debug("Validation found %d error(s)", len(errors))
    return errors


def ensure_valid(
    configs: Configs,
    resolver: EnvResolver,
    dir_exists: Optional[Callable[[str], bool]] = None,
) -> None:
    """
    Validate a manifest and raise if anything is wrong.

    Raises:
        ManifestValidationError: With every error message
    """
    errors = validate(configs, resolver, dir_exists)
    if errors:
        raise ManifestValidationError(errors)
