"""
Error classes for taskdock manifest loading.

Every failure raised while loading a task file derives from TaskdockError:
- TaskFileNotFoundError: No task file found (upward search exhausted)
- ManifestDecodeError: Malformed YAML or wrong document shape
- AssignmentFormatError: An `envs` entry is not of the form NAME=VALUE
- EnvResolutionError: A referenced variable exists in no source
- ManifestValidationError: One or more validation rules failed

Validation errors are collected, not raised one at a time: the loader
gathers every rule violation and raises ManifestValidationError once with
the full list, so a single run reports every defect in the manifest.
"""

from typing import Optional


class TaskdockError(Exception):
    """Base exception for taskdock."""
    pass


class TaskFileNotFoundError(TaskdockError):
    """The task file could not be found in the working directory or any parent."""
    pass


class ManifestDecodeError(TaskdockError):
    """
    The task file could not be decoded into a manifest.

    Raised for YAML syntax errors (the decoder's message is kept as-is and
    the original exception is chained) and for documents whose shape does
    not match the manifest format, e.g. `steps` that is not a list.
    """
    pass


class AssignmentFormatError(TaskdockError):
    """An environment assignment does not contain exactly one `=`."""

    def __init__(self, assignment: str):
        self.assignment = assignment
        super().__init__(f"config: invalid format of environment variable: {assignment}")


class EnvResolutionError(TaskdockError):
    """
    A variable referenced by a directive is defined in no source.

    Attributes:
        name: The variable name that could not be resolved
        dotenv_file: The dotenv file that was consulted, if any
    """

    def __init__(self, name: str, dotenv_file: Optional[str] = None):
        self.name = name
        self.dotenv_file = dotenv_file
        if dotenv_file:
            message = (
                f"config: could not find environment variable '{name}' in {dotenv_file} "
                f"file or among host environment variables"
            )
        else:
            message = f"could not find environment variable '{name}'"
        super().__init__(message)


class ManifestValidationError(TaskdockError):
    """
    The manifest failed validation.

    Attributes:
        errors: Every human-readable validation message, in report order
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        count = len(self.errors)
        noun = "error" if count == 1 else "errors"
        super().__init__(f"task file has {count} validation {noun}:\n" + "\n".join(self.errors))


class MountDecodeError(TaskdockError):
    """A mount string cannot be decoded into a bind mount."""
    pass


class TaskNotFoundError(TaskdockError):
    """A task name does not exist in the manifest."""
    pass


class FollowCycleError(TaskdockError):
    """Tasks follow each other in a cycle."""
    pass
