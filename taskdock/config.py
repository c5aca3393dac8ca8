"""
Runtime settings for taskdock.

Settings come from three places, highest priority first:
explicit overrides (CLI flags), TASKDOCK_* environment variables, defaults.
"""

import os
from dataclasses import dataclass
from typing import Any, Optional

DEFAULT_TASK_FILE = ".taskdock.yaml"
DEFAULT_DOTENV_FILE = ".env"
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_ENV_PREFIX = "TASKDOCK_"
_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class TaskdockSettings:
    """
    Resolved settings for one taskdock invocation.

    Attributes:
        task_file: Task file name; the default name triggers an upward search
        dotenv_file: Dotenv file consulted before host environment variables
        log_level: Logging level name
        async_mode: Run steps concurrently (consumed by the execution layer)
    """
    task_file: str = DEFAULT_TASK_FILE
    dotenv_file: str = DEFAULT_DOTENV_FILE
    log_level: str = DEFAULT_LOG_LEVEL
    async_mode: bool = False


def _env(name: str) -> Optional[str]:
    value = os.environ.get(_ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    return value.strip()


def load_settings(**overrides: Any) -> TaskdockSettings:
    """
    Build settings from environment variables and explicit overrides.

    Args:
        **overrides: Field values that win over the environment. None values
                     are ignored so unset CLI options fall through.

    Returns:
        TaskdockSettings instance

    Raises:
        ValueError: If the log level is not one of LOG_LEVELS
    """
    async_env = _env("ASYNC")
    values: dict[str, Any] = {
        "task_file": _env("TASK_FILE") or DEFAULT_TASK_FILE,
        "dotenv_file": _env("ENV_FILE") or DEFAULT_DOTENV_FILE,
        "log_level": (_env("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        "async_mode": async_env is not None and async_env.lower() in _TRUE_VALUES,
    }

    for key, value in overrides.items():
        if key not in values:
            raise TypeError(f"Unknown setting: {key}")
        if value is not None:
            values[key] = value

    values["log_level"] = str(values["log_level"]).upper()
    if values["log_level"] not in LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{values['log_level']}', expected one of: {', '.join(LOG_LEVELS)}"
        )
    return TaskdockSettings(**values)
