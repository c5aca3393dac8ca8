"""
Task file loading.

    path = find_task_file(settings.task_file)
    configs = Configs.from_dict(yaml.safe_load(text))
    resolver = EnvResolver.from_dotenv(settings.dotenv_file)
    configs = resolve_manifest_envs(configs, resolver)
    ensure_valid(configs, resolver)

`load_manifest` stops after assignment resolution; `load_and_validate`
also runs validation and raises with every error found.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional

import yaml

from taskdock.config import DEFAULT_DOTENV_FILE, DEFAULT_TASK_FILE
from taskdock.directives import resolve_manifest_envs
from taskdock.env import EnvResolver
from taskdock.errors import ManifestDecodeError
from taskdock.locator import find_task_file
from taskdock.schemas import Configs
from taskdock.validation import ensure_valid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedManifest:
    """
    A loaded task file.

    Attributes:
        path: Task file that was read
        configs: Manifest with assignments resolved
        resolver: The variable source used; reuse it for step planning
    """
    path: str
    configs: Configs
    resolver: EnvResolver


def parse_manifest(text: str, source: str = "<string>") -> Configs:
    """
    Decode task file text into a manifest.

    Raises:
        ManifestDecodeError: On YAML syntax errors or a malformed document
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ManifestDecodeError(f"{source}: {e}") from e
    return Configs.from_dict(data)


def load_manifest(
    filename: str = DEFAULT_TASK_FILE,
    dotenv_file: str | Path = DEFAULT_DOTENV_FILE,
    start: Optional[Path | str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> LoadedManifest:
    """
    Locate, read and decode the task file and resolve its assignments.

    Args:
        filename: Task file name; the default name is searched upwards
        dotenv_file: Dotenv file consulted before the host environment
        start: Directory the upward search starts from
        environ: Host environment (default: os.environ)

    Returns:
        LoadedManifest

    Raises:
        TaskFileNotFoundError: If the task file cannot be found
        ManifestDecodeError: If the task file cannot be decoded
        AssignmentFormatError: If an assignment is not NAME=VALUE
        EnvResolutionError: If an assignment references an undefined variable
    """
    path = find_task_file(filename, start=start)

    with open(path) as f:
        text = f.read()

    configs = parse_manifest(text, source=path)
    resolver = EnvResolver.from_dotenv(dotenv_file, environ=environ)
    configs = resolve_manifest_envs(configs, resolver)

    logger.debug("Loaded %d task(s) from %s", len(configs.tasks), path)
    return LoadedManifest(path=path, configs=configs, resolver=resolver)


def load_and_validate(
    filename: str = DEFAULT_TASK_FILE,
    dotenv_file: str | Path = DEFAULT_DOTENV_FILE,
    start: Optional[Path | str] = None,
    environ: Optional[Mapping[str, str]] = None,
    dir_exists: Optional[Callable[[str], bool]] = None,
) -> LoadedManifest:
    """
    Load the task file and validate it.

    Raises:
        ManifestValidationError: With every validation error, in addition
                                 to the errors raised by load_manifest
    """
    loaded = load_manifest(filename, dotenv_file, start=start, environ=environ)
    ensure_valid(loaded.configs, loaded.resolver, dir_exists)
    logger.info("Task file %s is valid", loaded.path)
    return loaded
