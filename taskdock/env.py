"""
Environment source resolution.

Variables referenced from a task file are looked up in two sources: the
dotenv file (default `.env`) and the host process environment. When both
define a name, the dotenv value wins so a local file can override the host
for development.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

from taskdock.errors import EnvResolutionError

logger = logging.getLogger(__name__)


class EnvResolver:
    """
    Two-source variable lookup: dotenv values first, host environment second.

    Build one resolver per invocation with `from_dotenv` and pass it to every
    component that resolves directives. It is read-only after construction.
    """

    def __init__(
        self,
        dotenv: Optional[Mapping[str, Optional[str]]] = None,
        environ: Optional[Mapping[str, str]] = None,
        dotenv_file: Optional[str] = None,
    ):
        """
        Initialize the resolver.

        Args:
            dotenv: Values read from the dotenv file (None values mean "declared
                    without a value" and fall through to the host environment)
            environ: Host environment; defaults to a snapshot of os.environ
            dotenv_file: Path of the dotenv file, used in error messages
        """
        self._dotenv = {k: v for k, v in (dotenv or {}).items() if v is not None}
        self._environ = dict(os.environ if environ is None else environ)
        self._dotenv_file = dotenv_file

    @classmethod
    def from_dotenv(
        cls,
        dotenv_file: str | Path,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "EnvResolver":
        """
        Create a resolver primed from a dotenv file.

        A missing dotenv file is not an error: it is logged and the resolver
        falls back to the host environment only.
        """
        path = Path(dotenv_file)
        if path.is_file():
            # `${VAR}` references are kept literally
            values = dotenv_values(path, interpolate=False)
            logger.debug("Loaded %d variables from %s", len(values), path)
        else:
            logger.info("No environment loaded from %s file: Not found", dotenv_file)
            values = {}
        return cls(values, environ=environ, dotenv_file=str(dotenv_file))

    @property
    def dotenv_file(self) -> Optional[str]:
        return self._dotenv_file

    def lookup(self, name: str) -> tuple[str, bool]:
        """
        Look a variable up.

        Returns:
            (value, found). When not found, value is the empty string.
        """
        if name in self._dotenv:
            return self._dotenv[name], True
        if name in self._environ:
            return self._environ[name], True
        return "", False

    def require(self, name: str) -> str:
        """
        Return the value of a variable or raise.

        Raises:
            EnvResolutionError: If the name is defined in neither source
        """
        value, found = self.lookup(name)
        if not found:
            raise EnvResolutionError(name, self._dotenv_file)
        return value

    def __contains__(self, name: str) -> bool:
        return self.lookup(name)[1]
