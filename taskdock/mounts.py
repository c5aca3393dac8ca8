"""
Mount string decoding.

Mount strings have the form `<source>:<target>[:<mode>]`. The mode is either
read-only (`r`, the default) or read-write (`wr` or `w`). Decoding assumes
the string has already passed the `mountdir` and `parsedir` validation rules
and does not re-check that the source exists.
"""

import os
from pathlib import Path
from typing import Iterable, Optional

from taskdock.errors import MountDecodeError
from taskdock.schemas import MountDescriptor

DEFAULT_MODE = "r"
VALID_MODES = (DEFAULT_MODE, "wr", "rw", "w")

# `rw` passes validation but only these decode as read-write
READ_WRITE_MODES = ("wr", "w")


def join_path_rel_to_home(path: str, home: Optional[str] = None) -> str:
    """Expand a leading `~` against the home directory."""
    if not path.startswith("~"):
        return path
    home = home if home is not None else str(Path.home())
    rest = path.strip("~").lstrip("/")
    return os.path.normpath(os.path.join(home, rest))


def decode_mount(raw: str, home: Optional[str] = None) -> MountDescriptor:
    """
    Decode one mount string into a bind mount.

    Raises:
        MountDecodeError: If the string has no target segment
        OSError: If the source cannot be made absolute
    """
    parts = raw.strip("'").strip('"').split(":")
    if len(parts) < 2 or not parts[0]:
        raise MountDecodeError(f"mount directory '{raw}' has no source and target")

    read_only = True
    if len(parts) == 3 and parts[2] in READ_WRITE_MODES:
        read_only = False

    source = os.path.abspath(join_path_rel_to_home(parts[0], home))
    return MountDescriptor(source=source, target=parts[1], read_only=read_only)


def decode_mounts(mounts: Iterable[str], home: Optional[str] = None) -> list[MountDescriptor]:
    """Decode mount strings, preserving order."""
    return [decode_mount(m, home) for m in mounts]
