"""
MountDescriptor schema - a resolved bind mount ready for container creation.
"""

from dataclasses import dataclass
from typing import Any, Literal


@dataclass(frozen=True)
class MountDescriptor:
    """
    A bind mount decoded from a `source:target[:mode]` string.

    Attributes:
        source: Absolute host path
        target: Path inside the container
        read_only: False only for the `w` and `wr` modes
        type: Mount type, always "bind"
    """
    source: str
    target: str
    read_only: bool = True
    type: Literal["bind"] = "bind"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "source": self.source,
            "target": self.target,
            "read_only": self.read_only,
        }
