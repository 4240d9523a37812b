"""
Tagged command descriptors.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class CommandFamily(Enum):
    """Which vocabulary a command kind belongs to."""
    EXTENSION_COMMAND = "ExtensionCommand"
    EXTENSION_EVENT = "ExtensionExtraEvent"
    HOST_QUERY = "HostQuery"


@dataclass
class CommandDescriptor:
    """A command kind tag plus the payload that kind carries."""
    kind: str
    data: Any = None
    family: CommandFamily = CommandFamily.EXTENSION_COMMAND

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "data": self.data}

    def describe(self) -> str:
        payload = json.dumps(self.data, sort_keys=True, default=str)
        return f"{self.family.value}[{self.kind}: {payload}]"

    def __str__(self) -> str:
        return self.describe()
