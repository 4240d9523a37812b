"""
Trace schema definitions.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..commands import CommandDescriptor


@dataclass
class InvocationStep:
    """A single command to send to the host."""
    command: CommandDescriptor
    expected: Optional[Any] = None
    interactive: bool = False


@dataclass
class MockResponseRecord:
    """A recorded answer to a host query."""
    kind: str
    data: Any = None

    @property
    def key(self) -> Optional[str]:
        """Stored key of a preference-like record, if it has one."""
        if isinstance(self.data, dict):
            key = self.data.get("key")
            if isinstance(key, str):
                return key
        return None


@dataclass
class TraceDefinition:
    """A scripted command sequence plus the mock answers for one run."""
    steps: List[InvocationStep]
    mock_responses: List[MockResponseRecord] = field(default_factory=list)
    source: Optional[str] = None

    @property
    def name(self) -> str:
        return self.source or "<inline trace>"
