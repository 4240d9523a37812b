"""
Payload providers for interactive trace steps.

An interactive step keeps its command kind but takes its payload from the
operator at run time. The runner asks a provider for raw JSON text, checks it
against the kind's shape and asks again until it gets a valid payload.
"""

import json
import sys
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, List, Optional, TextIO

from .commands import CommandDescriptor
from .errors import PayloadExhaustedError


class PayloadProvider(ABC):
    """Source of replacement payloads for interactive steps."""

    @abstractmethod
    def next_payload(self, command: CommandDescriptor) -> str:
        """Return JSON text for the payload of `command`."""
        pass

    def rejected(self, text: str, reason: str):
        """Called when the last payload could not be used."""
        pass


class ConsolePayloadProvider(PayloadProvider):
    """Prompts the operator on the console."""

    def __init__(self, read_line: Optional[Callable[[], str]] = None,
                 stream: Optional[TextIO] = None):
        self.read_line = read_line or sys.stdin.readline
        self.stream = stream or sys.stdout

    def next_payload(self, command: CommandDescriptor) -> str:
        self.stream.write(f"Data for {command.kind} (current: {json.dumps(command.data)})\n")
        self.stream.write("Enter data > ")
        self.stream.flush()
        line = self.read_line()
        if line == "":
            raise PayloadExhaustedError(f"No input available for interactive {command.kind}")
        return line

    def rejected(self, text: str, reason: str):
        self.stream.write(f"Could not parse data: {text.strip()}, {reason}, try again...\n")


class ScriptedPayloadProvider(PayloadProvider):
    """Hands out pre-written payloads in order. Used by tests and CI."""

    def __init__(self, payloads: Iterable[Any]):
        self._pending: List[Any] = list(payloads)
        self.rejections: List[str] = []

    def next_payload(self, command: CommandDescriptor) -> str:
        if not self._pending:
            raise PayloadExhaustedError(f"No scripted payload left for interactive {command.kind}")
        payload = self._pending.pop(0)
        return payload if isinstance(payload, str) else json.dumps(payload)

    def rejected(self, text: str, reason: str):
        self.rejections.append(reason)
