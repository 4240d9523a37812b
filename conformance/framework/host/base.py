"""
Host boundary.

The harness treats the extension host as a black box: it can list installed
extensions, accept a command and return a response, and call back into the
harness with queries of its own.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from ..commands import CommandDescriptor

# Handler(package_name, query) -> response value
QueryHandler = Callable[[str, CommandDescriptor], Any]


@dataclass
class InstalledExtension:
    """An extension as reported by the host."""
    package_name: str
    active: bool = False


class ExtensionHost(ABC):
    """Base class for hosts the harness can drive."""

    def __init__(self):
        self.query_handler: Optional[QueryHandler] = None

    def set_query_handler(self, handler: QueryHandler):
        """Install the callback that answers queries from the host."""
        self.query_handler = handler

    def answer_query(self, package_name: str, query: CommandDescriptor) -> Any:
        if self.query_handler is None:
            return None
        return self.query_handler(package_name, query)

    @abstractmethod
    def list_installed_extensions(self) -> List[InstalledExtension]:
        """Extensions the host has discovered, with their activation status."""
        pass

    @abstractmethod
    def send_command(self, command: CommandDescriptor) -> Any:
        """Send a command and wait for the host's response."""
        pass

    def close(self):
        """Release host resources."""
        pass

    def __enter__(self) -> "ExtensionHost":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
