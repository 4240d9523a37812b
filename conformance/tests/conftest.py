"""
Pytest configuration for harness tests.

Provides an in-memory extension host, a quiet run context and helpers for
locating and writing trace files.
"""

import io
import os
from typing import Any, Callable, Dict, List, Optional

import pytest

from conformance.framework.commands import CommandDescriptor, CommandFamily
from conformance.framework.config import HarnessConfig
from conformance.framework.context import RunContext
from conformance.framework.host.base import ExtensionHost, InstalledExtension


TRACES_DIR = os.path.join(os.path.dirname(__file__), "..", "traces")


def get_trace_path(name: str) -> str:
    """Get path to a bundled trace file."""
    return os.path.join(TRACES_DIR, name)


class FakeHost(ExtensionHost):
    """
    Extension host that answers from a script.

    `responses` maps a command kind to either a value or a callable taking the
    sent command. `queries` maps a command kind to host queries that are asked
    (through the installed query handler) before the command is answered.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, Any]] = None,
        extensions: Optional[List[InstalledExtension]] = None,
        queries: Optional[Dict[str, List[CommandDescriptor]]] = None,
        activation_polls: int = 0,
    ):
        super().__init__()
        self.responses = responses or {}
        self.extensions = extensions if extensions is not None else [InstalledExtension("pkg.foo", True)]
        self.queries = queries or {}
        self.activation_polls = activation_polls
        self.polls = 0
        self.sent: List[CommandDescriptor] = []
        self.answers: List[Any] = []
        self.closed = False

    def list_installed_extensions(self) -> List[InstalledExtension]:
        self.polls += 1
        if self.polls <= self.activation_polls:
            return [InstalledExtension(e.package_name, False) for e in self.extensions]
        return list(self.extensions)

    def send_command(self, command: CommandDescriptor) -> Any:
        self.sent.append(command)
        package = self.extensions[0].package_name if self.extensions else ""
        for query in self.queries.get(command.kind, []):
            self.answers.append(self.answer_query(package, query))
        response = self.responses.get(command.kind)
        if callable(response):
            return response(command)
        return response

    def close(self):
        self.closed = True


def query(kind: str, data: Any = None) -> CommandDescriptor:
    return CommandDescriptor(kind, data, CommandFamily.HOST_QUERY)


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def quiet_context(output) -> RunContext:
    return RunContext(stream=output, show_progress=False)


@pytest.fixture
def fast_config() -> HarnessConfig:
    return HarnessConfig(poll_interval=0.0)


@pytest.fixture
def write_trace(tmp_path) -> Callable[[str, str], str]:
    """Write a trace file under tmp_path and return its path."""
    def _write(name: str, content: str) -> str:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return str(path)
    return _write
