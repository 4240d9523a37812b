"""
Stdio host adapter.

Launches a host process and talks to it with one JSON object per line:

    harness -> host   {"id": 1, "method": "listInstalledExtensions"}
                      {"id": 2, "method": "sendCommand", "params": {"type": ..., "data": ...}}
    host -> harness   {"id": 2, "result": ...}  or  {"id": 2, "error": "..."}
                      {"id": "q7", "method": "answerQuery",
                       "params": {"packageName": ..., "type": ..., "data": ...}}

Queries may arrive while the harness waits for a reply; each one is answered
immediately with {"id": "q7", "result": ...}. Lines the host writes to stderr
are logged as extension output.
"""

import itertools
import json
import logging
import subprocess
import threading
from typing import Any, Dict, List, Optional, Sequence

from .base import ExtensionHost, InstalledExtension
from ..commands import CommandDescriptor, CommandFamily
from ..errors import HostProtocolError

logger = logging.getLogger(__name__)
extension_output = logging.getLogger("conformance.host.output")

ANSWER_QUERY = "answerQuery"


class StdioHost(ExtensionHost):
    """An extension host running as a child process."""

    def __init__(self, command: Sequence[str], cwd: Optional[str] = None):
        super().__init__()
        self.command = list(command)
        self._ids = itertools.count(1)
        logger.debug("Starting host: %s", " ".join(self.command))
        try:
            self.process = subprocess.Popen(
                self.command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                bufsize=1,
                cwd=cwd,
            )
        except OSError as e:
            raise HostProtocolError(f"Could not start host {self.command[0]!r}: {e}") from e

        self._stderr_thread = threading.Thread(
            target=self._forward_stderr, name="host-stderr", daemon=True,
        )
        self._stderr_thread.start()

    def list_installed_extensions(self) -> List[InstalledExtension]:
        result = self._call("listInstalledExtensions")
        if not isinstance(result, list):
            raise HostProtocolError(f"listInstalledExtensions returned {result!r}, expected a list")
        extensions = []
        for item in result:
            if not isinstance(item, dict) or not isinstance(item.get("packageName"), str):
                raise HostProtocolError(f"Malformed extension entry: {item!r}")
            extensions.append(InstalledExtension(item["packageName"], bool(item.get("active"))))
        return extensions

    def send_command(self, command: CommandDescriptor) -> Any:
        return self._call("sendCommand", command.to_dict())

    def close(self):
        if self.process.poll() is None:
            try:
                self.process.stdin.close()
            except OSError:
                pass
            try:
                self.process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                logger.warning("Host did not exit, killing it")
                self.process.kill()
                self.process.wait()
        self._stderr_thread.join(timeout=1)

    # -------------------------------------------------------------------------
    # Wire protocol
    # -------------------------------------------------------------------------

    def _call(self, method: str, params: Any = None) -> Any:
        request_id = next(self._ids)
        message: Dict[str, Any] = {"id": request_id, "method": method}
        if params is not None:
            message["params"] = params
        self._write(message)

        while True:
            reply = self._read()
            if reply.get("method") == ANSWER_QUERY:
                self._handle_query(reply)
                continue
            if reply.get("id") != request_id:
                raise HostProtocolError(
                    f"Expected reply to {method} #{request_id}, got {reply!r}"
                )
            if "error" in reply:
                raise HostProtocolError(f"{method} failed: {reply['error']}")
            return reply.get("result")

    def _handle_query(self, message: Dict[str, Any]):
        params = message.get("params") or {}
        kind = params.get("type")
        if not isinstance(kind, str):
            raise HostProtocolError(f"Query without a type: {message!r}")
        query = CommandDescriptor(kind, params.get("data"), CommandFamily.HOST_QUERY)
        response = self.answer_query(params.get("packageName", ""), query)
        self._write({"id": message.get("id"), "result": response})

    def _write(self, message: Dict[str, Any]):
        line = json.dumps(message)
        logger.debug(">> %s", line)
        try:
            self.process.stdin.write(line + "\n")
            self.process.stdin.flush()
        except (BrokenPipeError, ValueError) as e:
            raise HostProtocolError(f"Host closed its input: {e}") from e

    def _read(self) -> Dict[str, Any]:
        line = self.process.stdout.readline()
        if not line:
            code = self.process.poll()
            raise HostProtocolError(f"Host closed its output (exit status {code})")
        logger.debug("<< %s", line.rstrip())
        try:
            message = json.loads(line)
        except json.JSONDecodeError as e:
            raise HostProtocolError(f"Undecodable line from host: {line.rstrip()!r}") from e
        if not isinstance(message, dict):
            raise HostProtocolError(f"Expected a JSON object from host, got {message!r}")
        return message

    def _forward_stderr(self):
        for line in self.process.stderr:
            extension_output.debug(line.rstrip("\n"))
