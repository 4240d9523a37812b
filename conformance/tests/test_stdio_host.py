"""
Stdio Host Tests

Tests for the line-delimited JSON protocol spoken with a host process:
- Listing extensions
- Sending commands and reading replies
- Answering queries that arrive before the reply
- Error replies, crashes and garbage output
"""

import io
import sys
import textwrap

import pytest

from conformance.framework.commands import CommandDescriptor
from conformance.framework.context import RunContext
from conformance.framework.errors import HostProtocolError
from conformance.framework.host import StdioHost


HOST_SCRIPT = textwrap.dedent('''
    import json
    import sys

    def send(message):
        sys.stdout.write(json.dumps(message) + "\\n")
        sys.stdout.flush()

    while True:
        line = sys.stdin.readline()
        if not line:
            break
        message = json.loads(line)
        if message["method"] == "listInstalledExtensions":
            send({"id": message["id"], "result": [
                {"packageName": "pkg.foo", "active": True},
                {"packageName": "pkg.bar"},
            ]})
            continue

        kind = message["params"]["type"]
        if kind == "getAccounts":
            send({"id": "q1", "method": "answerQuery",
                  "params": {"packageName": "pkg.foo", "type": "getPreference",
                             "data": {"key": "theme"}}})
            answer = json.loads(sys.stdin.readline())
            send({"id": message["id"], "result": {"queryAnswer": answer}})
        elif kind == "performAccountLogin":
            send({"id": message["id"], "error": "login rejected"})
        elif kind == "getProviderScopes":
            sys.stderr.write("extension crashed\\n")
            sys.stderr.flush()
            sys.exit(3)
        elif kind == "getExtensionContextMenu":
            sys.stdout.write("this is not json\\n")
            sys.stdout.flush()
        elif kind == "onClickedContextMenu":
            send({"id": 999, "result": None})
        else:
            send({"id": message["id"], "result": message["params"]})
''')


@pytest.fixture
def stdio_host(tmp_path):
    script = tmp_path / "host.py"
    script.write_text(HOST_SCRIPT, encoding="utf-8")
    host = StdioHost([sys.executable, str(script)])
    yield host
    host.close()


def command(kind, data=None):
    return CommandDescriptor(kind, data)


class TestStdioHost:
    def test_list_installed_extensions(self, stdio_host):
        extensions = stdio_host.list_installed_extensions()
        assert [(e.package_name, e.active) for e in extensions] == [("pkg.foo", True), ("pkg.bar", False)]

    def test_send_command_echo(self, stdio_host):
        response = stdio_host.send_command(command("getAccounts2", {"a": 1}))
        assert response == {"type": "getAccounts2", "data": {"a": 1}}

    def test_query_answered_before_reply(self, stdio_host):
        seen = []

        def handler(package_name, query):
            seen.append((package_name, query.kind, query.data))
            return {"type": query.kind, "data": {"key": f"{package_name}.theme", "value": "dark"}}

        stdio_host.set_query_handler(handler)
        response = stdio_host.send_command(command("getAccounts", {"packageName": "pkg.foo"}))

        assert seen == [("pkg.foo", "getPreference", {"key": "theme"})]
        assert response == {"queryAnswer": {
            "id": "q1",
            "result": {"type": "getPreference", "data": {"key": "pkg.foo.theme", "value": "dark"}},
        }}

    def test_query_without_handler_answers_null(self, stdio_host):
        response = stdio_host.send_command(command("getAccounts", {"packageName": "pkg.foo"}))
        assert response == {"queryAnswer": {"id": "q1", "result": None}}

    def test_error_reply(self, stdio_host):
        with pytest.raises(HostProtocolError, match="login rejected"):
            stdio_host.send_command(command("performAccountLogin"))

    def test_undecodable_line(self, stdio_host):
        with pytest.raises(HostProtocolError, match="Undecodable line"):
            stdio_host.send_command(command("getExtensionContextMenu"))

    def test_reply_to_wrong_request(self, stdio_host):
        with pytest.raises(HostProtocolError, match="Expected reply to sendCommand"):
            stdio_host.send_command(command("onClickedContextMenu"))

    def test_crash_is_reported_and_stderr_logged(self, stdio_host):
        with RunContext(stream=io.StringIO(), show_progress=False) as context:
            with pytest.raises(HostProtocolError, match="Host closed its output"):
                stdio_host.send_command(command("getProviderScopes"))
            stdio_host.close()
            logs = context.buffered_logs()
        assert any("extension crashed" in line for line in logs)

    def test_missing_executable(self, tmp_path):
        with pytest.raises(HostProtocolError, match="Could not start host"):
            StdioHost([str(tmp_path / "no-such-host")])
