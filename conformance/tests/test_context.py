"""
Run Context Tests

Tests for log capture, progress output, console payload prompts and logging
setup.
"""

import io
import logging

import pytest

from conformance.framework.commands import CommandDescriptor
from conformance.framework.context import LogBuffer, RunContext
from conformance.framework.errors import PayloadExhaustedError
from conformance.framework.logging_config import HOST_LOGGER, setup_logging
from conformance.framework.payloads import ConsolePayloadProvider


class FakeTerminal(io.StringIO):
    def isatty(self):
        return True


# =============================================================================
# Log Capture Tests
# =============================================================================

class TestLogCapture:
    def test_records_captured_while_entered(self):
        context = RunContext(stream=io.StringIO(), show_progress=False, logger_name="conformance.test.capture")
        log = logging.getLogger("conformance.test.capture.child")

        log.debug("before")
        with context:
            log.debug("during")
        log.debug("after")

        lines = context.buffered_logs()
        assert len(lines) == 1
        assert lines[0].endswith("conformance.test.capture.child: during")

    def test_level_restored(self):
        target = logging.getLogger("conformance.test.level")
        target.setLevel(logging.WARNING)
        with RunContext(stream=io.StringIO(), logger_name="conformance.test.level"):
            assert target.level == logging.DEBUG
        assert target.level == logging.WARNING

    def test_drain_clears(self):
        buffer = LogBuffer()
        buffer.handle(logging.makeLogRecord({"name": "x", "msg": "one", "levelno": logging.INFO,
                                             "levelname": "INFO"}))
        assert len(buffer.drain()) == 1
        assert buffer.lines() == []


# =============================================================================
# Progress Tests
# =============================================================================

class TestProgress:
    def test_no_progress_on_plain_stream(self):
        out = io.StringIO()
        context = RunContext(stream=out)
        context.start_progress("Waiting for extension...")
        context.finish_progress()
        assert out.getvalue() == ""

    def test_query_report_redraws_progress(self):
        out = FakeTerminal()
        context = RunContext(stream=out)
        context.start_progress("Waiting for extension...")
        context.report_query("HostQuery[getTime: null]", "3.0")

        text = out.getvalue()
        assert text.count("... Waiting for extension...") == 2
        assert text.index("\r\x1b[K") < text.index("Responded to request HostQuery[getTime: null] with 3.0")
        assert context.progress.active

    def test_query_report_without_progress(self):
        out = FakeTerminal()
        context = RunContext(stream=out)
        context.report_query("a", "b")
        assert out.getvalue() == "Responded to request a with b\n"
        assert context.progress is None


# =============================================================================
# Console Payload Tests
# =============================================================================

class TestConsolePayloadProvider:
    def test_prompt_and_read(self):
        out = io.StringIO()
        provider = ConsolePayloadProvider(read_line=lambda: "[1.5]\n", stream=out)
        text = provider.next_payload(CommandDescriptor("seeked", [0]))
        assert text == "[1.5]\n"
        assert out.getvalue().endswith("Enter data > ")

    def test_rejection_message(self):
        out = io.StringIO()
        provider = ConsolePayloadProvider(read_line=lambda: "", stream=out)
        provider.rejected("nope\n", "expected [number], got string")
        assert out.getvalue() == "Could not parse data: nope, expected [number], got string, try again...\n"

    def test_end_of_input(self):
        provider = ConsolePayloadProvider(read_line=lambda: "", stream=io.StringIO())
        with pytest.raises(PayloadExhaustedError):
            provider.next_payload(CommandDescriptor("seeked", [0]))


# =============================================================================
# Logging Setup Tests
# =============================================================================

class TestSetupLogging:
    def test_quiet_by_default(self):
        setup_logging(0)
        harness = logging.getLogger("conformance")
        assert harness.handlers == []
        assert harness.propagate is False

    def test_verbose_streams_host_output(self):
        setup_logging(1, "info")
        host = logging.getLogger(HOST_LOGGER)
        assert len(host.handlers) == 1
        assert host.level == logging.INFO

        setup_logging(0)
        assert host.handlers == []
