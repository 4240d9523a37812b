"""
Run context.

Holds the per-trace observability state: a buffer that captures log records
(extension output included) so they can be shown only when a run fails, and
the progress indicator shown while the harness waits on the host.
"""

import logging
import sys
from typing import List, Optional, TextIO

HARNESS_LOGGER = "conformance"

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class LogBuffer(logging.Handler):
    """Logging handler that keeps formatted records in memory."""

    def __init__(self, level: int = logging.DEBUG):
        super().__init__(level)
        self.setFormatter(logging.Formatter(LOG_FORMAT))
        self._lines: List[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record)
        except Exception:
            self.handleError(record)
            return
        # Handler.handle() already holds self.lock around emit()
        self._lines.append(line)

    def lines(self) -> List[str]:
        with self.lock:
            return list(self._lines)

    def drain(self) -> List[str]:
        """Return buffered lines and clear the buffer."""
        with self.lock:
            lines, self._lines = self._lines, []
        return lines


class ProgressIndicator:
    """A single status line, cleared before other output is written."""

    def __init__(self, message: str, stream: TextIO):
        self.message = message
        self.stream = stream
        self.active = True
        self._is_tty = getattr(stream, "isatty", lambda: False)()
        if self._is_tty:
            self.stream.write(f"... {message}")
            self.stream.flush()

    def finish_and_clear(self) -> None:
        if self.active and self._is_tty:
            self.stream.write("\r\x1b[K")
            self.stream.flush()
        self.active = False


class RunContext:
    """
    Observability state for one trace run.

    Use as a context manager: entering attaches the log buffer to the harness
    logger, leaving detaches it and clears any progress line.
    """

    def __init__(self, stream: Optional[TextIO] = None, show_progress: bool = True,
                 logger_name: str = HARNESS_LOGGER):
        self.stream = stream if stream is not None else sys.stdout
        self.show_progress = show_progress
        self.log_buffer = LogBuffer()
        self.progress: Optional[ProgressIndicator] = None
        self._logger = logging.getLogger(logger_name)
        self._saved_level: Optional[int] = None

    def __enter__(self) -> "RunContext":
        self._logger.addHandler(self.log_buffer)
        self._saved_level = self._logger.level
        if self._logger.getEffectiveLevel() > logging.DEBUG:
            self._logger.setLevel(logging.DEBUG)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.finish_progress()
        self._logger.removeHandler(self.log_buffer)
        if self._saved_level is not None:
            self._logger.setLevel(self._saved_level)

    def echo(self, message: str = "") -> None:
        """Write a line of operator output."""
        self.stream.write(message + "\n")

    def start_progress(self, message: str) -> None:
        if not self.show_progress:
            return
        if self.progress is not None:
            self.progress.finish_and_clear()
        self.progress = ProgressIndicator(message, self.stream)

    def finish_progress(self) -> None:
        if self.progress is not None:
            self.progress.finish_and_clear()

    def report_query(self, request: str, response: str) -> None:
        """Show an answered host query without garbling the progress line."""
        current = self.progress
        was_active = current is not None and current.active
        if was_active:
            current.finish_and_clear()
        self.echo(f"Responded to request {request} with {response}")
        if was_active:
            # replaced, not resumed, so the new line renders below the output
            self.progress = ProgressIndicator(current.message, self.stream)

    def buffered_logs(self) -> List[str]:
        return self.log_buffer.lines()
