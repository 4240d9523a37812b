"""
Trace Runner

Drives one trace against an extension host:
- Waits until the host reports every discovered extension as active
- Sends each step's command, in order
- Lets the operator supply payloads for interactive steps
- Validates every response and stops at the first mismatch

Queries the host sends back while a command is in flight are answered from
the trace's mock responses.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

from .commands import (
    CommandDescriptor, CommandFamily, EXTRA_EVENT_COMMAND,
    lookup_outbound, describe_mismatch,
)
from .config import HarnessConfig
from .context import RunContext
from .errors import HostNotReadyError, HostProtocolError, PayloadExhaustedError
from .host.base import ExtensionHost, InstalledExtension
from .mocks.synthesizer import MockResponder
from .payloads import ConsolePayloadProvider, PayloadProvider
from .traces.parser import discover_traces, load_trace
from .traces.schema import InvocationStep, TraceDefinition
from .validation.validator import MismatchReport, validate

logger = logging.getLogger(__name__)

WAITING_MESSAGE = "Waiting for extension..."


class RunnerState(Enum):
    AWAITING_HOST_READY = "awaiting_host_ready"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class StepFailure:
    """The first failure of a trace run."""
    step_index: int  # 1-based, 0 if no step had started
    step_total: int
    command: str
    message: str
    report: Optional[MismatchReport] = None

    def __str__(self) -> str:
        detail = str(self.report) if self.report is not None else self.message
        if self.step_index == 0:
            return f"Before first command: {detail}"
        return f"Command [{self.step_index}/{self.step_total}] {self.command} failed:\n{detail}"


@dataclass
class TraceRunResult:
    """Result of running a trace."""
    trace_name: str
    state: RunnerState
    steps_total: int
    steps_passed: int
    package_name: Optional[str] = None
    failure: Optional[StepFailure] = None
    logs: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.state is RunnerState.COMPLETED

    def __str__(self) -> str:
        status = "PASSED" if self.passed else "FAILED"
        text = (
            f"Trace '{self.trace_name}': {status}\n"
            f"  Steps: {self.steps_passed}/{self.steps_total} passed"
        )
        if self.failure is not None:
            text += f"\n{self.failure}"
        return text


class TraceRunner:
    """
    Runs one trace against one host session.

    States move AWAITING_HOST_READY -> RUNNING -> COMPLETED, or to FAILED
    from either of the first two. With `close_host` the runner owns the host
    session and closes it before collecting the run's logs.
    """

    def __init__(
        self,
        trace: TraceDefinition,
        host: ExtensionHost,
        context: Optional[RunContext] = None,
        config: Optional[HarnessConfig] = None,
        payload_provider: Optional[PayloadProvider] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        close_host: bool = False,
    ):
        self.trace = trace
        self.host = host
        self.context = context or RunContext()
        self.config = config or HarnessConfig()
        self.payload_provider = payload_provider or ConsolePayloadProvider(stream=self.context.stream)
        self.sleep = sleep
        self.clock = clock
        self.close_host = close_host

        self.state = RunnerState.AWAITING_HOST_READY
        self.step_index = 0
        self.steps_passed = 0
        self.package_name: Optional[str] = None

    def run(self) -> TraceRunResult:
        """Run the trace to completion or first failure."""
        with self.context:
            try:
                failure = self._execute()
            finally:
                # host output still in flight must reach the log buffer
                if self.close_host:
                    self.host.close()
            logs = self.context.log_buffer.drain()
        self.state = RunnerState.FAILED if failure else RunnerState.COMPLETED

        return TraceRunResult(
            trace_name=self.trace.name,
            state=self.state,
            steps_total=len(self.trace.steps),
            steps_passed=self.steps_passed,
            package_name=self.package_name,
            failure=failure,
            logs=logs,
        )

    def _execute(self) -> Optional[StepFailure]:
        echo = self.context.echo
        self.host.set_query_handler(MockResponder(self.trace.mock_responses, self.context).answer_query)
        echo(f"Loaded test case with {len(self.trace.steps)} commands "
             f"and {len(self.trace.mock_responses)} requests\n")

        try:
            self.package_name = self.wait_for_host()
        except (HostNotReadyError, HostProtocolError) as e:
            return self._failure(str(e))

        self.state = RunnerState.RUNNING
        echo("\n" + "-" * 60)
        echo(f"=== Running commands from test case {self.trace.name} ... ===")

        total = len(self.trace.steps)
        for index, step in enumerate(self.trace.steps, 1):
            self.step_index = index
            try:
                if step.interactive:
                    self.prepare_interactive_payload(step)
                description = step.command.describe()
                echo(f"\nCommand [{index}/{total}]: {description}")
                response = self.dispatch(step.command)
            except (HostProtocolError, PayloadExhaustedError) as e:
                return self._failure(str(e), step.command.describe())

            report = validate(response, step.expected)
            if report is not None:
                return self._failure(report.message, description, report)

            if step.expected is not None:
                echo(f"Received response {json.dumps(response, default=str)}")
            echo(f"✓ Successful: {description}")
            self.steps_passed += 1

        echo(f"=== Completed test case {self.trace.name} ... ===")
        return None

    def wait_for_host(self) -> str:
        """
        Poll the host until it reports at least one extension and all are active.

        Returns the package name of the first extension. Raises HostNotReadyError
        if `config.ready_timeout` is set and elapses first.
        """
        timeout = self.config.ready_timeout
        started = self.clock()
        announced = set()
        self.context.start_progress(WAITING_MESSAGE)

        while True:
            extensions = self.host.list_installed_extensions()
            for ext in extensions:
                if ext.package_name not in announced:
                    announced.add(ext.package_name)
                    self.context.echo(f"Extension found {ext.package_name}, active: {ext.active}")

            if _all_active(extensions):
                break
            if timeout is not None and self.clock() - started >= timeout:
                self.context.finish_progress()
                raise HostNotReadyError(
                    f"Host did not activate its extensions within {timeout:g}s "
                    f"(found: {', '.join(sorted(announced)) or 'none'})"
                )
            self.sleep(self.config.poll_interval)

        self.context.finish_progress()
        package_name = extensions[0].package_name
        self.context.echo(f"Extension active: {package_name}")
        return package_name

    def prepare_interactive_payload(self, step: InvocationStep):
        """Replace the step's payload with operator input that fits its kind."""
        spec = lookup_outbound(step.command.kind)
        while True:
            text = self.payload_provider.next_payload(step.command)
            try:
                payload = json.loads(text)
            except json.JSONDecodeError as e:
                self.payload_provider.rejected(text, str(e))
                continue
            if spec is not None and not spec.payload_shape(payload):
                self.payload_provider.rejected(text, describe_mismatch(spec.payload_shape, payload))
                continue
            step.command.data = payload
            logger.debug("Interactive payload for %s: %r", step.command.kind, payload)
            return

    def dispatch(self, command: CommandDescriptor) -> Any:
        """Send a command, wrapping extra events for the active package."""
        if command.family is CommandFamily.EXTENSION_EVENT:
            command = CommandDescriptor(
                EXTRA_EVENT_COMMAND,
                {"packageName": self.package_name, "data": command.to_dict()},
                CommandFamily.EXTENSION_COMMAND,
            )
        return self.host.send_command(command)

    def _failure(self, message: str, command: str = "",
                 report: Optional[MismatchReport] = None) -> StepFailure:
        self.state = RunnerState.FAILED
        logger.info("Trace %s failed at step %d: %s", self.trace.name, self.step_index, message)
        return StepFailure(
            step_index=self.step_index,
            step_total=len(self.trace.steps),
            command=command,
            message=message,
            report=report,
        )


def _all_active(extensions: List[InstalledExtension]) -> bool:
    return bool(extensions) and all(ext.active for ext in extensions)


# =============================================================================
# Multiple traces
# =============================================================================

@dataclass
class SuiteResult:
    """Results of running several trace files."""
    results: List[TraceRunResult]
    trace_count: int

    @property
    def passed(self) -> bool:
        return len(self.results) == self.trace_count and all(r.passed for r in self.results)

    @property
    def first_failure(self) -> Optional[TraceRunResult]:
        return next((r for r in self.results if not r.passed), None)


HostFactory = Callable[[], ExtensionHost]


def run_trace(
    trace: TraceDefinition,
    host: ExtensionHost,
    config: Optional[HarnessConfig] = None,
    **kwargs,
) -> TraceRunResult:
    """
    Convenience function to run a trace.

    Args:
        trace: The trace to run
        host: A host session dedicated to this trace
        config: Harness settings

    Returns:
        TraceRunResult
    """
    return TraceRunner(trace, host, config=config, **kwargs).run()


def run_traces(
    paths: Sequence[str],
    host_factory: HostFactory,
    config: Optional[HarnessConfig] = None,
    payload_provider: Optional[PayloadProvider] = None,
    stream=None,
) -> SuiteResult:
    """
    Run trace files one after another, each with its own host and run context.

    Every file is loaded before the first trace runs, so a malformed trace
    aborts the whole run with TraceLoadError. Runs stop at the first failed
    trace unless `config.continue_on_failure` is set.
    """
    config = config or HarnessConfig()
    traces = [load_trace(path) for path in paths]

    results = []
    for trace in traces:
        context = RunContext(stream=stream, show_progress=config.verbose == 0)
        host = host_factory()
        result = TraceRunner(trace, host, context, config, payload_provider, close_host=True).run()
        results.append(result)
        if not result.passed and not config.continue_on_failure:
            break

    return SuiteResult(results=results, trace_count=len(traces))


def run_trace_directory(directory: str, host_factory: HostFactory, **kwargs) -> SuiteResult:
    """Run every trace file found under `directory`."""
    return run_traces(discover_traces(directory), host_factory, **kwargs)
