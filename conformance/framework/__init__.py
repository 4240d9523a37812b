"""
Extension Conformance Framework

Replays scripted command traces against an extension host and checks every
response against the expected value, with wildcard support.
"""

from .errors import (
    HarnessError,
    TraceLoadError,
    ManifestError,
    HostProtocolError,
    HostNotReadyError,
    PayloadExhaustedError,
)
from .commands import (
    CommandDescriptor,
    CommandFamily,
    QueryCategory,
    QUERY_KINDS,
    EXTENSION_COMMANDS,
    EXTENSION_EVENTS,
)
from .traces import (
    TraceDefinition,
    InvocationStep,
    MockResponseRecord,
    parse_trace,
    load_trace,
    discover_traces,
)
from .mocks import (
    MockResponder,
    synthesize,
)
from .validation import (
    IGNORE_MARKER,
    MismatchReport,
    validate,
)
from .host import (
    ExtensionHost,
    InstalledExtension,
    StdioHost,
)
from .payloads import (
    PayloadProvider,
    ConsolePayloadProvider,
    ScriptedPayloadProvider,
)
from .context import RunContext
from .config import HarnessConfig
from .manifest import ExtensionManifest, validate_manifest
from .runner import (
    RunnerState,
    StepFailure,
    TraceRunner,
    TraceRunResult,
    SuiteResult,
    run_trace,
    run_traces,
    run_trace_directory,
)

__all__ = [
    # Errors
    "HarnessError",
    "TraceLoadError",
    "ManifestError",
    "HostProtocolError",
    "HostNotReadyError",
    "PayloadExhaustedError",
    # Commands
    "CommandDescriptor",
    "CommandFamily",
    "QueryCategory",
    "QUERY_KINDS",
    "EXTENSION_COMMANDS",
    "EXTENSION_EVENTS",
    # Traces
    "TraceDefinition",
    "InvocationStep",
    "MockResponseRecord",
    "parse_trace",
    "load_trace",
    "discover_traces",
    # Mocks
    "MockResponder",
    "synthesize",
    # Validation
    "IGNORE_MARKER",
    "MismatchReport",
    "validate",
    # Host
    "ExtensionHost",
    "InstalledExtension",
    "StdioHost",
    # Payloads
    "PayloadProvider",
    "ConsolePayloadProvider",
    "ScriptedPayloadProvider",
    # Context & config
    "RunContext",
    "HarnessConfig",
    "ExtensionManifest",
    "validate_manifest",
    # Runner
    "RunnerState",
    "StepFailure",
    "TraceRunner",
    "TraceRunResult",
    "SuiteResult",
    "run_trace",
    "run_traces",
    "run_trace_directory",
]
