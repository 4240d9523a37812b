"""
Trace module for loading scripted conformance runs.
"""

from .schema import TraceDefinition, InvocationStep, MockResponseRecord
from .parser import (
    parse_trace,
    load_trace,
    discover_traces,
    strip_json_comments,
    trace_format,
    TRACE_EXTENSIONS,
)

__all__ = [
    # Schema
    "TraceDefinition",
    "InvocationStep",
    "MockResponseRecord",
    # Parser
    "parse_trace",
    "load_trace",
    "discover_traces",
    "strip_json_comments",
    "trace_format",
    "TRACE_EXTENSIONS",
]
