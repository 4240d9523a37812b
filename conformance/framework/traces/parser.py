"""
Trace parser for JSON, JSONC and YAML documents.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

import yaml

from .schema import TraceDefinition, InvocationStep, MockResponseRecord
from ..commands import (
    CommandDescriptor, QUERY_KINDS, lookup_outbound, describe_mismatch,
)
from ..errors import TraceLoadError

logger = logging.getLogger(__name__)

JSON_EXTENSIONS = ("json", "jsonc")
YAML_EXTENSIONS = ("yaml", "yml")
TRACE_EXTENSIONS = JSON_EXTENSIONS + YAML_EXTENSIONS


def parse_trace(content: str, fmt: str = "yaml", source: Optional[str] = None) -> TraceDefinition:
    """Parse a trace from document text in the given format."""
    fmt = fmt.lower()
    where = source or "<string>"
    try:
        if fmt in JSON_EXTENSIONS:
            data = json.loads(strip_json_comments(content))
        elif fmt in YAML_EXTENSIONS:
            data = yaml.safe_load(content)
        else:
            raise TraceLoadError(f"{where}: unsupported trace format '{fmt}'")
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise TraceLoadError(f"{where}: could not decode trace: {e}") from e

    trace = _parse_trace_dict(data, where)
    trace.source = source
    return trace


def load_trace(file_path: str) -> TraceDefinition:
    """Load a trace from a file, picking the format from its extension."""
    path = os.fspath(file_path)
    fmt = trace_format(path)
    if fmt is None:
        raise TraceLoadError(f"{path}: missing or unsupported file extension")
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise TraceLoadError(f"{path}: could not open trace: {e}") from e
    except UnicodeDecodeError as e:
        raise TraceLoadError(f"{path}: could not read trace: {e}") from e

    trace = parse_trace(content, fmt, source=path)
    logger.debug("Loaded %s: %d commands, %d requests",
                 path, len(trace.steps), len(trace.mock_responses))
    return trace


def trace_format(path: str) -> Optional[str]:
    """Lower-cased extension of a trace path, or None if it is not a trace file."""
    ext = os.path.splitext(path)[1].lstrip(".").lower()
    return ext if ext in TRACE_EXTENSIONS else None


def discover_traces(directory: str) -> List[str]:
    """Recursively list trace files under `directory` in sorted order."""
    directory = os.fspath(directory)
    if not os.path.isdir(directory):
        raise TraceLoadError(f"Traces directory {directory} does not exist")

    found = []
    for root, dirs, files in os.walk(directory):
        dirs.sort()
        for name in sorted(files):
            if trace_format(name) is not None:
                found.append(os.path.join(root, name))
    return found


def strip_json_comments(text: str) -> str:
    """
    Remove `//`, `#` and `/* */` comments that are outside string literals.

    Comment characters are replaced by spaces (newlines are kept) so decoder
    error positions still point at the original line and column.
    """
    out = []
    i = 0
    n = len(text)
    in_string = False

    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
        elif ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif ch == "#" or text.startswith("//", i):
            end = text.find("\n", i)
            end = n if end == -1 else end
            out.append(" " * (end - i))
            i = end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
            out.append("".join(c if c == "\n" else " " for c in text[i:end]))
            i = end
        else:
            out.append(ch)
            i += 1

    return "".join(out)


def _parse_trace_dict(data: Any, where: str) -> TraceDefinition:
    """Parse a trace from a decoded document."""
    if not isinstance(data, dict):
        raise TraceLoadError(f"{where}: trace must be a mapping with 'commands' and 'requests'")

    # Validate required fields
    for field in ("commands", "requests"):
        if field not in data:
            raise TraceLoadError(f"{where}: missing required field: {field}")
        if not isinstance(data[field], list):
            raise TraceLoadError(f"{where}: '{field}' must be a list")

    steps = [_parse_step(item, i, where) for i, item in enumerate(data["commands"], 1)]
    requests = [_parse_request(item, i, where) for i, item in enumerate(data["requests"], 1)]

    return TraceDefinition(steps=steps, mock_responses=requests)


def _parse_step(data: Dict[str, Any], index: int, where: str) -> InvocationStep:
    """Parse one entry of `commands`."""
    context = f"{where}: commands[{index}]"
    kind = _require_type(data, context)

    spec = lookup_outbound(kind)
    if spec is None:
        raise TraceLoadError(f"{context}: unknown command type '{kind}'")

    payload = data.get("data")
    if not spec.payload_shape(payload):
        raise TraceLoadError(
            f"{context}: invalid data for '{kind}': {describe_mismatch(spec.payload_shape, payload)}"
        )

    interactive = data.get("interactive", False)
    if not isinstance(interactive, bool):
        raise TraceLoadError(f"{context}: 'interactive' must be a boolean")

    return InvocationStep(
        command=CommandDescriptor(kind, payload, spec.family),
        expected=data.get("expected"),
        interactive=interactive,
    )


def _parse_request(data: Dict[str, Any], index: int, where: str) -> MockResponseRecord:
    """Parse one entry of `requests`."""
    context = f"{where}: requests[{index}]"
    kind = _require_type(data, context)

    spec = QUERY_KINDS.get(kind)
    if spec is None:
        raise TraceLoadError(f"{context}: unknown request type '{kind}'")

    payload = data.get("data")
    if not spec.response_shape(payload):
        raise TraceLoadError(
            f"{context}: invalid data for '{kind}': {describe_mismatch(spec.response_shape, payload)}"
        )

    return MockResponseRecord(kind=kind, data=payload)


def _require_type(data: Any, context: str) -> str:
    if not isinstance(data, dict):
        raise TraceLoadError(f"{context}: entry must be a mapping")
    kind = data.get("type")
    if not isinstance(kind, str):
        raise TraceLoadError(f"{context}: missing 'type'")
    return kind
