"""
Command vocabulary: descriptors, payload shapes and the kind registry.
"""

from .descriptor import CommandDescriptor, CommandFamily
from .shapes import Shape, describe_mismatch
from .registry import (
    QueryCategory,
    QueryKind,
    CommandKind,
    QUERY_KINDS,
    EXTENSION_COMMANDS,
    EXTENSION_EVENTS,
    EXTRA_EVENT_COMMAND,
    register_query_kind,
    register_extension_command,
    register_extension_event,
    lookup_outbound,
    preference_key,
)

__all__ = [
    # Descriptor
    "CommandDescriptor",
    "CommandFamily",
    # Shapes
    "Shape",
    "describe_mismatch",
    # Registry
    "QueryCategory",
    "QueryKind",
    "CommandKind",
    "QUERY_KINDS",
    "EXTENSION_COMMANDS",
    "EXTENSION_EVENTS",
    "EXTRA_EVENT_COMMAND",
    "register_query_kind",
    "register_extension_command",
    "register_extension_event",
    "lookup_outbound",
    "preference_key",
]
