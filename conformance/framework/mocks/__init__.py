"""
Mock responses for queries the host sends to the harness.
"""

from .synthesizer import (
    MockResponder,
    synthesize,
    find_matching_record,
    default_response,
)

__all__ = [
    "MockResponder",
    "synthesize",
    "find_matching_record",
    "default_response",
]
