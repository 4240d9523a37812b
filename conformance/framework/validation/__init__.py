"""
Response validation.

Provides wildcard-aware comparison of host responses and diff rendering.
"""

from .normalize import (
    IGNORE_MARKER,
    apply_ignore_markers,
    strip_nulls,
    deep_equal,
    path_to_pointer,
)
from .diff import LEGEND, render_diff
from .validator import MismatchReport, validate, normalize_pair

__all__ = [
    "IGNORE_MARKER",
    "apply_ignore_markers",
    "strip_nulls",
    "deep_equal",
    "path_to_pointer",
    "LEGEND",
    "render_diff",
    "MismatchReport",
    "validate",
    "normalize_pair",
]
