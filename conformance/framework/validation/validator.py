"""
Response Validator

Compares a host response against the expected value tree of a trace step.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from .diff import LEGEND, EXPECTED_ONLY, RECEIVED_ONLY, pretty, render_diff
from .normalize import apply_ignore_markers, deep_equal, strip_nulls


@dataclass
class MismatchReport:
    """Why a response did not match what the trace expected."""
    message: str
    diff: str = ""
    legend: str = ""
    expected: Any = None
    received: Any = None

    def changed_lines(self) -> List[str]:
        """Diff lines that differ between the two sides."""
        return [
            line for line in self.diff.splitlines()
            if line.startswith((EXPECTED_ONLY, RECEIVED_ONLY))
        ]

    def __str__(self) -> str:
        parts = [self.message]
        if self.diff:
            parts.append(self.diff)
        if self.legend:
            parts.append(self.legend)
        return "\n\n".join(parts)


def normalize_pair(actual: Any, expected: Any):
    """Apply ignore markers to `actual`, then strip null fields from both sides."""
    sanitized = apply_ignore_markers(actual, expected)
    return strip_nulls(sanitized), strip_nulls(expected)


def validate(actual: Any, expected: Optional[Any] = None) -> Optional[MismatchReport]:
    """
    Validate a response.

    Returns None when `actual` is acceptable, otherwise a MismatchReport. A
    missing `expected` means the response must be null.
    """
    if expected is None:
        if actual is None:
            return None
        return MismatchReport(
            message=f"Expected: null, received: {pretty(actual)}",
            received=actual,
        )

    received, wanted = normalize_pair(actual, expected)
    if deep_equal(received, wanted):
        return None

    return MismatchReport(
        message="Expected response does not match received response:",
        diff=render_diff(pretty(wanted), pretty(received)),
        legend=LEGEND,
        expected=wanted,
        received=received,
    )
