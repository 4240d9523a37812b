"""
Line diff rendering for mismatch reports.
"""

import difflib
import json
from typing import Any, List

EXPECTED_ONLY = "-"
RECEIVED_ONLY = "+"

LEGEND = (
    "Legend:\n"
    f'"{EXPECTED_ONLY}" - Present in expected but not in received\n'
    f'"{RECEIVED_ONLY}" - Present in received but not in expected'
)


def pretty(value: Any) -> str:
    """Stable pretty-printed JSON used on both sides of a diff."""
    return json.dumps(value, indent=2, sort_keys=True, ensure_ascii=False, default=str)


def render_diff(expected: str, received: str) -> str:
    """
    Render a line diff between two texts.

    Unchanged lines are indented by two spaces, lines only in `expected` are
    prefixed with "-" and lines only in `received` with "+".
    """
    return "\n".join(diff_lines(expected.splitlines(), received.splitlines()))


def diff_lines(expected: List[str], received: List[str]) -> List[str]:
    lines = []
    matcher = difflib.SequenceMatcher(a=expected, b=received, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            lines.extend("  " + line for line in expected[i1:i2])
            continue
        # replace, delete and insert all reduce to removed-then-added lines
        lines.extend(f"{EXPECTED_ONLY} {line}" for line in expected[i1:i2])
        lines.extend(f"{RECEIVED_ONLY} {line}" for line in received[j1:j2])
    return lines
