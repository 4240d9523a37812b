"""
Payload shapes.

A shape is a named predicate over a decoded JSON value. Every command kind
declares the shape of its payload; trace decoding and interactive input are
checked against it.
"""

from typing import Any, Callable, Dict


class Shape:
    """A named structural check for a JSON-like value."""

    def __init__(self, name: str, check: Callable[[Any], bool], optional: bool = False):
        self.name = name
        self._check = check
        self.optional = optional

    def __call__(self, value: Any) -> bool:
        return self._check(value)

    def __repr__(self) -> str:
        return f"Shape({self.name})"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


ANY = Shape("any", lambda v: True, optional=True)
BOOLEAN = Shape("boolean", lambda v: isinstance(v, bool))
NUMBER = Shape("number", _is_number)
STRING = Shape("string", lambda v: isinstance(v, str))
OBJECT = Shape("object", lambda v: isinstance(v, dict))
NOTHING = Shape("nothing", lambda v: v is None or v == [] or v == {}, optional=True)


def optional(shape: Shape) -> Shape:
    """Accept null (or a missing field) in addition to `shape`."""
    return Shape(f"optional {shape.name}", lambda v: v is None or shape(v), optional=True)


def array_of(item: Shape) -> Shape:
    """A list whose every element satisfies `item`."""
    return Shape(
        f"list of {item.name}",
        lambda v: isinstance(v, list) and all(item(i) for i in v),
    )


def one_of(*values: str) -> Shape:
    """A string restricted to a fixed set of values."""
    allowed = frozenset(values)
    return Shape(
        "one of " + ", ".join(sorted(allowed)),
        lambda v: isinstance(v, str) and v in allowed,
    )


def tuple_of(*items: Shape) -> Shape:
    """
    A positional argument list.

    Trailing optional items may be omitted, so `tuple_of(STRING, optional(STRING))`
    accepts both `["a"]` and `["a", null]`. A lone argument may also be given
    without the surrounding list.
    """
    required = len(items)
    while required and items[required - 1].optional:
        required -= 1

    def check(value: Any) -> bool:
        if not isinstance(value, list):
            if len(items) == 1:
                return items[0](value)
            return value is None and required == 0
        if not required <= len(value) <= len(items):
            return False
        return all(shape(v) for shape, v in zip(items, value))

    names = ", ".join(s.name for s in items)
    return Shape(f"[{names}]", check, optional=required == 0)


def record(**fields: Shape) -> Shape:
    """An object whose listed fields satisfy their shapes. Extra fields are allowed."""

    def check(value: Any) -> bool:
        if not isinstance(value, dict):
            return False
        for key, shape in fields.items():
            if key not in value:
                if not shape.optional:
                    return False
                continue
            if not shape(value[key]):
                return False
        return True

    names = ", ".join(f"{k}: {s.name}" for k, s in fields.items())
    return Shape("{" + names + "}", check)


# =============================================================================
# Domain shapes
# =============================================================================

SONG = record(song=OBJECT)
SONGS = array_of(SONG)
PLAYLIST = record(playlist_id=optional(STRING), playlist_name=optional(STRING))
PLAYER_STATE = one_of("PLAYING", "PAUSED", "STOPPED", "LOADING")
PREFERENCE_DATA = record(key=STRING, value=ANY, defaultValue=ANY)
PREFERENCE_QUERY = record(key=STRING, defaultValue=ANY)
PACKAGE = record(packageName=STRING)


def describe_mismatch(shape: Shape, value: Any) -> str:
    """Human readable explanation of why `value` does not satisfy `shape`."""
    return f"expected {shape.name}, got {_type_name(value)}"


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    names: Dict[type, str] = {
        bool: "boolean", int: "number", float: "number", str: "string",
        list: "list", dict: "object",
    }
    return names.get(type(value), type(value).__name__)
