"""
Value tree normalization.

Every walk here uses an explicit work-list instead of recursion, so response
trees of any depth are handled without hitting the interpreter's recursion
limit.
"""

from typing import Any, List, Tuple, Union

IGNORE_MARKER = "ignore"

PathSegment = Union[str, int]


def escape_pointer_token(token: str) -> str:
    """Escape one JSON Pointer reference token (RFC 6901)."""
    return token.replace("~", "~0").replace("/", "~1")


def unescape_pointer_token(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def path_to_pointer(path: List[PathSegment]) -> str:
    """Convert a list of object keys and array indices into a JSON Pointer."""
    return "".join("/" + escape_pointer_token(str(seg)) for seg in path)


def resolve_pointer(doc: Any, pointer: str) -> Tuple[bool, Any, Any, Any]:
    """
    Walk `pointer` into `doc`.

    Returns (found, node, parent, last_token). `parent` and `last_token` are set
    whenever the parent container exists, even if the final node does not, so
    callers can insert a missing object field.
    """
    if pointer == "":
        return True, doc, None, None

    node = doc
    tokens = [unescape_pointer_token(t) for t in pointer.split("/")[1:]]
    for depth, token in enumerate(tokens):
        last = depth == len(tokens) - 1
        if isinstance(node, dict):
            if token not in node:
                return False, None, (node if last else None), token
            parent, node = node, node[token]
        elif isinstance(node, list):
            if not (token.isascii() and token.isdigit()) or int(token) >= len(node):
                return False, None, None, token
            parent, node = node, node[int(token)]
            token = int(token)
        else:
            return False, None, None, token
        if last:
            return True, node, parent, token
    return False, None, None, None


def clone_tree(value: Any) -> Any:
    """Copy the dict/list structure of a value tree. Scalars are shared."""
    root_holder = [None]
    stack = [(value, root_holder, 0)]
    while stack:
        src, dest, slot = stack.pop()
        if isinstance(src, dict):
            copy = {}
            dest[slot] = copy
            for key, child in src.items():
                copy[key] = None
                stack.append((child, copy, key))
        elif isinstance(src, list):
            copy = [None] * len(src)
            dest[slot] = copy
            for i, child in enumerate(src):
                stack.append((child, copy, i))
        else:
            dest[slot] = src
    return root_holder[0]


def apply_ignore_markers(actual: Any, expected: Any) -> Any:
    """
    Return a copy of `actual` where every position that holds the ignore marker
    in `expected` is replaced by the marker itself.

    The subtree under a marker is never inspected, so it can hold any content:
    timestamps, generated ids, nested objects. A marker for an object field that
    is missing from `actual` is inserted, which makes absent and null values
    acceptable too.
    """
    if isinstance(expected, str) and expected == IGNORE_MARKER:
        return IGNORE_MARKER
    result = clone_tree(actual)

    stack: List[List[PathSegment]] = [[]]
    while stack:
        path = stack.pop()
        pointer = path_to_pointer(path)
        found, exp_node, _, _ = resolve_pointer(expected, pointer)
        if not found:
            continue

        if isinstance(exp_node, str) and exp_node == IGNORE_MARKER:
            _, _, parent, token = resolve_pointer(result, pointer)
            if parent is not None:
                parent[token] = IGNORE_MARKER
            continue

        if isinstance(exp_node, dict):
            for key in exp_node:
                stack.append(path + [key])
        elif isinstance(exp_node, list):
            for i in range(len(exp_node)):
                stack.append(path + [i])

    return result


def strip_nulls(value: Any) -> Any:
    """
    Return a copy of `value` with every null-valued object field removed.

    Arrays are walked but keep their length: a null element stays in place.
    """
    result = clone_tree(value)
    stack = [result]
    while stack:
        node = stack.pop()
        if isinstance(node, dict):
            for key in [k for k, v in node.items() if v is None]:
                del node[key]
            stack.extend(node.values())
        elif isinstance(node, list):
            stack.extend(node)
    return result


def deep_equal(left: Any, right: Any) -> bool:
    """
    Structural equality of two JSON-like trees.

    Unlike `==`, booleans never compare equal to numbers, and deep trees do not
    recurse.
    """
    stack = [(left, right)]
    while stack:
        a, b = stack.pop()
        if isinstance(a, dict):
            if not isinstance(b, dict) or a.keys() != b.keys():
                return False
            stack.extend((a[k], b[k]) for k in a)
        elif isinstance(a, list):
            if not isinstance(b, list) or len(a) != len(b):
                return False
            stack.extend(zip(a, b))
        elif isinstance(a, bool) or isinstance(b, bool):
            if not (isinstance(a, bool) and isinstance(b, bool) and a == b):
                return False
        elif isinstance(b, (dict, list)):
            return False
        elif a != b:
            return False
    return True
