"""
yamlpatch.core — Document tree and structural path addressing
=============================================================

§1  THE DOCUMENT TREE
─────────────────────

A parsed YAML document is one of three node kinds:

    (1)  Scalar(v)                       v ∈ str | int | float | bool | None
    (2)  Sequence(n₁, ..., nₖ)           ordered, opaque to path addressing
    (3)  Mapping({k₁: n₁, ..., kₖ: nₖ})  string keys, insertion ordered

The set is CLOSED.  Every traversal in this package dispatches on exactly
these three classes and raises TypeError for anything else, so a new node
kind cannot slip through a walker unnoticed.

Nodes are immutable.  Operations that "modify" a tree return a new tree
and share every untouched subtree with the input, which makes the usual
"edit a clone, then diff against the original" workflow free.

Equality is deep and structural:
    • Mapping equality ignores key order: {a: 1, b: 2} == {b: 2, a: 1}
    • a boolean never equals a number: Scalar(True) != Scalar(1)
    • NaN equals NaN, so a document always equals its own re-parse


§2  STRUCTURAL PATHS
────────────────────

A path is a non-empty sequence of non-empty segments, written joined by
dots:  "database.host" ≡ ("database", "host").  Each segment indexes one
Mapping level.  Sequences are leaves as far as paths are concerned.

    get_path(T, P)       → the node at P, or None when P is absent
    set_path(T, P, V)    → new tree with V at P (intermediates created)
    unset_path(T, P)     → new tree without P (absent P is a no-op)

Only an empty path is an error.  Walking through a scalar is "absent",
never a failure.
"""

import math
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Sequence as PySequence, Union

from .errors import EmptyPathError


# ═══════════════════════════════════════════════════════════════════
#  DOCUMENT TREE
# ═══════════════════════════════════════════════════════════════════

class Node:
    """Base class for document tree nodes.  Not instantiated directly."""
    __slots__ = ()


@dataclass(frozen=True, slots=True, eq=False)
class Scalar(Node):
    """
    A leaf value: string, number, boolean or null.

    PyYAML also produces date/datetime values for timestamps; those are
    carried through untouched.

    Examples:
        Scalar("localhost")
        Scalar(5432)
        Scalar(True)
        Scalar(None)
    """
    val: Any

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Scalar):
            return NotImplemented
        a, b = self.val, other.val
        # bool is a subclass of int in Python; YAML keeps them apart.
        if (type(a) is bool) != (type(b) is bool):
            return False
        if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
            return True
        return a == b

    def __hash__(self) -> int:
        if isinstance(self.val, float) and math.isnan(self.val):
            return hash("nan")
        return hash((type(self.val) is bool, self.val))

    def __repr__(self) -> str:
        return f"Scalar({self.val!r})"


@dataclass(frozen=True, slots=True)
class Sequence(Node):
    """
    An ordered list of nodes.

    Sequences are opaque to path addressing and search: a path stops at a
    sequence, and a sequence value is compared and replaced as a whole.
    """
    items: tuple[Node, ...]

    def __init__(self, items=()):
        object.__setattr__(self, 'items', tuple(items))

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.items)

    def __repr__(self) -> str:
        if len(self.items) <= 5:
            return f"Sequence({list(self.items)})"
        return f"Sequence([{self.items[0]!r}, ..., {self.items[-1]!r}] len={len(self.items)})"


@dataclass(frozen=True, slots=True)
class Mapping(Node):
    """
    An insertion-ordered mapping of string keys to nodes.

    Order is kept so that re-serialization reproduces the author's key
    order, but it does NOT take part in equality.

    Examples:
        Mapping({"host": Scalar("localhost"), "port": Scalar(5432)})
    """
    entries: dict[str, Node]

    def __init__(self, entries=None):
        object.__setattr__(self, 'entries', dict(entries or {}))

    def __hash__(self):
        return hash(frozenset(self.entries.items()))

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def get(self, key: str, default: Optional[Node] = None) -> Optional[Node]:
        return self.entries.get(key, default)

    def items(self):
        return self.entries.items()

    def with_entry(self, key: str, value: Node) -> "Mapping":
        """Copy with `key` bound to `value`.  An existing key keeps its position."""
        entries = dict(self.entries)
        entries[key] = value
        return Mapping(entries)

    def without(self, key: str) -> "Mapping":
        """Copy with `key` removed (a missing key returns self)."""
        if key not in self.entries:
            return self
        entries = dict(self.entries)
        del entries[key]
        return Mapping(entries)

    def __repr__(self) -> str:
        if len(self.entries) <= 3:
            return f"Mapping({self.entries})"
        return f"Mapping({{...}} len={len(self.entries)})"


def ensure_node(value: Any) -> Node:
    """Reject anything that is not one of the three node kinds."""
    if isinstance(value, (Scalar, Sequence, Mapping)):
        return value
    raise TypeError(f"Unknown Node type: {type(value)}")


# ═══════════════════════════════════════════════════════════════════
#  STRUCTURAL PATHS
# ═══════════════════════════════════════════════════════════════════

PathLike = Union[str, PySequence[str]]


def split_path(path: PathLike) -> tuple[str, ...]:
    """
    Normalize a dotted string or a sequence of segments to a tuple.

        split_path("a.b.c")       → ("a", "b", "c")
        split_path(("a", "b"))    → ("a", "b")

    Raises EmptyPathError for an empty path or an empty segment.
    """
    if isinstance(path, str):
        parts = tuple(path.split(".")) if path else ()
    else:
        parts = tuple(path)
    if not parts:
        raise EmptyPathError()
    if any(not part for part in parts):
        raise EmptyPathError(f"Empty segment in key path {join_path(parts)!r}")
    return parts


def join_path(parts: PySequence[str]) -> str:
    return ".".join(parts)


def child_path(prefix: str, key: str) -> str:
    """Extend a dotted path by one key; the empty prefix is the root."""
    return f"{prefix}.{key}" if prefix else key


def is_under(path: str, ancestor: str) -> bool:
    """True when `path` is `ancestor` itself or lies below it."""
    return path == ancestor or path.startswith(ancestor + ".")


# ═══════════════════════════════════════════════════════════════════
#  PATH ADDRESSING
# ═══════════════════════════════════════════════════════════════════

def get_path(tree: Node, path: PathLike) -> Optional[Node]:
    """
    Return the node at `path`, or None when it is absent.

    A missing key or a non-mapping intermediate both count as absent.
    """
    current = tree
    for part in split_path(path):
        if not isinstance(current, Mapping) or part not in current.entries:
            return None
        current = current.entries[part]
    return current


def set_path(tree: Node, path: PathLike, value: Node) -> Mapping:
    """
    Return a new tree with `value` stored at `path`.

    The root becomes an empty mapping if it is not one already.  Missing
    intermediates, and intermediates holding a non-mapping value, are
    replaced by empty mappings.  The final key is inserted or overwritten
    whatever it held before.
    """
    parts = split_path(path)
    return _set_in(tree, parts, ensure_node(value))


def _set_in(node: Node, parts: tuple[str, ...], value: Node) -> Mapping:
    base = node if isinstance(node, Mapping) else Mapping()
    head, rest = parts[0], parts[1:]
    if not rest:
        return base.with_entry(head, value)
    return base.with_entry(head, _set_in(base.entries.get(head, Mapping()), rest, value))


def unset_path(tree: Node, path: PathLike) -> Node:
    """
    Return a new tree without the key at `path`.

    Never creates structure.  If any segment is missing or a non-mapping
    is in the way, the input tree is returned unchanged.
    """
    parts = split_path(path)
    return _unset_in(tree, parts)


def _unset_in(node: Node, parts: tuple[str, ...]) -> Node:
    if not isinstance(node, Mapping) or parts[0] not in node.entries:
        return node
    head, rest = parts[0], parts[1:]
    if not rest:
        return node.without(head)
    child = node.entries[head]
    new_child = _unset_in(child, rest)
    if new_child is child:
        return node
    return node.with_entry(head, new_child)
