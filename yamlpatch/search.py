"""
yamlpatch.search — Find values by a regex over their full structural path.

ALGORITHM:
    Walk mapping entries depth-first in insertion order, building the full
    dotted path of every entry.  Test each path with an unanchored regex
    search.

      • match     → emit (path, value) and do NOT descend into the value,
                    even if it is a mapping: the whole subtree is the result
      • no match  → descend into the value if it is a mapping

    Sequences are opaque: never descended into, only returned whole as the
    value of a matching key.

    {a: {b: 1, c: 2}}  with  ^a$     → [("a", {b: 1, c: 2})]
    {a: {b: 1, c: 2}}  with  ^a\\.   → [("a.b", 1), ("a.c", 2)]
"""

import re
from typing import Iterator, Union

from .core import Mapping, Node, Scalar, Sequence, child_path
from .errors import PatternError

PatternLike = Union[str, "re.Pattern[str]"]


def compile_pattern(pattern: PatternLike) -> "re.Pattern[str]":
    """Compile a search pattern, raising PatternError if it is invalid."""
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise PatternError(pattern, str(exc)) from exc


def search(tree: Node, pattern: PatternLike) -> list[tuple[str, Node]]:
    """
    Return every (path, value) whose full path matches `pattern`.

    An invalid pattern raises PatternError before any result is produced.
    """
    return list(iter_matches(tree, pattern))


def iter_matches(tree: Node, pattern: PatternLike) -> Iterator[tuple[str, Node]]:
    """Lazy form of search().  The pattern is still compiled eagerly."""
    regex = compile_pattern(pattern)
    return _walk(tree, regex, "")


def _walk(node: Node, regex: "re.Pattern[str]", prefix: str) -> Iterator[tuple[str, Node]]:
    if isinstance(node, Mapping):
        for key, value in node.entries.items():
            path = child_path(prefix, key)
            if regex.search(path):
                yield path, value
            else:
                yield from _walk(value, regex, path)
    elif isinstance(node, (Sequence, Scalar)):
        return
    else:
        raise TypeError(f"Unknown Node type: {type(node)}")
