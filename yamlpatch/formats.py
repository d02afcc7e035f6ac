"""
yamlpatch.formats — Convert between YAML text, Python data and trees.

Supported conversions:
    • Python objects (dict, list, str, int, float, bool, None) ↔ Node
    • YAML text ↔ Node (PyYAML safe loader / safe dumper)
    • Node → one-line YAML fragment, for patching a single `key: value` line
    • (key, Node) → display line(s) for search results
"""

import datetime
import math
from typing import Any, Optional

import yaml

from .config import DEFAULT_CONFIG, PatchConfig
from .core import Mapping, Node, Scalar, Sequence
from .errors import ParseError


# ═══════════════════════════════════════════════════════════════════
#  PYTHON OBJECTS ↔ TREES
# ═══════════════════════════════════════════════════════════════════

def from_python(obj: Any) -> Node:
    """
    Convert a Python object to a document tree.

    Mapping:
        str / int / float / bool / None / date  → Scalar
        list / tuple                            → Sequence
        dict                                    → Mapping (keys stringified)

    Nested structures are converted recursively.  Nodes pass through.
    """
    if isinstance(obj, Node):
        return obj
    if obj is None or isinstance(obj, (bool, int, float, str, datetime.date)):
        return Scalar(obj)
    if isinstance(obj, (list, tuple)):
        return Sequence(from_python(item) for item in obj)
    if isinstance(obj, dict):
        return Mapping({str(k): from_python(v) for k, v in obj.items()})

    # Fallback: convert to string representation
    return Scalar(str(obj))


def to_python(node: Node) -> Any:
    """
    Convert a tree back to plain Python data.

    Inverse of from_python:
        to_python(from_python(obj)) == obj
    for YAML-compatible objects with string keys.
    """
    if isinstance(node, Scalar):
        return node.val
    if isinstance(node, Sequence):
        return [to_python(item) for item in node.items]
    if isinstance(node, Mapping):
        return {k: to_python(v) for k, v in node.entries.items()}
    raise TypeError(f"Unknown Node type: {type(node)}")


# ═══════════════════════════════════════════════════════════════════
#  YAML TEXT ↔ TREES
# ═══════════════════════════════════════════════════════════════════

def parse(text: str, source_file: Optional[str] = None) -> Node:
    """
    Parse YAML text into a tree.

    An empty document parses to Scalar(None).  Any PyYAML error is raised
    as ParseError, located at the problem mark when PyYAML reports one.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        problem = getattr(exc, "problem", None) or str(exc)
        raise ParseError(
            f"Failed to parse YAML: {problem}",
            lineno=mark.line + 1 if mark is not None else None,
            col_offset=mark.column + 1 if mark is not None else None,
            source_file=source_file,
        ) from exc
    return from_python(data)


def serialize(tree: Node, config: PatchConfig = DEFAULT_CONFIG) -> str:
    """Canonical block-style YAML for a tree, keeping key order."""
    return yaml.safe_dump(
        to_python(tree),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        indent=config.indent,
    )


def parse_scalar(text: str) -> Node:
    """
    Interpret a command-line value as YAML.

        "5432"    → Scalar(5432)
        "true"    → Scalar(True)
        "[a, b]"  → Sequence
        "a: b: c" → Scalar("a: b: c")   (not valid YAML, kept verbatim)
    """
    try:
        return from_python(yaml.safe_load(text))
    except yaml.YAMLError:
        return Scalar(text)


# ═══════════════════════════════════════════════════════════════════
#  INLINE FORMATTING  (the value half of a patched `key: value` line)
# ═══════════════════════════════════════════════════════════════════

def format_inline(node: Node) -> str:
    """
    Render a node as a YAML fragment that fits after `key: ` on one line.

    Strings are single-quoted when they contain a space or a colon, are
    empty, start with '#', or would not read back as the same string.
    Sequences and mappings are written in flow style.
    """
    if isinstance(node, Scalar):
        return _format_scalar(node.val)
    if isinstance(node, (Sequence, Mapping)):
        return yaml.safe_dump(
            to_python(node),
            default_flow_style=True,
            sort_keys=False,
            allow_unicode=True,
            width=math.inf,
        ).strip()
    raise TypeError(f"Unknown Node type: {type(node)}")


def _format_scalar(val: Any) -> str:
    if val is None:
        return "null"
    if isinstance(val, bool):
        return "true" if val else "false"
    if isinstance(val, int):
        return str(val)
    if isinstance(val, float):
        return _dump_plain(val)
    if isinstance(val, str):
        return _format_string(val)
    if isinstance(val, datetime.date):
        return _dump_plain(val)
    return _format_string(str(val))


def _dump_plain(val: Any) -> str:
    # safe_dump ends a bare scalar document with "\n...\n"
    return yaml.safe_dump(val, default_flow_style=True).splitlines()[0]


def _format_string(s: str) -> str:
    if "\n" in s or "\r" in s:
        return yaml.safe_dump(s, default_style='"', width=math.inf,
                              allow_unicode=True).splitlines()[0]
    if " " in s or ":" in s or not s or s.startswith("#") or not _reads_back(s):
        return "'" + s.replace("'", "''") + "'"
    return s


def _reads_back(s: str) -> bool:
    try:
        return yaml.safe_load(s) == s
    except yaml.YAMLError:
        return False


# ═══════════════════════════════════════════════════════════════════
#  SEARCH RESULT DISPLAY
# ═══════════════════════════════════════════════════════════════════

def format_result(key: str, value: Node, terminal_width: int) -> str:
    """
    Render one search match for display.

    Mappings and sequences are shown as `key:` followed by their YAML,
    indented two spaces, and are never truncated.  Null is `key: null`.
    Other scalars are `key: value`, cut to the terminal width with '...'.
    """
    if isinstance(value, (Mapping, Sequence)):
        block = serialize(value)
        indented = "\n".join(
            f"  {line}" if line else line for line in block.splitlines()
        )
        return f"{key}:\n{indented}"
    if isinstance(value, Scalar):
        if value.val is None:
            return f"{key}: null"
        return truncate(f"{key}: {_display_scalar(value.val)}", terminal_width)
    raise TypeError(f"Unknown Node type: {type(value)}")


def _display_scalar(val: Any) -> str:
    if isinstance(val, bool):
        return "true" if val else "false"
    if isinstance(val, float):
        return _dump_plain(val)
    return str(val)


def truncate(text: str, terminal_width: int) -> str:
    """Cut a single line to `terminal_width` characters, ending in '...'."""
    if len(text) > terminal_width:
        return text[:max(terminal_width - 3, 0)] + "..."
    return text
