"""
yamlpatch — Format-preserving YAML editing and key-path search
==============================================================

Edit a YAML file by structural path and write back only the lines that
changed.  Comments, blank lines, key order and indentation elsewhere in
the file survive the edit.

    tree = parse(text)
    edit = set_path(tree, "database.port", Scalar(5433))
    new_text = patch(text, edit)          # only the `port:` line differs

    search(tree, r"(dev|prod)\\.password")  → [("dev.password", ...), ...]

When an edit adds new nested structure, the patch falls back to a clean
re-serialization of the whole document rather than guessing at layout.
"""

from yamlpatch.core import (
    # Types
    Node,
    Scalar,
    Sequence,
    Mapping,
    # Paths
    split_path,
    get_path,
    set_path,
    unset_path,
)
from yamlpatch.formats import (
    from_python, to_python, parse, serialize, parse_scalar,
    format_inline, format_result,
)
from yamlpatch.search import search, iter_matches
from yamlpatch.diff import ChangeSet, diff, is_line_patchable
from yamlpatch.patcher import patch, write_preserving_format, index_lines
from yamlpatch.config import PatchConfig, DEFAULT_CONFIG
from yamlpatch.errors import (
    YamlPatchError, EmptyPathError, PatternError, ParseError,
    KeyNotFoundError, UsageError,
)

__version__ = "0.1.0"
__all__ = [
    "Node", "Scalar", "Sequence", "Mapping",
    "split_path", "get_path", "set_path", "unset_path",
    "from_python", "to_python", "parse", "serialize", "parse_scalar",
    "format_inline", "format_result",
    "search", "iter_matches",
    "ChangeSet", "diff", "is_line_patchable",
    "patch", "write_preserving_format", "index_lines",
    "PatchConfig", "DEFAULT_CONFIG",
    "YamlPatchError", "EmptyPathError", "PatternError", "ParseError",
    "KeyNotFoundError", "UsageError",
]
