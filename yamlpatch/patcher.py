"""
yamlpatch.patcher — Write an edited tree back into its original text.

Only the lines an edit touches are rewritten; comments, blank lines, key
order and indentation elsewhere are left byte for byte as they were.

ALGORITHM:
    1. Parse the original text and diff it against the edited tree.
    2. Not line-patchable         → full re-serialization of the edit.
       Nothing changed            → the original text, unchanged.
    3. Index the lines: line number → full dotted path of the key on it,
       tracking nesting with a stack of (indent, key) frames.
    4. Scan top to bottom:
         blank / comment line     → copied verbatim
         removed path (or below)  → the line and its block are dropped
         changed path             → `indent key: value` replaces the line
                                    and its old block
         anything else            → copied verbatim
    5. Changes no line claimed are additions.  Top-level ones are appended
       as `key: value`; nested ones force a re-serialization of the
       original tree with every change applied.
    6. Optionally re-parse the result and fall back to re-serialization
       if it does not read back as the edited tree.

RETENTION POLICY:
    Inside a dropped or replaced block, comment lines indented no deeper
    than the block's own key are kept; deeper ones go with the block.
    Blank lines are kept only when the block ends after them.  The rule
    is the same for removals and replacements at every depth.

LINE ENDINGS:
    Lines keep their own ending.  A rewritten line keeps the "\\r" of a
    CRLF line, and appended keys use CRLF when the text contains it.
"""

import re
from typing import Optional

import yaml

from .config import DEFAULT_CONFIG, PatchConfig
from .core import Mapping, Node, Scalar, is_under, set_path, unset_path
from .diff import ChangeSet, diff
from .errors import ParseError
from .formats import format_inline, parse, serialize
from .logger import get_logger

logger = get_logger(__name__)

_KEY_RE = re.compile(
    r"""
    (?P<key>
        "(?:[^"\\]|\\.)*"                          # double-quoted key
      | '(?:[^']|'')*'                             # single-quoted key
      | (?![-?:](?:\s|$))[^\s#'"\[\]{}&*!|>%@`][^#]*?  # plain key
    )
    [ \t]*:(?=\s|$)
    """,
    re.VERBOSE,
)


# ═══════════════════════════════════════════════════════════════════
#  PUBLIC ENTRY POINT
# ═══════════════════════════════════════════════════════════════════

def patch(original_text: str, edited_tree: Node,
          config: PatchConfig = DEFAULT_CONFIG) -> str:
    """
    Return the text to persist for `edited_tree`, reusing `original_text`.

    Raises ParseError if the original text is not valid YAML.
    """
    original_tree = parse(original_text)
    changeset = diff(original_tree, edited_tree)

    if not changeset.patchable:
        logger.debug("Structural change is not line-patchable; re-serializing")
        return serialize(edited_tree, config)

    if changeset.is_empty:
        logger.debug("No changes; keeping original text")
        return original_text

    patched = apply_changes(original_text, original_tree, changeset, config)

    if config.verify and not _reads_as(patched, edited_tree):
        logger.debug("Patched text does not read back as the edit; re-serializing")
        return serialize(edited_tree, config)
    return patched


write_preserving_format = patch


def _reads_as(text: str, tree: Node) -> bool:
    try:
        return parse(text) == tree
    except ParseError:
        return False


# ═══════════════════════════════════════════════════════════════════
#  LINE-KEY INDEX
# ═══════════════════════════════════════════════════════════════════

def index_lines(lines: list[str]) -> dict[int, str]:
    """
    Map each key-bearing line number to the full dotted path it defines.

    Blank lines, comments and sequence items are not indexed.  A line pops
    every frame at the same or deeper indentation before pushing its key.
    """
    index: dict[int, str] = {}
    stack: list[tuple[int, str]] = []

    for lineno, line in enumerate(lines):
        stripped = line.lstrip()
        if _is_trivia(stripped):
            continue
        match = _KEY_RE.match(stripped)
        if match is None:
            continue
        indent = len(line) - len(stripped)
        key = _unquote_key(match.group("key"))

        while stack and stack[-1][0] >= indent:
            stack.pop()

        path = ".".join([k for _, k in stack] + [key])
        index[lineno] = path
        stack.append((indent, key))

    return index


def _is_trivia(stripped: str) -> bool:
    return not stripped or stripped.startswith("#")


def _unquote_key(key: str) -> str:
    if key.startswith("'"):
        return key[1:-1].replace("''", "'")
    if key.startswith('"'):
        try:
            value = yaml.safe_load(key)
        except yaml.YAMLError:
            return key[1:-1]
        return value if isinstance(value, str) else key[1:-1]
    return key


# ═══════════════════════════════════════════════════════════════════
#  LINE PATCHING
# ═══════════════════════════════════════════════════════════════════

def apply_changes(text: str, original_tree: Node, changeset: ChangeSet,
                  config: PatchConfig = DEFAULT_CONFIG) -> str:
    """Rewrite `text` line by line according to a patchable ChangeSet."""
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    index = index_lines(lines)

    out: list[str] = []
    applied: set[str] = set()
    removals_seen: set[str] = set()

    i = 0
    while i < len(lines):
        line = lines[i]
        stripped = line.lstrip()
        if _is_trivia(stripped):
            out.append(line)
            i += 1
            continue

        indent = len(line) - len(stripped)
        path = index.get(i)

        if path is not None:
            removed = _removed_ancestor(path, changeset.removed)
            if removed is not None:
                removals_seen.add(removed)
                i = _skip_block(lines, i + 1, indent, out)
                continue

            if path in changeset.changes:
                out.append(_render_line(line, indent, changeset.changes[path]))
                applied.add(path)
                i = _skip_block(lines, i + 1, indent, out)
                continue

        out.append(line)
        i += 1

    pending = [p for p in changeset.changes if p not in applied]
    missed = [p for p in changeset.removed
              if p not in removals_seen and not any(is_under(p, a) for a in applied)]
    if missed or any(not _appendable(p, original_tree) for p in pending):
        logger.debug("Changes not expressible as line edits (pending=%s, missed=%s); "
                     "re-serializing", pending, missed)
        return serialize(_rebuild(original_tree, changeset), config)

    if pending:
        _append_keys(out, pending, changeset, text)

    output = "\n".join(out)
    if text.endswith("\n"):
        output += "\n"
    return output


def _append_keys(out: list[str], pending: list[str], changeset: ChangeSet,
                 text: str) -> None:
    """Append new top-level keys after one blank line, in the text's line ending."""
    eol = "\r" if "\r\n" in text else ""
    if eol and out and not out[-1].endswith(eol):
        out[-1] += eol
    added = [""] if out and out[-1].strip() else []
    added += [f"{format_inline(Scalar(path))}: {format_inline(changeset.changes[path])}"
              for path in pending]
    out.extend(entry + eol for entry in added)
    if eol and not text.endswith("\n"):
        out[-1] = out[-1][:-len(eol)]


def _removed_ancestor(path: str, removed: list[str]) -> Optional[str]:
    for candidate in removed:
        if is_under(path, candidate):
            return candidate
    return None


def _skip_block(lines: list[str], start: int, indent: int, out: list[str]) -> int:
    """
    Skip the block owned by a key at `indent`, starting at line `start`.

    Returns the index of the first line after the block.  Comment lines
    no deeper than `indent` are copied to `out`.  Blank lines are copied
    only when no block content follows them, so a blank line inside a
    block scalar goes with the block.
    """
    j = start
    blanks: list[str] = []
    while j < len(lines):
        line = lines[j]
        stripped = line.lstrip()
        line_indent = len(line) - len(stripped)
        if not stripped:
            blanks.append(line)
            j += 1
            continue
        if stripped.startswith("#"):
            if line_indent <= indent:
                out.extend(blanks)
                out.append(line)
            blanks = []
            j += 1
            continue
        # `key:` followed by `- item` at the same indentation
        if line_indent == indent and _is_sequence_item(stripped):
            blanks = []
            j += 1
            continue
        if line_indent <= indent:
            break
        blanks = []
        j += 1
    out.extend(blanks)
    return j


def _is_sequence_item(stripped: str) -> bool:
    return stripped == "-" or stripped.startswith("- ") or stripped.startswith("-\t")


def _render_line(line: str, indent: int, value: Node) -> str:
    # lines are split on "\n", so a CRLF line still ends in "\r"
    eol = "\r" if line.endswith("\r") else ""
    stripped = line[indent:len(line) - len(eol)]
    match = _KEY_RE.match(stripped)
    key_text = match.group("key")
    comment = _inline_comment(stripped[match.end():])
    formatted = format_inline(value)
    rendered = f"{line[:indent]}{key_text}:"
    if formatted:
        rendered += f" {formatted}"
    return rendered + comment + eol


def _inline_comment(rest: str) -> str:
    """
    Return the trailing `  # comment` of a value, with its leading spaces.

    A '#' only starts a comment outside quotes and after whitespace.
    """
    quote = None
    i = 0
    while i < len(rest):
        ch = rest[i]
        if quote is not None:
            if quote == '"' and ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "'\"" and (i == 0 or rest[i - 1] in " \t[{,"):
            quote = ch
        elif ch == "#" and (i == 0 or rest[i - 1] in " \t"):
            start = i
            while start > 0 and rest[start - 1] in " \t":
                start -= 1
            return rest[start:]
        i += 1
    return ""


# ═══════════════════════════════════════════════════════════════════
#  FALLBACK
# ═══════════════════════════════════════════════════════════════════

def _appendable(path: str, original_tree: Node) -> bool:
    """A pending change can be appended only as a new top-level key."""
    if "." in path:
        return False
    return not (isinstance(original_tree, Mapping) and path in original_tree)


def _rebuild(original_tree: Node, changeset: ChangeSet) -> Node:
    """Apply a ChangeSet onto the original tree, keeping its key order."""
    tree = original_tree
    for path, value in changeset.changes.items():
        tree = set_path(tree, path, value)
    for path in changeset.removed:
        tree = unset_path(tree, path)
    return tree
