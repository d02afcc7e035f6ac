"""
yamlpatch.ops — Document operations on files.

Every edit follows the same contract:

    text  = read(file)
    tree  = parse(text)
    edit  = set_path / unset_path applied to tree   (tree is immutable)
    write(file, patch(text, edit))

Copy and move are compositions of that contract.  A move is a copy
followed by a separate edit of the source; the two writes are not atomic,
so a failure between them leaves the value in both files.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping as PyMapping, Optional, Union

from .config import DEFAULT_CONFIG, PatchConfig
from .core import Node, get_path, set_path, unset_path
from .errors import KeyNotFoundError, UsageError, YamlPatchError
from .formats import from_python, parse, serialize
from .logger import get_logger
from .patcher import patch
from .search import PatternLike, compile_pattern, iter_matches

logger = get_logger(__name__)

PathArg = Union[str, os.PathLike]


@dataclass
class Document:
    """A loaded file: where it came from, its raw text and its tree."""
    path: Path
    text: str
    tree: Node


def load_document(path: PathArg) -> Document:
    """Read and parse a YAML file.  OSError and ParseError propagate."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    return Document(path=path, text=text, tree=parse(text, source_file=str(path)))


def save_document(doc: Document, tree: Node,
                  config: PatchConfig = DEFAULT_CONFIG) -> str:
    """Patch `tree` into the document's text, write it, return the new text."""
    new_text = patch(doc.text, tree, config)
    if new_text != doc.text:
        doc.path.write_text(new_text, encoding="utf-8")
    return new_text


# ═══════════════════════════════════════════════════════════════════
#  SINGLE-FILE EDITS
# ═══════════════════════════════════════════════════════════════════

def set_values(path: PathArg, updates: PyMapping[str, Any],
               config: PatchConfig = DEFAULT_CONFIG) -> str:
    """
    Set every `key path → value` in `updates` and write the file once.

    Values may be Nodes or plain Python data.
    """
    doc = load_document(path)
    tree = doc.tree
    for key, value in updates.items():
        tree = set_path(tree, key, from_python(value))
    return save_document(doc, tree, config)


def unset_values(path: PathArg, keys: Iterable[str],
                 config: PatchConfig = DEFAULT_CONFIG) -> str:
    """Remove every key path in `keys` (absent ones are ignored)."""
    doc = load_document(path)
    tree = doc.tree
    for key in keys:
        tree = unset_path(tree, key)
    return save_document(doc, tree, config)


def get_value(path: PathArg, key: str) -> Optional[Node]:
    """Return the node at `key` in a file, or None when it is absent."""
    return get_path(load_document(path).tree, key)


# ═══════════════════════════════════════════════════════════════════
#  COPY / MOVE
# ═══════════════════════════════════════════════════════════════════

def resolve_destination(source_file: PathArg, source_key: str,
                        dest_file: Optional[PathArg] = None,
                        dest_key: Optional[str] = None) -> tuple[Path, str]:
    """Fill an omitted destination file or key from the source."""
    if dest_file is None and dest_key is None:
        raise UsageError("destination file and destination key cannot both be omitted")
    return (Path(dest_file if dest_file is not None else source_file),
            dest_key if dest_key is not None else source_key)


def copy_value(source_file: PathArg, source_key: str,
               dest_file: Optional[PathArg] = None,
               dest_key: Optional[str] = None,
               config: PatchConfig = DEFAULT_CONFIG) -> str:
    """
    Copy the value at `source_file:source_key` to `dest_file:dest_key`.

    An existing destination is patched in place; a missing one is created
    from the canonical serialization.  Returns the destination text.
    """
    dest_path, dest_key = resolve_destination(source_file, source_key, dest_file, dest_key)

    source = load_document(source_file)
    value = get_path(source.tree, source_key)
    if value is None:
        raise KeyNotFoundError(source_key, str(source_file))

    if dest_path.exists():
        dest = load_document(dest_path)
        return save_document(dest, set_path(dest.tree, dest_key, value), config)

    text = serialize(set_path(from_python({}), dest_key, value), config)
    dest_path.write_text(text, encoding="utf-8")
    logger.debug("Created %s", dest_path)
    return text


def move_value(source_file: PathArg, source_key: str,
               dest_file: Optional[PathArg] = None,
               dest_key: Optional[str] = None,
               config: PatchConfig = DEFAULT_CONFIG) -> str:
    """
    Copy, then remove the key from the source.  Returns the source text.

    Not atomic.  Moving a key onto itself (same file and key) deletes it:
    the copy changes nothing and the removal that follows takes it out.
    """
    copy_value(source_file, source_key, dest_file, dest_key, config)
    source = load_document(source_file)
    return save_document(source, unset_path(source.tree, source_key), config)


# ═══════════════════════════════════════════════════════════════════
#  SEARCH OVER FILES
# ═══════════════════════════════════════════════════════════════════

def grep_text(pattern: PatternLike, text: str,
              source: str = "<stdin>") -> list[tuple[str, Node]]:
    """Search YAML text (e.g. standard input) by key path pattern."""
    regex = compile_pattern(pattern)
    return list(iter_matches(parse(text, source_file=source), regex))


def grep_files(pattern: PatternLike, paths: Iterable[PathArg],
               recursive: bool = False,
               config: PatchConfig = DEFAULT_CONFIG) -> Iterator[tuple[str, str, Node]]:
    """
    Yield (source, path, value) for every match in files and directories.

    Directories are always walked recursively for YAML files; `recursive`
    is accepted for command-line compatibility.  A named file that cannot
    be read or parsed aborts the search; files found inside a directory
    that fail are logged and skipped.
    """
    regex = compile_pattern(pattern)
    return _grep_paths(regex, list(paths), config)


def _grep_paths(regex, paths: list[PathArg],
                config: PatchConfig) -> Iterator[tuple[str, str, Node]]:
    for path in map(Path, paths):
        if path.is_file():
            yield from _grep_file(regex, path)
        elif path.is_dir():
            for found in _yaml_files(path, config.yaml_suffixes):
                try:
                    yield from _grep_file(regex, found)
                except (OSError, YamlPatchError) as exc:
                    logger.warning("Skipping %s: %s", found, exc)
        else:
            raise UsageError(f"'{path}' is not a file or directory")


def _grep_file(regex, path: Path) -> Iterator[tuple[str, str, Node]]:
    doc = load_document(path)
    for key, value in iter_matches(doc.tree, regex):
        yield str(path), key, value


def _yaml_files(directory: Path, suffixes: tuple[str, ...]) -> Iterator[Path]:
    for entry in sorted(directory.iterdir()):
        if entry.is_dir():
            yield from _yaml_files(entry, suffixes)
        elif entry.is_file() and entry.suffix in suffixes:
            yield entry


def should_show_source(paths: list[PathArg]) -> bool:
    """Prefix results with their file unless exactly one plain file is searched."""
    if len(paths) == 1:
        return Path(paths[0]).is_dir()
    return True
