"""
yamlpatch.cli — the ``ym`` command.

    ym grep PATTERN [-R] [FILES...]      search key paths (stdin if no files)
    ym get FILE KEY                      print one value
    ym set FILE KEY=VALUE...             set values, keeping the file's layout
    ym unset FILE KEY...                 remove keys
    ym cp FILE:KEY [DEST]                copy a value
    ym mv FILE:KEY [DEST]                move a value

DEST is ``FILE:KEY``, ``FILE:`` (same key), ``:KEY`` or ``KEY`` (same file).
Values given to ``set`` are read as YAML, so ``port=5432`` stores a number
and ``debug=true`` a boolean.
"""

import argparse
import logging
import shutil
import sys
from typing import Optional, Sequence

from . import __version__
from .config import DEFAULT_CONFIG, PatchConfig
from .errors import KeyNotFoundError, UsageError, YamlPatchError
from .formats import format_result, parse_scalar
from .ops import (
    copy_value, get_value, grep_files, grep_text, move_value,
    set_values, should_show_source, unset_values,
)


def terminal_width(config: PatchConfig = DEFAULT_CONFIG) -> int:
    return shutil.get_terminal_size((config.terminal_width, 24)).columns


# ═══════════════════════════════════════════════════════════════════
#  ARGUMENT HELPERS
# ═══════════════════════════════════════════════════════════════════

def parse_file_key_pair(value: str) -> tuple[str, str]:
    """Split a required ``file:key`` pair."""
    file, sep, key = value.partition(":")
    if not sep or not file or not key:
        raise UsageError(
            f"Invalid file:key pair: {value} (expected format: file.yaml:key.path)"
        )
    return file, key


def parse_optional_file_key_pair(value: str) -> tuple[Optional[str], Optional[str]]:
    """
    Split a destination: ``file:key``, ``file:``, ``:key`` or a bare key.

    Empty halves come back as None.
    """
    if ":" not in value:
        if not value:
            raise UsageError("Key cannot be empty")
        return None, value
    file, _, key = value.partition(":")
    if not file and not key:
        raise UsageError(f"Invalid file:key pair: {value} (file and key cannot both be empty)")
    return file or None, key or None


def parse_updates(pairs: Sequence[str]) -> dict:
    """Turn ``key=value`` arguments into {key: Node}.  Values may contain '='."""
    if not pairs:
        raise UsageError("set requires at least one key=value pair")
    updates = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise UsageError(f"Invalid key=value pair: {pair}")
        updates[key] = parse_scalar(value)
    return updates


def _destination(name: str, destination: Sequence[str]) -> tuple[Optional[str], Optional[str]]:
    if len(destination) > 1:
        raise UsageError(f"{name} accepts at most one destination argument")
    if not destination:
        return None, None
    return parse_optional_file_key_pair(destination[0])


# ═══════════════════════════════════════════════════════════════════
#  COMMANDS
# ═══════════════════════════════════════════════════════════════════

def cmd_grep(args: argparse.Namespace) -> int:
    width = terminal_width()
    if not args.files:
        for key, value in grep_text(args.pattern, sys.stdin.read()):
            print(format_result(key, value, width))
        return 0

    show_source = should_show_source(args.files)
    for source, key, value in grep_files(args.pattern, args.files, recursive=args.recursive):
        line = format_result(key, value, width)
        print(f"{source}:{line}" if show_source else line)
    return 0


def cmd_get(args: argparse.Namespace) -> int:
    value = get_value(args.file, args.key)
    if value is None:
        raise KeyNotFoundError(args.key, args.file)
    print(format_result(args.key, value, terminal_width()))
    return 0


def cmd_set(args: argparse.Namespace) -> int:
    set_values(args.file, parse_updates(args.updates))
    return 0


def cmd_unset(args: argparse.Namespace) -> int:
    if not args.keys:
        raise UsageError("unset requires at least one key")
    unset_values(args.file, args.keys)
    return 0


def cmd_cp(args: argparse.Namespace) -> int:
    source_file, source_key = parse_file_key_pair(args.source)
    dest_file, dest_key = _destination("cp", args.destination)
    copy_value(source_file, source_key, dest_file, dest_key)
    return 0


def cmd_mv(args: argparse.Namespace) -> int:
    source_file, source_key = parse_file_key_pair(args.source)
    dest_file, dest_key = _destination("mv", args.destination)
    move_value(source_file, source_key, dest_file, dest_key)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ym", description="A YAML search and patch tool")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("grep", help="Search YAML keys by regex pattern (reads stdin if no files)")
    p.add_argument("pattern", help="Pattern to search for")
    p.add_argument("-R", dest="recursive", action="store_true",
                   help="Recursive search in directories")
    p.add_argument("files", nargs="*", help="Files or directories to search")
    p.set_defaults(func=cmd_grep)

    p = sub.add_parser("get", help="Print the value at a key path")
    p.add_argument("file")
    p.add_argument("key")
    p.set_defaults(func=cmd_get)

    p = sub.add_parser("set", help="Set YAML values at key paths")
    p.add_argument("file", help="File to modify")
    p.add_argument("updates", nargs="*", help="key=value pairs (values can contain '=')")
    p.set_defaults(func=cmd_set)

    p = sub.add_parser("unset", help="Remove keys from YAML")
    p.add_argument("file", help="File to modify")
    p.add_argument("keys", nargs="*", help="Keys to remove, e.g. database.password")
    p.set_defaults(func=cmd_unset)

    p = sub.add_parser("cp", help="Copy a value from one key to another (same or different file)")
    p.add_argument("source", help="file.yaml:key.path")
    p.add_argument("destination", nargs="*", help="file.yaml:key.path, file.yaml:, :key or key")
    p.set_defaults(func=cmd_cp)

    p = sub.add_parser("mv", help="Move a value (deletes the source after copying)")
    p.add_argument("source", help="file.yaml:key.path")
    p.add_argument("destination", nargs="*", help="file.yaml:key.path, file.yaml:, :key or key")
    p.set_defaults(func=cmd_mv)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    try:
        return args.func(args)
    except (YamlPatchError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
