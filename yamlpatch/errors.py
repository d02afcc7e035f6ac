"""
yamlpatch.errors — Exception hierarchy.

Every failure the library reports on purpose derives from YamlPatchError.
Absence (a missing key on get/unset) is never an error, and fallbacks to
full re-serialization are logged rather than raised.  I/O failures are
left as the builtin OSError, which already carries the file name.
"""

from typing import Optional


class YamlPatchError(Exception):
    """Base exception for all yamlpatch errors."""


class EmptyPathError(YamlPatchError):
    """A structural path was empty or contained an empty segment."""

    def __init__(self, message: str = "Empty key path"):
        super().__init__(message)


class PatternError(YamlPatchError):
    """A search pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid regex pattern {pattern!r}: {reason}")


class ParseError(YamlPatchError):
    """
    Source text could not be parsed as a YAML document.

    The message is prefixed with ``file:line:col`` when the location is
    known, so it reads like a compiler diagnostic.
    """

    def __init__(
        self,
        message: str,
        lineno: Optional[int] = None,
        col_offset: Optional[int] = None,
        source_file: Optional[str] = None,
    ):
        self.message = message
        self.lineno = lineno
        self.col_offset = col_offset
        self.source_file = source_file

        location = ""
        if source_file:
            location = f"{source_file}:"
        if lineno is not None:
            location += f"{lineno}:"
            if col_offset is not None:
                location += f"{col_offset}:"
        if location:
            location = location.rstrip(":") + " "

        super().__init__(f"{location}{message}")


class KeyNotFoundError(YamlPatchError):
    """The source key of a copy or move does not exist."""

    def __init__(self, key: str, source: str):
        self.key = key
        self.source = source
        super().__init__(f"Key '{key}' not found in '{source}'")


class UsageError(YamlPatchError):
    """Arguments to a document operation or command are malformed."""
