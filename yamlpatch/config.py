"""
yamlpatch.config — Explicit, immutable configuration.

A PatchConfig is passed down to whatever needs it; nothing reads ambient
process state.  The default instance is shared and safe to reuse because
it is frozen.
"""

from dataclasses import dataclass, fields
from typing import Any


@dataclass(frozen=True, slots=True)
class PatchConfig:
    """
    Settings for serialization, patching and display.

    Attributes:
        indent:          Indentation width used by the serializer.
        verify:          Re-parse patched text and fall back to full
                         serialization if it does not read back as the
                         edited tree.
        terminal_width:  Display width used to truncate search results
                         when the caller does not supply one.
        yaml_suffixes:   File suffixes picked up by directory search.
    """
    indent: int = 2
    verify: bool = True
    terminal_width: int = 80
    yaml_suffixes: tuple[str, ...] = (".yaml", ".yml")

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "PatchConfig":
        """Build a config from a plain dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in config_dict.items() if k in known}
        if "yaml_suffixes" in kwargs:
            kwargs["yaml_suffixes"] = tuple(kwargs["yaml_suffixes"])
        return cls(**kwargs)


DEFAULT_CONFIG = PatchConfig()
