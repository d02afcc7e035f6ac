"""Logging helpers for yamlpatch.

The library only creates loggers; configuring handlers is left to the
application (the ``ym`` command does it in ``yamlpatch.cli``).
"""

import logging


def get_logger(name: str) -> logging.Logger:
    """Return a standard library logger under the ``yamlpatch.`` namespace.

    Example:
        >>> get_logger("ops").name
        'yamlpatch.ops'
    """
    if not (name == "yamlpatch" or name.startswith("yamlpatch.")):
        name = f"yamlpatch.{name}"
    return logging.getLogger(name)
