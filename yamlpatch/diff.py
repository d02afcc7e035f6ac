"""
yamlpatch.diff — Compare an original tree with an edited one.

The result is a ChangeSet:

    changes    full path → new value, for every modified leaf and every
               added key (at any depth)
    removed    full paths present in the original but not in the edit
    patchable  whether the difference can be written as local line edits

Two independent passes build it:

    collect_changes   walks the EDITED tree.  A changed mapping is
                      recursed into, so a deep edit records only the leaf
                      that moved.  A changed sequence, or a mapping that
                      lost all of its keys, is recorded whole.
    collect_removed   walks the ORIGINAL tree.  A vanished key is recorded
                      once; its descendants are not listed separately.

Because changes come from keys of the edited tree and removals from keys
missing in it, the two never overlap.

LINE-PATCHABLE VERDICT
    The verdict is deliberately conservative.  New indented structure
    cannot be synthesized safely by inserting lines, so it is rejected:

      • a new key whose value is a mapping                → not patchable
      • a changed key where exactly one side is a mapping → not patchable
      • both sides mappings                               → recurse
      • two different non-mapping document roots          → not patchable
      • everything else (scalar edits, sequence values,
        removals at any depth, scalar additions)          → patchable
"""

from dataclasses import dataclass, field

from .core import Mapping, Node, Sequence, child_path, ensure_node


@dataclass
class ChangeSet:
    """Difference between an original and an edited tree."""
    changes: dict[str, Node] = field(default_factory=dict)
    removed: list[str] = field(default_factory=list)
    patchable: bool = True

    @property
    def is_empty(self) -> bool:
        return not self.changes and not self.removed

    def __repr__(self) -> str:
        if self.is_empty:
            return "ChangeSet(no changes)"
        mode = "line patch" if self.patchable else "re-serialize"
        return (f"ChangeSet({len(self.changes)} changed, "
                f"{len(self.removed)} removed, {mode})")


def diff(old: Node, new: Node) -> ChangeSet:
    """Compute the ChangeSet that turns `old` into `new`."""
    changes: dict[str, Node] = {}
    removed: list[str] = []
    collect_changes(old, new, "", changes)
    collect_removed(old, new, "", removed)
    return ChangeSet(changes=changes, removed=removed,
                     patchable=is_line_patchable(old, new))


# ═══════════════════════════════════════════════════════════════════
#  CHANGED AND ADDED PATHS
# ═══════════════════════════════════════════════════════════════════

def collect_changes(old: Node, new: Node, prefix: str, changes: dict[str, Node]) -> None:
    """Record in `changes` every path whose value differs in `new`."""
    if isinstance(old, Mapping) and isinstance(new, Mapping):
        for key, new_val in new.entries.items():
            path = child_path(prefix, key)
            if key not in old.entries:
                changes[path] = new_val
                continue
            old_val = old.entries[key]
            if old_val != new_val:
                if isinstance(new_val, Mapping) and not new_val.entries:
                    # a bare `key:` would read back as null
                    changes[path] = new_val
                elif isinstance(new_val, (Mapping, Sequence)):
                    collect_changes(old_val, new_val, path, changes)
                else:
                    changes[path] = ensure_node(new_val)
            elif isinstance(new_val, Mapping):
                # descendant removals are found by collect_removed
                collect_changes(old_val, new_val, path, changes)
        return

    ensure_node(old)
    ensure_node(new)
    if old != new and prefix:
        changes[prefix] = new


# ═══════════════════════════════════════════════════════════════════
#  REMOVED PATHS
# ═══════════════════════════════════════════════════════════════════

def collect_removed(old: Node, new: Node, prefix: str, removed: list[str]) -> None:
    """Record in `removed` every path of `old` that `new` no longer has."""
    if not (isinstance(old, Mapping) and isinstance(new, Mapping)):
        return
    for key, old_val in old.entries.items():
        path = child_path(prefix, key)
        if key not in new.entries:
            removed.append(path)
        else:
            new_val = new.entries[key]
            if isinstance(old_val, Mapping) and isinstance(new_val, Mapping):
                collect_removed(old_val, new_val, path, removed)


# ═══════════════════════════════════════════════════════════════════
#  PATCHABILITY
# ═══════════════════════════════════════════════════════════════════

def is_line_patchable(old: Node, new: Node) -> bool:
    """Pure predicate: can `old` → `new` be written as local line edits?"""
    if not (isinstance(old, Mapping) and isinstance(new, Mapping)):
        return old == new

    for key, new_val in new.entries.items():
        if key not in old.entries:
            if isinstance(new_val, Mapping):
                return False
            continue
        old_val = old.entries[key]
        if old_val == new_val:
            continue
        old_is_map = isinstance(old_val, Mapping)
        new_is_map = isinstance(new_val, Mapping)
        if old_is_map and new_is_map:
            if not is_line_patchable(old_val, new_val):
                return False
        elif old_is_map or new_is_map:
            return False
    return True
