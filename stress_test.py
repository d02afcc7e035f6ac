"""
Stress tests / adversarial evaluation of yamlpatch.

This script attempts to BREAK the claimed properties:
  1. Patched text always reads back as the edited tree
  2. Untouched lines survive line-patchable edits byte for byte
  3. Search never returns a path nested under another result
  4. Diff change and removal sets never overlap
  5. Patching cost on large documents
"""

import random
import time

from yamlpatch.core import Mapping, Scalar, get_path, is_under, set_path, unset_path
from yamlpatch.diff import diff
from yamlpatch.formats import from_python, parse, serialize
from yamlpatch.patcher import patch
from yamlpatch.search import search


def test(name, condition, detail=""):
    status = "PASS" if condition else "FAIL"
    print(f"  [{status}] {name}" + (f"  ({detail})" if detail else ""))
    return condition


KEYS = ["a", "b", "c", "db", "host", "port", "x"]
SCALARS = [42, 0, -1, "hello", "two words", "a: b", "#x", "", "yes", "123",
           None, True, False, 1.5]


def random_value(depth=0, max_depth=3):
    """Generate a random document value."""
    if depth >= max_depth:
        return random.choice(SCALARS)

    kind = random.choice(["scalar", "scalar", "seq", "map"])
    if kind == "scalar":
        return random.choice(SCALARS)
    elif kind == "seq":
        return [random_value(depth + 1, max_depth) for _ in range(random.randint(0, 3))]
    else:
        keys = random.sample(KEYS, random.randint(0, 3))
        return {k: random_value(depth + 1, max_depth) for k in keys}


def random_document():
    keys = random.sample(KEYS, random.randint(1, 4))
    return {k: random_value(1) for k in keys}


def random_path():
    return ".".join(random.choice(KEYS) for _ in range(random.randint(1, 3)))


def random_edit(tree):
    """Apply 1-3 random set/unset edits to a tree."""
    for _ in range(random.randint(1, 3)):
        if random.random() < 0.6:
            tree = set_path(tree, random_path(), from_python(random_value(2)))
        else:
            tree = unset_path(tree, random_path())
    return tree


def commented(document):
    return "# header\n" + serialize(from_python(document)) + "# footer\n"


# ═══════════════════════════════════════════════════════════════
#  §1  READ-BACK — random documents and random edits
# ═══════════════════════════════════════════════════════════════

print("=" * 70)
print("  §1  READ-BACK — random documents and edits")
print("=" * 70)

random.seed(42)
mismatches = 0
trials = 500
for _ in range(trials):
    text = commented(random_document())
    edited = random_edit(parse(text))
    result = patch(text, edited)
    if parse(result) != edited:
        mismatches += 1
        if mismatches <= 3:
            print(f"    MISMATCH:\n{text}---\n{result}")

test(f"patch() reads back as the edit ({trials} random edits)",
     mismatches == 0,
     f"{mismatches} mismatches")


# ═══════════════════════════════════════════════════════════════
#  §2  PRESERVATION — scalar edits keep every other line
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 70)
print("  §2  PRESERVATION — scalar edits of existing keys")
print("=" * 70)

random.seed(7)
lost = 0
trials = 300
for _ in range(trials):
    document = random_document()
    key = random.choice(list(document))
    document[key] = "old"
    text = commented(document)
    edited = set_path(parse(text), key, Scalar(random.choice(SCALARS)))
    result = patch(text, edited)

    before = [line for line in text.splitlines() if not line.startswith(f"{key}:")]
    after = [line for line in result.splitlines() if not line.startswith(f"{key}:")]
    if before != after:
        lost += 1
        if lost <= 3:
            print(f"    CHANGED:\n{text}---\n{result}")

test(f"Other lines untouched ({trials} scalar edits)",
     lost == 0,
     f"{lost} documents rewritten")

# Comment on the edited line itself
text = "a: 1  # keep me\nb: 2\n"
result = patch(text, set_path(parse(text), "a", Scalar(5)))
test("Inline comment kept on replaced line",
     result == "a: 5  # keep me\nb: 2\n",
     repr(result))


# ═══════════════════════════════════════════════════════════════
#  §3  SEARCH STOP RULE
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 70)
print("  §3  SEARCH STOP RULE")
print("=" * 70)

random.seed(99)
nested = 0
unaddressable = 0
for _ in range(300):
    tree = from_python(random_document())
    results = search(tree, random.choice(["a", "^db", r"\.", "o", ".", "x$"]))
    found = [path for path, _ in results]
    for path, value in results:
        if get_path(tree, path) != value:
            unaddressable += 1
        if any(other != path and is_under(other, path) for other in found):
            nested += 1

test("No result nested under another", nested == 0, f"{nested} nested")
test("Every result is addressable", unaddressable == 0, f"{unaddressable} bad")


# ═══════════════════════════════════════════════════════════════
#  §4  DIFF EDGE CASES
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 70)
print("  §4  DIFF EDGE CASES")
print("=" * 70)

random.seed(5)
overlaps = 0
for _ in range(300):
    old = from_python(random_document())
    cs = diff(old, random_edit(old))
    if set(cs.changes) & set(cs.removed):
        overlaps += 1
test("Changes and removals disjoint (300 edits)", overlaps == 0, f"{overlaps} overlaps")

# bool vs int (Python: True == 1)
cs = diff(from_python({"a": 1}), from_python({"a": True}))
test("1 → true is a change", cs.changes == {"a": Scalar(True)}, repr(cs))

# Emptied mapping must not read back as null
text = "a:\n  b: 1\n"
result = patch(text, unset_path(parse(text), "a.b"))
test("Emptied mapping written as {}",
     isinstance(get_path(parse(result), "a"), Mapping),
     repr(result))


# ═══════════════════════════════════════════════════════════════
#  §5  PERFORMANCE
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 70)
print("  §5  PERFORMANCE")
print("=" * 70)

for n in [100, 1000, 5000]:
    document = {f"section{i}": {"host": f"h{i}", "port": i} for i in range(n)}
    text = serialize(from_python(document))
    edited = set_path(parse(text), f"section{n // 2}.port", Scalar(-1))
    t0 = time.perf_counter()
    patch(text, edited)
    dt = time.perf_counter() - t0
    print(f"  {n} sections ({len(text.splitlines())} lines): {dt*1000:.1f}ms")


# ═══════════════════════════════════════════════════════════════
#  SUMMARY
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 70)
print("  STRESS TEST SUMMARY")
print("=" * 70)
print("  If you see FAIL above, there's a bug.")
print("  If everything is PASS, the implementation is correct")
print("  for the tested cases (not a proof, but high confidence).")
