"""Property-based tests for yamlpatch using Hypothesis.

These tests check invariants that should hold for any document and edit:
1. A patched file always reads back as the edited tree
2. Set then get returns the value; unset then get returns nothing
3. Search results are real paths and never nest inside each other
4. Changes and removals of a diff never overlap
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from yamlpatch.core import Mapping, get_path, is_under, set_path, unset_path
from yamlpatch.diff import diff
from yamlpatch.formats import from_python, parse, serialize
from yamlpatch.patcher import patch
from yamlpatch.search import search

keys = st.sampled_from(["a", "b", "c", "host", "port", "db"])
scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-1000, max_value=1000),
    st.text(alphabet="abz09 :#'-", max_size=6),
)
values = st.recursive(
    scalars,
    lambda children: st.one_of(
        st.lists(children, max_size=3),
        st.dictionaries(keys, children, max_size=3),
    ),
    max_leaves=8,
)
documents = st.dictionaries(keys, values, min_size=1, max_size=4)
paths = st.lists(keys, min_size=1, max_size=3).map(".".join)


class TestPatchProperties:

    @given(original=documents, edited=documents)
    @settings(max_examples=150, deadline=None)
    def test_patch_reads_back_as_edit(self, original, edited) -> None:
        text = "# header\n" + serialize(from_python(original))
        tree = from_python(edited)
        assert parse(patch(text, tree)) == tree

    @given(original=documents, path=paths, value=scalars)
    @settings(max_examples=150, deadline=None)
    def test_set_reads_back(self, original, path, value) -> None:
        text = serialize(from_python(original))
        tree = set_path(parse(text), path, from_python(value))
        assert get_path(parse(patch(text, tree)), path) == from_python(value)

    @given(original=documents, path=paths)
    @settings(max_examples=100, deadline=None)
    def test_unset_reads_back(self, original, path) -> None:
        text = serialize(from_python(original))
        tree = unset_path(parse(text), path)
        assert get_path(parse(patch(text, tree)), path) is None

    @given(original=documents, key=keys, value=scalars)
    @settings(max_examples=100, deadline=None)
    def test_scalar_edit_keeps_comments(self, original, key, value) -> None:
        original = {**original, key: "old"}
        text = "# header\n" + serialize(from_python(original)) + "# footer\n"
        tree = set_path(parse(text), key, from_python(value))
        result = patch(text, tree)
        assert result.startswith("# header\n")
        assert "# footer\n" in result

    @given(document=documents)
    @settings(max_examples=50, deadline=None)
    def test_unchanged_text_returned_verbatim(self, document) -> None:
        text = "# header\n" + serialize(from_python(document)) + "\n# end\n"
        assert patch(text, parse(text)) == text


class TestAddressingProperties:

    @given(document=documents, path=paths, value=values)
    @settings(max_examples=100)
    def test_set_then_get(self, document, path, value) -> None:
        node = from_python(value)
        assert get_path(set_path(from_python(document), path, node), path) == node

    @given(document=documents, path=paths)
    @settings(max_examples=100)
    def test_unset_then_get(self, document, path) -> None:
        assert get_path(unset_path(from_python(document), path), path) is None


class TestSearchProperties:

    @given(document=documents, pattern=st.sampled_from(["a", "^db", r"\.", "o", "."]))
    @settings(max_examples=100)
    def test_results_are_addressable_and_disjoint(self, document, pattern) -> None:
        tree = from_python(document)
        results = search(tree, pattern)
        for path, value in results:
            assert get_path(tree, path) == value
        found = [path for path, _ in results]
        for p in found:
            assert not any(q != p and is_under(q, p) for q in found)


class TestDiffProperties:

    @given(old=documents, new=documents)
    @settings(max_examples=100)
    def test_changes_and_removals_disjoint(self, old, new) -> None:
        cs = diff(from_python(old), from_python(new))
        assert not set(cs.changes) & set(cs.removed)
        assert cs.is_empty == (from_python(old) == from_python(new))

    @given(old=documents, new=documents)
    @settings(max_examples=100)
    def test_changed_paths_hold_new_values(self, old, new) -> None:
        new_tree = from_python(new)
        cs = diff(from_python(old), new_tree)
        assert isinstance(new_tree, Mapping)
        for path, value in cs.changes.items():
            assert get_path(new_tree, path) == value
