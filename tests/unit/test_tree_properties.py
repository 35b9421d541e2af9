"""Property tests: random edit sequences keep the tree consistent."""

from __future__ import annotations

import itertools

from hypothesis import given, settings
from hypothesis import strategies as st

from studio_cli.designer.registry import default_registry
from studio_cli.designer.tree import DesignTree
from studio_cli.errors import TreeError

TYPES = ["container", "row", "col", "button", "text", "image", "input"]


def sequential_ids():
    counter = itertools.count(1)
    return lambda type_name: f"{type_name}-{next(counter)}"


operations = st.lists(
    st.tuples(
        st.sampled_from(["insert", "move", "remove", "duplicate", "undo", "redo"]),
        st.integers(min_value=0, max_value=1_000),
        st.integers(min_value=0, max_value=1_000),
        st.sampled_from(TYPES),
        st.one_of(st.none(), st.integers(min_value=-2, max_value=20)),
    ),
    max_size=60,
)


def _apply(tree: DesignTree, op: tuple) -> None:
    name, a, b, type_name, index = op
    ids = sorted(tree.snapshot())
    pick_a, pick_b = ids[a % len(ids)], ids[b % len(ids)]
    try:
        if name == "insert":
            tree.insert(pick_a, type_name, index)
        elif name == "move":
            tree.move(pick_a, pick_b, index)
        elif name == "remove":
            tree.remove(pick_a)
        elif name == "duplicate":
            tree.duplicate(pick_a)
        elif name == "undo":
            tree.undo()
        else:
            tree.redo()
    except TreeError:
        pass


@settings(max_examples=150, deadline=None)
@given(operations)
def test_mutations_preserve_invariants(ops):
    tree = DesignTree.new(default_registry(), id_factory=sequential_ids())
    for op in ops:
        _apply(tree, op)
        assert tree.validate_tree() == []

    for instance in tree.walk():
        assert instance.depth == len(tree.ancestors(instance.id))
    assert len(list(tree.walk())) == len(tree)


@settings(max_examples=50, deadline=None)
@given(operations)
def test_document_round_trip(ops):
    registry = default_registry()
    tree = DesignTree.new(registry, id_factory=sequential_ids())
    for op in ops:
        _apply(tree, op)
    doc = tree.to_document()
    assert DesignTree.from_document(doc, registry).to_document() == doc
