"""Tests for the AVL ``BalancedTree`` and its rotation helpers."""

from __future__ import annotations

import random
from typing import Optional

import pytest

from narrated_trees import (
    BalancedTree,
    SearchTree,
    TreeNode,
    balance_factor,
    height,
    rotate_left,
    rotate_right,
)


def _build(values: list[int]) -> BalancedTree:
    tree = BalancedTree(strict=True)
    tree.insert_many(values)
    return tree


def _node(value: int, left: Optional[TreeNode] = None, right: Optional[TreeNode] = None) -> TreeNode:
    node = TreeNode(value, left, right)
    node.height = 1 + max(height(left), height(right))
    return node


def test_balanced_insert_needs_no_rotation() -> None:
    tree = _build([5, 3, 8])
    assert [entry.description for entry in tree.history] == [
        "Inserted 5: Inserted as root node",
        "Inserted 3: Inserted as left child of 5",
        "Inserted 8: Inserted as right child of 5",
    ]
    assert tree.in_order() == [3, 5, 8]


def test_left_left_case_rotates_right() -> None:
    tree = _build([3, 2, 1])
    assert tree.root.value == 2
    assert tree.history[-1].description == (
        "Inserted 1: Inserted as 3 → left child of 2. Tree became unbalanced after "
        "insertion, requiring Right Rotation at node 3 (balance factor: 2)"
    )
    assert tree.get_tree_data() == {
        "name": 2,
        "children": [{"name": 1, "children": []}, {"name": 3, "children": []}],
    }


def test_left_right_case_rotates_twice() -> None:
    tree = _build([3, 1, 2])
    assert tree.root.value == 2
    assert tree.history[-1].description == (
        "Inserted 2: Inserted as 3 → right child of 1. Tree became unbalanced after "
        "insertion, requiring Left-Right Rotation at node 3 (balance factor: 2): "
        "Left rotation at 1 followed by Right rotation at 3"
    )


def test_right_right_case_rotates_left() -> None:
    tree = _build([1, 2, 3])
    assert tree.root.value == 2
    assert tree.history[-1].description.endswith(
        "requiring Left Rotation at node 1 (balance factor: -2)"
    )


def test_right_left_case_rotates_twice() -> None:
    tree = _build([1, 3, 2])
    assert tree.root.value == 2
    assert tree.history[-1].description == (
        "Inserted 2: Inserted as 1 → left child of 3. Tree became unbalanced after "
        "insertion, requiring Right-Left Rotation at node 1 (balance factor: -2): "
        "Right rotation at 3 followed by Left rotation at 1"
    )


def test_duplicate_insert_is_recorded_but_ignored() -> None:
    tree = _build([5, 3])
    data_before = tree.get_tree_data()

    snapshot = tree.insert(5)

    assert snapshot.description == "Inserted 5: 5 is already present, tree unchanged"
    assert tree.get_tree_data() == data_before
    assert len(tree) == 2
    assert len(tree.history) == 3


def test_delete_leaf_triggers_left_rotation() -> None:
    tree = _build([2, 1, 3, 4])
    tree.delete(1)
    assert tree.root.value == 3
    assert tree.history[-1].description == (
        "Deleted 1: Removed leaf node 1. Tree was rebalanced with "
        "Left Rotation at node 2 (balance factor: -2)"
    )


def test_delete_rotates_when_pivot_child_is_balanced() -> None:
    tree = _build([2, 1, 4, 3, 5])
    tree.delete(1)
    assert tree.get_tree_data() == {
        "name": 4,
        "children": [
            {"name": 2, "children": [{"name": 3, "children": []}]},
            {"name": 5, "children": []},
        ],
    }


def test_delete_right_left_case() -> None:
    tree = _build([2, 1, 4, 3])
    tree.delete(1)
    assert tree.root.value == 3
    assert tree.history[-1].description == (
        "Deleted 1: Removed leaf node 1. Tree was rebalanced with "
        "Right-Left Rotation at node 2 (balance factor: -2): "
        "Right rotation at 4 followed by Left rotation at 2"
    )


def test_delete_can_rotate_at_several_ancestors() -> None:
    left = _node(2, _node(1), _node(3, None, _node(4)))
    right = _node(
        10,
        _node(8, _node(7), _node(9)),
        _node(12, _node(11), _node(13, None, _node(14))),
    )
    tree = BalancedTree(strict=True)
    tree.root = _node(5, left, right)
    tree.check_invariants()

    tree.delete(1)

    assert tree.history[-1].description == (
        "Deleted 1: Removed leaf node 1. Tree was rebalanced with "
        "Left Rotation at node 2 (balance factor: -2) and "
        "Left Rotation at node 5 (balance factor: -2)"
    )
    assert tree.root.value == 10
    assert tree.in_order() == [2, 3, 4, 5, 7, 8, 9, 10, 11, 12, 13, 14]


def test_delete_narrates_structural_cases() -> None:
    tree = _build([5, 3, 8])
    tree.delete(5)
    assert tree.history[-1].description == (
        "Deleted 5: Removed node 5 with two children, replaced by successor 8"
    )
    tree.delete(8)
    assert tree.history[-1].description == (
        "Deleted 8: Removed node 8 with left child, replaced by 3"
    )
    tree.delete(42)
    assert tree.history[-1].description == "Deleted 42"
    assert tree.in_order() == [3]


def test_update_narrates_both_phases() -> None:
    tree = _build([5, 3, 8])
    tree.update(3, 10)
    assert tree.history[-1].description == (
        "Updated 3 to 10: Removed leaf node 3. Then inserted 10 as 5 → right child "
        "of 8. During insertion, tree required Left Rotation at node 5 (balance factor: -2)"
    )
    assert tree.root.value == 8


def test_update_reports_rebalancing_during_deletion() -> None:
    tree = _build([2, 1, 3, 4])
    tree.update(1, 6)
    assert tree.history[-1].description == (
        "Updated 1 to 6: Removed leaf node 1. During deletion, tree was rebalanced "
        "with Left Rotation at node 2 (balance factor: -2). Then inserted 6 as "
        "3 → right child of 4"
    )
    assert tree.in_order() == [2, 3, 4, 6]


def test_update_into_empty_tree_and_onto_duplicate() -> None:
    single = _build([4])
    single.update(4, 9)
    assert single.history[-1].description == (
        "Updated 4 to 9: Removed leaf node 4. Then inserted 9 as root"
    )

    tree = _build([5, 3, 8])
    tree.update(3, 8)
    assert tree.history[-1].description == (
        "Updated 3 to 8: Removed leaf node 3. Then skipped 8, already present"
    )
    assert tree.in_order() == [5, 8]


def test_update_absent_value_takes_no_snapshot() -> None:
    tree = _build([1, 2, 3])
    history_before = tree.history
    assert tree.update(99, 1) is None
    assert tree.history == history_before
    assert tree.in_order() == [1, 2, 3]


def test_rotations_recompute_heights() -> None:
    y = _node(3, _node(2, _node(1)))
    x = rotate_right(y)
    assert (x.value, x.height, y.height) == (2, 2, 1)
    assert balance_factor(x) == 0

    z = rotate_left(x)
    assert (z.value, z.height, x.height) == (3, 3, 2)
    assert balance_factor(z) == 2
    assert balance_factor(None) == 0


def test_balanced_tree_satisfies_protocol() -> None:
    assert isinstance(BalancedTree(), SearchTree)


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_random_operations_preserve_avl_invariants(seed: int) -> None:
    rng = random.Random(seed)
    tree = BalancedTree(strict=True)
    model: set[int] = set()

    for _ in range(400):
        value = rng.randint(0, 120)
        size_before = len(tree)
        if rng.random() < 0.6:
            tree.insert(value)
            expected = size_before if value in model else size_before + 1
            model.add(value)
        else:
            tree.delete(value)
            expected = size_before - 1 if value in model else size_before
            model.discard(value)
        assert len(tree) == expected
        assert tree.in_order() == sorted(model)
        assert tree.get_tree_data() == tree.history[-1].tree_data

    for value in sorted(model):
        tree.update(value, value)
    assert tree.in_order() == sorted(model)
