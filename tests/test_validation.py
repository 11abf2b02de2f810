"""Tests for the structural invariant checks."""

from __future__ import annotations

import pytest

from narrated_trees import (
    TreeInvariantError,
    TreeNode,
    is_balanced,
    verify_balance,
    verify_heights,
    verify_ordering,
)


def test_verify_ordering_accepts_search_tree() -> None:
    root = TreeNode(5, TreeNode(3, TreeNode(1), TreeNode(4)), TreeNode(8))
    verify_ordering(root)
    verify_ordering(None)


def test_verify_ordering_rejects_misplaced_descendant() -> None:
    # 6 sits in the left subtree of 5 even though it is larger.
    root = TreeNode(5, TreeNode(3, right=TreeNode(6)), TreeNode(8))
    with pytest.raises(TreeInvariantError, match="must be less than 5"):
        verify_ordering(root)


def test_verify_ordering_rejects_equal_values() -> None:
    with pytest.raises(TreeInvariantError):
        verify_ordering(TreeNode(5, right=TreeNode(5)))


def test_verify_heights_detects_stale_cache() -> None:
    root = TreeNode(2, TreeNode(1), height=2)
    assert verify_heights(root) == 2

    root.right = TreeNode(3, right=TreeNode(4))
    with pytest.raises(TreeInvariantError, match="Cached height"):
        verify_heights(root)


def test_balance_checks_agree() -> None:
    skewed = TreeNode(1, right=TreeNode(2, height=2), height=3)
    skewed.right.right = TreeNode(3)
    assert not is_balanced(skewed)
    with pytest.raises(TreeInvariantError, match="unbalanced"):
        verify_balance(skewed)

    balanced = TreeNode(2, TreeNode(1), TreeNode(3), height=2)
    assert is_balanced(balanced)
    verify_balance(balanced)


def test_invariant_error_is_assertion_error() -> None:
    assert issubclass(TreeInvariantError, AssertionError)
