"""Structural invariant checks for ordered and balanced trees.

Violations are programming errors rather than recoverable states, so the
``verify_*`` helpers raise :class:`TreeInvariantError` (an ``AssertionError``)
as soon as one is detected. ``is_balanced`` is the non-raising predicate and
short-circuits on the first imbalance it finds.
"""

from __future__ import annotations

from typing import Optional

from .node import Scalar, TreeNode

__all__ = [
    "TreeInvariantError",
    "is_balanced",
    "verify_balance",
    "verify_heights",
    "verify_ordering",
]

BalanceResult = tuple[bool, int]


class TreeInvariantError(AssertionError):
    """Raised when a tree violates ordering, height or balance invariants."""


def verify_ordering(
    node: Optional[TreeNode],
    lower: Optional[Scalar] = None,
    upper: Optional[Scalar] = None,
) -> None:
    """Ensure every value lies strictly between its ancestors' bounds."""

    if node is None:
        return
    if lower is not None and not node.value > lower:
        raise TreeInvariantError(
            f"Ordering violated: {node.value} must be greater than {lower}"
        )
    if upper is not None and not node.value < upper:
        raise TreeInvariantError(
            f"Ordering violated: {node.value} must be less than {upper}"
        )
    verify_ordering(node.left, lower, node.value)
    verify_ordering(node.right, node.value, upper)


def verify_heights(node: Optional[TreeNode]) -> int:
    """Return the recomputed height of *node*, checking every cached height."""

    if node is None:
        return 0
    expected = 1 + max(verify_heights(node.left), verify_heights(node.right))
    if node.height != expected:
        raise TreeInvariantError(
            f"Cached height {node.height} of node {node.value} should be {expected}"
        )
    return expected


def _check_height(node: Optional[TreeNode]) -> BalanceResult:
    """Return a tuple indicating whether *node* is balanced and its height."""

    if node is None:
        return True, 0

    left_balanced, left_height = _check_height(node.left)
    if not left_balanced:
        return False, left_height + 1

    right_balanced, right_height = _check_height(node.right)
    if not right_balanced:
        return False, right_height + 1

    balanced = abs(left_height - right_height) <= 1
    return balanced, max(left_height, right_height) + 1


def is_balanced(root: Optional[TreeNode]) -> bool:
    """Return ``True`` when *root* is height-balanced (computed, not cached)."""

    balanced, _ = _check_height(root)
    return balanced


def verify_balance(node: Optional[TreeNode]) -> None:
    """Raise unless every node's subtree heights differ by at most one."""

    if node is None:
        return
    left_height = verify_heights(node.left)
    right_height = verify_heights(node.right)
    if abs(left_height - right_height) > 1:
        raise TreeInvariantError(
            f"Node {node.value} is unbalanced "
            f"(balance factor: {left_height - right_height})"
        )
    verify_balance(node.left)
    verify_balance(node.right)
