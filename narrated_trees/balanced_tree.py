"""Height-balanced (AVL) tree with narrated rotations.

``BalancedTree`` offers the same operations as
:class:`~narrated_trees.ordered_tree.OrderedTree` and keeps every node's
subtree heights within one of each other. Insertions resolve at most one of
the four classic imbalance cases, chosen by comparing the inserted value with
the heavy child. Deletions use balance factors instead, because removing a
node can unbalance an ancestor whose heavy child is itself perfectly
balanced; a single deletion may therefore rotate at several ancestors while
the recursion unwinds.

Rotations are narrated with the unbalanced node, its balance factor and, for
the double cases, the two single rotations that make them up.
"""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Callable, Iterable, List, Optional, Tuple

from .export import HistoryRecorder, Snapshot, TreeData, count_nodes, export_tree, in_order_values
from .narration import (
    DeleteTrace,
    InsertTrace,
    PathStep,
    RotationRecord,
    describe_child_replacement,
    describe_leaf_removal,
    describe_rotations,
    describe_successor_replacement,
    format_path,
)
from .node import Scalar, TreeNode, validate_scalar
from .validation import verify_balance, verify_heights, verify_ordering

logger = logging.getLogger(__name__)

__all__ = [
    "BalancedTree",
    "balance_factor",
    "height",
    "rotate_left",
    "rotate_right",
    "update_height",
]


def height(node: Optional[TreeNode]) -> int:
    return node.height if node is not None else 0


def balance_factor(node: Optional[TreeNode]) -> int:
    """Left subtree height minus right subtree height (``0`` for ``None``)."""

    if node is None:
        return 0
    return height(node.left) - height(node.right)


def update_height(node: TreeNode) -> None:
    node.height = 1 + max(height(node.left), height(node.right))


def rotate_right(y: TreeNode) -> TreeNode:
    """Rotate the subtree rooted at *y* to the right and return its new root."""

    x = y.left
    assert x is not None, "right rotation requires a left child"
    y.left = x.right
    x.right = y
    update_height(y)
    update_height(x)
    return x


def rotate_left(x: TreeNode) -> TreeNode:
    """Rotate the subtree rooted at *x* to the left and return its new root."""

    y = x.right
    assert y is not None, "left rotation requires a right child"
    x.right = y.left
    y.left = x
    update_height(x)
    update_height(y)
    return y


class BalancedTree:
    """AVL tree recording a narrated history of its mutations."""

    __slots__ = ("root", "_recorder", "_strict")

    variant = "AVL"

    def __init__(
        self,
        *,
        strict: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.root: Optional[TreeNode] = None
        self._recorder = HistoryRecorder(clock=clock)
        self._strict = strict

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def insert(self, value: Scalar) -> Snapshot:
        """Insert *value*, rebalancing on the way back up.

        Duplicates leave the tree untouched but are still recorded so the
        history reflects every call.
        """

        validate_scalar(value)
        trace = InsertTrace()
        self.root = self._insert_node(self.root, value, trace)
        if trace.duplicate:
            logger.info("Value %s already present, insertion ignored", value)
            return self._record(f"Inserted {value}: {value} is already present, tree unchanged")

        explanation = "Inserted as root node"
        if trace.path:
            explanation = f"Inserted as {format_path(trace.path)}"
        if trace.rotations:
            explanation += (
                ". Tree became unbalanced after insertion, requiring "
                + describe_rotations(trace.rotations)
            )
        return self._record(f"Inserted {value}: {explanation}")

    def insert_many(self, values: Iterable[Scalar]) -> List[Snapshot]:
        """Insert each of *values* in order, one snapshot per value."""

        return [self.insert(value) for value in list(values)]

    def delete(self, value: Scalar) -> Snapshot:
        """Remove *value* if present and narrate every rebalancing rotation."""

        validate_scalar(value)
        trace = DeleteTrace()
        self.root = self._delete_node(self.root, value, trace)
        if not trace.found:
            logger.info("Value %s not found in the tree, nothing removed", value)
            return self._record(f"Deleted {value}")

        explanation = trace.explanation
        if trace.rotations:
            explanation += ". Tree was rebalanced with " + describe_rotations(trace.rotations)
        return self._record(f"Deleted {value}: {explanation}")

    def update(self, old_value: Scalar, new_value: Scalar) -> Optional[Snapshot]:
        """Replace *old_value* with *new_value*, narrating both phases.

        Nothing is recorded when *old_value* is absent.
        """

        validate_scalar(new_value)
        if not self.search(old_value):
            logger.warning("Value %s not found in the tree", old_value)
            return None

        delete_trace = DeleteTrace()
        self.root = self._delete_node(self.root, old_value, delete_trace)
        insert_trace = InsertTrace()
        self.root = self._insert_node(self.root, new_value, insert_trace)

        explanation = delete_trace.explanation
        if delete_trace.rotations:
            explanation += (
                ". During deletion, tree was rebalanced with "
                + describe_rotations(delete_trace.rotations)
            )
        if insert_trace.duplicate:
            explanation += f". Then skipped {new_value}, already present"
        elif insert_trace.path:
            explanation += f". Then inserted {new_value} as {format_path(insert_trace.path)}"
        else:
            explanation += f". Then inserted {new_value} as root"
        if insert_trace.rotations:
            explanation += (
                ". During insertion, tree required "
                + describe_rotations(insert_trace.rotations)
            )
        return self._record(f"Updated {old_value} to {new_value}: {explanation}")

    def clear(self) -> None:
        """Discard the root and the entire history."""

        self.root = None
        self._recorder.clear()
        logger.info("Cleared %s", self.variant)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def search(self, value: Scalar) -> bool:
        validate_scalar(value)
        node = self.root
        while node is not None:
            if node.value == value:
                return True
            node = node.left if value < node.value else node.right
        return False

    def get_tree_data(self) -> Optional[TreeData]:
        return export_tree(self.root)

    def in_order(self) -> List[Scalar]:
        return in_order_values(self.root)

    @property
    def history(self) -> Tuple[Snapshot, ...]:
        return self._recorder.entries

    @property
    def recorder(self) -> HistoryRecorder:
        return self._recorder

    def check_invariants(self) -> None:
        """Verify ordering, cached heights and balance of every node."""

        verify_ordering(self.root)
        verify_heights(self.root)
        verify_balance(self.root)

    def __len__(self) -> int:
        return count_nodes(self.root)

    def __contains__(self, value: object) -> bool:
        try:
            return self.search(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _record(self, description: str) -> Snapshot:
        if self._strict:
            self.check_invariants()
        return self._recorder.save_snapshot(description, self.get_tree_data())

    def _insert_node(
        self, node: Optional[TreeNode], value: Scalar, trace: InsertTrace
    ) -> TreeNode:
        if node is None:
            return TreeNode(value)

        if value < node.value:
            trace.path.append(PathStep(node.value, "left"))
            node.left = self._insert_node(node.left, value, trace)
        elif value > node.value:
            trace.path.append(PathStep(node.value, "right"))
            node.right = self._insert_node(node.right, value, trace)
        else:
            trace.duplicate = True
            return node

        update_height(node)
        return self._rebalance_after_insert(node, value, trace)

    def _rebalance_after_insert(
        self, node: TreeNode, value: Scalar, trace: InsertTrace
    ) -> TreeNode:
        balance = balance_factor(node)
        if balance > 1 and value < node.left.value:  # type: ignore[union-attr]
            trace.rotations.append(RotationRecord("Right Rotation", node.value, balance))
            logger.debug("Left-Left case at %s, rotating right", node.value)
            return rotate_right(node)

        if balance < -1 and value > node.right.value:  # type: ignore[union-attr]
            trace.rotations.append(RotationRecord("Left Rotation", node.value, balance))
            logger.debug("Right-Right case at %s, rotating left", node.value)
            return rotate_left(node)

        if balance > 1 and value > node.left.value:  # type: ignore[union-attr]
            trace.rotations.append(self._left_right_record(node, balance))
            logger.debug("Left-Right case at %s", node.value)
            node.left = rotate_left(node.left)  # type: ignore[arg-type]
            return rotate_right(node)

        if balance < -1 and value < node.right.value:  # type: ignore[union-attr]
            trace.rotations.append(self._right_left_record(node, balance))
            logger.debug("Right-Left case at %s", node.value)
            node.right = rotate_right(node.right)  # type: ignore[arg-type]
            return rotate_left(node)

        return node

    def _delete_node(
        self, node: Optional[TreeNode], value: Scalar, trace: DeleteTrace
    ) -> Optional[TreeNode]:
        if node is None:
            return None

        if value < node.value:
            node.left = self._delete_node(node.left, value, trace)
        elif value > node.value:
            node.right = self._delete_node(node.right, value, trace)
        elif node.is_leaf():
            trace.explanation = describe_leaf_removal(value)
            return None
        elif node.left is None or node.right is None:
            side = "left" if node.left is not None else "right"
            child = node.left if node.left is not None else node.right
            trace.explanation = describe_child_replacement(value, side, child.value)  # type: ignore[union-attr]
            # The surviving child's subtree is already balanced with correct heights.
            return child
        else:
            successor = self._min_value_node(node.right).value
            trace.explanation = describe_successor_replacement(value, successor)
            trace.successor = successor
            node.value = successor
            # Rotations below this node still belong to this deletion.
            node.right = self._delete_node(
                node.right, successor, DeleteTrace(rotations=trace.rotations)
            )

        update_height(node)
        return self._rebalance_after_delete(node, trace)

    def _rebalance_after_delete(self, node: TreeNode, trace: DeleteTrace) -> TreeNode:
        balance = balance_factor(node)
        if balance > 1:
            if balance_factor(node.left) >= 0:
                trace.rotations.append(RotationRecord("Right Rotation", node.value, balance))
                logger.debug("Left-heavy node %s after deletion, rotating right", node.value)
                return rotate_right(node)
            trace.rotations.append(self._left_right_record(node, balance))
            logger.debug("Left-Right case at %s after deletion", node.value)
            node.left = rotate_left(node.left)  # type: ignore[arg-type]
            return rotate_right(node)

        if balance < -1:
            if balance_factor(node.right) <= 0:
                trace.rotations.append(RotationRecord("Left Rotation", node.value, balance))
                logger.debug("Right-heavy node %s after deletion, rotating left", node.value)
                return rotate_left(node)
            trace.rotations.append(self._right_left_record(node, balance))
            logger.debug("Right-Left case at %s after deletion", node.value)
            node.right = rotate_right(node.right)  # type: ignore[arg-type]
            return rotate_left(node)

        return node

    @staticmethod
    def _left_right_record(node: TreeNode, balance: int) -> RotationRecord:
        return RotationRecord(
            "Left-Right Rotation",
            node.value,
            balance,
            first_step=f"Left rotation at {node.left.value}",  # type: ignore[union-attr]
            second_step=f"Right rotation at {node.value}",
        )

    @staticmethod
    def _right_left_record(node: TreeNode, balance: int) -> RotationRecord:
        return RotationRecord(
            "Right-Left Rotation",
            node.value,
            balance,
            first_step=f"Right rotation at {node.right.value}",  # type: ignore[union-attr]
            second_step=f"Left rotation at {node.value}",
        )

    @staticmethod
    def _min_value_node(node: TreeNode) -> TreeNode:
        while node.left is not None:
            node = node.left
        return node
