"""Unbalanced binary search tree with narrated mutations.

``OrderedTree`` mirrors the classic textbook BST: insertions attach the new
node at the first free slot found by descending left on ``<`` and right
otherwise, and deletions handle the leaf, single child and two children cases
in that order. Every completed ``insert``/``delete``/``update`` appends one
:class:`~narrated_trees.export.Snapshot` describing what happened.

Insertion does not look for an exact match on the way down, so a value equal to
an existing one is routed into the right subtree and stored again. This keeps
the descent rule identical to the narration it produces; callers that need
uniqueness should use :class:`~narrated_trees.balanced_tree.BalancedTree` or
check :meth:`OrderedTree.search` first.
"""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Callable, Iterable, List, Optional, Tuple

from .export import HistoryRecorder, Snapshot, TreeData, count_nodes, export_tree, in_order_values
from .narration import (
    DeleteTrace,
    PathStep,
    describe_child_replacement,
    describe_leaf_removal,
    describe_successor_replacement,
    format_path,
)
from .node import Scalar, TreeNode, validate_scalar
from .validation import verify_ordering

logger = logging.getLogger(__name__)

__all__ = ["OrderedTree"]


class OrderedTree:
    """Binary search tree recording a narrated history of its mutations."""

    __slots__ = ("root", "_recorder", "_strict")

    variant = "BST"

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
        """Insert *value* and record the descent path that placed it."""

        new_node = TreeNode(value)
        if self.root is None:
            self.root = new_node
            return self._record(f"Inserted {value} as root node since the tree was empty")

        path: List[PathStep] = []
        self._insert_with_path(self.root, new_node, path)
        return self._record(f"Inserted {value}: Placed as {format_path(path)}")

    def insert_many(self, values: Iterable[Scalar]) -> List[Snapshot]:
        """Insert each of *values* in order, one snapshot per value."""

        return [self.insert(value) for value in list(values)]

    def delete(self, value: Scalar) -> Snapshot:
        """Remove *value* if present; absent values still record a snapshot."""

        validate_scalar(value)
        trace = DeleteTrace()
        self.root = self._delete_node(self.root, value, trace)
        if not trace.found:
            logger.info("Value %s not found in the tree, nothing removed", value)
            return self._record(f"Deleted {value}")
        return self._record(f"Deleted {value}: {trace.explanation}")

    def update(self, old_value: Scalar, new_value: Scalar) -> Optional[Snapshot]:
        """Replace *old_value* with *new_value* as a delete followed by an insert.

        Nothing is recorded when *old_value* is absent.
        """

        validate_scalar(new_value)
        if not self.search(old_value):
            logger.warning("Value %s not found in the tree", old_value)
            return None

        trace = DeleteTrace()
        self.root = self._delete_node(self.root, old_value, trace)

        new_node = TreeNode(new_value)
        if self.root is None:
            self.root = new_node
            return self._record(
                f"Updated {old_value} to {new_value}: "
                "Inserted as root since tree became empty"
            )

        path: List[PathStep] = []
        self._insert_with_path(self.root, new_node, path)
        return self._record(
            f"Updated {old_value} to {new_value}: "
            f"{trace.explanation}, then Placed as {format_path(path)}"
        )

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
        return self._search(self.root, value)

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
        """Raise :class:`~narrated_trees.validation.TreeInvariantError` on a broken order."""

        verify_ordering(self.root)

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

    def _insert_with_path(self, node: TreeNode, new_node: TreeNode, path: List[PathStep]) -> None:
        if new_node.value < node.value:
            path.append(PathStep(node.value, "left"))
            if node.left is None:
                node.left = new_node
            else:
                self._insert_with_path(node.left, new_node, path)
        else:
            path.append(PathStep(node.value, "right"))
            if node.right is None:
                node.right = new_node
            else:
                self._insert_with_path(node.right, new_node, path)

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
        elif node.left is None:
            trace.explanation = describe_child_replacement(value, "right", node.right.value)  # type: ignore[union-attr]
            return node.right
        elif node.right is None:
            trace.explanation = describe_child_replacement(value, "left", node.left.value)
            return node.left
        else:
            successor = self._min_value(node.right)
            trace.explanation = describe_successor_replacement(value, successor)
            trace.successor = successor
            node.value = successor
            # The successor's own removal is not part of the narration.
            node.right = self._delete_node(node.right, successor, DeleteTrace())

        return node

    @staticmethod
    def _min_value(node: TreeNode) -> Scalar:
        while node.left is not None:
            node = node.left
        return node.value

    @classmethod
    def _search(cls, node: Optional[TreeNode], value: Scalar) -> bool:
        if node is None:
            return False
        if node.value == value:
            return True
        if value < node.value:
            return cls._search(node.left, value)
        return cls._search(node.right, value)
