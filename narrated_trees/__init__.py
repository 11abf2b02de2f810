"""Ordered and balanced search trees that narrate their own mutations.

Two interchangeable variants are provided:

* ``OrderedTree`` – a plain binary search tree.
* ``BalancedTree`` – an AVL tree that rotates to stay height-balanced.

Both satisfy the structural ``SearchTree`` protocol, record one
``Snapshot`` per completed ``insert``/``delete``/``update`` and export their
shape as nested ``{"name": value, "children": [...]}`` records for renderers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, List, Optional, Protocol, Tuple, runtime_checkable

from .balanced_tree import BalancedTree, balance_factor, height, rotate_left, rotate_right
from .export import HistoryRecorder, Snapshot, TreeData, count_nodes, export_tree, in_order_values
from .node import Scalar, TreeNode, validate_scalar
from .ordered_tree import OrderedTree
from .validation import (
    TreeInvariantError,
    is_balanced,
    verify_balance,
    verify_heights,
    verify_ordering,
)

__all__ = [
    "BalancedTree",
    "HistoryRecorder",
    "OrderedTree",
    "Scalar",
    "SearchTree",
    "Snapshot",
    "TreeData",
    "TreeInvariantError",
    "TreeNode",
    "VARIANTS",
    "balance_factor",
    "count_nodes",
    "create_tree",
    "export_tree",
    "height",
    "in_order_values",
    "is_balanced",
    "rotate_left",
    "rotate_right",
    "validate_scalar",
    "verify_balance",
    "verify_heights",
    "verify_ordering",
]


@runtime_checkable
class SearchTree(Protocol):
    """Operation set shared by every tree variant."""

    root: Optional[TreeNode]

    def insert(self, value: Scalar) -> Snapshot: ...

    def insert_many(self, values: Iterable[Scalar]) -> List[Snapshot]: ...

    def delete(self, value: Scalar) -> Snapshot: ...

    def update(self, old_value: Scalar, new_value: Scalar) -> Optional[Snapshot]: ...

    def search(self, value: Scalar) -> bool: ...

    def get_tree_data(self) -> Optional[TreeData]: ...

    def clear(self) -> None: ...

    def check_invariants(self) -> None: ...

    def in_order(self) -> List[Scalar]: ...

    @property
    def recorder(self) -> HistoryRecorder: ...

    @property
    def history(self) -> Tuple[Snapshot, ...]: ...


VARIANTS = {
    "bst": OrderedTree,
    "avl": BalancedTree,
}


def create_tree(
    variant: str,
    *,
    strict: bool = False,
    clock: Callable[[], datetime] = datetime.now,
) -> SearchTree:
    """Instantiate the tree registered under *variant* (``"bst"`` or ``"avl"``)."""

    try:
        factory = VARIANTS[variant.lower()]
    except KeyError as exc:
        raise ValueError(
            f"Unknown tree variant {variant!r}; expected one of {sorted(VARIANTS)}"
        ) from exc
    return factory(strict=strict, clock=clock)
