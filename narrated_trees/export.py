"""Hierarchical export of tree shapes and the snapshot history built on it.

The exported form is the only data contract consumed outside the engine::

    {"name": <value>, "children": [<left record>, <right record>]}

Absent subtrees are omitted from ``children`` rather than represented as
``None`` and an empty tree exports as ``None``. Each export is built from fresh
containers so callers never share state with live nodes.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime
import json
import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from .node import Scalar, TreeNode

logger = logging.getLogger(__name__)

TreeData = Dict[str, Any]

__all__ = [
    "HistoryRecorder",
    "Snapshot",
    "TreeData",
    "count_nodes",
    "export_tree",
    "in_order_values",
]


def export_tree(root: Optional[TreeNode]) -> Optional[TreeData]:
    """Return the nested ``{name, children}`` record for *root*."""

    if root is None:
        return None
    children: List[TreeData] = []
    for child in (root.left, root.right):
        if child is not None:
            children.append(export_tree(child))  # type: ignore[arg-type]
    return {"name": root.value, "children": children}


def in_order_values(root: Optional[TreeNode]) -> List[Scalar]:
    """Return the values of *root* in ascending (in-order) sequence."""

    values: List[Scalar] = []

    def _walk(node: Optional[TreeNode]) -> None:
        if node is None:
            return
        _walk(node.left)
        values.append(node.value)
        _walk(node.right)

    _walk(root)
    return values


def count_nodes(root: Optional[TreeNode]) -> int:
    if root is None:
        return 0
    return 1 + count_nodes(root.left) + count_nodes(root.right)


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Immutable record of one completed mutation.

    ``tree_data`` is a deep copy of the exported shape taken when the mutation
    finished; ``timestamp`` is the local wall-clock time formatted
    ``HH:MM:SS``.
    """

    description: str
    tree_data: Optional[TreeData]
    timestamp: str

    def as_dict(self) -> Dict[str, Any]:
        """Return a JSON-safe copy using the exported field names."""

        return {
            "description": self.description,
            "treeData": copy.deepcopy(self.tree_data),
            "timestamp": self.timestamp,
        }


class HistoryRecorder:
    """Append-only log of snapshots owned by a single tree."""

    __slots__ = ("_entries", "_clock")

    def __init__(self, *, clock: Callable[[], datetime] = datetime.now) -> None:
        self._entries: List[Snapshot] = []
        self._clock = clock

    def save_snapshot(self, description: str, tree_data: Optional[TreeData]) -> Snapshot:
        """Record *description* alongside an independent copy of *tree_data*."""

        snapshot = Snapshot(
            description=description,
            tree_data=copy.deepcopy(tree_data),
            timestamp=self._clock().strftime("%H:%M:%S"),
        )
        self._entries.append(snapshot)
        logger.info("%s", description)
        return snapshot

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> Tuple[Snapshot, ...]:
        return tuple(self._entries)

    @property
    def latest(self) -> Optional[Snapshot]:
        return self._entries[-1] if self._entries else None

    def to_json(self, *, indent: Optional[int] = 2) -> str:
        """Serialise the history in chronological order."""

        return json.dumps([entry.as_dict() for entry in self._entries], indent=indent)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(tuple(self._entries))
