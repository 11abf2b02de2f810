"""Narration accumulators and text formatting for tree mutations.

Mutating operations thread an :class:`InsertTrace` or :class:`DeleteTrace`
through their recursive helpers. The recursion appends path steps and rotation
records as it goes; once the public call completes, the helpers in this module
turn the accumulated facts into the sentence stored in the tree history.

Formatting is kept separate from the algorithms so both tree variants describe
the shared cases (descent paths, deletion cases) with identical wording.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Sequence

from .node import Scalar

Direction = Literal["left", "right"]

SINGLE_ROTATIONS = ("Left Rotation", "Right Rotation")

__all__ = [
    "DeleteTrace",
    "Direction",
    "InsertTrace",
    "PathStep",
    "RotationRecord",
    "describe_child_replacement",
    "describe_leaf_removal",
    "describe_rotations",
    "describe_successor_replacement",
    "format_path",
]


@dataclass(frozen=True, slots=True)
class PathStep:
    """A single step of a descent: the visited node and the branch taken."""

    node: Scalar
    direction: Direction


@dataclass(frozen=True, slots=True)
class RotationRecord:
    """Description of one rebalancing action applied at an unbalanced node.

    Double rotations carry the two intermediate single rotations in
    ``first_step`` and ``second_step``.
    """

    kind: str
    node: Scalar
    balance_factor: int
    first_step: Optional[str] = None
    second_step: Optional[str] = None

    @property
    def is_double(self) -> bool:
        return self.kind not in SINGLE_ROTATIONS

    def describe(self) -> str:
        text = f"{self.kind} at node {self.node} (balance factor: {self.balance_factor})"
        if self.is_double:
            text += f": {self.first_step} followed by {self.second_step}"
        return text


@dataclass(slots=True)
class InsertTrace:
    """Mutable accumulator filled while an insertion descends and unwinds."""

    path: List[PathStep] = field(default_factory=list)
    rotations: List[RotationRecord] = field(default_factory=list)
    duplicate: bool = False


@dataclass(slots=True)
class DeleteTrace:
    """Mutable accumulator filled while a deletion descends and unwinds.

    ``explanation`` stays empty when the target value was never found.
    """

    explanation: str = ""
    successor: Optional[Scalar] = None
    rotations: List[RotationRecord] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.explanation)


def format_path(path: Sequence[PathStep]) -> str:
    """Render *path* as ``a → b → left child of c``.

    Every step but the last names only the visited node; the final step names
    the slot the new node was attached to. An empty path renders as ``""``.
    """

    if not path:
        return ""
    parts = [f"{step.node} → " for step in path[:-1]]
    last = path[-1]
    parts.append(f"{last.direction} child of {last.node}")
    return "".join(parts)


def describe_rotations(rotations: Sequence[RotationRecord]) -> str:
    return " and ".join(rotation.describe() for rotation in rotations)


def describe_leaf_removal(value: Scalar) -> str:
    return f"Removed leaf node {value}"


def describe_child_replacement(value: Scalar, side: Direction, child: Scalar) -> str:
    return f"Removed node {value} with {side} child, replaced by {child}"


def describe_successor_replacement(value: Scalar, successor: Scalar) -> str:
    return f"Removed node {value} with two children, replaced by successor {successor}"
