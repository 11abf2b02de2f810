"""Tree vertex shared by the ordered and balanced tree variants."""

from __future__ import annotations

from dataclasses import dataclass
import math
from numbers import Real
from typing import Optional, Union

Scalar = Union[int, float]


def validate_scalar(value: object) -> Scalar:
    """Return *value* unchanged when it can participate in a total order.

    Booleans are rejected even though they subclass ``int`` and ``NaN`` is
    rejected because it compares unequal to everything, itself included.
    """

    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError("Tree values must be real numbers")
    if isinstance(value, float) and math.isnan(value):
        raise ValueError("Tree values must not be NaN")
    return value  # type: ignore[return-value]


@dataclass(slots=True)
class TreeNode:
    """Node representation used by both tree variants.

    ``height`` is only maintained by :class:`~narrated_trees.BalancedTree`;
    the ordered tree leaves it at the leaf default.
    """

    value: Scalar
    left: Optional["TreeNode"] = None
    right: Optional["TreeNode"] = None
    height: int = 1

    def __post_init__(self) -> None:
        validate_scalar(self.value)

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


__all__ = ["Scalar", "TreeNode", "validate_scalar"]
