"""Command line harness for the narrated search trees.

Operations are given as positional tokens and applied in order to a single
tree; the resulting history is printed one ``timestamp: description`` line per
snapshot and can optionally be written to disk as JSON::

    python narrate_tree.py --variant avl insert:3,2,1 delete:2 update:3=7

Supported tokens are ``insert:<v>[,<v>...]``, ``delete:<v>[,<v>...]``,
``update:<old>=<new>`` and ``clear``. Without any tokens the built-in example
workload is replayed.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Iterator, List, Sequence, Tuple

from narrated_trees import (
    VARIANTS,
    Scalar,
    SearchTree,
    Snapshot,
    TreeInvariantError,
    create_tree,
    validate_scalar,
)

logger = logging.getLogger(__name__)

EXAMPLE_VALUES = (49, 56, 39, 34, 95, 43, 75, 86, 73, 44, 23, 66, 42, 51, 93)


class OperationParseError(ValueError):
    """Raised when an operation token cannot be understood."""


@dataclass(frozen=True)
class Operation:
    """A single tree operation requested on the command line."""

    action: str
    values: Tuple[Scalar, ...] = ()

    def apply(self, tree: SearchTree) -> List[Snapshot]:
        """Run the operation against *tree* and return the snapshots it produced."""

        if self.action == "clear":
            tree.clear()
            return []
        if self.action == "insert":
            return tree.insert_many(self.values)
        if self.action == "delete":
            return [tree.delete(value) for value in self.values]
        old_value, new_value = self.values
        snapshot = tree.update(old_value, new_value)
        return [snapshot] if snapshot is not None else []


def _parse_scalar(raw: str) -> Scalar:
    text = raw.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return validate_scalar(float(text))
    except ValueError as exc:
        raise OperationParseError(f"{raw!r} is not a number") from exc


def parse_operation(token: str) -> Operation:
    """Translate a command line *token* into an :class:`Operation`."""

    action, _, payload = token.partition(":")
    action = action.strip().lower()
    if action == "clear":
        if payload:
            raise OperationParseError("clear does not take values")
        return Operation("clear")
    if action in ("insert", "delete"):
        items = [item for item in payload.split(",") if item.strip()]
        if not items:
            raise OperationParseError(f"{action} requires at least one value")
        return Operation(action, tuple(_parse_scalar(item) for item in items))
    if action == "update":
        old_raw, separator, new_raw = payload.partition("=")
        if not separator or not old_raw.strip() or not new_raw.strip():
            raise OperationParseError("update expects the form update:<old>=<new>")
        return Operation("update", (_parse_scalar(old_raw), _parse_scalar(new_raw)))
    raise OperationParseError(f"Unknown operation {token!r}")


def _iter_example_operations() -> Iterator[Operation]:
    """Yield the built-in example workload."""

    yield Operation("insert", EXAMPLE_VALUES)
    yield Operation("delete", (75,))
    yield Operation("delete", (39,))
    yield Operation("delete", (49,))
    yield Operation("update", (43, 77))
    yield Operation("update", (66, 55))


def _format_history(history: Sequence[Snapshot], tail: int | None) -> List[str]:
    entries = history
    if tail is not None:
        entries = history[-tail:] if tail > 0 else ()
    return [f"{entry.timestamp}: {entry.description}" for entry in entries]


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point applying the requested operations and printing the history."""

    parser = argparse.ArgumentParser(
        description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "operations",
        nargs="*",
        help="Operation tokens such as insert:5,3,8 delete:3 update:5=9 clear",
    )
    parser.add_argument(
        "--variant",
        default="bst",
        choices=sorted(VARIANTS),
        help="Tree variant to operate on.",
    )
    parser.add_argument(
        "--tail",
        type=int,
        default=None,
        help="Only print the last N history entries.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Optional destination for the history serialised as JSON.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Verify tree invariants after every mutation.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Logging verbosity for diagnostic output.",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    try:
        operations = [parse_operation(token) for token in args.operations]
    except OperationParseError as exc:
        parser.error(str(exc))
    if not operations:
        operations = list(_iter_example_operations())

    tree = create_tree(args.variant, strict=args.strict)
    try:
        for operation in operations:
            operation.apply(tree)
    except TreeInvariantError as exc:
        logger.error("Tree invariant violated: %s", exc)
        return 1

    for line in _format_history(tree.history, args.tail):
        print(line)
    print(f"In-order: {tree.in_order()}")

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(tree.recorder.to_json() + "\n", encoding="utf-8")
        logger.info("History written to %s", args.output)
    return 0


__all__ = [
    "Operation",
    "OperationParseError",
    "main",
    "parse_operation",
]


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
