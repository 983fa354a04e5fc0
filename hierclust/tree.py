"""Merge tree nodes and flattening of a tree into item groups."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass(frozen=True)
class Leaf:
    """A single input item; ``ordinal`` is its position in the input sequence."""

    item: Any
    ordinal: int

    @property
    def size(self) -> int:
        return 1

    @property
    def distance(self) -> float:
        return 0.0


@dataclass(frozen=True)
class Merge:
    """Internal node joining two subtrees at linkage ``distance``."""

    left: Cluster
    right: Cluster
    distance: float
    size: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "size", self.left.size + self.right.size)


Cluster = Union[Leaf, Merge]


def iter_leaves(node: Optional[Cluster]) -> Iterator[Leaf]:
    """Depth-first, left subtree before right subtree.

    Uses an explicit stack: single-linkage chains can be far deeper than
    the interpreter's recursion limit.
    """
    stack = [node] if node is not None else []
    while stack:
        current = stack.pop()
        if isinstance(current, Leaf):
            yield current
        else:
            stack.append(current.right)
            stack.append(current.left)


def extract_leaves(node: Optional[Cluster]) -> list[Any]:
    return [leaf.item for leaf in iter_leaves(node)]


def leaf_ordinals(node: Optional[Cluster]) -> list[int]:
    return [leaf.ordinal for leaf in iter_leaves(node)]


def split(root: Cluster, k: int) -> list[Cluster]:
    """Subtree roots whose leaves form the groups of ``partition(root, k)``.

    k == 0 keeps the whole tree, k == 1 separates the root's two children
    (a leaf stays whole), larger k recurses into both children at k - 1.
    """
    if k < 0:
        raise ValueError(f"partition depth must be >= 0, got {k}")
    if k == 0 or isinstance(root, Leaf):
        return [root]
    if k == 1:
        return [root.left, root.right]
    return split(root.left, k - 1) + split(root.right, k - 1)


def partition(root: Cluster, k: int) -> list[list[Any]]:
    return [extract_leaves(node) for node in split(root, k)]
