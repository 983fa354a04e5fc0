"""Linkage rules: distance from a freshly merged cluster to another cluster."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Union

# (distance from left part, distance from right part, left size, right size)
LinkageFn = Callable[[float, float, int, int], float]


class Linkage(str, Enum):
    SINGLE = "single"
    COMPLETE = "complete"
    AVERAGE = "average"
    CENTROID = "centroid"

    @property
    def uses_centroids(self) -> bool:
        """Centroid linkage re-measures representatives instead of combining rows."""
        return self is Linkage.CENTROID

    def __call__(self, d_left: float, d_right: float, size_left: int, size_right: int) -> float:
        if self is Linkage.SINGLE:
            return min(d_left, d_right)
        if self is Linkage.COMPLETE:
            return max(d_left, d_right)
        if self is Linkage.AVERAGE:
            return (d_left * size_left + d_right * size_right) / (size_left + size_right)
        raise TypeError("centroid linkage is computed from representative vectors")


VALID_LINKAGE_OPTIONS = frozenset(lk.value for lk in Linkage)

LinkageLike = Union[Linkage, str, LinkageFn]
