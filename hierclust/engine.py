"""Agglomerative merge loop over a distance matrix with cached nearest neighbours."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Optional, Union

import numpy as np

from hierclust.linkage import Linkage, LinkageFn
from hierclust.matrix import init_nearest, nearest_in_row
from hierclust.metrics import Metric, MetricFn
from hierclust.tree import Cluster, Leaf, Merge

logger = logging.getLogger("hierclust")


@dataclass(frozen=True)
class MergeStep:
    left_key: int
    right_key: int
    distance: float
    size: int


class MergeEngine:
    """Bottom-up merging of the clusters of one clustering call.

    The working record is kept apart from the tree nodes: ``_live`` lists
    the active matrix keys in scan order (a key's position is its index in
    that list), and the per-key arrays hold node, size, cached nearest key
    and representative vector. A merged cluster keeps the winner's key; the
    consumed neighbour's key is retired.
    """

    def __init__(
        self,
        items: Sequence[Any],
        features: np.ndarray,
        dist: np.ndarray,
        *,
        metric: Union[Metric, MetricFn] = Metric.EUCLIDEAN,
        linkage: Union[Linkage, LinkageFn] = Linkage.SINGLE,
        threshold: float = np.inf,
    ) -> None:
        n = len(items)
        if dist.shape != (n, n) or features.shape[0] != n:
            raise ValueError(
                f"expected {n} items, got features {features.shape} and matrix {dist.shape}"
            )
        self._dist = dist
        self._metric = metric
        self._linkage = linkage
        self._threshold = threshold

        self._live: list[int] = list(range(n))
        self._nodes: list[Optional[Cluster]] = [Leaf(item, i) for i, item in enumerate(items)]
        self._sizes = np.ones(n, dtype=np.int64)
        self._nearest = init_nearest(dist)
        self._centroids = features.astype(np.float64, copy=True)

    @property
    def keys(self) -> list[int]:
        return list(self._live)

    @property
    def roots(self) -> list[Cluster]:
        return [self._nodes[key] for key in self._live]

    @property
    def distances(self) -> np.ndarray:
        return self._dist

    @property
    def nearest(self) -> np.ndarray:
        return self._nearest

    def _closest(self) -> tuple[int, float]:
        """Key with the globally smallest cached distance; first in scan order wins."""
        best_key = self._live[0]
        best = np.inf
        for key in self._live:
            d = self._dist[key, self._nearest[key]]
            if d < best:
                best_key, best = key, d
        return best_key, float(best)

    def _linked_distance(self, c1: int, c2: int, cur: int) -> float:
        if isinstance(self._linkage, Linkage) and self._linkage.uses_centroids:
            return float(self._metric(self._centroids[c1], self._centroids[cur]))
        return float(self._linkage(
            self._dist[c1, cur], self._dist[c2, cur],
            int(self._sizes[c1]), int(self._sizes[c2]),
        ))

    def merge_closest(self) -> Optional[MergeStep]:
        """Merge the closest pair, or return ``None`` once the threshold is reached."""
        if len(self._live) < 2:
            return None

        c1, best = self._closest()
        if best >= self._threshold:
            return None
        c2 = int(self._nearest[c1])

        size1, size2 = int(self._sizes[c1]), int(self._sizes[c2])
        merged = Merge(left=self._nodes[c1], right=self._nodes[c2], distance=best)

        self._live.remove(c2)
        self._nodes[c1] = merged
        self._nodes[c2] = None

        if isinstance(self._linkage, Linkage) and self._linkage.uses_centroids:
            self._centroids[c1] = (
                self._centroids[c1] * size1 + self._centroids[c2] * size2
            ) / (size1 + size2)

        # The linkage needs pre-merge sizes, so sizes are updated afterwards.
        for cur in self._live:
            d = np.inf if cur == c1 else self._linked_distance(c1, c2, cur)
            self._dist[c1, cur] = self._dist[cur, c1] = d
        self._sizes[c1] = size1 + size2
        self._dist[c2, :] = np.inf
        self._dist[:, c2] = np.inf

        for cur in self._live:
            cached = self._nearest[cur]
            if cached == c1 or cached == c2:
                self._nearest[cur] = nearest_in_row(self._dist, cur, self._live)
            elif self._dist[cur, c1] < self._dist[cur, cached]:
                self._nearest[cur] = c1

        logger.debug("Merged %d + %d at %.4f (size %d)", c1, c2, best, size1 + size2)
        return MergeStep(left_key=c1, right_key=c2, distance=best, size=size1 + size2)

    def run(self) -> int:
        """Merge until no pair is closer than the threshold; returns the merge count."""
        n_merges = 0
        while self.merge_closest() is not None:
            n_merges += 1
        return n_merges
