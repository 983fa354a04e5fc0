"""Agglomerative clustering of host items into trees and item groups."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from typing import Any, Optional

import numpy as np

from hierclust.engine import MergeEngine
from hierclust.matrix import compute_distance_matrix
from hierclust.metrics import feature_matrix
from hierclust.params import ClusterParams, EmptyInputError
from hierclust.tree import Cluster, extract_leaves, leaf_ordinals, split

logger = logging.getLogger("hierclust")

GroupFactory = Callable[[list[Any]], Any]


@dataclass(frozen=True)
class ClusterResult:
    roots: tuple[Cluster, ...]
    groups: list[Any]
    labels: np.ndarray
    n_clusters: int
    n_merges: int

    @property
    def root(self) -> Optional[Cluster]:
        """The whole dendrogram, when merging ran down to a single tree."""
        return self.roots[0] if len(self.roots) == 1 else None


def group_roots(roots: Sequence[Cluster], params: ClusterParams) -> list[Cluster]:
    """Subtrees that become output groups.

    A single surviving tree is cut according to the mode; when the
    threshold stopped merging early every survivor is one group.
    """
    if len(roots) == 1:
        return split(roots[0], params.mode.depth)
    return list(roots)


def cluster(
    items: Sequence[Any],
    params: Optional[ClusterParams] = None,
    *,
    group_factory: GroupFactory = list,
    **options: Any,
) -> ClusterResult:
    """Cluster *items* bottom-up and hand each resulting group to *group_factory*.

    Options may be given as a ``ClusterParams`` or as keyword overrides
    (``metric``, ``linkage``, ``threshold``, ``mode``, ``attributes``);
    both are validated before any distance is computed.
    """
    if params is None:
        params = ClusterParams(**options)
    elif options:
        params = replace(params, **options)

    items = list(items)
    if not items:
        raise EmptyInputError("cannot cluster an empty item sequence")

    features = feature_matrix(items, params.attributes)
    dist = compute_distance_matrix(features, params.metric)
    engine = MergeEngine(
        items,
        features,
        dist,
        metric=params.metric,
        linkage=params.linkage,
        threshold=params.threshold,
    )
    n_merges = engine.run()
    roots = tuple(engine.roots)

    subtrees = group_roots(roots, params)
    labels = np.empty(len(items), dtype=int)
    for label, node in enumerate(subtrees):
        labels[leaf_ordinals(node)] = label
    groups = [group_factory(extract_leaves(node)) for node in subtrees]

    described = params.describe()
    logger.info(
        "Agglomerative found %d groups from %d trees after %d merges (threshold=%.3f, linkage=%s)",
        len(subtrees), len(roots), n_merges, params.threshold, described["linkage"],
    )
    return ClusterResult(
        roots=roots,
        groups=groups,
        labels=labels,
        n_clusters=len(subtrees),
        n_merges=n_merges,
    )

