"""Agglomerative hierarchical clustering of items with numeric attributes."""

from hierclust.clustering import ClusterResult, cluster
from hierclust.linkage import Linkage
from hierclust.metrics import Metric, item_distance
from hierclust.params import (
    ClusterParams,
    ClusteringArgumentError,
    EmptyInputError,
    Mode,
    UnknownLinkageError,
    UnknownMetricError,
    UnknownModeError,
)
from hierclust.tree import Leaf, Merge, extract_leaves, partition

__all__ = [
    "ClusterParams",
    "ClusterResult",
    "ClusteringArgumentError",
    "EmptyInputError",
    "Leaf",
    "Linkage",
    "Merge",
    "Metric",
    "Mode",
    "UnknownLinkageError",
    "UnknownMetricError",
    "UnknownModeError",
    "cluster",
    "extract_leaves",
    "item_distance",
    "partition",
]
