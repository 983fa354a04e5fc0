"""Pairwise distance matrix and nearest-neighbour cache initialisation."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Union

import numpy as np
from scipy.spatial.distance import pdist, squareform
from sklearn.metrics import pairwise_distances

from hierclust.metrics import Metric, MetricFn


def compute_distance_matrix(
    features: np.ndarray,
    metric: Union[Metric, MetricFn] = Metric.EUCLIDEAN,
) -> np.ndarray:
    """Symmetric ``(n, n)`` dissimilarity matrix with ``+inf`` on the diagonal.

    Built-in metrics go through scipy's difference-based ``pdist``, which
    stays exact for large coordinates (timestamps, projected maps); a
    custom callable is applied to every pair through scikit-learn.
    """
    n = features.shape[0]
    if n == 0:
        return np.zeros((0, 0), dtype=np.float64)

    if isinstance(metric, Metric):
        dist = squareform(pdist(features, metric=metric.scipy_name))
    else:
        dist = pairwise_distances(features, metric=metric)
    dist = dist.astype(np.float64, copy=False)

    # Mirror the upper triangle so D[i, j] and D[j, i] are bit-identical.
    upper = np.triu(dist, k=1)
    dist = upper + upper.T
    np.fill_diagonal(dist, np.inf)
    return dist


def init_nearest(dist: np.ndarray) -> np.ndarray:
    """Column of the first minimum in every row.

    Rows with nothing finite (a lone cluster) point at themselves.
    """
    n = dist.shape[0]
    nearest = np.arange(n, dtype=np.intp)
    if n == 0:
        return nearest
    best = np.argmin(dist, axis=1)
    finite = np.isfinite(dist[np.arange(n), best])
    nearest[finite] = best[finite]
    return nearest


def nearest_in_row(dist: np.ndarray, key: int, live_keys: Sequence[int]) -> int:
    """Rescan one row against the live keys, first strict minimum in live order."""
    row = dist[key, live_keys]
    pos = int(np.argmin(row))
    if row[pos] < dist[key, key]:
        return int(live_keys[pos])
    return key
