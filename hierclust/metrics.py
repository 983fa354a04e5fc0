"""Distance metrics over attribute vectors."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any, Union

import numpy as np

AttributeFn = Callable[[Any], float]
MetricFn = Callable[[np.ndarray, np.ndarray], float]


class Metric(str, Enum):
    """Built-in dissimilarity measures between two feature vectors."""

    EUCLIDEAN = "euclidean"
    MANHATTAN = "manhattan"
    MAX = "max"

    def __call__(self, u: np.ndarray, v: np.ndarray) -> float:
        diff = np.abs(np.asarray(u, dtype=np.float64) - np.asarray(v, dtype=np.float64))
        if self is Metric.EUCLIDEAN:
            return float(np.sqrt(np.sum(diff * diff)))
        if self is Metric.MANHATTAN:
            return float(np.sum(diff))
        return float(diff.max()) if diff.size else 0.0

    @property
    def scipy_name(self) -> str:
        """Name understood by ``scipy.spatial.distance.pdist``."""
        return _SCIPY_NAMES[self]


_SCIPY_NAMES = {
    Metric.EUCLIDEAN: "euclidean",
    Metric.MANHATTAN: "cityblock",
    Metric.MAX: "chebyshev",
}

VALID_METRIC_OPTIONS = frozenset(m.value for m in Metric)

MetricLike = Union[Metric, str, MetricFn]


def position_x(item: Any) -> float:
    return item.position[0]


def position_y(item: Any) -> float:
    return item.position[1]


DEFAULT_ATTRIBUTES: tuple[AttributeFn, ...] = (position_x, position_y)


def feature_vector(item: Any, attributes: Sequence[AttributeFn]) -> np.ndarray:
    return np.array([float(attr(item)) for attr in attributes], dtype=np.float64)


def feature_matrix(items: Sequence[Any], attributes: Sequence[AttributeFn]) -> np.ndarray:
    """Apply every extractor to every item once; shape ``(n, len(attributes))``."""
    features = np.empty((len(items), len(attributes)), dtype=np.float64)
    for i, item in enumerate(items):
        features[i] = feature_vector(item, attributes)
    return features


def item_distance(
    a: Any,
    b: Any,
    attributes: Sequence[AttributeFn],
    metric: Metric | MetricFn = Metric.EUCLIDEAN,
) -> float:
    """Dissimilarity of two host items as seen through *attributes*."""
    return float(metric(feature_vector(a, attributes), feature_vector(b, attributes)))
