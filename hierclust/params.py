"""Validated clustering parameters and argument errors."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import Any, Union

from hierclust.config import DEFAULTS
from hierclust.linkage import VALID_LINKAGE_OPTIONS, Linkage, LinkageFn, LinkageLike
from hierclust.metrics import (
    DEFAULT_ATTRIBUTES,
    VALID_METRIC_OPTIONS,
    AttributeFn,
    Metric,
    MetricFn,
    MetricLike,
)


class Mode(str, Enum):
    """Shape of the grouped output when a single tree survives."""

    DENDROGRAM = "dendrogram"
    CLUSTERS = "clusters"

    @property
    def depth(self) -> int:
        return 0 if self is Mode.DENDROGRAM else 1


VALID_MODE_OPTIONS = frozenset(m.value for m in Mode)


class ClusteringArgumentError(ValueError):
    """Raised when clustering parameters or inputs are invalid."""


class UnknownMetricError(ClusteringArgumentError):
    pass


class UnknownLinkageError(ClusteringArgumentError):
    pass


class UnknownModeError(ClusteringArgumentError):
    pass


class EmptyInputError(ClusteringArgumentError):
    pass


def resolve_metric(metric: MetricLike) -> Union[Metric, MetricFn]:
    if isinstance(metric, Metric):
        return metric
    if isinstance(metric, str):
        if metric not in VALID_METRIC_OPTIONS:
            raise UnknownMetricError(
                f"metric must be one of {sorted(VALID_METRIC_OPTIONS)}, got '{metric}'"
            )
        return Metric(metric)
    if callable(metric):
        return metric
    raise UnknownMetricError(f"metric must be a name or a callable, got {metric!r}")


def resolve_linkage(linkage: LinkageLike) -> Union[Linkage, LinkageFn]:
    if isinstance(linkage, Linkage):
        return linkage
    if isinstance(linkage, str):
        if linkage not in VALID_LINKAGE_OPTIONS:
            raise UnknownLinkageError(
                f"linkage must be one of {sorted(VALID_LINKAGE_OPTIONS)}, got '{linkage}'"
            )
        return Linkage(linkage)
    if callable(linkage):
        return linkage
    raise UnknownLinkageError(f"linkage must be a name or a callable, got {linkage!r}")


def resolve_mode(mode: Union[Mode, str]) -> Mode:
    if isinstance(mode, Mode):
        return mode
    if mode not in VALID_MODE_OPTIONS:
        raise UnknownModeError(
            f"mode must be one of {sorted(VALID_MODE_OPTIONS)}, got '{mode}'"
        )
    return Mode(mode)


def validate_threshold(threshold: Any) -> float:
    if isinstance(threshold, bool) or not isinstance(threshold, Real):
        raise ClusteringArgumentError(f"threshold must be a number, got {threshold!r}")
    if math.isnan(threshold):
        raise ClusteringArgumentError("threshold must not be NaN")
    return float(threshold)


def validate_attributes(attributes: Sequence[AttributeFn]) -> tuple[AttributeFn, ...]:
    attributes = tuple(attributes)
    if not attributes:
        raise ClusteringArgumentError("at least one attribute extractor is required")
    for attr in attributes:
        if not callable(attr):
            raise ClusteringArgumentError(f"attribute extractors must be callable, got {attr!r}")
    return attributes


@dataclass(frozen=True)
class ClusterParams:
    """Typed, validated clustering options.

    Names given as strings are normalized to their enum members, so a
    constructed instance never holds an unknown metric, linkage or mode.
    """

    metric: MetricLike = DEFAULTS.metric
    linkage: LinkageLike = DEFAULTS.linkage
    threshold: float = DEFAULTS.threshold
    mode: Union[Mode, str] = DEFAULTS.mode
    attributes: Sequence[AttributeFn] = DEFAULT_ATTRIBUTES

    def __post_init__(self) -> None:
        object.__setattr__(self, "metric", resolve_metric(self.metric))
        object.__setattr__(self, "linkage", resolve_linkage(self.linkage))
        object.__setattr__(self, "threshold", validate_threshold(self.threshold))
        object.__setattr__(self, "mode", resolve_mode(self.mode))
        object.__setattr__(self, "attributes", validate_attributes(self.attributes))

    def describe(self) -> dict[str, Any]:
        """Plain values for logs and manifests."""
        return {
            "metric": _label(self.metric),
            "linkage": _label(self.linkage),
            "threshold": self.threshold,
            "mode": self.mode.value,
        }


def _label(value: Any) -> str:
    if isinstance(value, Enum):
        return value.value
    return getattr(value, "__name__", repr(value))
