"""Tests for hierclust.engine: merge loop, linkage updates and cache upkeep."""

from __future__ import annotations

import math
from itertools import product

import numpy as np
import pytest

from hierclust.engine import MergeEngine, MergeStep
from hierclust.linkage import Linkage
from hierclust.matrix import compute_distance_matrix
from hierclust.metrics import Metric
from hierclust.tree import Leaf, Merge, leaf_ordinals


def _engine(points, *, metric=Metric.EUCLIDEAN, linkage=Linkage.SINGLE, threshold=np.inf):
    features = np.asarray(points, dtype=np.float64)
    dist = compute_distance_matrix(features, metric)
    items = [tuple(p) for p in points]
    return MergeEngine(items, features, dist, metric=metric, linkage=linkage, threshold=threshold)


def _merges(node):
    if isinstance(node, Merge):
        yield node
        yield from _merges(node.left)
        yield from _merges(node.right)


def _random_points(n: int, seed: int) -> np.ndarray:
    return np.random.default_rng(seed).uniform(0.0, 100.0, size=(n, 2))


THREE = [(0, 0), (1, 0), (10, 10)]


def _shrinking_single(d_left, d_right, size_left, size_right):
    # Merged clusters come out closer than either part
    return 0.5 * min(d_left, d_right)


class TestMergeClosest:
    def test_first_merge_joins_closest_pair(self):
        engine = _engine(THREE)
        step = engine.merge_closest()

        assert step == MergeStep(left_key=0, right_key=1, distance=1.0, size=2)
        assert engine.keys == [0, 2]
        root = engine.roots[0]
        assert isinstance(root, Merge)
        assert root.left == Leaf((0, 0), 0)
        assert root.right == Leaf((1, 0), 1)

    def test_threshold_stops_merging(self):
        engine = _engine(THREE, threshold=5.0)
        assert engine.merge_closest() is not None
        assert engine.merge_closest() is None
        assert engine.keys == [0, 2]

    def test_distance_equal_to_threshold_is_not_merged(self):
        engine = _engine(THREE, threshold=1.0)
        assert engine.merge_closest() is None
        assert engine.keys == [0, 1, 2]

    def test_single_cluster_reports_no_merge(self):
        engine = _engine([(4, 4)])
        assert engine.merge_closest() is None
        assert engine.run() == 0

    def test_single_linkage_updates_row(self):
        engine = _engine(THREE)
        engine.merge_closest()
        assert engine.distances[0, 2] == pytest.approx(math.sqrt(181))
        assert engine.distances[2, 0] == engine.distances[0, 2]
        assert math.isinf(engine.distances[0, 0])

    def test_complete_linkage_updates_row(self):
        engine = _engine(THREE, linkage=Linkage.COMPLETE)
        engine.merge_closest()
        assert engine.distances[0, 2] == pytest.approx(math.sqrt(200))

    def test_average_linkage_uses_pre_merge_sizes(self):
        engine = _engine(THREE, linkage=Linkage.AVERAGE)
        engine.merge_closest()
        expected = (math.sqrt(200) + math.sqrt(181)) / 2
        assert engine.distances[0, 2] == pytest.approx(expected)

    def test_centroid_linkage_measures_representatives(self):
        engine = _engine([(0, 0), (2, 0), (1, 5)], linkage=Linkage.CENTROID)
        engine.run()
        assert engine.roots[0].distance == pytest.approx(5.0)

    def test_custom_linkage_function(self):
        engine = _engine([(0, 0), (1, 0), (10, 0)], linkage=lambda d1, d2, s1, s2: d1 + d2)
        engine.run()
        assert engine.roots[0].distance == pytest.approx(19.0)

    def test_retired_key_is_removed_from_matrix(self):
        engine = _engine(THREE)
        engine.merge_closest()
        assert np.all(np.isinf(engine.distances[1, :]))
        assert np.all(np.isinf(engine.distances[:, 1]))

    def test_cache_rescanned_for_neighbours_of_merged_pair(self):
        line = [(0, 0), (1, 0), (2, 0)]
        engine = _engine(line)
        engine.merge_closest()
        assert engine.nearest[0] == 2
        assert engine.nearest[2] == 0

    def test_centroid_merge_becomes_nearest_of_untouched_cluster(self):
        # Cluster 2 starts nearest to 3 (2.05) but the centroid (1, 0) of 0+1
        # lies at 1.9 from it.
        engine = _engine([(0, 0), (2, 0), (1, 1.9), (1, 3.95)], linkage=Linkage.CENTROID)
        assert engine.nearest[2] == 3

        step = engine.merge_closest()

        assert (step.left_key, step.right_key) == (0, 1)
        assert engine.distances[0, 2] == pytest.approx(1.9)
        assert engine.nearest[2] == 0
        assert engine.merge_closest() == MergeStep(
            left_key=0, right_key=2, distance=pytest.approx(1.9), size=3,
        )

    def test_custom_linkage_merge_becomes_nearest_of_untouched_cluster(self):
        engine = _engine([(0, 0), (1, 0), (4, 0), (6.5, 0)], linkage=_shrinking_single)
        assert engine.nearest[2] == 3

        engine.merge_closest()

        assert engine.distances[0, 2] == pytest.approx(1.5)
        assert engine.nearest[2] == 0
        assert engine.nearest[3] == 2

    def test_ties_go_to_first_in_scan_order(self):
        engine = _engine([(0, 0), (1, 0), (2, 0)])
        step = engine.merge_closest()
        assert (step.left_key, step.right_key) == (0, 1)

    def test_rejects_mismatched_inputs(self):
        features = np.zeros((3, 2))
        with pytest.raises(ValueError, match="expected 2 items"):
            MergeEngine(["a", "b"], features, compute_distance_matrix(features))


class TestRun:
    def test_infinite_threshold_merges_down_to_one_root(self):
        points = _random_points(30, seed=1)
        engine = _engine(points)
        assert engine.run() == 29
        assert len(engine.roots) == 1
        assert engine.roots[0].size == 30
        assert sorted(leaf_ordinals(engine.roots[0])) == list(range(30))

    def test_zero_threshold_merges_nothing(self):
        engine = _engine(_random_points(10, seed=2), threshold=0.0)
        assert engine.run() == 0
        assert [root.size for root in engine.roots] == [1] * 10

    @pytest.mark.parametrize(
        "linkage",
        [Linkage.SINGLE, Linkage.COMPLETE, Linkage.AVERAGE, Linkage.CENTROID, _shrinking_single],
    )
    def test_matrix_and_cache_invariants_hold_after_every_merge(self, linkage):
        engine = _engine(_random_points(25, seed=3), linkage=linkage)
        while engine.merge_closest() is not None:
            dist = engine.distances
            assert np.array_equal(dist, dist.T)
            live = engine.keys
            for key in live:
                assert math.isinf(dist[key, key])
                others = [k for k in live if k != key]
                if others:
                    assert dist[key, engine.nearest[key]] == min(dist[key, k] for k in others)

    @pytest.mark.parametrize(
        "linkage, combine",
        [
            (Linkage.SINGLE, min),
            (Linkage.COMPLETE, max),
            (Linkage.AVERAGE, lambda ds: sum(ds) / len(ds)),
        ],
    )
    def test_merge_heights_match_pairwise_definition(self, linkage, combine):
        points = _random_points(20, seed=4)
        engine = _engine(points, linkage=linkage)
        engine.run()
        for node in _merges(engine.roots[0]):
            left, right = leaf_ordinals(node.left), leaf_ordinals(node.right)
            pairwise = [
                Metric.EUCLIDEAN(points[i], points[j]) for i, j in product(left, right)
            ]
            assert node.distance == pytest.approx(combine(pairwise))
            assert node.size == node.left.size + node.right.size

    def test_merge_heights_are_monotone_for_single_linkage(self):
        engine = _engine(_random_points(20, seed=5))
        heights = []
        step = engine.merge_closest()
        while step is not None:
            heights.append(step.distance)
            step = engine.merge_closest()
        assert heights == sorted(heights)
