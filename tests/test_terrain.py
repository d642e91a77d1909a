"""Tests for terrain decoration scattering."""

import math

import pytest

from py_realm.core.geometry import point_in_polygon, point_segment_distance
from py_realm.core.models import Point, TerrainKind
from py_realm.core.terrain import TerrainOptions, TerrainScatterer, pick_kind

LAND = [Point(0, 0), Point(600, 0), Point(600, 600), Point(0, 600)]


class TestPickKind:
    """Test cumulative threshold lookup."""

    def test_thresholds(self):
        options = TerrainOptions()
        assert pick_kind(0.1, options.far_thresholds) == TerrainKind.FOREST
        assert pick_kind(0.5, options.far_thresholds) == TerrainKind.MOUNTAIN
        assert pick_kind(0.55, options.far_thresholds) == TerrainKind.LAKE
        assert pick_kind(0.7, options.far_thresholds) is None


class TestTerrainScatterer:
    """Test the seeded scatter."""

    def setup_method(self):
        self.scatterer = TerrainScatterer()

    def test_cell_seed(self):
        assert self.scatterer.cell_seed(0, 0, 0) == 42
        assert self.scatterer.cell_seed(2, 3, 4) == 2042 + 3 * 1009 + 4 * 17

    def test_features_on_land(self):
        features = self.scatterer.scatter([LAND], [], [], seed=1)
        assert features
        for feature in features:
            assert point_in_polygon(feature.position, LAND)
            assert 0 <= feature.variant <= 2
            assert feature.size > 0

    def test_no_land_no_terrain(self):
        assert self.scatterer.scatter([], [], [Point(10, 10)], seed=1) == []

    def test_node_clearance(self):
        nodes = [Point(150, 150), Point(300, 300), Point(450, 450)]
        features = self.scatterer.scatter([LAND], [], nodes, seed=2)
        for feature in features:
            nearest = min(math.hypot(feature.position.x - n.x, feature.position.y - n.y) for n in nodes)
            assert nearest >= 45.0

    def test_sparse_small_trees_near_roads(self):
        road = [Point(0, 300), Point(600, 300)]
        features = self.scatterer.scatter([LAND], [road], [], seed=3)
        near = [
            f for f in features if point_segment_distance(f.position, road[0], road[1]) < 25.0
        ]
        for feature in near:
            assert feature.kind == TerrainKind.TREE
            assert 6.0 <= feature.size < 10.0

    def test_no_big_features_in_medium_band(self):
        road = [Point(0, 300), Point(600, 300)]
        features = self.scatterer.scatter([LAND], [road], [], seed=3)
        for feature in features:
            gap = point_segment_distance(feature.position, road[0], road[1])
            if 25.0 <= gap < 60.0:
                assert feature.kind in (TerrainKind.TREE, TerrainKind.ROCK)

    def test_deterministic(self):
        road = [Point(0, 100), Point(600, 500)]
        first = self.scatterer.scatter([LAND], [road], [Point(50, 50)], seed=9)
        second = TerrainScatterer().scatter([LAND], [road], [Point(50, 50)], seed=9)
        assert first == second

    def test_seed_changes_scatter(self):
        first = self.scatterer.scatter([LAND], [], [], seed=9)
        second = self.scatterer.scatter([LAND], [], [], seed=10)
        assert first != second

    def test_custom_cell_size(self):
        coarse = TerrainScatterer(TerrainOptions(cell_size=200.0)).scatter([LAND], [], [], seed=1)
        fine = self.scatterer.scatter([LAND], [], [], seed=1)
        assert len(coarse) < len(fine)
