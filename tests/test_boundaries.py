"""
Tests for country and province outline generation.

Geometric checks use shapely polygons built from the generated vertices.
"""

import math

import pytest
from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon

from py_realm.config import ShapeParameters
from py_realm.core.boundaries import (
    COUNTRY_PROFILE,
    PROVINCE_PROFILE,
    BoundaryGenerator,
    SiblingInfo,
    bulge_falloff,
    province_reach,
    sibling_limit,
)
from py_realm.core.models import Node, NodeKind, Point


def polygon(points):
    return Polygon([(p.x, p.y) for p in points])


class TestBulgeFalloff:
    """Test the settlement bulge fall-off curve."""

    def test_inner_zone_full_strength(self):
        assert bulge_falloff(0.0, COUNTRY_PROFILE) == 1.0
        assert bulge_falloff(0.3, COUNTRY_PROFILE) == 1.0

    def test_shoulder_value(self):
        assert bulge_falloff(0.87, COUNTRY_PROFILE) == pytest.approx(0.4)
        assert bulge_falloff(0.52, PROVINCE_PROFILE) == pytest.approx(0.2)

    def test_zero_outside_cone(self):
        assert bulge_falloff(1.40, COUNTRY_PROFILE) == 0.0
        assert bulge_falloff(2.0, PROVINCE_PROFILE) == 0.0

    def test_monotonic(self):
        samples = [bulge_falloff(i * 0.05, COUNTRY_PROFILE) for i in range(30)]
        assert all(a >= b for a, b in zip(samples, samples[1:]))


class TestSiblingLimit:
    """Test the biased bisector cap between sibling provinces."""

    def test_plain_bisector(self):
        sibling = SiblingInfo(Point(100, 0), False)
        limit = sibling_limit(Point(0, 0), 0.0, [sibling], False)
        assert limit == pytest.approx(40.0)

    def test_bias_toward_settled_province(self):
        empty = SiblingInfo(Point(100, 0), False)
        settled = SiblingInfo(Point(100, 0), True)
        assert sibling_limit(Point(0, 0), 0.0, [empty], True) == pytest.approx(47.5)
        assert sibling_limit(Point(0, 0), 0.0, [settled], False) == pytest.approx(32.5)

    def test_facing_away_is_unlimited(self):
        sibling = SiblingInfo(Point(100, 0), False)
        assert sibling_limit(Point(0, 0), math.pi, [sibling], False) is None

    def test_coincident_sibling_skipped(self):
        sibling = SiblingInfo(Point(1, 1), True)
        assert sibling_limit(Point(0, 0), 0.0, [sibling], False) is None


class TestProvinceReach:
    """Test the country radius floor toward child provinces."""

    def test_floor_toward_province(self):
        floor = province_reach(Point(0, 0), 0.0, [Point(400, 0)], 150.0)
        assert floor == pytest.approx(550.0)

    def test_floor_inside_cone(self):
        floor = province_reach(Point(0, 0), 0.8, [Point(400, 0)], 150.0)
        assert floor == pytest.approx(550.0)

    def test_no_floor_outside_cone(self):
        assert province_reach(Point(0, 0), 1.0, [Point(400, 0)], 150.0) == 0.0
        assert province_reach(Point(0, 0), math.pi, [Point(400, 0)], 150.0) == 0.0

    def test_farthest_province_wins(self):
        floor = province_reach(Point(0, 0), 0.0, [Point(100, 0), Point(300, 50)], 150.0)
        assert floor == pytest.approx(math.hypot(300, 50) + 150.0)


class TestCountryBoundary:
    """Test country outlines."""

    def setup_method(self):
        self.nodes = [
            Node(id="c1", kind=NodeKind.COUNTRY, x=600, y=400),
            Node(id="p1", kind=NodeKind.PROVINCE, x=700, y=400, parent_id="c1"),
            Node(id="p2", kind=NodeKind.PROVINCE, x=550, y=300, parent_id="c1"),
            Node(id="far", kind=NodeKind.CITY, x=1000, y=400, parent_id="p1"),
        ]
        self.generator = BoundaryGenerator(seed=0)

    def test_valid_polygon(self):
        boundary = self.generator.generate(self.nodes[0], self.nodes)
        assert len(boundary) >= 3
        shape = polygon(boundary)
        assert shape.is_valid
        assert shape.area > 0

    def test_contains_provinces(self):
        shape = polygon(self.generator.generate_country(self.nodes[0], self.nodes))
        assert shape.contains(ShapelyPoint(700, 400))
        assert shape.contains(ShapelyPoint(550, 300))

    def test_bulges_toward_distant_settlement(self):
        shape = polygon(self.generator.generate_country(self.nodes[0], self.nodes))
        assert shape.contains(ShapelyPoint(1000, 400))

    def test_deterministic(self):
        first = self.generator.generate_country(self.nodes[0], self.nodes)
        second = BoundaryGenerator(seed=0).generate_country(self.nodes[0], self.nodes)
        assert first == second

    def test_seed_changes_shape(self):
        first = self.generator.generate_country(self.nodes[0], self.nodes)
        other = BoundaryGenerator(seed=1).generate_country(self.nodes[0], self.nodes)
        assert first != other

    def test_childless_country(self):
        lonely = Node(id="solo", kind=NodeKind.COUNTRY, x=0, y=0)
        shape = polygon(self.generator.generate(lonely, [lonely]))
        assert shape.is_valid
        assert shape.contains(ShapelyPoint(0, 0))

    def test_settlement_rejected(self):
        with pytest.raises(ValueError):
            self.generator.generate(self.nodes[3], self.nodes)

    def test_shape_params_respected(self):
        params = ShapeParameters(country_sides=6, country_side_jitter=0, country_angular_ratio=0.0)
        boundary = BoundaryGenerator(params).generate_country(self.nodes[0], self.nodes)
        assert len(boundary) == 6


class TestProvinceBoundary:
    """Test province outlines against siblings and the parent country."""

    def setup_method(self):
        self.nodes = [
            Node(id="c1", kind=NodeKind.COUNTRY, x=600, y=400),
            Node(id="pa", kind=NodeKind.PROVINCE, x=540, y=400, parent_id="c1"),
            Node(id="pb", kind=NodeKind.PROVINCE, x=660, y=400, parent_id="c1"),
            Node(id="ta", kind=NodeKind.TOWN, x=520, y=390, parent_id="pa"),
        ]
        self.generator = BoundaryGenerator(seed=3)
        self.country = self.generator.generate_country(self.nodes[0], self.nodes)

    def _province(self, index):
        province = self.nodes[index]
        siblings = [n for n in self.nodes[1:3] if n.id != province.id]
        return self.generator.generate(province, self.nodes, siblings, self.country)

    def test_valid_polygon(self):
        for index in (1, 2):
            shape = polygon(self._province(index))
            assert shape.is_valid
            assert shape.area > 0

    def test_siblings_do_not_overlap(self):
        first = polygon(self._province(1))
        second = polygon(self._province(2))
        assert first.intersection(second).area <= 1.0

    def test_inside_parent(self):
        country = polygon(self.country)
        for index in (1, 2):
            province = polygon(self._province(index))
            assert province.difference(country).area <= 0.05 * province.area

    def test_contains_its_settlement(self):
        province = polygon(self._province(1))
        assert province.distance(ShapelyPoint(520, 390)) <= 2.0

    def test_unclipped_province(self):
        orphan = Node(id="px", kind=NodeKind.PROVINCE, x=0, y=0)
        shape = polygon(self.generator.generate_province(orphan, [orphan]))
        assert shape.is_valid
        # Base radius 90 with organic variation, floor 50
        assert shape.bounds[2] < 150

    def test_positions_override_node_coordinates(self):
        province = self.nodes[1]
        moved = self.generator.generate_province(
            province, self.nodes, positions={"pa": Point(100, 100), "ta": Point(110, 100)}
        )
        assert polygon(moved).contains(ShapelyPoint(100, 100))


class TestProvincesNearRim:
    """Test provinces far from the country center across many seeds."""

    def setup_method(self):
        self.nodes = [
            Node(id="c1", kind=NodeKind.COUNTRY, x=600, y=400),
            Node(id="pa", kind=NodeKind.PROVINCE, x=200, y=400, parent_id="c1"),
            Node(id="pb", kind=NodeKind.PROVINCE, x=1000, y=400, parent_id="c1"),
        ]

    @pytest.mark.parametrize("seed", range(100))
    def test_provinces_inside_country(self, seed):
        generator = BoundaryGenerator(seed=seed)
        country_boundary = generator.generate_country(self.nodes[0], self.nodes)
        country = polygon(country_boundary)
        assert country.is_valid

        provinces = self.nodes[1:]
        for province in provinces:
            siblings = [p for p in provinces if p.id != province.id]
            shape = polygon(
                generator.generate_province(province, self.nodes, siblings, country_boundary)
            )
            assert shape.is_valid
            assert country.contains(ShapelyPoint(province.x, province.y))
            assert shape.difference(country).area <= 0.05 * shape.area

    @pytest.mark.parametrize("seed", range(100))
    def test_border_clears_provinces(self, seed):
        country = polygon(BoundaryGenerator(seed=seed).generate_country(self.nodes[0], self.nodes))
        for province in self.nodes[1:]:
            # The border keeps well clear of each province, not just its center
            assert country.exterior.distance(ShapelyPoint(province.x, province.y)) >= 100.0
