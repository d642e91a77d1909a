"""
Boundary synthesis for countries and provinces.

Each region outline is built by walking a ring of section directions around
the region center:

1. A base radius is chosen (countries: enclose all child provinces; provinces:
   a fixed size, settlements do not inflate them).
2. Each section is either *angular* (2-3 close points, small radius variance,
   reads as a drawn border) or *organic* (one point, larger variance and angle
   jitter, reads as a coastline).
3. Settlements pull the outline outward with a localised bulge. Countries
   also keep a floor past every child province in its direction, so no
   section dips below a province near the rim.
4. Provinces are capped by the (biased) perpendicular bisector toward each
   sibling province, so siblings never overlap.
5. Provinces are clipped to a fraction of the distance to the parent country
   outline along each ray.

Vertex angles are kept strictly increasing, so every outline is star-shaped
around its center and therefore a simple polygon.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import structlog

from ..config.shape_params import DEFAULT_SHAPE_PARAMETERS, RegionShape, ShapeParameters
from .geometry import (
    angle_between,
    direction_to,
    distance,
    is_valid_polygon,
    ray_boundary_distance,
    regular_polygon,
)
from .models import Node, NodeKind, Point
from .seeded_random import hash_string, seeded_random, seeded_range

logger = structlog.get_logger()


@dataclass(frozen=True)
class RegionProfile:
    """Fixed geometry constants for one region kind."""

    base_radius: float  # countries: floor for the base radius; provinces: the base radius
    child_padding: float  # room kept around the farthest child province
    radius_floor: float  # smallest radius for an undisturbed section
    bulge_cone: float  # settlements further off-axis than this do not bulge (radians)
    bulge_inner: float  # full-strength zone of the bulge
    bulge_shoulder_angle: float  # where the steep part of the fall-off ends
    bulge_shoulder: float  # fall-off value at the shoulder
    bulge_margin: float  # distance kept between a settlement and the border
    perp_jitter: float  # sideways wobble of angular section points


COUNTRY_PROFILE = RegionProfile(
    base_radius=200.0,
    child_padding=150.0,
    radius_floor=50.0,
    bulge_cone=1.40,
    bulge_inner=0.35,
    bulge_shoulder_angle=0.87,
    bulge_shoulder=0.4,
    bulge_margin=80.0,
    perp_jitter=15.0,
)

PROVINCE_PROFILE = RegionProfile(
    base_radius=90.0,
    child_padding=0.0,
    radius_floor=50.0,
    bulge_cone=0.70,
    bulge_inner=0.17,
    bulge_shoulder_angle=0.52,
    bulge_shoulder=0.2,
    bulge_margin=40.0,
    perp_jitter=8.0,
)

# Sibling separation
SIBLING_CONE = 2.09
SIBLING_BIAS = 0.15
SIBLING_MARGIN = 10.0
MIN_SIBLING_DISTANCE = 5.0

# Parent clipping
PARENT_BUFFER = 0.97
PENINSULA_BUFFER = 0.995
COAST_CONE = 1.22
COAST_PROXIMITY = 0.7

# Child provinces keep the country border at least `child_padding` beyond them
# across this cone, wider than the largest default gap between vertices
CHILD_PROVINCE_CONE = 0.87

# Settlements closer than this to the center have no usable direction
MIN_SETTLEMENT_DISTANCE = 10.0
MIN_VERTEX_RADIUS = 1.0

RadiusFunction = Callable[[float, int, bool], float]


@dataclass(frozen=True)
class SiblingInfo:
    """What a province needs to know about one sibling."""

    position: Point
    has_settlements: bool


def bulge_falloff(angle_diff: float, profile: RegionProfile) -> float:
    """
    Strength of a settlement bulge at ``angle_diff`` radians off its axis.

    1.0 inside the inner zone, linear down to the shoulder value, then linear
    to zero at the cone edge.
    """
    if angle_diff >= profile.bulge_cone:
        return 0.0
    if angle_diff < profile.bulge_inner:
        return 1.0
    if angle_diff < profile.bulge_shoulder_angle:
        t = (angle_diff - profile.bulge_inner) / (
            profile.bulge_shoulder_angle - profile.bulge_inner
        )
        return 1.0 - t * (1.0 - profile.bulge_shoulder)
    t = (angle_diff - profile.bulge_shoulder_angle) / (
        profile.bulge_cone - profile.bulge_shoulder_angle
    )
    return profile.bulge_shoulder * (1.0 - t)


def settlement_reach(
    center: Point,
    angle: float,
    settlements: Sequence[Point],
    base_radius: float,
    profile: RegionProfile,
) -> Tuple[float, float]:
    """
    Outward pull of settlements on one boundary direction.

    Returns:
        (bulge, floor): the largest bulge beyond ``base_radius`` and the
        minimum radius needed by settlements sitting almost exactly on this
        direction
    """
    bulge = 0.0
    floor = 0.0
    for position in settlements:
        dist = distance(center, position)
        if dist < MIN_SETTLEMENT_DISTANCE:
            continue
        diff = angle_between(angle, direction_to(center, position))
        if diff >= profile.bulge_cone:
            continue
        target = dist + profile.bulge_margin
        if diff < profile.bulge_inner:
            floor = max(floor, target)
        if target > base_radius:
            bulge = max(bulge, (target - base_radius) * bulge_falloff(diff, profile))
    return bulge, floor


def province_reach(
    center: Point,
    angle: float,
    provinces: Sequence[Point],
    padding: float,
) -> float:
    """
    Smallest country radius along ``angle`` that keeps child provinces inside.

    Every province within ``CHILD_PROVINCE_CONE`` of the direction asks for
    its distance plus ``padding``, so organic sections cannot dip below a
    province sitting near the rim.
    """
    floor = 0.0
    for position in provinces:
        dist = distance(center, position)
        if dist < MIN_SETTLEMENT_DISTANCE:
            continue
        if angle_between(angle, direction_to(center, position)) < CHILD_PROVINCE_CONE:
            floor = max(floor, dist + padding)
    return floor


class BoundaryGenerator:
    """Builds country and province outlines for one seed and parameter set."""

    def __init__(self, shape_params: Optional[ShapeParameters] = None, seed: int = 0):
        self.shape_params = shape_params or DEFAULT_SHAPE_PARAMETERS
        self.seed = seed

    def region_seed(self, node_id: str) -> int:
        return hash_string(node_id) + self.seed

    def generate(
        self,
        region: Node,
        nodes: Sequence[Node],
        siblings: Sequence[Node] = (),
        parent_boundary: Optional[Sequence[Point]] = None,
        positions: Optional[Dict[str, Point]] = None,
    ) -> List[Point]:
        """
        Generate the outline of a country or province.

        Args:
            region: Country or province node
            nodes: Every node of the map
            siblings: Other provinces of the same country (ignored for countries)
            parent_boundary: Finished outline of the parent country (provinces)
            positions: Effective node positions; missing ids use the node's own

        Returns:
            Polygon vertices, at least three, implicitly closed
        """
        if region.kind == NodeKind.COUNTRY:
            return self.generate_country(region, nodes, positions)
        if region.kind == NodeKind.PROVINCE:
            return self.generate_province(region, nodes, siblings, parent_boundary, positions)
        raise ValueError(f"Node '{region.id}' is a {region.kind.value}, not a region")

    def generate_country(
        self,
        country: Node,
        nodes: Sequence[Node],
        positions: Optional[Dict[str, Point]] = None,
    ) -> List[Point]:
        """Outline a country around its provinces, bulging toward settlements."""
        profile = COUNTRY_PROFILE
        center = _position_of(country, positions)

        provinces = [
            n for n in nodes if n.kind == NodeKind.PROVINCE and n.parent_id == country.id
        ]
        province_ids = {p.id for p in provinces}
        settlements = [
            _position_of(n, positions)
            for n in nodes
            if n.kind.is_settlement and n.parent_id in province_ids
        ]

        # Settlements bulge the border locally instead of growing the base radius
        base_radius = profile.base_radius
        for province in provinces:
            base_radius = max(
                base_radius,
                distance(center, _position_of(province, positions)) + profile.child_padding,
            )

        province_positions = [_position_of(p, positions) for p in provinces]
        shape = self.shape_params.for_kind("country")

        def radius_at(angle: float, variation_seed: int, angular: bool) -> float:
            low, high = shape.angular_radius if angular else shape.organic_radius
            varied = base_radius * seeded_range(variation_seed, low, high)
            bulge, floor = settlement_reach(center, angle, settlements, base_radius, profile)
            radius = base_radius + bulge if bulge > 0 else varied
            held = province_reach(center, angle, province_positions, profile.child_padding)
            return max(radius, floor, held, profile.radius_floor)

        points = self._walk_sections(center, self.region_seed(country.id), shape, profile, radius_at)
        return self._checked(country, center, points, profile, shape)

    def generate_province(
        self,
        province: Node,
        nodes: Sequence[Node],
        siblings: Sequence[Node] = (),
        parent_boundary: Optional[Sequence[Point]] = None,
        positions: Optional[Dict[str, Point]] = None,
    ) -> List[Point]:
        """Outline a province inside its country, separated from its siblings."""
        profile = PROVINCE_PROFILE
        center = _position_of(province, positions)

        settlements = [
            _position_of(n, positions)
            for n in nodes
            if n.kind.is_settlement and n.parent_id == province.id
        ]
        has_settlements = bool(settlements)
        settled_provinces = {n.parent_id for n in nodes if n.kind.is_settlement}
        sibling_info = [
            SiblingInfo(_position_of(s, positions), s.id in settled_provinces)
            for s in siblings
            if s.id != province.id
        ]

        base_radius = profile.base_radius
        shape = self.shape_params.for_kind("province")

        def radius_at(angle: float, variation_seed: int, angular: bool) -> float:
            low, high = shape.angular_radius if angular else shape.organic_radius
            varied = max(profile.radius_floor, base_radius * seeded_range(variation_seed, low, high))
            bulge, floor = settlement_reach(center, angle, settlements, base_radius, profile)
            radius = base_radius + bulge if bulge > 0 else varied
            radius = max(radius, floor)

            limit = sibling_limit(center, angle, sibling_info, has_settlements)
            if limit is not None:
                protected = max(base_radius + bulge if bulge > 0 else 0.0, floor)
                radius = min(radius, max(limit, protected))

            if parent_boundary:
                radius = clip_to_parent(center, angle, radius, settlements, parent_boundary)

            return max(radius, MIN_VERTEX_RADIUS)

        points = self._walk_sections(center, self.region_seed(province.id), shape, profile, radius_at)
        return self._checked(province, center, points, profile, shape)

    def _walk_sections(
        self,
        center: Point,
        region_seed: int,
        shape: RegionShape,
        profile: RegionProfile,
        radius_at: RadiusFunction,
    ) -> List[Point]:
        num_sides = max(3, shape.sides + int(seeded_random(region_seed) * shape.side_jitter))
        width = 2 * math.pi / num_sides
        # Keeps organic points clear of the previous section's angular points
        max_angle_jitter = width / 5

        points: List[Point] = []
        for i in range(num_sides):
            base_angle = i * width
            section_seed = region_seed + i * 73
            angular = seeded_random(section_seed + 11) < shape.angular_ratio

            if angular:
                num_sub = 2 + int(seeded_random(section_seed) * 2)
                for j in range(num_sub):
                    angle = base_angle + (j / num_sub) * width
                    radius = radius_at(angle, section_seed + j * 41, True)
                    perp = (seeded_random(section_seed + j * 97) - 0.5) * profile.perp_jitter
                    max_perp = radius * math.tan(width / (4 * num_sub))
                    perp = max(-max_perp, min(max_perp, perp))
                    points.append(
                        Point(
                            center.x + math.cos(angle) * radius - math.sin(angle) * perp,
                            center.y + math.sin(angle) * radius + math.cos(angle) * perp,
                        )
                    )
            else:
                jitter = (seeded_random(section_seed + 200) - 0.5) * shape.angle_jitter
                jitter = max(-max_angle_jitter, min(max_angle_jitter, jitter))
                angle = base_angle + jitter
                radius = radius_at(angle, section_seed + 137, False)
                points.append(
                    Point(center.x + math.cos(angle) * radius, center.y + math.sin(angle) * radius)
                )
        return points

    def _checked(
        self,
        region: Node,
        center: Point,
        points: List[Point],
        profile: RegionProfile,
        shape: RegionShape,
    ) -> List[Point]:
        if is_valid_polygon(points):
            return points
        logger.warning(
            "Degenerate region outline, using fallback polygon",
            node_id=region.id,
            points=len(points),
        )
        return regular_polygon(center, profile.radius_floor, max(3, shape.sides))


def sibling_limit(
    center: Point,
    angle: float,
    siblings: Sequence[SiblingInfo],
    has_settlements: bool,
) -> Optional[float]:
    """
    Furthest a province may reach along ``angle`` before crossing into a sibling.

    The limit is where the ray meets the bisector between the two centers. The
    bisector shifts 15% toward the sibling when only this province has
    settlements and 15% away when only the sibling has them, so the two
    shifted lines always coincide and the provinces cannot overlap.
    """
    ray_x, ray_y = math.cos(angle), math.sin(angle)
    limit = math.inf
    for sibling in siblings:
        dx = sibling.position.x - center.x
        dy = sibling.position.y - center.y
        dist = math.hypot(dx, dy)
        if dist < MIN_SIBLING_DISTANCE:
            continue
        if angle_between(angle, math.atan2(dy, dx)) >= SIBLING_CONE:
            continue
        cos_theta = (dx * ray_x + dy * ray_y) / dist
        if cos_theta <= 0:
            continue

        share = 0.5
        if has_settlements and not sibling.has_settlements:
            share *= 1 + SIBLING_BIAS
        elif sibling.has_settlements and not has_settlements:
            share *= 1 - SIBLING_BIAS

        limit = min(limit, share * dist / cos_theta - SIBLING_MARGIN)
    return None if limit == math.inf else limit


def clip_to_parent(
    center: Point,
    angle: float,
    radius: float,
    settlements: Sequence[Point],
    parent_boundary: Sequence[Point],
) -> float:
    """Cap ``radius`` to a fraction of the distance to the parent outline."""
    to_boundary = ray_boundary_distance(center, (math.cos(angle), math.sin(angle)), parent_boundary)
    if to_boundary is None:
        return radius

    # A settlement out near the coast lets the border run almost to the edge
    buffer = PARENT_BUFFER
    for position in settlements:
        dist = distance(center, position)
        if dist < MIN_SETTLEMENT_DISTANCE:
            continue
        if angle_between(angle, direction_to(center, position)) >= COAST_CONE:
            continue
        if dist / to_boundary > COAST_PROXIMITY:
            buffer = PENINSULA_BUFFER
            break

    return min(radius, to_boundary * buffer)


def _position_of(node: Node, positions: Optional[Dict[str, Point]]) -> Point:
    if positions is not None and node.id in positions:
        position = positions[node.id]
        return Point(float(position[0]), float(position[1]))
    return node.position
