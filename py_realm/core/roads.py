"""
Road path generation.

Roads are recomputed on every render, so the waypoints must depend only on
the endpoints and a seed. Interior waypoints are pushed sideways off the
straight line, most strongly mid-road, with alternating sides so a road
meanders instead of bowing to one side.
"""

import math
from typing import List, Sequence

from .models import Point
from .seeded_random import hash_string, seeded_random

# Below this length a road gets a single bend
SHORT_ROAD = 50.0
LATERAL_SCALE = 0.4
LONGITUDINAL_SCALE = 0.1


def road_seed(source_id: str, target_id: str, seed: int = 0) -> int:
    """Seed component for the road between two nodes."""
    return hash_string(source_id + target_id) + seed


def generate_road_path(
    start: Sequence[float],
    end: Sequence[float],
    seed: int = 0,
    curviness: float = 0.35,
    segments: int = 4,
) -> List[Point]:
    """
    Meandering waypoints from ``start`` to ``end``.

    Args:
        start: First endpoint, returned unchanged as the first point
        end: Second endpoint, returned unchanged as the last point
        seed: Seed component for this road
        curviness: 0 = straight, 1 = very curvy
        segments: Number of curve segments

    Returns:
        ``segments + 1`` points for normal roads, 3 for short ones, 2 when the
        endpoints coincide
    """
    a = Point(float(start[0]), float(start[1]))
    b = Point(float(end[0]), float(end[1]))
    dx = b.x - a.x
    dy = b.y - a.y
    length = math.hypot(dx, dy)
    if length == 0.0:
        return [a, b]

    # Unit vectors along and across the road
    ux, uy = dx / length, dy / length
    px, py = -uy, ux

    if length < SHORT_ROAD or segments < 2:
        bend = length * curviness * (seeded_random(seed) - 0.5)
        return [a, Point(a.x + dx / 2 + px * bend, a.y + dy / 2 + py * bend), b]

    points = [a]
    for i in range(1, segments):
        t = i / segments
        middle_factor = math.sin(t * math.pi)
        sign = 1.0 if i % 2 else -1.0
        lateral = (
            sign * curviness * length * LATERAL_SCALE * middle_factor * seeded_random(seed + i * 137)
        )
        longitudinal = length * curviness * LONGITUDINAL_SCALE * (seeded_random(seed + i * 73) - 0.5)
        points.append(
            Point(
                a.x + dx * t + px * lateral + ux * longitudinal,
                a.y + dy * t + py * lateral + uy * longitudinal,
            )
        )
    points.append(b)
    return points
