"""
Planar geometry helpers shared by the generators.

Polygons are sequences of (x, y) points, implicitly closed. Heavier queries
(ray casting, segment distances) are vectorised over edges with numpy.
"""

import math
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from .models import Point

# Edges this close to parallel with a ray are ignored
PARALLEL_EPSILON = 1e-4
AREA_EPSILON = 1e-6


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b[0] - a[0], b[1] - a[1])


def wrap_angle(angle: float) -> float:
    """Wrap an angle into [-pi, pi]."""
    while angle > math.pi:
        angle -= 2 * math.pi
    while angle < -math.pi:
        angle += 2 * math.pi
    return angle


def angle_between(a: float, b: float) -> float:
    """Absolute angular distance between two directions, in [0, pi]."""
    return abs(wrap_angle(a - b))


def direction_to(origin: Sequence[float], target: Sequence[float]) -> float:
    """Heading from ``origin`` to ``target`` in radians."""
    return math.atan2(target[1] - origin[1], target[0] - origin[0])


def _as_array(polygon: Sequence[Sequence[float]]) -> np.ndarray:
    return np.asarray(polygon, dtype=np.float64).reshape(-1, 2)


def ray_boundary_distance(
    origin: Sequence[float],
    direction: Sequence[float],
    polygon: Sequence[Sequence[float]],
) -> Optional[float]:
    """
    Distance along a ray to the closest polygon edge it crosses.

    Args:
        origin: Ray start
        direction: Ray direction, need not be normalised
        polygon: Polygon vertices

    Returns:
        Distance to the nearest hit with t > 0, or None when the direction is
        zero-length or the ray misses every edge
    """
    dx, dy = float(direction[0]), float(direction[1])
    length = math.hypot(dx, dy)
    if length == 0.0 or len(polygon) < 2:
        return None
    ndx, ndy = dx / length, dy / length

    p1 = _as_array(polygon)
    p2 = np.roll(p1, -1, axis=0)
    edge = p2 - p1
    wx = p1[:, 0] - origin[0]
    wy = p1[:, 1] - origin[1]

    denom = ndx * edge[:, 1] - ndy * edge[:, 0]
    usable = np.abs(denom) >= PARALLEL_EPSILON
    if not np.any(usable):
        return None

    safe_denom = np.where(usable, denom, 1.0)
    t = (wx * edge[:, 1] - wy * edge[:, 0]) / safe_denom
    s = (wx * ndy - wy * ndx) / safe_denom

    hits = usable & (t > 0) & (s >= 0) & (s <= 1)
    if not np.any(hits):
        return None
    return float(np.min(t[hits]))


def ray_polygon_intersection(
    origin: Sequence[float],
    direction: Sequence[float],
    polygon: Sequence[Sequence[float]],
) -> Optional[Point]:
    """Point where a ray from ``origin`` first leaves ``polygon``."""
    t = ray_boundary_distance(origin, direction, polygon)
    if t is None:
        return None
    length = math.hypot(direction[0], direction[1])
    return Point(
        origin[0] + t * direction[0] / length,
        origin[1] + t * direction[1] / length,
    )


def point_in_polygon(point: Sequence[float], polygon: Sequence[Sequence[float]]) -> bool:
    """Even-odd ray casting test."""
    if len(polygon) < 3:
        return False
    px, py = float(point[0]), float(point[1])
    pi = _as_array(polygon)
    pj = np.roll(pi, 1, axis=0)
    xi, yi = pi[:, 0], pi[:, 1]
    xj, yj = pj[:, 0], pj[:, 1]

    straddles = (yi > py) != (yj > py)
    dy = np.where(straddles, yj - yi, 1.0)
    crossing_x = (xj - xi) * (py - yi) / dy + xi
    crossings = straddles & (px < crossing_x)
    return bool(np.count_nonzero(crossings) % 2)


def segment_distances(
    point: Sequence[float], starts: np.ndarray, ends: np.ndarray
) -> np.ndarray:
    """Distance from ``point`` to each segment ``starts[i] -> ends[i]``."""
    p = np.asarray(point, dtype=np.float64)
    seg = ends - starts
    length_sq = np.einsum("ij,ij->i", seg, seg)
    rel = p - starts
    safe_length = np.where(length_sq > 0, length_sq, 1.0)
    t = np.clip(np.einsum("ij,ij->i", rel, seg) / safe_length, 0.0, 1.0)
    # Zero-length segments collapse to their start point
    t = np.where(length_sq > 0, t, 0.0)
    closest = starts + seg * t[:, None]
    return np.hypot(p[0] - closest[:, 0], p[1] - closest[:, 1])


def point_segment_distance(
    point: Sequence[float], a: Sequence[float], b: Sequence[float]
) -> float:
    """Distance from a point to a single segment."""
    starts = np.asarray([a], dtype=np.float64)
    ends = np.asarray([b], dtype=np.float64)
    return float(segment_distances(point, starts, ends)[0])


def polyline_segments(polylines: Iterable[Sequence[Sequence[float]]]) -> Tuple[np.ndarray, np.ndarray]:
    """Flatten polylines into parallel arrays of segment starts and ends."""
    starts = []
    ends = []
    for line in polylines:
        for a, b in zip(line[:-1], line[1:]):
            starts.append((a[0], a[1]))
            ends.append((b[0], b[1]))
    if not starts:
        empty = np.zeros((0, 2), dtype=np.float64)
        return empty, empty.copy()
    return np.asarray(starts, dtype=np.float64), np.asarray(ends, dtype=np.float64)


def polygon_area(polygon: Sequence[Sequence[float]]) -> float:
    """Signed shoelace area (positive for counter-clockwise in y-up axes)."""
    if len(polygon) < 3:
        return 0.0
    p = _as_array(polygon)
    q = np.roll(p, -1, axis=0)
    return float(np.sum(p[:, 0] * q[:, 1] - q[:, 0] * p[:, 1]) / 2.0)


def polygon_centroid(polygon: Sequence[Sequence[float]]) -> Point:
    """
    Area centroid of a polygon.

    Falls back to the vertex average when the area is (nearly) zero.
    """
    if len(polygon) == 0:
        return Point(0.0, 0.0)
    p = _as_array(polygon)
    q = np.roll(p, -1, axis=0)
    cross = p[:, 0] * q[:, 1] - q[:, 0] * p[:, 1]
    area = float(np.sum(cross)) / 2.0
    if abs(area) < 1e-4:
        mean = p.mean(axis=0)
        return Point(float(mean[0]), float(mean[1]))
    cx = float(np.sum((p[:, 0] + q[:, 0]) * cross)) / (6.0 * area)
    cy = float(np.sum((p[:, 1] + q[:, 1]) * cross)) / (6.0 * area)
    return Point(cx, cy)


def bounding_box(polygons: Iterable[Sequence[Sequence[float]]]) -> Optional[Tuple[float, float, float, float]]:
    """(min_x, min_y, max_x, max_y) over all points, or None if there are none."""
    points = [pt for polygon in polygons for pt in polygon]
    if not points:
        return None
    arr = _as_array(points)
    mins = arr.min(axis=0)
    maxs = arr.max(axis=0)
    return float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1])


def is_valid_polygon(polygon: Sequence[Sequence[float]]) -> bool:
    """At least three distinct finite vertices enclosing a non-zero area."""
    if len(polygon) < 3:
        return False
    arr = _as_array(polygon)
    if not np.all(np.isfinite(arr)):
        return False
    distinct = {(round(x, 6), round(y, 6)) for x, y in arr.tolist()}
    if len(distinct) < 3:
        return False
    return abs(polygon_area(polygon)) > AREA_EPSILON


def regular_polygon(center: Sequence[float], radius: float, sides: int) -> list:
    """Evenly spaced vertices on a circle."""
    sides = max(3, sides)
    return [
        Point(
            center[0] + math.cos(2 * math.pi * i / sides) * radius,
            center[1] + math.sin(2 * math.pi * i / sides) * radius,
        )
        for i in range(sides)
    ]
