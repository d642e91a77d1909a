"""
SVG path descriptions for region borders and roads.

Border edges are a deterministic mix of straight segments (``L``) and
quadratic curves (``Q``), which reads like a hand-drawn political map.
Roads are smoothed with quadratic curves through their waypoints.
"""

from typing import Sequence

from .models import Point
from .seeded_random import seeded_random


def _fmt(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".") if value != 0 else "0"


def _pt(point: Sequence[float]) -> str:
    return f"{_fmt(point[0])} {_fmt(point[1])}"


def points_to_path(points: Sequence[Point], seed: int = 0, straight_ratio: float = 0.4) -> str:
    """
    Closed border path through ``points``.

    Args:
        points: Polygon vertices
        seed: Region seed, decides which edges are straight
        straight_ratio: Share of edges drawn as straight lines (0-1)

    Returns:
        SVG path data, or an empty string for an empty polygon
    """
    if not points:
        return ""

    count = len(points)
    parts = [f"M {_pt(points[0])}"]
    for i in range(1, count + 1):
        current = points[i % count]
        following = points[(i + 1) % count]
        if i == count or seeded_random(seed + i * 31) < straight_ratio:
            # The closing edge runs straight back onto the starting vertex
            parts.append(f"L {_pt(current)}")
        else:
            mid = ((current[0] + following[0]) / 2, (current[1] + following[1]) / 2)
            parts.append(f"Q {_pt(current)} {_pt(mid)}")
    parts.append("Z")
    return " ".join(parts)


def waypoints_to_path(points: Sequence[Point]) -> str:
    """Open, smoothed road path through ``points`` (first and last are exact)."""
    if not points:
        return ""
    if len(points) == 1:
        return f"M {_pt(points[0])}"
    if len(points) == 2:
        return f"M {_pt(points[0])} L {_pt(points[1])}"

    parts = [f"M {_pt(points[0])}"]
    last = len(points) - 1
    for i in range(1, last):
        current = points[i]
        following = points[i + 1]
        if i == last - 1:
            parts.append(f"Q {_pt(current)} {_pt(following)}")
        else:
            mid = ((current[0] + following[0]) / 2, (current[1] + following[1]) / 2)
            parts.append(f"Q {_pt(current)} {_pt(mid)}")
    return " ".join(parts)
