"""
Coastal classification and repositioning of settlements.

Settlements carry no terrain information, only free text. A fixed keyword
table decides whether a settlement is coastal; coastal settlements are then
moved out to their country's generated border so harbours actually sit on the
coast.

Classification is a plain keyword heuristic. Inland keywords are checked
first and always win, so a description mentioning both ("a fishing village")
is Inland by construction.
"""

import math
import re
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence

import structlog

from .geometry import ray_polygon_intersection
from .models import Node, Point

logger = structlog.get_logger()

INLAND_KEYWORDS = (
    "inland", "interior", "landlocked", "mountain", "mountainous", "highland",
    "hilltop", "hill town", "valley", "forest", "woodland", "woods",
    "plains", "prairie", "grassland", "meadow", "pasture",
    "desert", "mesa", "canyon", "cave", "underground", "subterranean",
    "central", "heartland", "midland", "upland", "farmland", "agricultural",
    "rural", "countryside", "village", "hamlet", "farming", "ranching",
    "trade hub", "trading post", "crossroads", "market town", "merchant",
)

COASTAL_KEYWORDS = (
    "port city", "port town", "seaport", "harbor", "harbour",
    "coastal", "coast", "seaside", "waterfront", "seafront",
    "bay", "dock", "wharf", "marina", "beach", "shoreline",
    "nautical", "maritime", "naval", "naval base",
    "fishing village", "fishing port", "fishing harbor",
    "ocean", "oceanside", "lakeside", "lakefront",
    "estuary", "peninsula", "island", "archipelago", "reef",
    "lighthouse", "pier", "boardwalk", "cove", "inlet",
)

_COASTAL_WORD_PATTERNS = [
    re.compile(rf"\b{re.escape(keyword)}\b")
    for keyword in COASTAL_KEYWORDS
    if " " not in keyword
]
_COASTAL_PHRASES = [keyword for keyword in COASTAL_KEYWORDS if " " in keyword]

# Settlements sit this far along the ray from the country center to its border
COASTAL_INSET = 0.90
# Total arc that settlements of one province are spread across
COASTAL_ARC = math.radians(40.0)


class Coastline(str, Enum):
    """Result of coastal classification."""

    COASTAL = "coastal"
    INLAND = "inland"


def compose_description(
    summary: Optional[str] = None,
    overview: Optional[str] = None,
    tags: Optional[str] = None,
) -> str:
    """Join the free-text fields of a location the way classification expects."""
    return f"{summary or ''} {overview or ''} {tags or ''}"


def classify(text: Optional[str]) -> Coastline:
    """
    Classify a location description as coastal or inland.

    Args:
        text: Free text (summary, overview and tags)

    Returns:
        Coastline.INLAND when any inland keyword appears, Coastline.COASTAL when
        a coastal keyword appears, Coastline.INLAND otherwise
    """
    lowered = (text or "").lower()
    if not lowered.strip():
        return Coastline.INLAND

    if any(keyword in lowered for keyword in INLAND_KEYWORDS):
        return Coastline.INLAND

    if any(phrase in lowered for phrase in _COASTAL_PHRASES):
        return Coastline.COASTAL
    if any(pattern.search(lowered) for pattern in _COASTAL_WORD_PATTERNS):
        return Coastline.COASTAL
    return Coastline.INLAND


def is_coastal(node: Node) -> bool:
    return node.kind.is_settlement and classify(node.description_text) == Coastline.COASTAL


def arc_offsets(count: int, arc: float = COASTAL_ARC) -> List[float]:
    """Angular offsets spreading ``count`` settlements evenly across ``arc``."""
    if count <= 1:
        return [0.0] * count
    return [(index / (count - 1) - 0.5) * arc for index in range(count)]


def reposition(
    coastal_settlements: Sequence[Node],
    country_boundaries: Mapping[str, Sequence[Point]],
    nodes_by_id: Mapping[str, Node],
    positions: Optional[Mapping[str, Point]] = None,
) -> Dict[str, Point]:
    """
    Snap coastal settlements onto their country's border.

    Settlements are grouped by province. Each group is fanned across an arc
    around the direction from the country center toward the province and
    placed at ``COASTAL_INSET`` of the way to the border along that ray.

    Args:
        coastal_settlements: Settlements already classified as coastal
        country_boundaries: Country node id -> generated outline
        nodes_by_id: Every node, to resolve provinces and countries
        positions: Effective positions (manual overrides); nodes fall back to
            their own coordinates

    Returns:
        Sparse map of settlement id -> new position. Settlements whose country
        outline is unknown, or whose ray misses it, are left out.
    """
    positions = positions or {}

    def position_of(node: Node) -> Point:
        if node.id in positions:
            return Point(*positions[node.id])
        return node.position

    by_province: Dict[str, List[Node]] = {}
    for settlement in coastal_settlements:
        if settlement.parent_id is None:
            continue
        by_province.setdefault(settlement.parent_id, []).append(settlement)

    repositioned: Dict[str, Point] = {}
    for province_id, settlements in by_province.items():
        province = nodes_by_id.get(province_id)
        if province is None or province.parent_id is None:
            continue
        boundary = country_boundaries.get(province.parent_id)
        country = nodes_by_id.get(province.parent_id)
        if not boundary or country is None:
            continue

        country_center = position_of(country)
        province_position = position_of(province)
        base_angle = math.atan2(
            province_position.y - country_center.y,
            province_position.x - country_center.x,
        )

        for settlement, offset in zip(settlements, arc_offsets(len(settlements))):
            angle = base_angle + offset
            hit = ray_polygon_intersection(country_center, (math.cos(angle), math.sin(angle)), boundary)
            if hit is None:
                logger.debug("Coastal ray missed country border", node_id=settlement.id)
                continue
            repositioned[settlement.id] = Point(
                country_center.x + (hit.x - country_center.x) * COASTAL_INSET,
                country_center.y + (hit.y - country_center.y) * COASTAL_INSET,
            )

    logger.info("Repositioned coastal settlements", count=len(repositioned))
    return repositioned
