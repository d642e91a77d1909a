"""
Layout quality report.

Measures how well a generated layout honours the nesting rules: sibling
provinces should not overlap, provinces should stay inside their country and
settlements inside their province. Used for diagnostics and by the API's
report endpoint; generation itself never depends on it.
"""

from typing import Dict, List, Optional, Sequence

import structlog
from pydantic import BaseModel, Field
from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon

from .models import MapLayout, Node, Region

logger = structlog.get_logger()

# Settlements this close to their province border count as inside
CONTAINMENT_TOLERANCE = 2.0


class SiblingOverlap(BaseModel):
    """Overlap between two provinces of the same country."""

    first_id: str
    second_id: str
    area: float


class ProvinceSpill(BaseModel):
    """Part of a province lying outside its country."""

    province_id: str
    country_id: str
    area: float
    fraction: float = Field(description="Spill area as a share of the province area")


class LayoutReport(BaseModel):
    """Diagnostics for one layout."""

    invalid_regions: List[str] = Field(default_factory=list)
    sibling_overlaps: List[SiblingOverlap] = Field(default_factory=list)
    province_spills: List[ProvinceSpill] = Field(default_factory=list)
    stray_settlements: List[str] = Field(
        default_factory=list, description="Settlements outside their province outline"
    )

    @property
    def clean(self) -> bool:
        return not (
            self.invalid_regions
            or self.sibling_overlaps
            or self.stray_settlements
            or any(spill.fraction > 0.05 for spill in self.province_spills)
        )


def region_polygon(region: Region) -> Polygon:
    return Polygon([(p[0], p[1]) for p in region.boundary])


def analyze_layout(
    layout: MapLayout, nodes: Sequence[Node], overlap_tolerance: float = 1.0
) -> LayoutReport:
    """
    Check nesting and overlap rules of a layout.

    Args:
        layout: Generated layout
        nodes: The nodes the layout was generated from
        overlap_tolerance: Overlap areas at or below this are ignored

    Returns:
        LayoutReport listing every violation found
    """
    report = LayoutReport()
    nodes_by_id = {node.id: node for node in nodes}

    polygons: Dict[str, Polygon] = {}
    for region in layout.countries + layout.provinces:
        polygon = region_polygon(region)
        if not polygon.is_valid or polygon.area <= 0:
            report.invalid_regions.append(region.node_id)
        polygons[region.node_id] = polygon

    by_country: Dict[Optional[str], List[Region]] = {}
    for region in layout.provinces:
        parent_id = nodes_by_id[region.node_id].parent_id if region.node_id in nodes_by_id else None
        by_country.setdefault(parent_id, []).append(region)

    for country_id, provinces in by_country.items():
        for i, first in enumerate(provinces):
            for second in provinces[i + 1:]:
                area = _safe_area(polygons[first.node_id], polygons[second.node_id], "intersection")
                if area > overlap_tolerance:
                    report.sibling_overlaps.append(
                        SiblingOverlap(first_id=first.node_id, second_id=second.node_id, area=area)
                    )

            country = polygons.get(country_id) if country_id is not None else None
            if country is None:
                continue
            province = polygons[first.node_id]
            spill = _safe_area(province, country, "difference")
            if spill > overlap_tolerance:
                report.province_spills.append(
                    ProvinceSpill(
                        province_id=first.node_id,
                        country_id=country_id,
                        area=spill,
                        fraction=spill / province.area if province.area > 0 else 1.0,
                    )
                )

    for node in nodes:
        if not node.kind.is_settlement or node.parent_id not in polygons:
            continue
        position = layout.positions.get(node.id, node.position)
        outline = polygons[node.parent_id]
        if outline.distance(ShapelyPoint(position[0], position[1])) > CONTAINMENT_TOLERANCE:
            report.stray_settlements.append(node.id)

    if not report.clean:
        logger.warning(
            "Layout has nesting problems",
            invalid=len(report.invalid_regions),
            overlaps=len(report.sibling_overlaps),
            spills=len(report.province_spills),
            strays=len(report.stray_settlements),
        )
    return report


def _safe_area(a: Polygon, b: Polygon, operation: str) -> float:
    if not (a.is_valid and b.is_valid):
        return 0.0
    return float(getattr(a, operation)(b).area)
