"""
Full layout pipeline.

Process:
1. validate_graph() - Reject malformed input before any geometry is built
2. Country outlines - Sized to enclose their provinces
3. Coastal repositioning - Coastal settlements snap onto their country border
4. Province outlines - Need the parent outline and final settlement positions
5. Roads - One meandering path per link, plus manual roads
6. Terrain - Seeded scatter over land, thinned near roads
7. Labels - Settlement label offsets

Steps 5-7 are independent of each other. Position precedence everywhere is:
manual override, then coastal repositioning, then the node's own position.
"""

from typing import Dict, List, Optional, Sequence

import structlog

from ..config.settings import settings
from ..config.shape_params import DEFAULT_SHAPE_PARAMETERS, ShapeParameters
from .boundaries import BoundaryGenerator
from .coastal import is_coastal, reposition
from .geometry import polygon_centroid
from .labels import LabelDeclutterer, LabelOptions, build_label_boxes
from .layout_analysis import analyze_layout
from .models import (
    Link,
    MapLayout,
    MapOverrides,
    Node,
    NodeKind,
    Point,
    Region,
    RoadPath,
)
from .roads import generate_road_path, road_seed
from .svg_paths import points_to_path, waypoints_to_path
from .terrain import TerrainOptions, TerrainScatterer
from .validation import validate_graph

logger = structlog.get_logger()


class MapGenerator:
    """Runs every layout stage for one parameter set."""

    def __init__(
        self,
        shape_params: Optional[ShapeParameters] = None,
        terrain_options: Optional[TerrainOptions] = None,
        label_options: Optional[LabelOptions] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
        check_quality: Optional[bool] = None,
    ) -> None:
        """
        Initialize the generator.

        Args:
            shape_params: Outline and road tuning, defaults to the reference look
            terrain_options: Terrain scatter options
            label_options: Label sizing and relaxation options
            width: Logical canvas width, defaults to settings
            height: Logical canvas height, defaults to settings
            check_quality: Run the layout report after generating and log problems
        """
        self.shape_params = shape_params or DEFAULT_SHAPE_PARAMETERS
        self.terrain = TerrainScatterer(terrain_options)
        self.label_options = label_options or LabelOptions()
        self.labels = LabelDeclutterer(self.label_options)
        self.width = width if width is not None else settings.canvas_width
        self.height = height if height is not None else settings.canvas_height
        self.check_quality = (
            check_quality if check_quality is not None else settings.check_layout_quality
        )

    def generate(
        self,
        nodes: Sequence[Node],
        links: Sequence[Link] = (),
        seed: int = 0,
        overrides: Optional[MapOverrides] = None,
    ) -> MapLayout:
        """
        Generate the complete layout.

        Args:
            nodes: Every location
            links: Roads between locations
            seed: Global seed; the same inputs and seed give the same layout
            overrides: Editor state (manual positions, decorations, roads)

        Returns:
            MapLayout with outlines, positions, roads, terrain and label offsets

        Raises:
            GraphValidationError: if the graph is malformed
        """
        overrides = overrides or MapOverrides()
        logger.info(
            "Starting map layout generation", nodes=len(nodes), links=len(links), seed=seed
        )
        nodes_by_id = validate_graph(nodes, links, overrides)
        manual = {node_id: Point(*pos) for node_id, pos in overrides.positions.items()}
        outlines = BoundaryGenerator(self.shape_params, seed)

        countries = [n for n in nodes if n.kind == NodeKind.COUNTRY]
        provinces = [n for n in nodes if n.kind == NodeKind.PROVINCE]
        settlements = [n for n in nodes if n.kind.is_settlement]

        # Step 1: Country outlines
        country_boundaries: Dict[str, List[Point]] = {}
        country_regions = []
        for country in countries:
            boundary = outlines.generate_country(country, nodes, manual)
            country_boundaries[country.id] = boundary
            child_ids = [p.id for p in provinces if p.parent_id == country.id]
            country_regions.append(self._region(country, boundary, child_ids, outlines))

        # Step 2: Coastal settlements onto the country borders
        coastal = [n for n in settlements if is_coastal(n) and n.id not in manual]
        repositioned = reposition(coastal, country_boundaries, nodes_by_id, manual)
        positions = self.resolve_positions(nodes, repositioned, manual)

        # Step 3: Province outlines
        province_regions = []
        for province in provinces:
            siblings = [
                p for p in provinces if p.id != province.id and p.parent_id == province.parent_id
            ]
            parent_boundary = (
                country_boundaries.get(province.parent_id) if province.parent_id else None
            )
            boundary = outlines.generate_province(
                province, nodes, siblings, parent_boundary, positions
            )
            child_ids = [s.id for s in settlements if s.parent_id == province.id]
            province_regions.append(self._region(province, boundary, child_ids, outlines))
        logger.info(
            "Generated region outlines",
            countries=len(country_regions),
            provinces=len(province_regions),
        )

        # Step 4: Roads
        roads = self.generate_roads(links, overrides, positions, seed)

        # Step 5: Terrain
        if overrides.disable_procedural_terrain:
            terrain = []
        else:
            terrain = self.terrain.scatter(
                list(country_boundaries.values()),
                [road.points for road in roads],
                list(positions.values()),
                seed,
            )

        # Step 6: Labels
        boxes = build_label_boxes(settlements, positions, self.label_options)
        label_offsets = self.labels.resolve(boxes) if len(boxes) > 1 else {}

        layout = MapLayout(
            seed=seed,
            width=self.width,
            height=self.height,
            countries=country_regions,
            provinces=province_regions,
            repositioned=repositioned,
            positions=positions,
            roads=roads,
            terrain=terrain,
            decorations=list(overrides.decorations),
            label_offsets=label_offsets,
        )

        if self.check_quality:
            analyze_layout(layout, nodes)

        logger.info(
            "Map layout generation complete",
            roads=len(roads),
            terrain=len(terrain),
            label_offsets=len(label_offsets),
        )
        return layout

    @staticmethod
    def resolve_positions(
        nodes: Sequence[Node],
        repositioned: Dict[str, Point],
        manual: Dict[str, Point],
    ) -> Dict[str, Point]:
        """Final position of every node (manual > repositioned > own)."""
        positions: Dict[str, Point] = {}
        for node in nodes:
            if node.id in manual:
                positions[node.id] = manual[node.id]
            elif node.id in repositioned:
                positions[node.id] = repositioned[node.id]
            else:
                positions[node.id] = node.position
        return positions

    def generate_roads(
        self,
        links: Sequence[Link],
        overrides: MapOverrides,
        positions: Dict[str, Point],
        seed: int,
    ) -> List[RoadPath]:
        """One procedural road per link, followed by the manual roads."""
        params = self.shape_params
        roads = []
        for link in links:
            component = road_seed(link.source, link.target, seed)
            points = generate_road_path(
                positions[link.source],
                positions[link.target],
                component,
                params.road_curviness,
                params.road_segments,
            )
            roads.append(
                RoadPath(
                    source=link.source,
                    target=link.target,
                    points=points,
                    seed=component,
                    path=waypoints_to_path(points),
                )
            )

        for manual_road in overrides.roads:
            points = [Point(*p) for p in manual_road.points]
            if not points and manual_road.source and manual_road.target:
                points = [positions[manual_road.source], positions[manual_road.target]]
            if len(points) < 2:
                logger.debug("Skipping manual road without a path", road_id=manual_road.id)
                continue
            roads.append(
                RoadPath(
                    source=manual_road.source or "",
                    target=manual_road.target or "",
                    points=points,
                    seed=0,
                    path=waypoints_to_path(points),
                    style=manual_road.style,
                )
            )
        return roads

    def _region(
        self,
        node: Node,
        boundary: List[Point],
        child_ids: List[str],
        outlines: BoundaryGenerator,
    ) -> Region:
        return Region(
            node_id=node.id,
            kind=node.kind,
            boundary=boundary,
            child_ids=child_ids,
            label_anchor=polygon_centroid(boundary),
            path=points_to_path(
                boundary, outlines.region_seed(node.id), self.shape_params.path_straight_ratio
            ),
        )


def generate_layout(
    nodes: Sequence[Node],
    links: Sequence[Link] = (),
    seed: int = 0,
    shape_params: Optional[ShapeParameters] = None,
    overrides: Optional[MapOverrides] = None,
) -> MapLayout:
    """Convenience wrapper around ``MapGenerator(shape_params).generate(...)``."""
    return MapGenerator(shape_params).generate(nodes, links, seed, overrides)
