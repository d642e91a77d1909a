"""
Terrain decoration scattering.

A fixed grid is laid over the land bounding box. Every cell gets one jittered
sample point whose seed comes from the cell's integer coordinates, so the
scatter only changes when the land or the roads change, not when unrelated
render state does. Samples in the sea or on top of a location are dropped;
the rest are decorated according to how far they are from the nearest road.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import structlog

from .geometry import bounding_box, point_in_polygon, polyline_segments, segment_distances
from .models import Point, TerrainFeature, TerrainKind
from .seeded_random import seeded_random

logger = structlog.get_logger()


@dataclass
class TerrainOptions:
    """Terrain scatter options."""

    cell_size: float = 50.0  # Grid spacing in canvas units
    jitter: float = 0.8  # Sample jitter as a share of the cell size
    node_clearance: float = 45.0  # No decoration this close to a location
    near_road: float = 25.0  # Inside this distance only sparse small trees
    medium_road: float = 60.0  # Inside this distance trees and rocks

    # Cumulative roll thresholds by road distance band
    near_thresholds: Tuple[Tuple[float, TerrainKind], ...] = ((0.3, TerrainKind.TREE),)
    medium_thresholds: Tuple[Tuple[float, TerrainKind], ...] = (
        (0.4, TerrainKind.TREE),
        (0.5, TerrainKind.ROCK),
    )
    # Above the last threshold the cell stays empty (38% of far cells)
    far_thresholds: Tuple[Tuple[float, TerrainKind], ...] = (
        (0.35, TerrainKind.FOREST),
        (0.45, TerrainKind.TREE),
        (0.52, TerrainKind.MOUNTAIN),
        (0.56, TerrainKind.LAKE),
        (0.62, TerrainKind.ROCK),
    )


# (base, spread) size ranges per band; a feature's size is base + roll * spread
NEAR_SIZES = {TerrainKind.TREE: (6.0, 4.0)}
MEDIUM_SIZES = {TerrainKind.TREE: (8.0, 6.0), TerrainKind.ROCK: (4.0, 4.0)}
FAR_SIZES = {
    TerrainKind.FOREST: (15.0, 15.0),
    TerrainKind.TREE: (10.0, 8.0),
    TerrainKind.MOUNTAIN: (20.0, 25.0),
    TerrainKind.LAKE: (15.0, 20.0),
    TerrainKind.ROCK: (5.0, 6.0),
}

TERRAIN_SEED_SCALE = 1000
TERRAIN_SEED_OFFSET = 42
CELL_X_STRIDE = 1009
CELL_Y_STRIDE = 17


def pick_kind(
    roll: float, thresholds: Sequence[Tuple[float, TerrainKind]]
) -> Optional[TerrainKind]:
    """First kind whose cumulative threshold exceeds ``roll``, or None."""
    for threshold, kind in thresholds:
        if roll < threshold:
            return kind
    return None


class TerrainScatterer:
    """Places seeded decorations over land, away from locations and roads."""

    def __init__(self, options: Optional[TerrainOptions] = None):
        self.options = options or TerrainOptions()

    def cell_seed(self, seed: int, cell_x: int, cell_y: int) -> int:
        terrain_seed = seed * TERRAIN_SEED_SCALE + TERRAIN_SEED_OFFSET
        return terrain_seed + cell_x * CELL_X_STRIDE + cell_y * CELL_Y_STRIDE

    def scatter(
        self,
        country_boundaries: Sequence[Sequence[Point]],
        roads: Sequence[Sequence[Point]],
        node_positions: Sequence[Point],
        seed: int,
    ) -> List[TerrainFeature]:
        """
        Scatter decorations over the land.

        Args:
            country_boundaries: Land polygons
            roads: Road polylines (waypoint lists)
            node_positions: Positions of every location on the map
            seed: Global map seed

        Returns:
            Terrain features in grid order (column by column)
        """
        box = bounding_box(country_boundaries)
        if box is None:
            return []
        min_x, min_y, max_x, max_y = box

        opts = self.options
        size = opts.cell_size
        starts, ends = polyline_segments(roads)
        nodes = np.asarray(node_positions, dtype=np.float64).reshape(-1, 2)

        features: List[TerrainFeature] = []
        # Cells are aligned to multiples of the cell size, independent of the box
        first_x = int(math.floor(min_x / size))
        last_x = int(math.ceil(max_x / size))
        first_y = int(math.floor(min_y / size))
        last_y = int(math.ceil(max_y / size))

        for cell_x in range(first_x, last_x + 1):
            for cell_y in range(first_y, last_y + 1):
                cell_seed = self.cell_seed(seed, cell_x, cell_y)
                px = cell_x * size + (seeded_random(cell_seed) - 0.5) * size * opts.jitter
                py = cell_y * size + (seeded_random(cell_seed + 1) - 0.5) * size * opts.jitter

                if not any(point_in_polygon((px, py), shape) for shape in country_boundaries):
                    continue
                if len(nodes) and np.min(np.hypot(nodes[:, 0] - px, nodes[:, 1] - py)) < opts.node_clearance:
                    continue

                road_distance = (
                    float(np.min(segment_distances((px, py), starts, ends)))
                    if len(starts)
                    else math.inf
                )
                feature = self._decorate(Point(px, py), road_distance, cell_seed)
                if feature is not None:
                    features.append(feature)

        logger.info("Scattered terrain", features=len(features))
        return features

    def _decorate(self, position: Point, road_distance: float, cell_seed: int) -> Optional[TerrainFeature]:
        opts = self.options
        if road_distance < opts.near_road:
            thresholds, sizes = opts.near_thresholds, NEAR_SIZES
        elif road_distance < opts.medium_road:
            thresholds, sizes = opts.medium_thresholds, MEDIUM_SIZES
        else:
            thresholds, sizes = opts.far_thresholds, FAR_SIZES

        kind = pick_kind(seeded_random(cell_seed + 2), thresholds)
        if kind is None:
            return None

        base, spread = sizes[kind]
        return TerrainFeature(
            kind=kind,
            position=position,
            size=base + seeded_random(cell_seed + 3) * spread,
            variant_seed=cell_seed,
            variant=min(2, int(seeded_random(cell_seed + 4) * 3)),
        )
