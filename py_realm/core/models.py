"""
Data structures crossing the engine boundary.

Inputs (nodes, links, overrides) are supplied by the surrounding application;
outputs (regions, roads, terrain, label offsets) are recomputed on every run
and never persisted by the engine.
"""

from enum import Enum
from typing import Dict, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field


class Point(NamedTuple):
    """A position on the logical canvas."""
    x: float
    y: float


class NodeKind(str, Enum):
    """Kinds of location in the political hierarchy."""

    COUNTRY = "country"
    PROVINCE = "province"
    CITY = "city"
    TOWN = "town"

    @property
    def is_region(self) -> bool:
        return self in (NodeKind.COUNTRY, NodeKind.PROVINCE)

    @property
    def is_settlement(self) -> bool:
        return self in (NodeKind.CITY, NodeKind.TOWN)


class Node(BaseModel):
    """A named location with a logical position."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique node identifier")
    kind: NodeKind = Field(description="Country, province, city or town")
    x: float = Field(description="X coordinate")
    y: float = Field(description="Y coordinate")
    parent_id: Optional[str] = Field(
        default=None, description="Parent country (provinces) or province (settlements)"
    )
    name: str = Field(default="", description="Display name, used to size labels")
    description_text: str = Field(
        default="", description="Summary, overview and tags, used for coastal classification"
    )

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)


class Link(BaseModel):
    """An unordered road connection between two nodes."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(description="Id of one endpoint")
    target: str = Field(description="Id of the other endpoint")


class Region(BaseModel):
    """Generated outline for a country or province."""

    node_id: str
    kind: NodeKind
    boundary: List[Point] = Field(description="Closed polygon, first point not repeated")
    child_ids: List[str] = Field(default_factory=list)
    label_anchor: Point = Field(description="Polygon centroid, where the region label goes")
    path: str = Field(default="", description="SVG path description of the boundary")


class RoadStyle(str, Enum):
    """Road drawing styles."""

    MAIN = "main"
    PATH = "path"
    TRAIL = "trail"


class RoadPath(BaseModel):
    """Waypoints of one road from ``source`` to ``target``."""

    source: str
    target: str
    points: List[Point]
    seed: int = Field(description="Seed component the waypoints were drawn from")
    path: str = Field(default="", description="Smoothed SVG path description")
    style: RoadStyle = RoadStyle.MAIN


class TerrainKind(str, Enum):
    """Procedural terrain decoration kinds."""

    TREE = "tree"
    ROCK = "rock"
    MOUNTAIN = "mountain"
    LAKE = "lake"
    FOREST = "forest"


class TerrainFeature(BaseModel):
    """One scattered decoration."""

    kind: TerrainKind
    position: Point
    size: float
    variant_seed: int = Field(description="Seed for drawing-level variation")
    variant: int = Field(default=0, description="Visual variant 0-2")


class LabelBox(BaseModel):
    """Axis-aligned label rectangle in canvas space."""

    owner_id: str
    x: float
    y: float
    width: float = Field(ge=0.0)
    height: float = Field(ge=0.0)
    offset: Point = Point(0.0, 0.0)


class Decoration(BaseModel):
    """Decoration placed by hand in the map editor."""

    id: str
    kind: str = Field(description="Sprite kind, e.g. tree, treePine, rock, flowers")
    x: float
    y: float
    size: float = 10.0
    seed: int = 0


class ManualRoad(BaseModel):
    """Road drawn by hand in the map editor."""

    id: str
    source: Optional[str] = None
    target: Optional[str] = None
    points: List[Point] = Field(default_factory=list)
    style: RoadStyle = RoadStyle.MAIN


class MapOverrides(BaseModel):
    """Editor state fed back into the engine as extra input."""

    positions: Dict[str, Point] = Field(
        default_factory=dict, description="Manual positions, these win over coastal snapping"
    )
    decorations: List[Decoration] = Field(default_factory=list)
    roads: List[ManualRoad] = Field(default_factory=list)
    disable_procedural_terrain: bool = False


class MapLayout(BaseModel):
    """Everything one generation run produces."""

    seed: int
    width: float
    height: float
    countries: List[Region] = Field(default_factory=list)
    provinces: List[Region] = Field(default_factory=list)
    repositioned: Dict[str, Point] = Field(default_factory=dict)
    positions: Dict[str, Point] = Field(
        default_factory=dict, description="Final position of every node"
    )
    roads: List[RoadPath] = Field(default_factory=list)
    terrain: List[TerrainFeature] = Field(default_factory=list)
    decorations: List[Decoration] = Field(default_factory=list)
    label_offsets: Dict[str, Point] = Field(default_factory=dict)

    def region(self, node_id: str) -> Optional[Region]:
        """Look up a country or province outline by node id."""
        for region in self.countries + self.provinces:
            if region.node_id == node_id:
                return region
        return None
