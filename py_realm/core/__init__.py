"""
Core layout engine functionality.
"""

from .boundaries import BoundaryGenerator
from .coastal import Coastline, classify, compose_description, reposition
from .labels import LabelDeclutterer, LabelOptions, build_label_boxes
from .models import (
    Decoration,
    LabelBox,
    Link,
    ManualRoad,
    MapLayout,
    MapOverrides,
    Node,
    NodeKind,
    Point,
    Region,
    RoadPath,
    TerrainFeature,
    TerrainKind,
)
from .pipeline import MapGenerator, generate_layout
from .roads import generate_road_path
from .seeded_random import hash_string, seeded_random
from .terrain import TerrainOptions, TerrainScatterer
from .validation import GraphValidationError, validate_graph

__all__ = ['BoundaryGenerator', 'Coastline', 'classify', 'compose_description', 'reposition',
           'LabelDeclutterer', 'LabelOptions', 'build_label_boxes',
           'Decoration', 'LabelBox', 'Link', 'ManualRoad', 'MapLayout', 'MapOverrides',
           'Node', 'NodeKind', 'Point', 'Region', 'RoadPath', 'TerrainFeature', 'TerrainKind',
           'MapGenerator', 'generate_layout', 'generate_road_path', 'hash_string', 'seeded_random',
           'TerrainOptions', 'TerrainScatterer', 'GraphValidationError', 'validate_graph']
