"""
Referential checks on the input graph.

The engine assumes a well-formed hierarchy. Callers are expected to validate
before generating; ``validate_graph`` is what the pipeline runs so a bad graph
fails fast with a message naming the offending id instead of producing a
corrupted map.
"""

import math
from typing import Dict, Iterable, Optional, Sequence

import structlog

from .models import Link, MapOverrides, Node, NodeKind

logger = structlog.get_logger()

# Expected parent kind per child kind
PARENT_KINDS = {
    NodeKind.PROVINCE: (NodeKind.COUNTRY,),
    NodeKind.CITY: (NodeKind.PROVINCE,),
    NodeKind.TOWN: (NodeKind.PROVINCE,),
}


class GraphValidationError(ValueError):
    """Raised when the node/link graph is malformed."""

    def __init__(self, message: str, node_id: Optional[str] = None):
        super().__init__(message)
        self.node_id = node_id


def index_nodes(nodes: Iterable[Node]) -> Dict[str, Node]:
    """Map node ids to nodes, rejecting duplicates."""
    by_id: Dict[str, Node] = {}
    for node in nodes:
        if node.id in by_id:
            raise GraphValidationError(f"Duplicate node id '{node.id}'", node.id)
        by_id[node.id] = node
    return by_id


def validate_graph(
    nodes: Sequence[Node],
    links: Sequence[Link],
    overrides: Optional[MapOverrides] = None,
) -> Dict[str, Node]:
    """
    Check the graph and return nodes indexed by id.

    Args:
        nodes: All locations
        links: Road connections
        overrides: Optional editor overrides

    Returns:
        Dict of node id -> node

    Raises:
        GraphValidationError: on duplicate ids, dangling references, parents of
            the wrong kind or non-finite coordinates
    """
    by_id = index_nodes(nodes)

    for node in nodes:
        if not (math.isfinite(node.x) and math.isfinite(node.y)):
            raise GraphValidationError(
                f"Node '{node.id}' has a non-finite position ({node.x}, {node.y})", node.id
            )
        if node.parent_id is None:
            continue
        parent = by_id.get(node.parent_id)
        if parent is None:
            raise GraphValidationError(
                f"Node '{node.id}' references missing parent '{node.parent_id}'", node.id
            )
        expected = PARENT_KINDS.get(node.kind)
        if expected is None:
            raise GraphValidationError(
                f"Country '{node.id}' cannot have a parent ('{node.parent_id}')", node.id
            )
        if parent.kind not in expected:
            raise GraphValidationError(
                f"{node.kind.value.capitalize()} '{node.id}' has parent '{parent.id}' "
                f"of kind {parent.kind.value}, expected {expected[0].value}",
                node.id,
            )

    for link in links:
        for endpoint in (link.source, link.target):
            if endpoint not in by_id:
                raise GraphValidationError(
                    f"Link {link.source} -> {link.target} references missing node '{endpoint}'",
                    endpoint,
                )

    if overrides is not None:
        for node_id, position in overrides.positions.items():
            if node_id not in by_id:
                raise GraphValidationError(
                    f"Position override for unknown node '{node_id}'", node_id
                )
            if not (math.isfinite(position[0]) and math.isfinite(position[1])):
                raise GraphValidationError(
                    f"Position override for '{node_id}' is not finite", node_id
                )
        for road in overrides.roads:
            for endpoint in (road.source, road.target):
                if endpoint is not None and endpoint not in by_id:
                    raise GraphValidationError(
                        f"Manual road '{road.id}' references missing node '{endpoint}'",
                        endpoint,
                    )

    logger.debug("Graph validated", nodes=len(nodes), links=len(links))
    return by_id
