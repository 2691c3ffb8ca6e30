"""Ring-based layouts: radial around a chosen node, and mind-map."""

import logging
import math
from collections.abc import Iterable, Sequence

import networkx as nx

from meshflow.layout.config import LayoutConfig
from meshflow.models import Edge, Node, Position

logger = logging.getLogger(__name__)


def _ring(
    node_ids: Sequence[str],
    center: tuple[float, float],
    radius: float,
) -> dict[str, Position]:
    """Place node_ids evenly on a circle, first one at angle 0."""
    if not node_ids:
        return {}
    cx, cy = center
    step = 2 * math.pi / len(node_ids)
    return {
        node_id: Position(cx + radius * math.cos(i * step), cy + radius * math.sin(i * step))
        for i, node_id in enumerate(node_ids)
    }


def radial_layout(
    nodes: Iterable[Node],
    center_id: str | None = None,
    config: LayoutConfig | None = None,
) -> dict[str, Position]:
    """
    Place every node on a circle around a center node.

    The center keeps its current position (canvas center if it has none);
    the others sit at ``angle = index * 2*pi / n`` on ``radial_radius``.

    Args:
        nodes: Nodes to place
        center_id: Node to keep in place (defaults to the first node)
        config: Layout parameters

    Raises:
        ValueError: If center_id is not among the nodes
    """
    config = config or LayoutConfig.from_settings()
    nodes = list(nodes)
    if not nodes:
        return {}

    by_id = {node.id: node for node in nodes}
    center_id = center_id or nodes[0].id
    center_node = by_id.get(center_id)
    if center_node is None:
        raise ValueError(f"Center node {center_id} is not part of the layout")

    center = (
        (center_node.x, center_node.y) if center_node.has_position else config.center
    )
    others = [node.id for node in nodes if node.id != center_id]

    positions = {center_id: Position(*center)}
    positions.update(_ring(others, center, config.radial_radius))
    return positions


def mind_map_layout(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    config: LayoutConfig | None = None,
) -> dict[str, Position]:
    """
    Most connected node at the canvas center, its neighbours on an inner
    ring, every other node on an outer ring (1.8x radius).
    """
    config = config or LayoutConfig.from_settings()
    nodes = list(nodes)
    if not nodes:
        return {}

    graph = nx.Graph()
    graph.add_nodes_from(node.id for node in nodes)
    graph.add_edges_from(
        (e.source, e.target) for e in edges
        if e.source in graph and e.target in graph and e.source != e.target
    )

    # max() keeps the first node on ties
    hub = max((node.id for node in nodes), key=graph.degree)
    neighbours = set(graph.neighbors(hub))
    inner = [node.id for node in nodes if node.id in neighbours]
    outer = [node.id for node in nodes if node.id != hub and node.id not in neighbours]

    positions = {hub: Position(*config.center)}
    positions.update(_ring(inner, config.center, config.radial_radius))
    positions.update(_ring(outer, config.center, config.radial_radius * 1.8))
    logger.debug(f"Mind map around {hub}: {len(inner)} inner, {len(outer)} outer")
    return positions
