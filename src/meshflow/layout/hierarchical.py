"""Tree and row layouts."""

import logging
from collections import defaultdict
from collections.abc import Iterable

import networkx as nx

from meshflow.layout.config import LayoutConfig
from meshflow.models import Edge, Node, Position

logger = logging.getLogger(__name__)


def hierarchical_layout(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    root_id: str | None = None,
    config: LayoutConfig | None = None,
) -> dict[str, Position]:
    """
    Breadth-first tree layout from a root, edges read as source -> target.

    Each BFS level sits ``level_offset`` below its parent; siblings are
    centred under their parent and spaced evenly. Nodes unreachable from the
    root keep their current position (canvas center if they have none).

    Args:
        nodes: Nodes to place
        edges: Directed edges
        root_id: Root node (defaults to the first node)
        config: Layout parameters
    """
    config = config or LayoutConfig.from_settings()
    nodes = list(nodes)
    if not nodes:
        return {}

    by_id = {node.id: node for node in nodes}
    root = by_id.get(root_id) if root_id else None
    if root is None:
        if root_id:
            logger.warning(f"Root {root_id} not found, using first node")
        root = nodes[0]

    graph = nx.DiGraph()
    graph.add_nodes_from(by_id)
    graph.add_edges_from(
        (e.source, e.target) for e in edges
        if e.source in by_id and e.target in by_id and e.source != e.target
    )

    # BFS tree: each node hangs under the parent that discovered it
    children: dict[str, list[str]] = defaultdict(list)
    order = [root.id]
    for parent, child in nx.bfs_edges(graph, root.id):
        children[parent].append(child)
        order.append(child)

    root_position = (root.x, root.y) if root.has_position else (config.width / 2, config.top_margin)
    positions = {root.id: Position(*root_position)}

    for parent_id in order:
        kids = children.get(parent_id)
        if not kids:
            continue
        px, py = positions[parent_id]
        spacing = min(config.sibling_spacing, config.width / (len(kids) + 1))
        left = px - spacing * (len(kids) - 1) / 2
        for i, child_id in enumerate(kids):
            positions[child_id] = Position(left + i * spacing, py + config.level_offset)

    for node in nodes:
        if node.id not in positions:
            positions[node.id] = Position(
                *((node.x, node.y) if node.has_position else config.center)
            )

    logger.debug(f"Hierarchical layout from {root.id}: {len(order)} reachable of {len(nodes)}")
    return positions


def linear_layout(
    nodes: Iterable[Node],
    config: LayoutConfig | None = None,
) -> dict[str, Position]:
    """A single horizontal row centred on the canvas."""
    config = config or LayoutConfig.from_settings()
    nodes = list(nodes)
    if not nodes:
        return {}
    cx, cy = config.center
    start = cx - config.linear_spacing * (len(nodes) - 1) / 2
    return {
        node.id: Position(start + i * config.linear_spacing, cy)
        for i, node in enumerate(nodes)
    }
