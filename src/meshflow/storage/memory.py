"""In-memory graph store for development, scripts and tests."""

import logging
import uuid
from collections.abc import Mapping
from datetime import datetime

from meshflow.models import Edge, EdgeDirective, Node, Position, edge_key
from meshflow.storage.base import DuplicateEdgeError, GraphStore

logger = logging.getLogger(__name__)


class InMemoryGraphStore(GraphStore):
    """Dict-backed store enforcing one edge per unordered pair per workspace."""

    def __init__(self) -> None:
        self._nodes: dict[str, Node] = {}
        self._edges: dict[str, Edge] = {}

    async def get_nodes(self, workspace_id: str) -> list[Node]:
        return [n for n in self._nodes.values() if n.workspace_id == workspace_id]

    async def get_edges(self, workspace_id: str) -> list[Edge]:
        return [e for e in self._edges.values() if e.workspace_id == workspace_id]

    async def get_node(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    async def save_node(self, node: Node) -> None:
        node.updated_at = datetime.utcnow()
        self._nodes[node.id] = node

    async def add_edge(self, edge: Edge) -> Edge:
        """Store a user-created edge as is."""
        self._check_unique(edge.workspace_id, edge.source, edge.target)
        self._edges[edge.id] = edge
        return edge

    async def create_edge(self, directive: EdgeDirective) -> Edge:
        self._check_unique(directive.workspace_id, directive.source, directive.target)
        edge = Edge(
            id=str(uuid.uuid4()),
            workspace_id=directive.workspace_id,
            source=directive.source,
            target=directive.target,
            similarity=directive.similarity,
        )
        self._edges[edge.id] = edge
        logger.debug(f"Created edge {edge.source} -> {edge.target} ({edge.similarity:.3f})")
        return edge

    async def delete_edge(self, edge_id: str) -> bool:
        return self._edges.pop(edge_id, None) is not None

    async def update_positions(self, positions: Mapping[str, Position]) -> int:
        updated = 0
        for node_id, (x, y) in positions.items():
            node = self._nodes.get(node_id)
            if node is None:
                continue
            node.x = float(x)
            node.y = float(y)
            updated += 1
        return updated

    def _check_unique(self, workspace_id: str, source: str, target: str) -> None:
        key = edge_key(source, target)
        for edge in self._edges.values():
            if edge.workspace_id == workspace_id and edge.key == key:
                raise DuplicateEdgeError(
                    f"Edge between {source} and {target} already exists"
                )
