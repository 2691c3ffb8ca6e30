"""Persistence contract the graph engines write through."""

from abc import ABC, abstractmethod
from collections.abc import Mapping

from meshflow.models import Edge, EdgeDirective, Node, Position


class DuplicateEdgeError(ValueError):
    """An edge for the same unordered node pair already exists in the workspace."""


class GraphStore(ABC):
    """Async store for workspace nodes and edges.

    Implementations own durability; the engines only read snapshots and
    emit directives or proposed positions.
    """

    @abstractmethod
    async def get_nodes(self, workspace_id: str) -> list[Node]:
        """All nodes of a workspace."""

    @abstractmethod
    async def get_edges(self, workspace_id: str) -> list[Edge]:
        """All edges of a workspace."""

    @abstractmethod
    async def get_node(self, node_id: str) -> Node | None:
        """A node by ID, or None."""

    @abstractmethod
    async def save_node(self, node: Node) -> None:
        """Create or replace a node."""

    @abstractmethod
    async def create_edge(self, directive: EdgeDirective) -> Edge:
        """Create an edge; raises DuplicateEdgeError for an existing pair."""

    @abstractmethod
    async def delete_edge(self, edge_id: str) -> bool:
        """Delete an edge, returning whether it existed."""

    @abstractmethod
    async def update_positions(self, positions: Mapping[str, Position]) -> int:
        """Persist proposed positions, returning the number of nodes updated."""
