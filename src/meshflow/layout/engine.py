"""Strategy dispatch for layouts."""

import logging
from collections.abc import Iterable
from enum import Enum

from meshflow.layout.config import LayoutConfig
from meshflow.layout.force import force_directed_layout
from meshflow.layout.hierarchical import hierarchical_layout, linear_layout
from meshflow.layout.radial import mind_map_layout, radial_layout
from meshflow.layout.semantic import semantic_cluster_layout
from meshflow.models import Edge, Node, Position

logger = logging.getLogger(__name__)


class LayoutStrategy(str, Enum):
    """Available layout strategies."""

    FORCE_DIRECTED = "force-directed"
    RADIAL = "radial"
    HIERARCHICAL = "hierarchical"
    SEMANTIC_CLUSTER = "semantic-cluster"
    MIND_MAP = "mind-map"
    LINEAR = "linear"


class LayoutEngine:
    """Computes proposed positions; the caller persists them."""

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig.from_settings()

    def compute(
        self,
        strategy: LayoutStrategy | str,
        nodes: Iterable[Node],
        edges: Iterable[Edge] = (),
        center_id: str | None = None,
        root_id: str | None = None,
    ) -> dict[str, Position]:
        """
        Run a layout strategy.

        Args:
            strategy: Strategy or its name (e.g. "force-directed")
            nodes: Snapshot of nodes
            edges: Snapshot of edges
            center_id: Center node for the radial strategy
            root_id: Root node for the hierarchical strategy

        Returns:
            Mapping of node_id -> position

        Raises:
            ValueError: For an unknown strategy
        """
        strategy = LayoutStrategy(strategy)
        nodes = list(nodes)
        edges = list(edges)

        if strategy == LayoutStrategy.FORCE_DIRECTED:
            positions = force_directed_layout(nodes, edges, self.config)
        elif strategy == LayoutStrategy.RADIAL:
            positions = radial_layout(nodes, center_id, self.config)
        elif strategy == LayoutStrategy.HIERARCHICAL:
            positions = hierarchical_layout(nodes, edges, root_id, self.config)
        elif strategy == LayoutStrategy.SEMANTIC_CLUSTER:
            positions = semantic_cluster_layout(nodes, self.config)
        elif strategy == LayoutStrategy.MIND_MAP:
            positions = mind_map_layout(nodes, edges, self.config)
        else:
            positions = linear_layout(nodes, self.config)

        logger.info(f"Computed {strategy.value} layout for {len(positions)} nodes")
        return positions
