"""MeshFlow data models."""

from meshflow.models.node import Edge, Node, NodeContent, edge_key, parse_datetime
from meshflow.models.results import (
    AutoLinkResult,
    Cluster,
    EdgeDirective,
    Position,
    SimilarityResult,
)

__all__ = [
    "Node",
    "NodeContent",
    "Edge",
    "edge_key",
    "parse_datetime",
    "Position",
    "SimilarityResult",
    "EdgeDirective",
    "AutoLinkResult",
    "Cluster",
]
