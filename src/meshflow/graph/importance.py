"""Node importance from connectivity and recency."""

from collections.abc import Iterable
from datetime import datetime

from meshflow.models import Edge, Node

CONNECTIVITY_WEIGHT = 0.7
RECENCY_WEIGHT = 0.3


def calculate_node_importance(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    now: datetime | None = None,
) -> dict[str, float]:
    """
    Score nodes by how connected and how recently updated they are.

    importance = 0.7 * degree / max_degree + 0.3 * (1 - age / max_age)

    Args:
        nodes: Snapshot of nodes
        edges: Snapshot of edges (direction ignored)
        now: Reference time (defaults to utcnow)

    Returns:
        Mapping of node_id -> importance in [0, 1]
    """
    nodes = list(nodes)
    if not nodes:
        return {}
    now = now or datetime.utcnow()

    degree: dict[str, int] = {node.id: 0 for node in nodes}
    for edge in edges:
        for endpoint in (edge.source, edge.target):
            if endpoint in degree:
                degree[endpoint] += 1

    max_degree = max(max(degree.values()), 1)
    ages = {
        node.id: max((now - node.updated_at).total_seconds(), 0.0)
        for node in nodes
    }
    max_age = max(max(ages.values()), 1.0)

    return {
        node.id: (
            CONNECTIVITY_WEIGHT * degree[node.id] / max_degree
            + RECENCY_WEIGHT * (1.0 - ages[node.id] / max_age)
        )
        for node in nodes
    }
