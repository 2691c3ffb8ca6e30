"""Semantic cluster layout and cluster separation."""

import logging
import math
from collections.abc import Iterable, Mapping

import numpy as np

from meshflow.layout.config import LayoutConfig
from meshflow.models import Node, Position

logger = logging.getLogger(__name__)


def embedding_distance(a: list[float], b: list[float]) -> float:
    """Euclidean distance; embeddings of different size are maximally far (1.0)."""
    if len(a) != len(b):
        return 1.0
    return float(np.linalg.norm(np.asarray(a) - np.asarray(b)))


def group_by_proximity(nodes: Iterable[Node], threshold: float) -> list[list[Node]]:
    """
    Greedy grouping: each ungrouped embedded node seeds a group and absorbs
    every later ungrouped node within ``threshold`` of it.
    """
    embedded = [node for node in nodes if node.has_embedding]
    groups: list[list[Node]] = []
    assigned: set[str] = set()

    for seed in embedded:
        if seed.id in assigned:
            continue
        group = [seed]
        assigned.add(seed.id)
        for other in embedded:
            if other.id in assigned:
                continue
            if embedding_distance(seed.embedding, other.embedding) < threshold:
                group.append(other)
                assigned.add(other.id)
        groups.append(group)
    return groups


def semantic_cluster_layout(
    nodes: Iterable[Node],
    config: LayoutConfig | None = None,
) -> dict[str, Position]:
    """
    Group nodes by embedding proximity and give each group a grid cell.

    Members sit on a small circle around their cell center. Nodes without an
    embedding keep their current position (canvas center if they have none).
    """
    config = config or LayoutConfig.from_settings()
    nodes = list(nodes)
    if not nodes:
        return {}

    groups = group_by_proximity(nodes, config.semantic_distance_threshold)
    positions: dict[str, Position] = {}

    if groups:
        columns = math.ceil(math.sqrt(len(groups)))
        cell_w = config.width / (columns + 1)
        cell_h = config.height / (columns + 1)
        member_radius = 0.4 * min(config.width, config.height) / (math.sqrt(len(groups)) + 2)

        for index, group in enumerate(groups):
            row, col = divmod(index, columns)
            cx = (col + 1) * cell_w
            cy = (row + 1) * cell_h
            if len(group) == 1:
                positions[group[0].id] = Position(cx, cy)
                continue
            for i, node in enumerate(group):
                angle = 2 * math.pi * i / len(group)
                positions[node.id] = Position(
                    cx + member_radius * math.cos(angle),
                    cy + member_radius * math.sin(angle),
                )

    for node in nodes:
        if node.id not in positions:
            positions[node.id] = Position(
                *((node.x, node.y) if node.has_position else config.center)
            )

    logger.debug(f"Semantic layout: {len(groups)} groups for {len(nodes)} nodes")
    return positions


def separate_clusters(
    positions: Mapping[str, Position],
    node_clusters: Mapping[str, int | str],
    separation_factor: float = 2.0,
) -> dict[str, Position]:
    """Push clusters apart while keeping nodes within clusters close.

    Args:
        positions: node_id -> position
        node_clusters: node_id -> cluster id (missing nodes share cluster 0)
        separation_factor: how much to push clusters apart (2.0 = double the distance)

    Returns:
        Updated positions
    """
    if not positions:
        return {}

    members: dict[int | str, list[str]] = {}
    for node_id in positions:
        members.setdefault(node_clusters.get(node_id, 0), []).append(node_id)

    centers = {
        cluster_id: np.mean([positions[n] for n in node_ids], axis=0)
        for cluster_id, node_ids in members.items()
    }
    global_center = np.mean(list(centers.values()), axis=0)

    separated: dict[str, Position] = {}
    for cluster_id, node_ids in members.items():
        # Offset = new_center - old_center
        offset = (centers[cluster_id] - global_center) * (separation_factor - 1.0)
        for node_id in node_ids:
            x, y = positions[node_id]
            separated[node_id] = Position(float(x + offset[0]), float(y + offset[1]))

    logger.debug(f"Separated {len(members)} clusters by factor {separation_factor}")
    return separated
