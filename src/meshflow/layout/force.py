"""Force-directed layout.

A velocity-Verlet simulation following the d3-force model:

- link: springs along edges pulling endpoints toward ``link_distance``
- charge: many-body repulsion over every node pair
- center: translates the layout so its mean sits at the canvas center
- collision: pushes apart nodes closer than ``collision_radius``

Alpha cools geometrically from 1 to ~0.001 over a fixed tick count; there is
no convergence check. Pairwise forces are computed exactly (O(n^2)) with
numpy, which is fine for workspace-sized graphs.
"""

import logging
from collections.abc import Iterable, Sequence

import numpy as np

from meshflow.layout.config import LayoutConfig
from meshflow.models import Edge, Node, Position

logger = logging.getLogger(__name__)

ALPHA_MIN = 0.001
VELOCITY_DECAY = 0.4
DISTANCE_MIN2 = 1.0  # Charge is softened below unit distance
JIGGLE = 1e-6
OVERLAP_PASSES = 100


class ForceSimulation:
    """Stateful simulation over a fixed node set."""

    def __init__(
        self,
        nodes: Sequence[Node],
        edges: Iterable[Edge],
        config: LayoutConfig | None = None,
    ) -> None:
        self.config = config or LayoutConfig.from_settings()
        self.ids = [node.id for node in nodes]
        self._index = {node_id: i for i, node_id in enumerate(self.ids)}
        self._rng = np.random.default_rng(self.config.seed)

        self.positions = self._initial_positions(nodes)
        self.velocities = np.zeros_like(self.positions)
        self.alpha = 1.0
        self.alpha_decay = 1.0 - ALPHA_MIN ** (1.0 / max(self.config.ticks, 1))

        self._links, self._bias = self._build_links(edges)

    def _initial_positions(self, nodes: Sequence[Node]) -> np.ndarray:
        """Last known positions, or a random spot near the canvas center."""
        cx, cy = self.config.center
        spread = self.config.start_jitter
        positions = np.empty((len(nodes), 2), dtype=np.float64)
        for i, node in enumerate(nodes):
            if node.has_position:
                positions[i] = (node.x, node.y)
            else:
                positions[i] = (
                    cx + (self._rng.random() - 0.5) * spread,
                    cy + (self._rng.random() - 0.5) * spread,
                )
        return positions

    def _build_links(self, edges: Iterable[Edge]) -> tuple[np.ndarray, np.ndarray]:
        """Index pairs for edges between known nodes, and d3's degree bias."""
        pairs = []
        for edge in edges:
            source = self._index.get(edge.source)
            target = self._index.get(edge.target)
            if source is None or target is None or source == target:
                continue
            pairs.append((source, target))

        if not pairs:
            return np.empty((0, 2), dtype=np.int64), np.empty(0)

        links = np.asarray(pairs, dtype=np.int64)
        count = np.bincount(links.ravel(), minlength=len(self.ids)).astype(np.float64)
        bias = count[links[:, 0]] / (count[links[:, 0]] + count[links[:, 1]])
        return links, bias

    def _jiggle(self, size: int) -> np.ndarray:
        return (self._rng.random((size, 2)) - 0.5) * JIGGLE

    def tick(self) -> None:
        """Advance the simulation by one step."""
        self.alpha += (0.0 - self.alpha) * self.alpha_decay

        self._apply_links()
        self._apply_charge()
        self._apply_center()
        self._apply_collision()

        self.velocities *= 1.0 - VELOCITY_DECAY
        self.positions += self.velocities

    def run(self, ticks: int | None = None) -> dict[str, Position]:
        """Run a fixed number of ticks, then resolve remaining overlaps."""
        ticks = self.config.ticks if ticks is None else ticks
        if len(self.ids) > 0:
            for _ in range(ticks):
                self.tick()
            self.resolve_overlaps()
        return self.result()

    def result(self) -> dict[str, Position]:
        return {
            node_id: Position(float(x), float(y))
            for node_id, (x, y) in zip(self.ids, self.positions)
        }

    def _apply_links(self) -> None:
        if len(self._links) == 0:
            return
        source, target = self._links[:, 0], self._links[:, 1]
        predicted = self.positions + self.velocities
        delta = predicted[target] - predicted[source]
        dist = np.linalg.norm(delta, axis=1)

        zero = dist == 0
        if zero.any():
            delta[zero] = self._jiggle(int(zero.sum()))
            dist[zero] = np.linalg.norm(delta[zero], axis=1)

        scale = (dist - self.config.link_distance) / dist * self.alpha * self.config.link_strength
        adjust = delta * scale[:, np.newaxis]
        np.add.at(self.velocities, target, -adjust * self._bias[:, np.newaxis])
        np.add.at(self.velocities, source, adjust * (1.0 - self._bias)[:, np.newaxis])

    def _apply_charge(self) -> None:
        n = len(self.ids)
        if n < 2:
            return
        # delta[i, j] = p_j - p_i
        delta = self.positions[np.newaxis, :, :] - self.positions[:, np.newaxis, :]
        dist2 = np.einsum("ijk,ijk->ij", delta, delta)
        off_diagonal = ~np.eye(n, dtype=bool)

        coincident = (dist2 == 0) & off_diagonal
        if coincident.any():
            delta[coincident] = self._jiggle(int(coincident.sum()))
            dist2[coincident] = np.einsum("ij,ij->i", delta[coincident], delta[coincident])

        dist2 = np.where(dist2 < DISTANCE_MIN2, np.sqrt(DISTANCE_MIN2 * dist2), dist2)
        np.fill_diagonal(dist2, np.inf)

        weight = self.config.charge_strength * self.alpha / dist2
        self.velocities += np.einsum("ijk,ij->ik", delta, weight)

    def _apply_center(self) -> None:
        if len(self.ids) == 0:
            return
        shift = self.positions.mean(axis=0) - np.asarray(self.config.center)
        self.positions -= shift

    def _apply_collision(self) -> None:
        n = len(self.ids)
        if n < 2:
            return
        separation = self.config.collision_radius
        predicted = self.positions + self.velocities
        # delta[i, j] = p_i - p_j
        delta = predicted[:, np.newaxis, :] - predicted[np.newaxis, :, :]
        dist = np.linalg.norm(delta, axis=2)
        overlap = (dist < separation) & np.triu(np.ones((n, n), dtype=bool), k=1)
        if not overlap.any():
            return

        coincident = overlap & (dist == 0)
        if coincident.any():
            delta[coincident] = self._jiggle(int(coincident.sum()))
            dist[coincident] = np.linalg.norm(delta[coincident], axis=1)

        scale = np.zeros_like(dist)
        scale[overlap] = (separation - dist[overlap]) / dist[overlap]
        push = delta * scale[:, :, np.newaxis]
        # Equal radii: each node of a pair takes half the correction
        self.velocities += 0.5 * push.sum(axis=1) - 0.5 * push.sum(axis=0)

    def resolve_overlaps(self, max_passes: int = OVERLAP_PASSES) -> int:
        """Project overlapping pairs apart until none is closer than the radius.

        Returns:
            Number of passes that moved nodes
        """
        n = len(self.ids)
        if n < 2:
            return 0
        separation = self.config.collision_radius
        target = separation * (1.0 + 1e-6)
        upper = np.triu(np.ones((n, n), dtype=bool), k=1)

        for performed in range(max_passes):
            delta = self.positions[:, np.newaxis, :] - self.positions[np.newaxis, :, :]
            dist = np.linalg.norm(delta, axis=2)
            overlap = upper & (dist < separation)
            if not overlap.any():
                return performed

            coincident = overlap & (dist == 0)
            if coincident.any():
                delta[coincident] = self._jiggle(int(coincident.sum()))
                dist[coincident] = np.linalg.norm(delta[coincident], axis=1)

            scale = np.zeros_like(dist)
            scale[overlap] = (target - dist[overlap]) / dist[overlap]
            push = delta * scale[:, :, np.newaxis]
            self.positions += 0.5 * push.sum(axis=1) - 0.5 * push.sum(axis=0)

        logger.warning(f"Overlaps remain after {max_passes} relaxation passes")
        return max_passes


def force_directed_layout(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    config: LayoutConfig | None = None,
) -> dict[str, Position]:
    """
    Compute a force-directed layout.

    Args:
        nodes: Nodes to place (start from their current position if set)
        edges: Edges acting as springs; unknown endpoints are ignored
        config: Simulation parameters

    Returns:
        Mapping of node_id -> proposed position
    """
    nodes = list(nodes)
    if not nodes:
        return {}
    simulation = ForceSimulation(nodes, edges, config)
    positions = simulation.run()
    logger.debug(f"Force layout: {len(nodes)} nodes, {len(simulation._links)} links")
    return positions
