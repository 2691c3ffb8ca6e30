"""Semantic clustering of nodes with k-means over cosine distance.

k = max(2, floor(sqrt(n / 2))) for n embedded nodes. Centroids are sampled
from the nodes, then refined for a fixed number of passes (no convergence
check, so latency is bounded). Random initialisation means two runs may give
different, equally valid partitions unless a seed is configured.
"""

import logging
import math
from collections.abc import Iterable

import numpy as np

from meshflow.graph.config import ClusterConfig
from meshflow.models import Cluster, Node

logger = logging.getLogger(__name__)

FALLBACK_LABEL = "All Nodes"


def cluster_count(n: int) -> int:
    """Number of clusters for n embedded nodes."""
    return max(2, math.floor(math.sqrt(n / 2)))


def _normalize_rows(matrix: np.ndarray) -> np.ndarray:
    """L2-normalize rows; zero rows stay zero."""
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    safe = np.where(norms > 0, norms, 1.0)
    return matrix / safe


def cosine_distance_matrix(vectors: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Pairwise cosine distances (rows: vectors, columns: centroids).

    A zero vector has similarity 0 (distance 1) to everything.
    """
    return 1.0 - _normalize_rows(vectors) @ _normalize_rows(centroids).T


class ClusterEngine:
    """Partitions nodes into semantic groups."""

    def __init__(self, config: ClusterConfig | None = None) -> None:
        self.config = config or ClusterConfig.from_settings()

    def cluster(self, nodes: Iterable[Node]) -> list[Cluster]:
        """
        Cluster nodes by embedding similarity.

        Every input node appears in exactly one cluster. Nodes without an
        embedding join the first cluster.

        Args:
            nodes: Snapshot of nodes

        Returns:
            Non-empty clusters
        """
        nodes = list(nodes)
        if not nodes:
            return []

        embedded = [n for n in nodes if n.has_embedding]
        if len(embedded) < 2:
            centroid = list(embedded[0].embedding) if embedded else []
            return [
                Cluster(
                    id="cluster-0",
                    node_ids=[n.id for n in nodes],
                    centroid=centroid,
                    label=FALLBACK_LABEL,
                )
            ]

        vectors = np.asarray([n.embedding for n in embedded], dtype=np.float64)
        k = cluster_count(len(embedded))
        assignments, centroids = self._kmeans(vectors, k)

        clusters: list[Cluster] = []
        for index in range(k):
            member_rows = np.flatnonzero(assignments == index)
            if len(member_rows) == 0:
                continue
            centroid = centroids[index]
            clusters.append(
                Cluster(
                    id=f"cluster-{index}",
                    node_ids=[embedded[row].id for row in member_rows],
                    centroid=centroid.tolist(),
                    label=self._label(embedded, vectors, member_rows, centroid, index),
                )
            )

        unembedded = [n.id for n in nodes if not n.has_embedding]
        if unembedded:
            clusters[0].node_ids.extend(unembedded)

        logger.info(
            f"Clustered {len(nodes)} nodes ({len(embedded)} embedded) "
            f"into {len(clusters)} clusters (k={k})"
        )
        return clusters

    def _kmeans(self, vectors: np.ndarray, k: int) -> tuple[np.ndarray, np.ndarray]:
        """Run a fixed number of assignment/update passes.

        Returns:
            (assignment index per row, centroid matrix)
        """
        rng = np.random.default_rng(self.config.seed)
        initial = rng.choice(len(vectors), size=k, replace=False)
        centroids = vectors[initial].copy()
        assignments = np.zeros(len(vectors), dtype=np.int64)

        for iteration in range(self.config.passes):
            distances = cosine_distance_matrix(vectors, centroids)
            assignments = np.argmin(distances, axis=1)

            for index in range(k):
                members = vectors[assignments == index]
                # An emptied cluster keeps its previous centroid
                if len(members) > 0:
                    centroids[index] = members.mean(axis=0)

            logger.debug(
                f"k-means pass {iteration + 1}/{self.config.passes}: "
                f"sizes={np.bincount(assignments, minlength=k).tolist()}"
            )

        return assignments, centroids

    @staticmethod
    def _label(
        embedded: list[Node],
        vectors: np.ndarray,
        member_rows: np.ndarray,
        centroid: np.ndarray,
        index: int,
    ) -> str:
        """Title of the member closest to the centroid."""
        distances = cosine_distance_matrix(vectors[member_rows], centroid[np.newaxis, :])
        representative = embedded[member_rows[int(np.argmin(distances[:, 0]))]]
        return representative.title or f"Cluster {index + 1}"
