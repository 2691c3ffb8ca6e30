"""Cosine similarity and ranked similarity search over node embeddings."""

import logging
from collections.abc import Iterable, Sequence

import numpy as np

from meshflow.models import Node, SimilarityResult

logger = logging.getLogger(__name__)


class EmbeddingDimensionError(ValueError):
    """Embeddings of different dimensions were mixed within one workspace."""


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """Compute cosine similarity between two vectors.

    Returns 0.0 when either vector has zero norm.
    """
    a = np.asarray(vec1, dtype=np.float64)
    b = np.asarray(vec2, dtype=np.float64)
    denominator = np.linalg.norm(a) * np.linalg.norm(b)
    if denominator == 0:
        return 0.0
    return float(np.dot(a, b) / denominator)


def cosine_distance(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """Cosine distance, ``1 - cosine_similarity``."""
    return 1.0 - cosine_similarity(vec1, vec2)


def cosine_similarity_batch(
    query: Sequence[float],
    vectors: Sequence[Sequence[float]] | np.ndarray,
) -> list[float]:
    """Compute cosine similarity between query and multiple vectors."""
    if len(vectors) == 0:
        return []
    q = np.asarray(query, dtype=np.float64)
    v = np.asarray(vectors, dtype=np.float64)

    q_norm = np.linalg.norm(q)
    v_norms = np.linalg.norm(v, axis=1)
    denominators = v_norms * q_norm

    dots = v @ q
    similarities = np.zeros(len(v), dtype=np.float64)
    nonzero = denominators > 0
    similarities[nonzero] = dots[nonzero] / denominators[nonzero]
    return similarities.tolist()


def find_similar(
    query: Sequence[float],
    candidates: Iterable[Node],
    threshold: float,
    limit: int | None = None,
    exclude_id: str | None = None,
) -> list[SimilarityResult]:
    """
    Rank candidate nodes by cosine similarity to a query vector.

    Candidates without an embedding are skipped. Ties keep the candidate
    order (stable sort).

    Args:
        query: Query embedding
        candidates: Nodes to score
        threshold: Minimum similarity to keep (inclusive)
        limit: Maximum number of results (None for no limit)
        exclude_id: Node ID to leave out (usually the query node itself)

    Returns:
        Results sorted by score, descending
    """
    if limit is not None and limit <= 0:
        return []

    embedded = [
        node for node in candidates
        if node.has_embedding and node.id != exclude_id
    ]
    if not embedded:
        return []

    scores = cosine_similarity_batch(query, [node.embedding for node in embedded])
    results = [
        SimilarityResult(node_id=node.id, score=score)
        for node, score in zip(embedded, scores)
        if score >= threshold
    ]
    results.sort(key=lambda r: r.score, reverse=True)

    if limit is not None:
        results = results[:limit]

    logger.debug(
        f"find_similar: {len(embedded)} candidates, {len(results)} >= {threshold}"
    )
    return results


def validate_dimensions(nodes: Iterable[Node]) -> int | None:
    """
    Check that every embedded node shares one dimension.

    Returns:
        The common dimension, or None if no node has an embedding

    Raises:
        EmbeddingDimensionError: If two embeddings differ in length
    """
    dimension: int | None = None
    first_id: str | None = None
    for node in nodes:
        if not node.has_embedding:
            continue
        if dimension is None:
            dimension = len(node.embedding)
            first_id = node.id
        elif len(node.embedding) != dimension:
            raise EmbeddingDimensionError(
                f"Node {node.id} has {len(node.embedding)} dims, "
                f"node {first_id} has {dimension}"
            )
    return dimension
