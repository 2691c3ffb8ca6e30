"""Graph intelligence: similarity search, auto-linking, clustering.

Provides:
- Cosine similarity and ranked similarity search
- Threshold-based auto-linking with unordered-pair dedup
- k-means clustering over cosine distance
- Node importance scoring
"""

from meshflow.graph.autolink import AutoLinker
from meshflow.graph.clustering import ClusterEngine, cluster_count
from meshflow.graph.config import AutoLinkConfig, ClusterConfig
from meshflow.graph.importance import calculate_node_importance
from meshflow.graph.similarity import (
    EmbeddingDimensionError,
    cosine_distance,
    cosine_similarity,
    cosine_similarity_batch,
    find_similar,
    validate_dimensions,
)

__all__ = [
    # Config
    "AutoLinkConfig",
    "ClusterConfig",
    # Similarity
    "EmbeddingDimensionError",
    "cosine_distance",
    "cosine_similarity",
    "cosine_similarity_batch",
    "find_similar",
    "validate_dimensions",
    # Engines
    "AutoLinker",
    "ClusterEngine",
    "cluster_count",
    "calculate_node_importance",
]
