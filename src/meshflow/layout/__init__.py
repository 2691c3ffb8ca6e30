"""Graph layout strategies and animated transitions."""

from meshflow.layout.animation import (
    LayoutAnimator,
    animate_layout,
    ease_out_cubic,
    interpolate_positions,
)
from meshflow.layout.config import AnimationConfig, LayoutConfig
from meshflow.layout.engine import LayoutEngine, LayoutStrategy
from meshflow.layout.force import ForceSimulation, force_directed_layout
from meshflow.layout.hierarchical import hierarchical_layout, linear_layout
from meshflow.layout.radial import mind_map_layout, radial_layout
from meshflow.layout.semantic import (
    group_by_proximity,
    semantic_cluster_layout,
    separate_clusters,
)

__all__ = [
    # Config
    "AnimationConfig",
    "LayoutConfig",
    # Engine
    "LayoutEngine",
    "LayoutStrategy",
    # Strategies
    "ForceSimulation",
    "force_directed_layout",
    "radial_layout",
    "hierarchical_layout",
    "semantic_cluster_layout",
    "mind_map_layout",
    "linear_layout",
    "group_by_proximity",
    "separate_clusters",
    # Animation
    "LayoutAnimator",
    "animate_layout",
    "ease_out_cubic",
    "interpolate_positions",
]
