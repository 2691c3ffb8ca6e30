"""Configuration for the graph intelligence engines."""

from dataclasses import dataclass

from meshflow.config import Settings, settings


@dataclass
class AutoLinkConfig:
    """Configuration for automatic edge creation."""

    # Similarity thresholds
    auto_link_threshold: float = 0.82  # Create an edge
    suggest_threshold: float = 0.68  # Surface as suggestion, no edge

    # Fan-out cap per pass, bounds graph density
    max_auto_links: int = 5

    def __post_init__(self) -> None:
        if self.suggest_threshold > self.auto_link_threshold:
            raise ValueError("suggest_threshold must not exceed auto_link_threshold")
        if self.max_auto_links < 1:
            raise ValueError("max_auto_links must be at least 1")

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "AutoLinkConfig":
        config = config or settings
        return cls(
            auto_link_threshold=config.auto_link_threshold,
            suggest_threshold=config.suggest_threshold,
            max_auto_links=config.max_auto_links,
        )


@dataclass
class ClusterConfig:
    """Configuration for k-means clustering."""

    passes: int = 10  # Fixed pass count, no convergence check
    seed: int | None = None  # Fixed seed for reproducible partitions

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "ClusterConfig":
        config = config or settings
        return cls(passes=config.cluster_passes, seed=config.cluster_seed)
