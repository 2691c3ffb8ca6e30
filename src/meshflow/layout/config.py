"""Configuration for layout strategies and animation."""

from dataclasses import dataclass

from meshflow.config import Settings, settings


@dataclass
class LayoutConfig:
    """Canvas and per-strategy layout parameters."""

    # Canvas
    width: float = 1000.0
    height: float = 800.0

    # Force-directed simulation
    link_distance: float = 150.0
    link_strength: float = 0.5
    charge_strength: float = -300.0  # Negative = repulsion
    collision_radius: float = 50.0  # Minimum center-to-center separation
    ticks: int = 300
    start_jitter: float = 400.0  # Spread of random start positions around center
    seed: int | None = None

    # Radial / mind-map
    radial_radius: float = 300.0

    # Hierarchical
    level_offset: float = 150.0
    sibling_spacing: float = 200.0
    top_margin: float = 100.0

    # Semantic cluster
    semantic_distance_threshold: float = 0.3

    # Linear
    linear_spacing: float = 250.0

    @property
    def center(self) -> tuple[float, float]:
        return (self.width / 2, self.height / 2)

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "LayoutConfig":
        config = config or settings
        return cls(
            width=config.layout_width,
            height=config.layout_height,
            link_distance=config.link_distance,
            link_strength=config.link_strength,
            charge_strength=config.charge_strength,
            collision_radius=config.collision_radius,
            ticks=config.layout_ticks,
            radial_radius=config.radial_radius,
            level_offset=config.level_offset,
            sibling_spacing=config.sibling_spacing,
            semantic_distance_threshold=config.semantic_distance_threshold,
        )


@dataclass
class AnimationConfig:
    """Configuration for animated layout transitions."""

    duration: float = 2.0  # Seconds
    fps: int = 60

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "AnimationConfig":
        config = config or settings
        return cls(duration=config.animation_duration, fps=config.animation_fps)
