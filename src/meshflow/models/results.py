"""Result models emitted by the similarity, auto-link, cluster and layout engines."""

from dataclasses import dataclass, field
from typing import NamedTuple


class Position(NamedTuple):
    """Canvas coordinates proposed by a layout."""

    x: float
    y: float


@dataclass
class SimilarityResult:
    """A candidate node and its cosine similarity to the query."""

    node_id: str
    score: float


@dataclass
class EdgeDirective:
    """Instruction to create an edge; the caller owns durability and retries."""

    workspace_id: str
    source: str
    target: str
    similarity: float

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "workspace_id": self.workspace_id,
            "source": self.source,
            "target": self.target,
            "similarity": self.similarity,
        }


@dataclass
class AutoLinkResult:
    """Outcome of one auto-link pass for a node."""

    node_id: str
    directives: list[EdgeDirective] = field(default_factory=list)
    suggestions: list[SimilarityResult] = field(default_factory=list)
    skipped_existing: int = 0  # Matches above threshold already connected
    created: int = 0  # Directives persisted successfully
    failed: int = 0  # Directives whose persistence failed

    @property
    def is_empty(self) -> bool:
        return not self.directives and not self.suggestions


@dataclass
class Cluster:
    """A semantic group of nodes. Recomputed on demand, never persisted."""

    id: str
    node_ids: list[str]
    centroid: list[float]
    label: str

    @property
    def size(self) -> int:
        return len(self.node_ids)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "node_ids": self.node_ids,
            "centroid": self.centroid,
            "label": self.label,
        }
