"""Node and edge models - the notes and links of a workspace graph."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# Rich documents arrive as editor JSON trees ({"type": "doc", "content": [...]})
NodeContent = str | dict[str, Any] | list[Any] | None


def parse_datetime(value: Any) -> datetime | None:
    """Parse datetime from various formats (ISO string, epoch millis, or native datetime)."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        # Browser clients send epoch milliseconds
        value = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    elif isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    elif not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value))
    # Timestamps are kept as naive UTC throughout
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    """Return the first present key (snake_case or camelCase)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass
class Node:
    """
    A note on the canvas.

    Position is the system of record; layouts only propose new values.
    A node without an embedding is laid out but never compared.
    """

    id: str
    workspace_id: str
    title: str = ""
    content: NodeContent = ""  # Plain text or rich document tree
    tags: list[str] = field(default_factory=list)

    # Canvas position
    x: float | None = None
    y: float | None = None

    # Embedding vector, fixed dimension D per provider
    embedding: list[float] | None = None

    # Metadata
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def has_embedding(self) -> bool:
        """True if the node can take part in similarity computation."""
        return bool(self.embedding)

    @property
    def has_position(self) -> bool:
        return self.x is not None and self.y is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for persistence."""
        return {
            "id": self.id,
            "workspace_id": self.workspace_id,
            "title": self.title,
            "content": self.content,
            "tags": self.tags,
            "x": self.x,
            "y": self.y,
            "embedding": self.embedding,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Node":
        """Create from dictionary (accepts camelCase client payloads)."""
        return cls(
            id=data["id"],
            workspace_id=_pick(data, "workspace_id", "workspaceId", default=""),
            title=data.get("title") or "",
            content=data.get("content", ""),
            tags=list(data.get("tags") or []),
            x=data.get("x"),
            y=data.get("y"),
            embedding=data.get("embedding") or None,
            created_at=parse_datetime(_pick(data, "created_at", "createdAt")) or datetime.utcnow(),
            updated_at=parse_datetime(_pick(data, "updated_at", "updatedAt")) or datetime.utcnow(),
        )


@dataclass
class Edge:
    """
    A link between two nodes.

    Direction matters for hierarchical layout only; for dedup the pair is
    unordered, so (A, B) and (B, A) are the same edge.
    """

    id: str
    workspace_id: str
    source: str
    target: str
    similarity: float | None = None  # Set for auto-linked edges
    label: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def key(self) -> frozenset[str]:
        """Unordered pair identifying this edge within its workspace."""
        return edge_key(self.source, self.target)

    def to_dict(self) -> dict:
        """Convert to dictionary for persistence."""
        return {
            "id": self.id,
            "workspace_id": self.workspace_id,
            "source": self.source,
            "target": self.target,
            "similarity": self.similarity,
            "label": self.label,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Edge":
        """Create from dictionary (accepts camelCase client payloads)."""
        return cls(
            id=data["id"],
            workspace_id=_pick(data, "workspace_id", "workspaceId", default=""),
            source=_pick(data, "source", "sourceId"),
            target=_pick(data, "target", "targetId"),
            similarity=data.get("similarity"),
            label=data.get("label"),
            created_at=parse_datetime(_pick(data, "created_at", "createdAt")) or datetime.utcnow(),
        )


def edge_key(source: str, target: str) -> frozenset[str]:
    """Unordered key for a node pair."""
    return frozenset((source, target))
