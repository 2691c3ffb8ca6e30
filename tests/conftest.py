"""Pytest configuration and fixtures."""

import hashlib
import math
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from meshflow.config import Settings, get_test_settings
from meshflow.embeddings import EmbeddingProvider, HashEmbeddingProvider
from meshflow.graph import AutoLinkConfig, AutoLinker
from meshflow.layout import AnimationConfig, LayoutConfig
from meshflow.models import Edge, Node
from meshflow.storage import InMemoryGraphStore

WORKSPACE = "ws-1"


def make_node(
    node_id: str,
    embedding: list[float] | None = None,
    title: str | None = None,
    content="",
    workspace_id: str = WORKSPACE,
    x: float | None = None,
    y: float | None = None,
    **kwargs,
) -> Node:
    """Build a node with sensible defaults."""
    return Node(
        id=node_id,
        workspace_id=workspace_id,
        title=title if title is not None else f"Note {node_id}",
        content=content,
        embedding=embedding,
        x=x,
        y=y,
        **kwargs,
    )


def make_edge(source: str, target: str, workspace_id: str = WORKSPACE, **kwargs) -> Edge:
    """Build an edge with an ID derived from its endpoints."""
    return Edge(
        id=f"e-{source}-{target}",
        workspace_id=workspace_id,
        source=source,
        target=target,
        **kwargs,
    )


def unit_vector(angle_deg: float) -> list[float]:
    """2-D unit vector; cosine similarity of two is cos(angle difference)."""
    rad = math.radians(angle_deg)
    return [math.cos(rad), math.sin(rad)]


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with defaults."""
    return get_test_settings()


@pytest.fixture
def layout_config() -> LayoutConfig:
    """Layout parameters with a fixed seed."""
    return LayoutConfig(seed=7)


@pytest.fixture
def animation_config() -> AnimationConfig:
    """Short, fast animation."""
    return AnimationConfig(duration=0.05, fps=100)


@pytest.fixture
def store() -> InMemoryGraphStore:
    """Empty in-memory graph store."""
    return InMemoryGraphStore()


@pytest.fixture
def linker() -> AutoLinker:
    """Auto-linker with default thresholds."""
    return AutoLinker(AutoLinkConfig())


@pytest.fixture
def hash_provider() -> HashEmbeddingProvider:
    """Deterministic provider without model or network."""
    return HashEmbeddingProvider(dimensions=64, timeout=1.0, max_chars=8000)


@pytest.fixture
def mock_embedding_provider() -> EmbeddingProvider:
    """Mock embedding provider for testing without loading models."""
    provider = MagicMock(spec=EmbeddingProvider)
    provider.dimensions = 16

    # Return consistent fake embeddings
    def fake_embed_sync(text: str) -> list[float]:
        # Generate deterministic embedding based on text hash
        h = hashlib.md5(text.encode()).hexdigest()
        # MD5 produces 32 hex chars, giving us 16 floats
        return [float(int(h[i:i+2], 16)) / 255.0 for i in range(0, 32, 2)]

    async def fake_embed(text: str) -> list[float]:
        return fake_embed_sync(text)

    provider.embed_sync = MagicMock(side_effect=fake_embed_sync)
    provider.embed = AsyncMock(side_effect=fake_embed)
    return provider


@pytest.fixture
def sample_nodes() -> list[Node]:
    """Nodes in two clear semantic groups plus one node without embedding."""
    return [
        make_node("a1", unit_vector(0), title="Python tips"),
        make_node("a2", unit_vector(5), title="Python typing"),
        make_node("a3", unit_vector(10), title="Python asyncio"),
        make_node("b1", unit_vector(90), title="Sourdough bread"),
        make_node("b2", unit_vector(95), title="Rye bread"),
        make_node("b3", unit_vector(100), title="Baking flour"),
        make_node("n1", None, title="Empty note", updated_at=datetime(2024, 1, 1)),
    ]
