"""Unit tests for the node save path."""

from unittest.mock import AsyncMock

import pytest

from conftest import WORKSPACE, make_node
from meshflow.embeddings import HashEmbeddingProvider
from meshflow.models import AutoLinkResult
from meshflow.service import NodeService


@pytest.fixture
def service(store, linker) -> NodeService:
    return NodeService(store, HashEmbeddingProvider(dimensions=64), linker)


class TestNodeService:
    """Tests for NodeService."""

    @pytest.mark.asyncio
    async def test_save_embeds_and_links(self, service, store) -> None:
        await service.save_node(make_node("a", title="Python asyncio tips", content="event loop"))
        await service.save_node(make_node("b", title="Python asyncio tips", content="event loop"))
        await service.drain()

        assert (await store.get_node("a")).has_embedding
        edges = await store.get_edges(WORKSPACE)
        assert len(edges) == 1
        assert edges[0].key == {"a", "b"}

    @pytest.mark.asyncio
    async def test_unchanged_text_not_reembedded(self, store, linker, mock_embedding_provider) -> None:
        service = NodeService(store, mock_embedding_provider, linker)
        node = make_node("a", title="Note", content="body")

        await service.save_node(node)
        node.x, node.y = 10.0, 20.0
        await service.save_node(node)
        await service.drain()

        assert mock_embedding_provider.embed.await_count == 1

    @pytest.mark.asyncio
    async def test_changed_text_reembedded(self, store, linker, mock_embedding_provider) -> None:
        service = NodeService(store, mock_embedding_provider, linker)
        await service.save_node(make_node("a", title="Note", content="body"))
        await service.save_node(make_node("a", title="Note", content="new body"))
        await service.drain()

        assert mock_embedding_provider.embed.await_count == 2

    @pytest.mark.asyncio
    async def test_stored_node_edited_in_place_reembedded(self, service, store) -> None:
        await service.save_node(make_node("a", title="Python asyncio", content="event loop"))

        node = await store.get_node("a")
        node.title = "Sourdough bread"
        node.content = "flour water salt"
        await service.save_node(node)
        await service.drain()

        expected = await HashEmbeddingProvider(dimensions=64).embed("Sourdough bread\nflour water salt")
        assert (await store.get_node("a")).embedding == pytest.approx(expected)

    @pytest.mark.asyncio
    async def test_in_place_edit_schedules_link(self, store) -> None:
        linker = AsyncMock()
        linker.link.return_value = AutoLinkResult(node_id="a")
        service = NodeService(store, HashEmbeddingProvider(dimensions=16), linker)

        await service.save_node(make_node("a", title="Note", content="body"))
        node = await store.get_node("a")
        node.content = "rewritten body"
        await service.save_node(node)
        await service.drain()

        assert linker.link.await_count == 2

    @pytest.mark.asyncio
    async def test_persisted_before_embedding(self, store, linker) -> None:
        seen = []

        async def embed(text):
            stored = await store.get_node("a")
            seen.append(stored.content if stored else None)
            return [1.0] * 16

        provider = AsyncMock()
        provider.embed.side_effect = embed
        service = NodeService(store, provider, linker)

        await service.save_node(make_node("a", title="Note", content="draft"))
        await service.drain()

        assert seen == ["draft"]
        assert (await store.get_node("a")).embedding == [1.0] * 16

    @pytest.mark.asyncio
    async def test_link_failure_does_not_fail_save(self, store) -> None:
        linker = AsyncMock()
        linker.link.side_effect = RuntimeError("boom")
        service = NodeService(store, HashEmbeddingProvider(dimensions=16), linker)

        saved = await service.save_node(make_node("a", title="Note"))
        await service.drain()

        assert saved.has_embedding
        assert await store.get_node("a") is saved

    @pytest.mark.asyncio
    async def test_drain_returns_after_links(self, store) -> None:
        linker = AsyncMock()
        linker.link.return_value = AutoLinkResult(node_id="a")
        service = NodeService(store, HashEmbeddingProvider(dimensions=16), linker)

        await service.save_node(make_node("a", title="Note"))
        await service.drain()

        linker.link.assert_awaited_once()
