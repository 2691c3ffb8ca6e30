"""Node save path: persist, re-embed on text change, auto-link in background."""

import asyncio
import hashlib
import logging

from meshflow.embeddings import EmbeddingProvider
from meshflow.embeddings.text import node_text
from meshflow.graph import AutoLinker
from meshflow.models import AutoLinkResult, Node
from meshflow.storage import GraphStore

logger = logging.getLogger(__name__)


def text_fingerprint(text: str) -> str:
    """Stable digest of the text an embedding was computed from."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()


class NodeService:
    """
    Ties the store, embedding provider and auto-linker together.

    Saving never fails because of embedding or linking: the node is stored
    first, and auto-linking runs as a background task.
    """

    def __init__(
        self,
        store: GraphStore,
        provider: EmbeddingProvider,
        linker: AutoLinker | None = None,
    ):
        self.store = store
        self.provider = provider
        self.linker = linker or AutoLinker()
        self._tasks: set[asyncio.Task] = set()
        # node id -> fingerprint of the text its current embedding was built from
        self._fingerprints: dict[str, str] = {}

    def _text_changed(self, node: Node, previous: Node | None, fingerprint: str) -> bool:
        if not node.has_embedding:
            return True
        known = self._fingerprints.get(node.id)
        if known is None:
            if previous is None:
                return True
            # The store may return the stored object itself, so it is only
            # trusted for nodes this service has not embedded yet
            known = text_fingerprint(node_text(previous.title, previous.content))
        return known != fingerprint

    async def save_node(self, node: Node) -> Node:
        """
        Persist a node, then re-embed it when its text changed.

        The node is stored before the embedding call and stored again once
        the new vector is set.

        Args:
            node: Node to create or update

        Returns:
            The saved node (with its embedding set if it was recomputed)
        """
        previous = await self.store.get_node(node.id)
        text = node_text(node.title, node.content)
        fingerprint = text_fingerprint(text)
        changed = self._text_changed(node, previous, fingerprint)

        await self.store.save_node(node)
        if not changed:
            return node

        # Provider falls back to the hash vector on any failure
        node.embedding = await self.provider.embed(text)
        self._fingerprints[node.id] = fingerprint
        await self.store.save_node(node)

        self._schedule_link(node)
        return node

    def _schedule_link(self, node: Node) -> None:
        task = asyncio.create_task(self._link(node))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _link(self, node: Node) -> AutoLinkResult:
        try:
            return await self.linker.link(node, self.store)
        except Exception as e:
            logger.error(f"Auto-link task for node {node.id} failed: {e}")
            return AutoLinkResult(node_id=node.id)

    async def drain(self) -> None:
        """Wait for all scheduled auto-link tasks."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
