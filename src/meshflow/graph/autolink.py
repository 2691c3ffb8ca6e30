"""Automatic linking of semantically similar nodes.

Triggered whenever a node's embedding is (re)computed:

1. Rank the other embedded nodes of the workspace by cosine similarity
2. Matches >= auto_link_threshold become edge directives, top
   ``max_auto_links`` only, minus pairs that are already connected
3. Matches in [suggest_threshold, auto_link_threshold) become suggestions

The cap is applied before dedup, so an unchanged node re-run against the
edges it produced yields nothing new.
"""

import asyncio
import logging
import weakref
from collections.abc import Iterable

from meshflow.graph.config import AutoLinkConfig
from meshflow.graph.similarity import find_similar
from meshflow.models import AutoLinkResult, Edge, EdgeDirective, Node, edge_key
from meshflow.storage import DuplicateEdgeError, GraphStore

logger = logging.getLogger(__name__)


class AutoLinker:
    """Decides and persists auto-links for a node."""

    def __init__(self, config: AutoLinkConfig | None = None) -> None:
        self.config = config or AutoLinkConfig.from_settings()
        # One writer at a time per workspace, dropped once no pass holds or awaits it
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, workspace_id: str) -> asyncio.Lock:
        lock = self._locks.get(workspace_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[workspace_id] = lock
        return lock

    def plan(
        self,
        node: Node,
        nodes: Iterable[Node],
        edges: Iterable[Edge],
    ) -> AutoLinkResult:
        """
        Compute edge directives and suggestions for a node (no side effects).

        Args:
            node: Node whose embedding changed
            nodes: Snapshot of nodes (other workspaces are ignored)
            edges: Snapshot of existing edges

        Returns:
            AutoLinkResult with directives and suggestions
        """
        result = AutoLinkResult(node_id=node.id)
        if not node.has_embedding:
            logger.debug(f"Node {node.id} has no embedding, nothing to link")
            return result

        candidates = [n for n in nodes if n.workspace_id == node.workspace_id]
        existing = {
            e.key for e in edges
            if e.workspace_id == node.workspace_id
        }

        matches = find_similar(
            node.embedding,
            candidates,
            threshold=self.config.suggest_threshold,
            exclude_id=node.id,
        )

        link_matches = [
            m for m in matches if m.score >= self.config.auto_link_threshold
        ][: self.config.max_auto_links]

        for match in link_matches:
            key = edge_key(node.id, match.node_id)
            if key in existing:
                result.skipped_existing += 1
                continue
            existing.add(key)
            result.directives.append(
                EdgeDirective(
                    workspace_id=node.workspace_id,
                    source=node.id,
                    target=match.node_id,
                    similarity=match.score,
                )
            )

        result.suggestions = [
            m for m in matches
            if m.score < self.config.auto_link_threshold
            and edge_key(node.id, m.node_id) not in existing
        ]

        logger.debug(
            f"Auto-link plan for {node.id}: {len(result.directives)} new, "
            f"{result.skipped_existing} existing, {len(result.suggestions)} suggested"
        )
        return result

    async def link(self, node: Node, store: GraphStore) -> AutoLinkResult:
        """
        Plan and persist auto-links for a node. Best-effort, never raises.

        The workspace snapshot is read inside the per-workspace lock, so two
        concurrent passes cannot create divergent edge sets.

        Args:
            node: Node whose embedding changed
            store: Persistence collaborator

        Returns:
            AutoLinkResult with created/failed counts filled in
        """
        async with self._lock_for(node.workspace_id):
            try:
                nodes = await store.get_nodes(node.workspace_id)
                edges = await store.get_edges(node.workspace_id)
                result = self.plan(node, nodes, edges)
            except Exception as e:
                logger.warning(f"Auto-link planning failed for node {node.id}: {e}")
                return AutoLinkResult(node_id=node.id)

            for directive in result.directives:
                try:
                    await store.create_edge(directive)
                    result.created += 1
                except DuplicateEdgeError:
                    result.skipped_existing += 1
                    logger.debug(
                        f"Edge {directive.source} - {directive.target} appeared concurrently"
                    )
                except Exception as e:
                    result.failed += 1
                    logger.warning(
                        f"Failed to create edge {directive.source} -> {directive.target}: {e}"
                    )

        if result.created or result.failed:
            logger.info(
                f"Auto-linked node {node.id}: {result.created} created, "
                f"{result.failed} failed, {len(result.suggestions)} suggestions"
            )
        return result
