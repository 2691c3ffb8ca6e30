#!/usr/bin/env python3
"""Compute layout positions (and optionally clusters) for a workspace snapshot.

This script:
1. Reads nodes and edges from a JSON snapshot ({"nodes": [...], "edges": [...]})
2. Embeds nodes that have no embedding yet (with --embed)
3. Runs a layout strategy
4. Optionally clusters nodes and pushes clusters apart
5. Writes {node_id: {"x", "y", "cluster"}} as JSON

Usage:
    python scripts/compute_layout.py snapshot.json
    python scripts/compute_layout.py snapshot.json --strategy radial --center n1
    python scripts/compute_layout.py snapshot.json --cluster --separation 2.5 -o positions.json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from meshflow.embeddings import get_embedding_provider
from meshflow.graph import ClusterEngine
from meshflow.layout import LayoutEngine, LayoutStrategy, separate_clusters
from meshflow.models import Edge, Node

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def load_snapshot(path: Path) -> tuple[list[Node], list[Edge]]:
    """Load nodes and edges from a snapshot file."""
    data = json.loads(path.read_text(encoding="utf-8"))
    nodes = [Node.from_dict(n) for n in data.get("nodes", [])]
    edges = [Edge.from_dict(e) for e in data.get("edges", [])]
    return nodes, edges


async def embed_missing(nodes: list[Node]) -> int:
    """Embed nodes without an embedding using the configured provider."""
    missing = [n for n in nodes if not n.has_embedding]
    if not missing:
        return 0

    provider = get_embedding_provider()
    logger.info(f"Embedding {len(missing)} nodes with {provider.name} provider...")
    for node in missing:
        node.embedding = await provider.embed_node(node)
    return len(missing)


async def compute(args: argparse.Namespace) -> dict:
    nodes, edges = load_snapshot(args.snapshot)
    logger.info(f"Loaded {len(nodes)} nodes, {len(edges)} edges")

    if args.embed:
        await embed_missing(nodes)

    logger.info(f"Computing {args.strategy} layout...")
    positions = LayoutEngine().compute(
        args.strategy,
        nodes,
        edges,
        center_id=args.center,
        root_id=args.root,
    )

    node_clusters: dict[str, str] = {}
    if args.cluster:
        logger.info("Clustering nodes...")
        clusters = ClusterEngine().cluster(nodes)
        for cluster in clusters:
            for node_id in cluster.node_ids:
                node_clusters[node_id] = cluster.id
        logger.info(f"Found {len(clusters)} clusters")

        logger.info(f"Separating clusters with factor {args.separation}...")
        positions = separate_clusters(positions, node_clusters, args.separation)

    if positions:
        xs = [p.x for p in positions.values()]
        ys = [p.y for p in positions.values()]
        logger.info(
            f"Bounding box: x=[{min(xs):.1f}, {max(xs):.1f}], "
            f"y=[{min(ys):.1f}, {max(ys):.1f}]"
        )

    return {
        node_id: {"x": pos.x, "y": pos.y, "cluster": node_clusters.get(node_id)}
        for node_id, pos in positions.items()
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Compute layout positions for a workspace snapshot")
    parser.add_argument("snapshot", type=Path, help="JSON file with nodes and edges")
    parser.add_argument(
        "--strategy",
        default=LayoutStrategy.FORCE_DIRECTED.value,
        choices=[s.value for s in LayoutStrategy],
    )
    parser.add_argument("--center", help="Center node ID (radial)")
    parser.add_argument("--root", help="Root node ID (hierarchical)")
    parser.add_argument("--embed", action="store_true", help="Embed nodes without embeddings")
    parser.add_argument("--cluster", action="store_true", help="Cluster nodes and separate clusters")
    parser.add_argument("--separation", type=float, default=2.0, help="Cluster separation factor")
    parser.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")
    args = parser.parse_args()

    try:
        result = asyncio.run(compute(args))
    except (OSError, ValueError) as e:
        logger.error(f"Layout failed: {e}")
        return 1

    payload = json.dumps(result, indent=2)
    if args.output:
        args.output.write_text(payload, encoding="utf-8")
        logger.info(f"Done! {len(result)} positions written to {args.output}")
    else:
        sys.stdout.write(payload + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
