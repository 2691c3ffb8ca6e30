"""Fuzzy node search and keyword-based connection suggestions.

Both work on text alone, so they are available for nodes that have no
embedding yet.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

import jellyfish

from meshflow.embeddings.text import extract_text
from meshflow.models import Node

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"\w+", re.UNICODE)

# Field weights: a title hit counts more than a body hit
FIELD_WEIGHTS = {"title": 1.0, "tags": 0.9, "content": 0.8}

MIN_KEYWORD_LENGTH = 4
MAX_KEYWORD_CONFIDENCE = 0.9


@dataclass
class SearchResult:
    """A node matching a search query."""

    node: Node
    score: float  # 0.0 - 1.0, higher is better


@dataclass
class ConnectionSuggestion:
    """A node suggested as related by shared keywords."""

    node_id: str
    reason: str
    confidence: float


def _field_score(query: str, text: str) -> float:
    """Best match of query against text: substring hit, else per-word Jaro-Winkler."""
    text = text.lower()
    if not text:
        return 0.0
    if query in text:
        return 1.0
    words = _WORD_RE.findall(text)
    if not words:
        return 0.0
    return max(jellyfish.jaro_winkler_similarity(query, word) for word in words)


def score_node(query: str, node: Node) -> float:
    """Weighted best field score of a node for a lowercase query."""
    fields = {
        "title": node.title or "",
        "tags": " ".join(node.tags),
        "content": extract_text(node.content),
    }
    return max(
        FIELD_WEIGHTS[name] * _field_score(query, text)
        for name, text in fields.items()
    )


def search_nodes(
    query: str,
    nodes: Iterable[Node],
    threshold: float = 0.3,
    limit: int = 10,
) -> list[SearchResult]:
    """
    Fuzzy search over node titles, tags and content.

    Args:
        query: Search text
        nodes: Nodes to search
        threshold: Fuzziness, 0.0 = exact matches only, 1.0 = anything
        limit: Maximum number of results

    Returns:
        Matches sorted by score (descending)
    """
    query = query.strip().lower()
    if not query:
        return []

    min_score = 1.0 - threshold
    results = []
    for node in nodes:
        score = score_node(query, node)
        if score >= min_score:
            results.append(SearchResult(node=node, score=score))

    results.sort(key=lambda r: r.score, reverse=True)
    return results[:limit]


def suggest_connections_by_keywords(
    content: str,
    nodes: Iterable[Node],
    exclude_id: str | None = None,
    limit: int = 5,
) -> list[ConnectionSuggestion]:
    """
    Suggest related nodes by counting shared keywords.

    Words shorter than four characters are ignored. Confidence is the share
    of the content's keywords found in the node, capped at 0.9.
    """
    words = [
        w for w in _WORD_RE.findall(content.lower())
        if len(w) >= MIN_KEYWORD_LENGTH
    ]
    if not words:
        return []

    suggestions = []
    for node in nodes:
        if node.id == exclude_id:
            continue
        node_words = set(
            _WORD_RE.findall(f"{node.title} {extract_text(node.content)}".lower())
        )
        matches = sum(1 for w in words if w in node_words)
        if matches == 0:
            continue
        suggestions.append(
            ConnectionSuggestion(
                node_id=node.id,
                reason=f"Shared keywords ({matches} matches)",
                confidence=min(matches / len(words), MAX_KEYWORD_CONFIDENCE),
            )
        )

    suggestions.sort(key=lambda s: s.confidence, reverse=True)
    logger.debug(f"Keyword suggestions: {len(suggestions)} candidates, returning {limit}")
    return suggestions[:limit]
