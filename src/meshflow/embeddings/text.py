"""Text extraction for node content.

Node content is either a plain string or a rich-document tree produced by the
editor, e.g.::

    {"type": "doc", "content": [
        {"type": "paragraph", "content": [
            {"type": "text", "text": "Hello", "marks": [{"type": "bold"}]},
        ]},
    ]}

Only leaf text nodes carry text; marks and attributes are formatting.
"""

from typing import Any


def extract_text(content: Any) -> str:
    """Extract plain text from node content.

    Args:
        content: Plain string, rich-document tree, list of blocks, or None

    Returns:
        Leaf texts joined with single spaces
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    _collect_text(content, parts)
    return " ".join(p for p in parts if p)


def _collect_text(node: Any, parts: list[str]) -> None:
    """Depth-first walk appending leaf text to parts."""
    if isinstance(node, list):
        for child in node:
            _collect_text(child, parts)
        return
    if not isinstance(node, dict):
        return

    if node.get("type") == "text":
        text = node.get("text")
        if isinstance(text, str):
            parts.append(text)
        return

    children = node.get("content")
    if isinstance(children, (list, dict)):
        _collect_text(children, parts)


def node_text(title: str | None, content: Any) -> str:
    """Text that represents a node for embedding: title, then body."""
    body = extract_text(content)
    title = title or ""
    if not body:
        return title
    return f"{title}\n{body}"
