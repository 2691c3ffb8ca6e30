"""Embedding providers for node text."""

from meshflow.config import EmbeddingBackend, Settings, settings
from meshflow.embeddings.base import (
    EmbeddingProvider,
    HashEmbeddingProvider,
    get_executor,
    hash_embedding,
)
from meshflow.embeddings.local import LocalEmbeddingProvider
from meshflow.embeddings.remote import RemoteEmbeddingProvider
from meshflow.embeddings.text import extract_text, node_text


def get_embedding_provider(config: Settings | None = None) -> EmbeddingProvider:
    """Build the provider selected by ``embedding_backend``."""
    config = config or settings
    common = {
        "dimensions": config.embedding_dimensions,
        "timeout": config.embedding_timeout,
        "max_chars": config.embedding_max_chars,
    }
    if config.embedding_backend == EmbeddingBackend.REMOTE:
        return RemoteEmbeddingProvider(
            base_url=config.embedding_base_url,
            model=config.embedding_model,
            api_key=config.embedding_api_key,
            **common,
        )
    if config.embedding_backend == EmbeddingBackend.LOCAL:
        return LocalEmbeddingProvider(model_name=config.local_embedding_model, **common)
    return HashEmbeddingProvider(**common)


__all__ = [
    "EmbeddingProvider",
    "HashEmbeddingProvider",
    "LocalEmbeddingProvider",
    "RemoteEmbeddingProvider",
    "extract_text",
    "get_embedding_provider",
    "get_executor",
    "hash_embedding",
    "node_text",
]
