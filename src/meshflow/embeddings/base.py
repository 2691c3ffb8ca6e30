"""Embedding provider contract and the deterministic hash fallback.

Every provider exposes ``async embed(text)`` which never raises: remote
timeouts, quota errors, missing credentials or a wrong vector size all
degrade to a stable hash-based vector of the same dimension.
"""

import asyncio
import hashlib
import logging
import re
import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from meshflow.config import settings
from meshflow.embeddings.text import node_text
from meshflow.models import Node

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)

# Shared thread pool for blocking provider calls
_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()


def get_executor() -> ThreadPoolExecutor:
    """Get shared thread pool executor."""
    global _executor
    with _executor_lock:
        if _executor is None:
            max_workers = min(32, settings.embedding_max_concurrent * 2)
            _executor = ThreadPoolExecutor(max_workers=max_workers)
            logger.info(f"Created embedding thread pool with {max_workers} workers")
        return _executor


def hash_embedding(text: str, dimensions: int) -> list[float]:
    """Deterministic bag-of-words vector, L2-normalized.

    Each lowercase token is hashed (md5, stable across processes) into one of
    ``dimensions`` buckets with a hash-derived sign. Text without tokens maps
    to the zero vector, whose similarity to anything is 0.
    """
    vector = np.zeros(dimensions, dtype=np.float64)
    for token in _TOKEN_RE.findall(text.lower()):
        digest = hashlib.md5(token.encode("utf-8")).digest()
        index = int.from_bytes(digest[:4], "little") % dimensions
        sign = 1.0 if digest[4] & 1 else -1.0
        vector[index] += sign

    norm = np.linalg.norm(vector)
    if norm > 0:
        vector /= norm
    return vector.tolist()


class EmbeddingProvider(ABC):
    """Converts text to a fixed-length vector.

    Subclasses implement the blocking ``embed_sync`` / ``embed_batch_sync``;
    the async wrappers run them on the shared pool with a timeout and fall
    back to ``hash_embedding`` on any failure.

    A timeout only abandons the result: the blocking call keeps its pool
    worker until it returns, so ``embed_sync`` should bound its own I/O
    (see ``RemoteEmbeddingProvider.request_timeout``).
    """

    name: str = "base"

    def __init__(
        self,
        dimensions: int | None = None,
        timeout: float | None = None,
        max_chars: int | None = None,
    ) -> None:
        self._dimensions = dimensions or settings.embedding_dimensions
        self.timeout = timeout or settings.embedding_timeout
        self.max_chars = max_chars or settings.embedding_max_chars

    @property
    def dimensions(self) -> int:
        """Embedding dimension D."""
        return self._dimensions

    @abstractmethod
    def embed_sync(self, text: str) -> list[float]:
        """Generate embedding for a single text (synchronous, may raise)."""

    def embed_batch_sync(self, texts: Sequence[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts (synchronous, may raise)."""
        return [self.embed_sync(t) for t in texts]

    def fallback(self, text: str) -> list[float]:
        """Hash-based vector used whenever the provider fails."""
        return hash_embedding(text, self.dimensions)

    def _prepare(self, text: str) -> str:
        return (text or "")[: self.max_chars]

    def _check(self, vector: Sequence[float]) -> list[float]:
        if len(vector) != self.dimensions:
            raise ValueError(
                f"{self.name} returned {len(vector)} dims, expected {self.dimensions}"
            )
        return [float(v) for v in vector]

    async def embed(self, text: str) -> list[float]:
        """Generate embedding for a single text (async, never raises)."""
        text = self._prepare(text)
        if not text.strip():
            return self.fallback(text)

        loop = asyncio.get_running_loop()
        try:
            vector = await asyncio.wait_for(
                loop.run_in_executor(get_executor(), self.embed_sync, text),
                timeout=self.timeout,
            )
            return self._check(vector)
        except asyncio.TimeoutError:
            logger.warning(
                f"{self.name} embedding timed out after {self.timeout}s, using hash fallback"
            )
        except Exception as e:
            logger.warning(f"{self.name} embedding failed: {e}, using hash fallback")
        return self.fallback(text)

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts (async, never raises)."""
        if not texts:
            return []
        prepared = [self._prepare(t) for t in texts]

        loop = asyncio.get_running_loop()
        try:
            vectors = await asyncio.wait_for(
                loop.run_in_executor(get_executor(), self.embed_batch_sync, prepared),
                timeout=self.timeout,
            )
            if len(vectors) != len(prepared):
                raise ValueError(
                    f"got {len(vectors)} embeddings for {len(prepared)} texts"
                )
            return [
                self._check(v) if t.strip() else self.fallback(t)
                for t, v in zip(prepared, vectors)
            ]
        except asyncio.TimeoutError:
            logger.warning(
                f"{self.name} batch embedding timed out after {self.timeout}s, using hash fallback"
            )
        except Exception as e:
            logger.warning(f"{self.name} batch embedding failed: {e}, using hash fallback")
        return [self.fallback(t) for t in prepared]

    async def embed_node(self, node: Node) -> list[float]:
        """Embed a node's title and extracted content."""
        return await self.embed(node_text(node.title, node.content))


class HashEmbeddingProvider(EmbeddingProvider):
    """Provider that only uses the deterministic fallback (dev and tests)."""

    name = "hash"

    def embed_sync(self, text: str) -> list[float]:
        return hash_embedding(text, self.dimensions)
