"""Local embeddings using sentence-transformers (HuggingFace models)."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import TYPE_CHECKING

from meshflow.config import settings
from meshflow.embeddings.base import EmbeddingProvider

if TYPE_CHECKING:
    from sentence_transformers import SentenceTransformer

logger = logging.getLogger(__name__)


class LocalEmbeddingProvider(EmbeddingProvider):
    """Embedding provider running a sentence-transformers model in-process.

    The model is loaded lazily on first use and shared by all calls.
    """

    name = "local"

    def __init__(
        self,
        model_name: str | None = None,
        dimensions: int | None = None,
        timeout: float | None = None,
        max_chars: int | None = None,
    ) -> None:
        super().__init__(dimensions=dimensions, timeout=timeout, max_chars=max_chars)
        self.model_name = model_name or settings.local_embedding_model
        self._model: SentenceTransformer | None = None
        self._model_lock = threading.Lock()

    def load_model(self) -> None:
        """Explicitly load the embedding model. Thread-safe."""
        with self._model_lock:
            if self._model is not None:
                return

            import torch
            from sentence_transformers import SentenceTransformer

            device = "cuda" if torch.cuda.is_available() else "cpu"
            logger.info(f"Loading embedding model: {self.model_name} on {device}")
            self._model = SentenceTransformer(self.model_name, device=device)

            model_dims = self._model.get_sentence_embedding_dimension()
            if model_dims != self.dimensions:
                logger.warning(
                    f"Model {self.model_name} produces {model_dims} dims but "
                    f"{self.dimensions} are configured; every call will fall back"
                )
            logger.info(f"Embedding model loaded. Dimensions: {model_dims}")

    def _get_model(self) -> SentenceTransformer:
        """Get the embedding model, loading it if necessary."""
        if self._model is None:
            self.load_model()
        return self._model

    def embed_sync(self, text: str) -> list[float]:
        """Generate embedding for a single text (synchronous)."""
        model = self._get_model()
        embedding = model.encode(text, convert_to_numpy=True, normalize_embeddings=True)
        return embedding.tolist()

    def embed_batch_sync(self, texts: Sequence[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts (synchronous)."""
        if not texts:
            return []
        model = self._get_model()
        # Some models fail on empty input
        cleaned = [t if t.strip() else " " for t in texts]
        embeddings = model.encode(
            cleaned,
            convert_to_numpy=True,
            normalize_embeddings=True,
            show_progress_bar=len(cleaned) > 100,
        )
        return embeddings.tolist()
