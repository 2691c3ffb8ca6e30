"""Remote embeddings over an OpenAI-compatible ``/embeddings`` endpoint."""

import logging
from collections.abc import Sequence

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from meshflow.config import settings
from meshflow.embeddings.base import EmbeddingProvider

logger = logging.getLogger(__name__)


class RemoteEmbeddingProvider(EmbeddingProvider):
    """Embedding provider backed by an OpenAI-compatible HTTP API.

    A missing API key is treated as a provider failure, so callers get the
    hash fallback instead of an error. Each HTTP attempt gets an equal share
    of ``timeout``, so a stalled endpoint frees its pool worker around the
    time the async wrapper gives up.
    """

    name = "remote"
    max_retries = 2

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        api_key: str | None = None,
        dimensions: int | None = None,
        timeout: float | None = None,
        max_chars: int | None = None,
    ) -> None:
        super().__init__(dimensions=dimensions, timeout=timeout, max_chars=max_chars)
        self.base_url = (base_url or settings.embedding_base_url).rstrip("/")
        self.model = model or settings.embedding_model
        self.api_key = api_key if api_key is not None else settings.embedding_api_key
        self._session: requests.Session | None = None

    def _get_session(self) -> requests.Session:
        """Get or create requests session with connection pooling."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            })
            adapter = HTTPAdapter(
                pool_connections=settings.embedding_max_concurrent,
                pool_maxsize=settings.embedding_max_concurrent * 2,
                max_retries=Retry(total=self.max_retries, backoff_factor=0.5),
            )
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)
        return self._session

    @property
    def request_timeout(self) -> float:
        """Timeout for a single HTTP attempt."""
        return self.timeout / (self.max_retries + 1)

    def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def _request(self, inputs: str | list[str]) -> list[list[float]]:
        if not self.api_key:
            raise RuntimeError("embedding API key is not configured")

        payload = {
            "model": self.model,
            "input": inputs,
            "dimensions": self.dimensions,
        }
        response = self._get_session().post(
            f"{self.base_url}/embeddings",
            json=payload,
            timeout=self.request_timeout,
        )
        response.raise_for_status()
        data = response.json().get("data", [])
        if not data:
            raise ValueError("embedding API returned no data")

        # Results carry their input index; order is not guaranteed
        data = sorted(data, key=lambda item: item.get("index", 0))
        return [item["embedding"] for item in data]

    def embed_sync(self, text: str) -> list[float]:
        """Generate embedding for a single text (synchronous)."""
        return self._request(text)[0]

    def embed_batch_sync(self, texts: Sequence[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts in one request."""
        if not texts:
            return []
        # The API rejects empty strings
        cleaned = [t if t.strip() else " " for t in texts]
        return self._request(cleaned)
