"""Unit tests for embedding providers."""

import time
from unittest.mock import MagicMock

import numpy as np
import pytest

from conftest import make_node
from meshflow.config import EmbeddingBackend, Settings
from meshflow.embeddings import (
    HashEmbeddingProvider,
    LocalEmbeddingProvider,
    RemoteEmbeddingProvider,
    extract_text,
    get_embedding_provider,
    hash_embedding,
    node_text,
)
from meshflow.graph import cosine_similarity


class TestExtractText:
    """Tests for rich-document text extraction."""

    def test_plain_string(self) -> None:
        assert extract_text("hello world") == "hello world"

    def test_none(self) -> None:
        assert extract_text(None) == ""

    def test_rich_document(self) -> None:
        doc = {
            "type": "doc",
            "content": [
                {
                    "type": "paragraph",
                    "content": [
                        {"type": "text", "text": "Hello", "marks": [{"type": "bold"}]},
                        {"type": "text", "text": "world"},
                    ],
                },
                {"type": "heading", "attrs": {"level": 2}, "content": [{"type": "text", "text": "Next"}]},
                {"type": "horizontalRule"},
            ],
        }
        assert extract_text(doc) == "Hello world Next"

    def test_list_of_blocks(self) -> None:
        blocks = [{"type": "text", "text": "a"}, {"type": "paragraph", "content": [{"type": "text", "text": "b"}]}]
        assert extract_text(blocks) == "a b"

    def test_node_text(self) -> None:
        assert node_text("Title", "Body") == "Title\nBody"
        assert node_text("Title", None) == "Title"
        assert node_text(None, "Body") == "\nBody"


class TestHashEmbedding:
    """Tests for the deterministic fallback vector."""

    def test_dimension_and_norm(self) -> None:
        vector = hash_embedding("graph notes and links", 64)
        assert len(vector) == 64
        assert np.linalg.norm(vector) == pytest.approx(1.0)

    def test_deterministic(self) -> None:
        assert hash_embedding("same text", 32) == hash_embedding("same text", 32)

    def test_case_insensitive(self) -> None:
        assert hash_embedding("Python Tips", 32) == hash_embedding("python tips", 32)

    def test_empty_text_is_zero(self) -> None:
        vector = hash_embedding("", 16)
        assert vector == [0.0] * 16
        assert cosine_similarity(vector, hash_embedding("anything", 16)) == 0.0

    def test_shared_words_are_similar(self) -> None:
        a = hash_embedding("python asyncio event loop tutorial", 256)
        b = hash_embedding("python asyncio event loop guide", 256)
        c = hash_embedding("sourdough bread baking flour", 256)
        assert cosine_similarity(a, b) > cosine_similarity(a, c)


class TestHashProvider:
    """Tests for the async provider contract using the hash provider."""

    @pytest.mark.asyncio
    async def test_embed_returns_list(self, hash_provider) -> None:
        embedding = await hash_provider.embed("test text")
        assert isinstance(embedding, list)
        assert len(embedding) == 64
        assert all(isinstance(x, float) for x in embedding)

    @pytest.mark.asyncio
    async def test_embed_batch(self, hash_provider) -> None:
        texts = ["text one", "text two", ""]
        embeddings = await hash_provider.embed_batch(texts)
        assert len(embeddings) == 3
        assert embeddings[0] == hash_embedding("text one", 64)
        assert embeddings[2] == [0.0] * 64

    @pytest.mark.asyncio
    async def test_embed_batch_empty(self, hash_provider) -> None:
        assert await hash_provider.embed_batch([]) == []

    @pytest.mark.asyncio
    async def test_truncates_input(self) -> None:
        provider = HashEmbeddingProvider(dimensions=32, max_chars=5)
        assert await provider.embed("hello world") == hash_embedding("hello", 32)

    @pytest.mark.asyncio
    async def test_embed_node(self, hash_provider) -> None:
        node = make_node("a", title="Title", content={"type": "doc", "content": [{"type": "text", "text": "Body"}]})
        assert await hash_provider.embed_node(node) == hash_embedding("Title\nBody", 64)


class _FailingProvider(HashEmbeddingProvider):
    name = "failing"

    def embed_sync(self, text: str) -> list[float]:
        raise RuntimeError("quota exceeded")


class _SlowProvider(HashEmbeddingProvider):
    name = "slow"

    def embed_sync(self, text: str) -> list[float]:
        time.sleep(0.5)
        return [1.0] * self.dimensions


class _WrongSizeProvider(HashEmbeddingProvider):
    name = "wrong-size"

    def embed_sync(self, text: str) -> list[float]:
        return [1.0, 0.0]


class TestFallback:
    """Provider failures degrade to the hash vector, never raise."""

    @pytest.mark.asyncio
    async def test_error_falls_back(self) -> None:
        provider = _FailingProvider(dimensions=16)
        assert await provider.embed("notes") == hash_embedding("notes", 16)

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self) -> None:
        provider = _SlowProvider(dimensions=16, timeout=0.05)
        assert await provider.embed("notes") == hash_embedding("notes", 16)

    @pytest.mark.asyncio
    async def test_wrong_dimension_falls_back(self) -> None:
        provider = _WrongSizeProvider(dimensions=16)
        assert await provider.embed("notes") == hash_embedding("notes", 16)

    @pytest.mark.asyncio
    async def test_batch_error_falls_back(self) -> None:
        provider = _FailingProvider(dimensions=16)
        vectors = await provider.embed_batch(["a b", "c"])
        assert vectors == [hash_embedding("a b", 16), hash_embedding("c", 16)]


class TestRemoteProvider:
    """Tests for the OpenAI-compatible provider (HTTP mocked)."""

    @pytest.mark.asyncio
    async def test_missing_api_key_falls_back(self) -> None:
        provider = RemoteEmbeddingProvider(api_key="", dimensions=8)
        assert await provider.embed("hello") == hash_embedding("hello", 8)

    @pytest.mark.asyncio
    async def test_successful_request(self) -> None:
        provider = RemoteEmbeddingProvider(
            base_url="http://embeddings.local/v1/",
            model="test-model",
            api_key="secret",
            dimensions=3,
        )
        response = MagicMock()
        response.json.return_value = {
            "data": [
                {"index": 1, "embedding": [0.0, 1.0, 0.0]},
                {"index": 0, "embedding": [1.0, 0.0, 0.0]},
            ]
        }
        session = MagicMock()
        session.post.return_value = response
        provider._session = session

        vectors = await provider.embed_batch(["first", "second"])

        assert vectors == [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]
        url = session.post.call_args.args[0]
        payload = session.post.call_args.kwargs["json"]
        assert url == "http://embeddings.local/v1/embeddings"
        assert payload == {"model": "test-model", "input": ["first", "second"], "dimensions": 3}

    @pytest.mark.asyncio
    async def test_attempts_fit_within_timeout(self) -> None:
        provider = RemoteEmbeddingProvider(api_key="secret", dimensions=1, timeout=9.0)
        response = MagicMock()
        response.json.return_value = {"data": [{"index": 0, "embedding": [1.0]}]}
        session = MagicMock()
        session.post.return_value = response
        provider._session = session

        await provider.embed("hello")

        request_timeout = session.post.call_args.kwargs["timeout"]
        assert request_timeout == pytest.approx(3.0)
        assert request_timeout * (provider.max_retries + 1) <= provider.timeout

    @pytest.mark.asyncio
    async def test_http_error_falls_back(self) -> None:
        provider = RemoteEmbeddingProvider(api_key="secret", dimensions=8)
        session = MagicMock()
        session.post.side_effect = ConnectionError("refused")
        provider._session = session

        assert await provider.embed("hello") == hash_embedding("hello", 8)

    def test_close(self) -> None:
        provider = RemoteEmbeddingProvider(api_key="secret", dimensions=8)
        session = MagicMock()
        provider._session = session
        provider.close()
        session.close.assert_called_once()
        assert provider._session is None


class TestLocalProvider:
    """Tests for the sentence-transformers provider (model mocked)."""

    @pytest.mark.asyncio
    async def test_uses_loaded_model(self) -> None:
        provider = LocalEmbeddingProvider(model_name="mini", dimensions=2)
        model = MagicMock()
        model.encode.return_value = np.array([0.6, 0.8])
        provider._model = model

        assert await provider.embed("hello") == [0.6, 0.8]
        assert model.encode.call_args.kwargs["normalize_embeddings"] is True


class TestProviderFactory:
    """Tests for backend selection."""

    @pytest.mark.parametrize(
        "backend, provider_type",
        [
            (EmbeddingBackend.HASH, HashEmbeddingProvider),
            (EmbeddingBackend.REMOTE, RemoteEmbeddingProvider),
            (EmbeddingBackend.LOCAL, LocalEmbeddingProvider),
        ],
    )
    def test_backend(self, backend, provider_type) -> None:
        provider = get_embedding_provider(Settings(embedding_backend=backend, embedding_dimensions=32))
        assert type(provider) is provider_type
        assert provider.dimensions == 32
