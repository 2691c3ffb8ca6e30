"""Unit tests for fuzzy search and keyword suggestions."""

import pytest

from conftest import make_node
from meshflow.search import search_nodes, suggest_connections_by_keywords


@pytest.fixture
def notes():
    return [
        make_node("docker", title="Docker basics", content="Containers and images", tags=["devops"]),
        make_node("bread", title="Sourdough", content={"type": "doc", "content": [{"type": "text", "text": "Starter and flour"}]}),
        make_node("k8s", title="Kubernetes", content="Orchestrating docker containers", tags=["devops"]),
    ]


class TestSearchNodes:
    """Tests for search_nodes."""

    def test_blank_query(self, notes) -> None:
        assert search_nodes("   ", notes) == []

    def test_title_match_ranks_first(self, notes) -> None:
        results = search_nodes("docker", notes)
        assert [r.node.id for r in results] == ["docker", "k8s"]
        assert results[0].score == pytest.approx(1.0)

    def test_case_insensitive(self, notes) -> None:
        assert [r.node.id for r in search_nodes("SOURDOUGH", notes)] == ["bread"]

    def test_rich_content_searched(self, notes) -> None:
        assert [r.node.id for r in search_nodes("flour", notes)] == ["bread"]

    def test_typo_tolerated(self, notes) -> None:
        results = search_nodes("kubernetse", notes)
        assert results and results[0].node.id == "k8s"

    def test_strict_threshold(self, notes) -> None:
        assert search_nodes("kubernetse", notes, threshold=0.0) == []

    def test_tags_searched(self, notes) -> None:
        ids = {r.node.id for r in search_nodes("devops", notes)}
        assert ids == {"docker", "k8s"}

    def test_limit(self, notes) -> None:
        assert len(search_nodes("devops", notes, limit=1)) == 1


class TestKeywordSuggestions:
    """Tests for suggest_connections_by_keywords."""

    def test_shared_keywords(self, notes) -> None:
        suggestions = suggest_connections_by_keywords("Orchestrating docker containers in production", notes)

        assert [s.node_id for s in suggestions] == ["k8s", "docker"]
        # k8s shares 3 of the 4 keywords, the docker note 2
        assert suggestions[0].confidence == pytest.approx(0.75)
        assert suggestions[1].confidence == pytest.approx(0.5)
        assert "3 matches" in suggestions[0].reason

    def test_short_words_ignored(self, notes) -> None:
        assert suggest_connections_by_keywords("and the of", notes) == []

    def test_exclude_self(self, notes) -> None:
        suggestions = suggest_connections_by_keywords("docker", notes, exclude_id="docker")
        assert [s.node_id for s in suggestions] == ["k8s"]

    def test_confidence_capped(self, notes) -> None:
        suggestions = suggest_connections_by_keywords("sourdough", notes)
        assert suggestions[0].confidence == pytest.approx(0.9)

    def test_limit(self) -> None:
        nodes = [make_node(f"n{i}", title="graph notes") for i in range(8)]
        assert len(suggest_connections_by_keywords("graph notes", nodes)) == 5
