"""Unit tests for settings and engine configs."""

import pytest
from pydantic import ValidationError

from meshflow.config import EmbeddingBackend, Settings, get_prod_settings, get_test_settings
from meshflow.graph import ClusterConfig
from meshflow.layout import AnimationConfig, LayoutConfig


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self) -> None:
        config = Settings()
        assert config.auto_link_threshold == 0.82
        assert config.suggest_threshold == 0.68
        assert config.max_auto_links == 5
        assert config.link_distance == 150.0
        assert config.collision_radius == 50.0
        assert config.animation_duration == 2.0

    def test_env_prefix(self, monkeypatch) -> None:
        monkeypatch.setenv("MESHFLOW_AUTO_LINK_THRESHOLD", "0.9")
        monkeypatch.setenv("MESHFLOW_EMBEDDING_BACKEND", "remote")
        config = Settings()
        assert config.auto_link_threshold == 0.9
        assert config.embedding_backend == EmbeddingBackend.REMOTE

    def test_suggest_above_auto_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(auto_link_threshold=0.6, suggest_threshold=0.7)

    def test_threshold_range(self) -> None:
        with pytest.raises(ValidationError):
            Settings(auto_link_threshold=1.5)

    def test_presets(self) -> None:
        assert get_test_settings().embedding_backend == EmbeddingBackend.HASH
        assert get_prod_settings().embedding_backend == EmbeddingBackend.REMOTE


class TestEngineConfigs:
    """Tests for from_settings on engine configs."""

    def test_layout_config(self, test_settings) -> None:
        config = LayoutConfig.from_settings(test_settings)
        assert config.width == test_settings.layout_width
        assert config.ticks == test_settings.layout_ticks

    def test_animation_config(self, test_settings) -> None:
        config = AnimationConfig.from_settings(test_settings)
        assert config.duration == 0.05
        assert config.fps == 100

    def test_cluster_config(self, test_settings) -> None:
        config = ClusterConfig.from_settings(test_settings)
        assert config.seed == 42
