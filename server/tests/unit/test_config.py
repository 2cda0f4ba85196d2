"""Tests for optimizer and application configuration."""

import pytest
from pydantic import ValidationError

from promptmaster_server.config import Settings
from promptmaster_server.core.exceptions import ConfigurationError
from promptmaster_server.core.optimizer import OptimizerConfig
from promptmaster_server.core.optimizer.config import (
    LevelThresholds,
    load_optimizer_config,
    read_bundled_yaml,
)
from promptmaster_server.core.optimizer.types import Dimension


class TestOptimizerConfig:
    def test_bundled_defaults(self):
        config = load_optimizer_config()

        assert config.weights[Dimension.CLARITY] == pytest.approx(0.25)
        assert config.weights[Dimension.CONTEXT_ADEQUACY] == pytest.approx(0.20)
        assert config.acceptance_threshold == pytest.approx(0.05)
        assert config.excerpt_length == 50
        assert [r.type for r in config.rules] == [
            "clarity_enhancement",
            "specificity_enhancement",
            "context_enrichment",
        ]

    def test_missing_weight(self):
        data = read_bundled_yaml("optimizer.yaml")
        del data["weights"]["structure"]

        with pytest.raises(ConfigurationError, match="weights missing for dimensions: structure"):
            OptimizerConfig.from_dict(data)

    def test_unbalanced_weights(self):
        data = read_bundled_yaml("optimizer.yaml")
        data["weights"]["clarity"] = 0.5

        with pytest.raises(ConfigurationError, match="weights must sum to 1.0"):
            OptimizerConfig.from_dict(data)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read optimizer config"):
            load_optimizer_config(tmp_path / "absent.yaml")

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "optimizer.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError, match="mapping at the top level"):
            load_optimizer_config(path)

    def test_frozen(self):
        config = load_optimizer_config()

        with pytest.raises(ValidationError):
            config.acceptance_threshold = 0.5


class TestLevelThresholds:
    @pytest.mark.parametrize(
        "score,level",
        [(0.0, "poor"), (0.45, "fair"), (0.65, "good"), (0.85, "excellent"), (1.0, "excellent")],
    )
    def test_level_for(self, score, level):
        assert LevelThresholds().level_for(score) == level

    def test_unordered(self):
        with pytest.raises(ValidationError):
            LevelThresholds(poor=0.7, fair=0.6, good=0.8)


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.technique_timeout_seconds == 30.0
        assert settings.azure_openai_deployment_name == "gpt-4o-mini"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("PROMPTMASTER_DATABASE_URL", "sqlite:///:memory:")
        monkeypatch.setenv("PROMPTMASTER_TECHNIQUE_TIMEOUT_SECONDS", "2.5")

        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite:///:memory:"
        assert settings.technique_timeout_seconds == 2.5
