"""Optimizer configuration: weights, thresholds and the opportunity rule table."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ...data import read_text
from ..exceptions import ConfigurationError
from .types import Benchmarks, Dimension, QualityLevel

DEFAULT_CONFIG_RESOURCE = "optimizer.yaml"


class OpportunityRule(BaseModel):
    """Emit an opportunity when a dimension score falls below a threshold."""

    model_config = ConfigDict(frozen=True)

    type: str
    dimension: Dimension
    threshold: float = Field(ge=0.0, le=1.0)
    potential_improvement: float = Field(ge=0.0, le=1.0)
    description: str
    techniques: tuple[str, ...]


class LevelThresholds(BaseModel):
    """Upper bounds (exclusive) of the poor, fair and good quality bands."""

    model_config = ConfigDict(frozen=True)

    poor: float = 0.4
    fair: float = 0.6
    good: float = 0.8

    @model_validator(mode="after")
    def _check_order(self) -> "LevelThresholds":
        if not self.poor <= self.fair <= self.good:
            raise ValueError("level thresholds must be ordered poor <= fair <= good")
        return self

    def level_for(self, score: float) -> QualityLevel:
        if score < self.poor:
            return "poor"
        if score < self.fair:
            return "fair"
        if score < self.good:
            return "good"
        return "excellent"


class OptimizerConfig(BaseModel):
    """Immutable configuration for one optimizer instance."""

    model_config = ConfigDict(frozen=True)

    weights: dict[Dimension, float]
    levels: LevelThresholds = Field(default_factory=LevelThresholds)
    acceptance_threshold: float = 0.05
    excerpt_length: int = 50
    benchmarks: Benchmarks = Field(default_factory=Benchmarks)
    rules: tuple[OpportunityRule, ...] = ()

    @model_validator(mode="after")
    def _check_weights(self) -> "OptimizerConfig":
        missing = [d.value for d in Dimension if d not in self.weights]
        if missing:
            raise ValueError(f"weights missing for dimensions: {', '.join(missing)}")
        total = math.fsum(self.weights.values())
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"weights must sum to 1.0, got {total}")
        return self

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OptimizerConfig":
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid optimizer configuration: {e}") from e

    @classmethod
    def from_yaml(cls, path: str | Path) -> "OptimizerConfig":
        """Load configuration from a YAML file."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read optimizer config {path}: {e}") from e
        return cls.from_dict(_parse_yaml(text, str(path)))


def _parse_yaml(text: str, source: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"YAML parse error in {source}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{source} must contain a mapping at the top level")
    return data


def read_bundled_yaml(name: str) -> dict[str, Any]:
    """Read one of the YAML data files shipped with the package."""
    return _parse_yaml(read_text(name), name)


def load_optimizer_config(path: str | Path | None = None) -> OptimizerConfig:
    """Load the optimizer configuration from ``path`` or the bundled defaults."""
    if path is not None:
        return OptimizerConfig.from_yaml(path)
    return OptimizerConfig.from_dict(read_bundled_yaml(DEFAULT_CONFIG_RESOURCE))
