"""Model catalogue and prompt-aware model selection."""

from __future__ import annotations

import logging
import math
import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...config import Settings, get_settings
from ...data import read_text
from ..exceptions import ConfigurationError, ExternalCallError
from .provider import AIBackend, GenerationResult, generate_with_timeout

logger = logging.getLogger(__name__)

PromptComplexity = Literal["simple", "moderate", "complex"]

# Completion size assumed when estimating usage and cost
ASSUMED_COMPLETION_TOKENS = 200

# Calls remembered per model for ranking
HISTORY_SIZE = 100


def assess_prompt_complexity(prompt: str) -> PromptComplexity:
    """Classify a prompt by word count and design-oriented vocabulary."""
    word_count = len(prompt.split())
    lowered = prompt.lower()
    if word_count > 150 and ("design" in lowered or "architecture" in lowered):
        return "complex"
    if word_count > 50:
        return "moderate"
    return "simple"


class ModelConfig(BaseModel):
    """A routable model and its static characteristics."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    key: str
    name: str
    provider: str
    model: str
    strengths: tuple[str, ...] = ()
    max_tokens: int
    cost_per_token: float
    input_cost_per_token: float | None = None
    output_cost_per_token: float | None = None
    average_latency_ms: float
    quality_score: float = Field(ge=0.0, le=1.0)
    supported_features: tuple[str, ...] = ()


class ModelRequirements(BaseModel):
    """Constraints a selected model has to satisfy."""

    quality: float | None = None
    max_latency_ms: float | None = None
    features: list[str] = []
    cost_preference: Literal["low", "medium", "high"] | None = None


class EstimatedPerformance(BaseModel):
    response_time_ms: float
    quality_score: float
    token_usage: int


class CostEstimate(BaseModel):
    total_cost: float
    input_cost: float
    output_cost: float
    currency: str = "USD"


class ModelSelection(BaseModel):
    """Outcome of routing a prompt to a model."""

    selected_model: ModelConfig
    alternatives: list[ModelConfig]
    reasoning: str
    expected_performance: EstimatedPerformance
    cost_estimate: CostEstimate


@dataclass
class ModelPerformance:
    """One recorded call to a model."""

    processing_time_ms: float
    success: bool
    tokens_used: Optional[int] = None
    quality: Optional[float] = None
    error: Optional[str] = None


def load_model_catalog(path: str | Path | None = None) -> Mapping[str, ModelConfig]:
    """Load the model catalogue from ``path`` or the bundled defaults."""
    try:
        text = read_text("models.yaml") if path is None else Path(path).read_text(encoding="utf-8")
        data = yaml.safe_load(text)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot load model catalogue {path or 'models.yaml'}: {e}") from e

    entries = (data or {}).get("models") if isinstance(data, dict) else None
    if not isinstance(entries, dict) or not entries:
        raise ConfigurationError("Model catalogue must define a non-empty 'models' mapping")

    catalog: dict[str, ModelConfig] = {}
    for key, entry in entries.items():
        try:
            catalog[key] = ModelConfig.model_validate({"key": key, **(entry or {})})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid model '{key}': {e}") from e
    return MappingProxyType(catalog)


class ModelRouter:
    """Selects models for prompts and runs prompts against AI backends."""

    def __init__(
        self,
        catalog: Mapping[str, ModelConfig] | None = None,
        *,
        min_fit: float = 0.3,
        history_size: int = HISTORY_SIZE,
    ):
        """
        Initialize the router.

        Args:
            catalog: Model key -> ModelConfig (defaults to the bundled catalogue)
            min_fit: Minimum prompt-fit score a model needs to be a candidate
            history_size: Most recent calls kept per model
        """
        self.catalog = catalog if catalog is not None else load_model_catalog()
        self.min_fit = min_fit
        self.history_size = history_size
        self._performance: dict[str, deque[ModelPerformance]] = {
            key: deque(maxlen=history_size) for key in self.catalog
        }

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ModelRouter":
        settings = settings or get_settings()
        return cls(load_model_catalog(settings.models_path))

    def select_model(self, prompt: str, requirements: ModelRequirements | None = None) -> ModelSelection:
        """
        Pick the best model for a prompt.

        Args:
            prompt: Prompt text the model will receive
            requirements: Quality, latency, feature and cost constraints

        Returns:
            ModelSelection with the best model and up to three alternatives

        Raises:
            ConfigurationError: If no model satisfies the requirements
        """
        requirements = requirements or ModelRequirements()
        candidates = self._candidates(prompt, requirements)
        if not candidates:
            raise ConfigurationError("No AI models found that meet the requirements.")

        ranked = sorted(
            candidates,
            key=lambda m: (-self._rank_score(m, prompt, requirements), -m.quality_score),
        )
        best = ranked[0]
        return ModelSelection(
            selected_model=best,
            alternatives=ranked[1:4],
            reasoning=self._reasoning(best, requirements),
            expected_performance=self.estimate_performance(best, prompt),
            cost_estimate=self.estimate_cost(best, prompt),
        )

    async def process_prompt(
        self,
        prompt: str,
        model_config: ModelConfig,
        backend: AIBackend,
        *,
        timeout: float | None = None,
        score_response: Callable[[str], float] | None = None,
        **options: Any,
    ) -> GenerationResult:
        """
        Send a prompt to a backend and record the call's performance.

        Failures and timeouts are reported as unsuccessful results rather
        than raised. When ``score_response`` is given it rates the content of
        successful responses in [0, 1]; the rating feeds later rankings.
        """
        start = time.perf_counter()
        try:
            result = await generate_with_timeout(
                backend, prompt, timeout=timeout, model=model_config.model, **options
            )
        except ExternalCallError as e:
            logger.warning(f"Call to {model_config.name} failed: {e}")
            result = GenerationResult(
                content="",
                tokens_used=0,
                latency_ms=0,
                model=model_config.model,
                provider=model_config.provider,
                success=False,
                error=str(e),
            )

        elapsed_ms = (time.perf_counter() - start) * 1000
        result.latency_ms = int(elapsed_ms)
        quality = None
        if score_response is not None and result.success:
            quality = max(0.0, min(1.0, score_response(result.content)))
        self.record_performance(
            model_config.key,
            ModelPerformance(
                processing_time_ms=elapsed_ms,
                success=result.success,
                tokens_used=result.tokens_used if result.success else None,
                quality=quality,
                error=result.error,
            ),
        )
        return result

    def record_performance(self, model_key: str, performance: ModelPerformance) -> None:
        self._performance.setdefault(model_key, deque(maxlen=self.history_size)).append(performance)

    def average_performance(self, model: ModelConfig) -> dict[str, float]:
        """Average quality, latency and success rate of recorded calls."""
        records = self._performance.get(model.key) or []
        if not records:
            return {"quality": model.quality_score, "latency": model.average_latency_ms, "success_rate": 1.0}

        qualities = [r.quality for r in records if r.quality is not None]
        return {
            "quality": sum(qualities) / len(qualities) if qualities else model.quality_score,
            "latency": sum(r.processing_time_ms for r in records) / len(records),
            "success_rate": sum(1 for r in records if r.success) / len(records),
        }

    def estimate_performance(self, model: ModelConfig, prompt: str) -> EstimatedPerformance:
        tokens = math.ceil(len(prompt) / 4) + ASSUMED_COMPLETION_TOKENS
        return EstimatedPerformance(
            response_time_ms=model.average_latency_ms + tokens / 10,
            quality_score=model.quality_score,
            token_usage=tokens,
        )

    def estimate_cost(self, model: ModelConfig, prompt: str) -> CostEstimate:
        prompt_tokens = math.ceil(len(prompt) / 4)
        input_rate = model.input_cost_per_token if model.input_cost_per_token is not None else model.cost_per_token
        output_rate = model.output_cost_per_token if model.output_cost_per_token is not None else model.cost_per_token
        input_cost = prompt_tokens * input_rate
        output_cost = ASSUMED_COMPLETION_TOKENS * output_rate
        return CostEstimate(total_cost=input_cost + output_cost, input_cost=input_cost, output_cost=output_cost)

    def _candidates(self, prompt: str, requirements: ModelRequirements) -> list[ModelConfig]:
        candidates = []
        for model in self.catalog.values():
            if requirements.quality is not None and model.quality_score < requirements.quality:
                continue
            if requirements.max_latency_ms is not None and model.average_latency_ms > requirements.max_latency_ms:
                continue
            if not all(feature in model.supported_features for feature in requirements.features):
                continue
            if not self._matches_cost_preference(model, requirements.cost_preference):
                continue
            if self._prompt_fit(model, prompt) > self.min_fit:
                candidates.append(model)
        return candidates

    @staticmethod
    def _matches_cost_preference(model: ModelConfig, preference: str | None) -> bool:
        if preference == "low":
            return model.cost_per_token <= 0.0002
        if preference == "medium":
            return 0.0002 < model.cost_per_token <= 0.0005
        if preference == "high":
            return model.cost_per_token > 0.0005
        return True

    @staticmethod
    def _prompt_fit(model: ModelConfig, prompt: str) -> float:
        """Score in [0, 1] of how well a model's strengths match a prompt."""
        lowered = prompt.lower()
        score = 0.0

        if ("code" in lowered or "programming" in lowered) and "coding" in model.strengths:
            score += 0.4
        if ("creative" in lowered or "story" in lowered) and "creativity" in model.strengths:
            score += 0.3
        if ("analyze" in lowered or "research" in lowered) and "analysis" in model.strengths:
            score += 0.3
        if assess_prompt_complexity(prompt) == "complex" and "reasoning" in model.strengths:
            score += 0.2
        # Long prompts need a larger context window
        if len(prompt) > 1000 and model.max_tokens < 5000:
            score -= 0.2

        return max(0.0, min(1.0, score))

    def _rank_score(self, model: ModelConfig, prompt: str, requirements: ModelRequirements) -> float:
        score = self._prompt_fit(model, prompt)
        history = self.average_performance(model)
        score += history["quality"] * 0.2 - history["latency"] / 1000 * 0.1
        if requirements.quality is not None:
            score += 0.3 if model.quality_score >= requirements.quality else -0.3
        return score

    @staticmethod
    def _reasoning(model: ModelConfig, requirements: ModelRequirements) -> str:
        reason = (
            f"Selected {model.name} ({model.provider}) because of its strengths in "
            f"{', '.join(model.strengths)}."
        )
        if requirements.quality is not None and model.quality_score >= requirements.quality:
            reason += f" It meets the minimum quality requirement of {requirements.quality}."
        return reason
