"""Data models for the prompt quality and optimization pipeline."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Dimension(str, Enum):
    """Quality dimensions, in canonical assessment order."""

    CLARITY = "clarity"
    SPECIFICITY = "specificity"
    STRUCTURE = "structure"
    CONTEXT_ADEQUACY = "contextAdequacy"
    CONSTRAINT_CLARITY = "constraintClarity"
    OUTPUT_SPECIFICATION = "outputSpecification"


QualityLevel = Literal["poor", "fair", "good", "excellent"]


class OptimizationContext(BaseModel):
    """Caller-supplied context that steers assessment and techniques."""

    model_config = ConfigDict(frozen=True)

    ai_provider: str = "openai"
    """Target AI provider (openai, anthropic, google, azure, gemini, ...)."""

    user_level: str | None = "intermediate"
    """Expertise of the prompt author: beginner, intermediate or expert."""

    target_audience: str | None = None
    """Who the generated output is for."""

    domain: str | None = None
    """Subject area of the request (e.g. 'marketing', 'finance')."""

    output_format: str | None = None
    """Preferred output format for the output specification technique."""


class DimensionAssessment(BaseModel):
    """Score and findings for a single quality dimension."""

    model_config = ConfigDict(frozen=True)

    dimension: Dimension
    score: float = Field(ge=0.0, le=1.0)
    issues: list[str] = []
    suggestions: list[str] = []


class Benchmarks(BaseModel):
    """Reference scores reported next to every assessment."""

    model_config = ConfigDict(frozen=True)

    industry_average: float = 0.75
    top_performing: float = 0.90


class QualityAssessment(BaseModel):
    """Aggregated quality of a prompt across all dimensions."""

    score: float = Field(ge=0.0, le=1.0)
    """Weighted sum of the dimension scores."""

    dimension_scores: dict[Dimension, float]
    """Score per dimension, always containing all six dimensions."""

    level: QualityLevel
    """Qualitative band derived from the overall score."""

    issues: list[str] = []
    suggestions: list[str] = []
    benchmarks: Benchmarks = Field(default_factory=Benchmarks)


class OptimizationOpportunity(BaseModel):
    """A detected gap in prompt quality and the techniques that may close it."""

    type: str
    description: str
    potential_improvement: float
    techniques: list[str]


class AppliedOptimization(BaseModel):
    """A technique application that was kept by the optimization loop."""

    type: str
    technique: str
    description: str
    original_segment: str
    """Excerpt of the prompt before the technique was applied."""

    optimized_segment: str
    """Excerpt of the prompt after the technique was applied."""

    improvement: float
    """Measured gain in overall score over the previously accepted prompt."""

    cost_impact: float = 0.0
    """Estimated change in input cost (USD) per request."""


class QualityImprovement(BaseModel):
    """Quality of the prompt before and after optimization."""

    before: QualityAssessment
    after: QualityAssessment


class OptimizationResult(BaseModel):
    """Result of optimizing a single prompt."""

    original_prompt: str
    optimized_prompt: str
    improvement: float
    """Overall score of the final prompt minus that of the original."""

    applied_optimizations: list[AppliedOptimization] = []
    quality_improvement: QualityImprovement
    suggestions: list[str] = []
    cost_impact: float = 0.0
    processing_time_ms: float = 0.0
    request_id: str | None = None
