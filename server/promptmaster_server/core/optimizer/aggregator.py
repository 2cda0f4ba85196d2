"""Combine dimension assessments into an overall quality assessment."""

import logging
import math
from typing import Iterable, Mapping

from ..exceptions import AssessmentFailure
from .assessors import ASSESSORS, Assessor
from .config import OptimizerConfig, load_optimizer_config
from .types import Dimension, DimensionAssessment, OptimizationContext, QualityAssessment

logger = logging.getLogger(__name__)


class QualityAggregator:
    """Runs the dimension assessors and aggregates their scores."""

    def __init__(
        self,
        config: OptimizerConfig | None = None,
        assessors: Mapping[Dimension, Assessor] | None = None,
    ):
        """
        Initialize the aggregator.

        Args:
            config: Optimizer configuration providing weights, level bands and
                benchmarks (defaults to the bundled configuration)
            assessors: Dispatch table from dimension to assessor (defaults to
                the built-in heuristic assessors)
        """
        self.config = config or load_optimizer_config()
        self.assessors = assessors if assessors is not None else ASSESSORS

    def assess(self, prompt: str, context: OptimizationContext) -> QualityAssessment:
        """Assess a prompt on every dimension and aggregate the result."""
        return self.aggregate(self.assess_dimensions(prompt, context))

    def assess_dimensions(
        self, prompt: str, context: OptimizationContext
    ) -> list[DimensionAssessment]:
        """
        Run every assessor in canonical dimension order.

        An assessor that raises, or a dimension without an assessor, scores 0
        with a synthetic issue instead of aborting the assessment.
        """
        assessments = []
        for dimension in Dimension:
            assessor = self.assessors.get(dimension)
            try:
                if assessor is None:
                    raise AssessmentFailure(dimension.value, "no assessor registered")
                try:
                    assessment = assessor(prompt, context)
                except Exception as e:
                    raise AssessmentFailure(dimension.value, e) from e
            except AssessmentFailure as failure:
                logger.warning(f"Scoring {dimension.value} as 0: {failure}")
                assessment = DimensionAssessment(
                    dimension=dimension, score=0.0, issues=[str(failure)]
                )
            assessments.append(assessment)
        return assessments

    def aggregate(self, assessments: Iterable[DimensionAssessment]) -> QualityAssessment:
        """
        Aggregate dimension assessments with the configured weights.

        Issues and suggestions are concatenated in canonical dimension order
        regardless of the order of ``assessments``.

        Args:
            assessments: One assessment per dimension; missing dimensions score 0

        Returns:
            QualityAssessment with overall score, level and findings
        """
        by_dimension = {assessment.dimension: assessment for assessment in assessments}

        dimension_scores: dict[Dimension, float] = {}
        issues: list[str] = []
        suggestions: list[str] = []
        for dimension in Dimension:
            assessment = by_dimension.get(dimension)
            if assessment is None:
                dimension_scores[dimension] = 0.0
                continue
            dimension_scores[dimension] = assessment.score
            issues.extend(assessment.issues)
            suggestions.extend(assessment.suggestions)

        overall = math.fsum(
            dimension_scores[dimension] * self.config.weights[dimension] for dimension in Dimension
        )
        overall = min(1.0, max(0.0, overall))

        return QualityAssessment(
            score=overall,
            dimension_scores=dimension_scores,
            level=self.config.levels.level_for(overall),
            issues=issues,
            suggestions=suggestions,
            benchmarks=self.config.benchmarks,
        )
