"""Prompt quality assessment and optimization.

Prompts are scored on six quality dimensions, opportunities are derived from
weak dimensions, and enhancement techniques are kept only when they raise the
overall score by more than the configured threshold.

Example usage:
    from promptmaster_server.core.optimizer import OptimizationContext, OptimizationEngine

    engine = OptimizationEngine()
    result = await engine.optimize(
        "Write a product description.",
        OptimizationContext(domain="marketing", user_level="beginner"),
    )

    print(result.optimized_prompt)
    print(result.quality_improvement.after.level)

    # Outside an event loop
    from promptmaster_server.core.optimizer import optimize

    result = optimize("Write a product description.")
"""

from .aggregator import QualityAggregator
from .config import OptimizerConfig, load_optimizer_config
from .engine import OptimizationEngine, optimize
from .opportunities import OpportunityIdentifier
from .techniques import TechniqueKind, TechniqueRegistry
from .types import (
    AppliedOptimization,
    Dimension,
    DimensionAssessment,
    OptimizationContext,
    OptimizationOpportunity,
    OptimizationResult,
    QualityAssessment,
    QualityImprovement,
)

__all__ = [
    # Main engine
    "OptimizationEngine",
    "optimize",
    # Pipeline stages
    "QualityAggregator",
    "OpportunityIdentifier",
    "TechniqueKind",
    "TechniqueRegistry",
    # Configuration
    "OptimizerConfig",
    "load_optimizer_config",
    # Types
    "AppliedOptimization",
    "Dimension",
    "DimensionAssessment",
    "OptimizationContext",
    "OptimizationOpportunity",
    "OptimizationResult",
    "QualityAssessment",
    "QualityImprovement",
]
