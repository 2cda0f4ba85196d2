"""Rule-based identification of optimization opportunities."""

from .config import OptimizerConfig, load_optimizer_config
from .types import OptimizationOpportunity, QualityAssessment


class OpportunityIdentifier:
    """Evaluates the configured rule table against a quality assessment."""

    def __init__(self, config: OptimizerConfig | None = None):
        self.config = config or load_optimizer_config()

    def identify(self, prompt: str, quality: QualityAssessment) -> list[OptimizationOpportunity]:
        """
        Propose opportunities for dimensions scoring below their rule threshold.

        Args:
            prompt: The assessed prompt
            quality: Its quality assessment

        Returns:
            Opportunities ranked by potential improvement, highest first; ties
            keep rule table order
        """
        opportunities = [
            OptimizationOpportunity(
                type=rule.type,
                description=rule.description,
                potential_improvement=rule.potential_improvement,
                techniques=list(rule.techniques),
            )
            for rule in self.config.rules
            if quality.dimension_scores.get(rule.dimension, 0.0) < rule.threshold
        ]
        # sorted() is stable, including with reverse=True
        return sorted(opportunities, key=lambda o: o.potential_improvement, reverse=True)
