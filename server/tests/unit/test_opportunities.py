"""Unit tests for opportunity identification."""

from promptmaster_server.core.optimizer import OpportunityIdentifier
from promptmaster_server.core.optimizer.config import OpportunityRule
from promptmaster_server.core.optimizer.types import Dimension, OptimizationContext

STRONG_PROMPT = (
    "You are an expert. Create a detailed report with the following requirements: "
    "must include X. Format: JSON.\n\n"
    "Audience: finance analysts, so that they can review quarterly results. "
    "For example, list revenue by region. Do not include speculation. Length: 200 words."
)


def test_ranked_by_potential_improvement(optimizer_config, aggregator, default_context):
    quality = aggregator.assess("Write something.", default_context)

    opportunities = OpportunityIdentifier(optimizer_config).identify("Write something.", quality)

    assert [o.type for o in opportunities] == [
        "context_enrichment",
        "clarity_enhancement",
        "specificity_enhancement",
    ]
    assert [o.potential_improvement for o in opportunities] == [0.18, 0.15, 0.12]
    assert opportunities[1].techniques == ["role_based_enhancement", "clarity_enhancement"]


def test_no_opportunities_for_strong_prompt(optimizer_config, aggregator):
    context = OptimizationContext(domain="finance", user_level="expert")
    quality = aggregator.assess(STRONG_PROMPT, context)

    assert OpportunityIdentifier(optimizer_config).identify(STRONG_PROMPT, quality) == []


def test_threshold_is_strict(optimizer_config, aggregator, default_context):
    rule = OpportunityRule(
        type="structure_pass",
        dimension=Dimension.STRUCTURE,
        threshold=1 / 3,
        potential_improvement=0.1,
        description="Structure",
        techniques=("chain_of_thought",),
    )
    config = optimizer_config.model_copy(update={"rules": (rule,)})
    quality = aggregator.assess("Write something", default_context)

    assert quality.dimension_scores[Dimension.STRUCTURE] == 1 / 3
    assert OpportunityIdentifier(config).identify("Write something", quality) == []


def test_ties_keep_rule_order(optimizer_config, aggregator, default_context):
    rules = tuple(
        OpportunityRule(
            type=name,
            dimension=Dimension.OUTPUT_SPECIFICATION,
            threshold=0.5,
            potential_improvement=0.1,
            description=name,
            techniques=("output_specification",),
        )
        for name in ("first", "second", "third")
    )
    config = optimizer_config.model_copy(update={"rules": rules})
    quality = aggregator.assess("Write something.", default_context)

    opportunities = OpportunityIdentifier(config).identify("Write something.", quality)

    assert [o.type for o in opportunities] == ["first", "second", "third"]
