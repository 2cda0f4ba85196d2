"""Main orchestrator for prompt optimization."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import TYPE_CHECKING, Any, Mapping, Optional

from pydantic import ValidationError

from ...config import Settings, get_settings
from ..exceptions import ExternalCallError, InvalidInput, StorageError, UnknownTechnique
from ..llm.registry import BackendRegistry
from ..token_pricing import TokenPricingService, estimate_tokens, get_pricing_service
from .aggregator import QualityAggregator
from .config import OptimizerConfig, load_optimizer_config
from .opportunities import OpportunityIdentifier
from .techniques import TechniqueRegistry
from .types import (
    AppliedOptimization,
    OptimizationContext,
    OptimizationOpportunity,
    OptimizationResult,
    QualityAssessment,
    QualityImprovement,
)

if TYPE_CHECKING:
    from ..result_store import ResultStore

logger = logging.getLogger(__name__)


class OptimizationEngine:
    """Orchestrates assessment, opportunity detection and the accept/reject loop."""

    def __init__(
        self,
        config: OptimizerConfig | None = None,
        techniques: TechniqueRegistry | None = None,
        aggregator: QualityAggregator | None = None,
        identifier: OpportunityIdentifier | None = None,
        store: Optional[ResultStore] = None,
        pricing: TokenPricingService | None = None,
    ):
        """
        Initialize optimization engine.

        Args:
            config: Optimizer configuration (defaults to the bundled configuration)
            techniques: Technique registry (defaults to one without an AI backend)
            aggregator: Quality aggregator built from ``config`` when None
            identifier: Opportunity identifier built from ``config`` when None
            store: Optional result store; results are not persisted when None
            pricing: Pricing service used for cost impact estimates
        """
        self.config = config or load_optimizer_config()
        self.techniques = techniques or TechniqueRegistry()
        self.aggregator = aggregator or QualityAggregator(self.config)
        self.identifier = identifier or OpportunityIdentifier(self.config)
        self.store = store
        self.pricing = pricing or get_pricing_service()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "OptimizationEngine":
        """Build an engine from application settings.

        The first configured AI backend powers ``ai_rewrite``; results are
        persisted when ``database_url`` is set.
        """
        from ..database import create_db_engine
        from ..result_store import SQLResultStore

        settings = settings or get_settings()
        config = load_optimizer_config(settings.optimizer_config_path)

        registry = BackendRegistry(settings)
        backend = registry.get_backend() if registry.has_backends() else None
        techniques = TechniqueRegistry(
            backend,
            model=settings.rewrite_model,
            timeout=settings.technique_timeout_seconds,
        )

        store = None
        if settings.database_url:
            store = SQLResultStore(create_db_engine(settings.database_url))

        return cls(config, techniques, store=store)

    def assess(
        self, prompt: Any, context: OptimizationContext | Mapping[str, Any] | None = None
    ) -> QualityAssessment:
        """Assess prompt quality without optimizing."""
        return self.aggregator.assess(_coerce_prompt(prompt), _coerce_context(context))

    async def optimize(
        self,
        prompt: Any,
        context: OptimizationContext | Mapping[str, Any] | None = None,
        *,
        request_id: str | None = None,
    ) -> OptimizationResult:
        """
        Optimize a prompt.

        Process:
        1. Assess the original prompt on every quality dimension
        2. Identify opportunities from the original assessment
        3. For each opportunity, apply its first technique to the current prompt
           and keep the result only if the overall score rises by more than the
           acceptance threshold
        4. Assess the final prompt and build the result

        Args:
            prompt: Prompt text (None is treated as an empty prompt)
            context: Optimization context or a mapping of its fields
            request_id: Identifier for logging and persistence (generated when None)

        Returns:
            Optimization result with before/after assessments

        Raises:
            InvalidInput: If the prompt is not a string or the context is not a mapping
        """
        start = time.perf_counter()
        prompt = _coerce_prompt(prompt)
        context = _coerce_context(context)
        request_id = request_id or str(uuid.uuid4())

        logger.info(f"Optimizing prompt {request_id} ({len(prompt)} chars)")

        before = self.aggregator.assess(prompt, context)
        current_prompt = prompt
        current = before
        applied: list[AppliedOptimization] = []

        if prompt.strip():
            for opportunity in self.identifier.identify(prompt, before):
                outcome = await self._try_opportunity(opportunity, current_prompt, current, context)
                if outcome is None:
                    continue
                optimization, current_prompt, current = outcome
                applied.append(optimization)

        after = self.aggregator.assess(current_prompt, context)

        result = OptimizationResult(
            original_prompt=prompt,
            optimized_prompt=current_prompt,
            improvement=after.score - before.score,
            applied_optimizations=applied,
            quality_improvement=QualityImprovement(before=before, after=after),
            suggestions=list(dict.fromkeys(after.suggestions)),
            cost_impact=self._cost_impact(prompt, current_prompt, context),
            processing_time_ms=(time.perf_counter() - start) * 1000,
            request_id=request_id,
        )

        logger.info(
            f"Optimized prompt {request_id}: score {before.score:.3f} -> {after.score:.3f}, "
            f"{len(applied)} technique(s) applied"
        )

        if self.store is not None:
            try:
                self.store.save(request_id, result)
            except StorageError:
                logger.error(f"Failed to store result {request_id}", exc_info=True)

        return result

    async def _try_opportunity(
        self,
        opportunity: OptimizationOpportunity,
        prompt: str,
        current: QualityAssessment,
        context: OptimizationContext,
    ) -> tuple[AppliedOptimization, str, QualityAssessment] | None:
        """Run one trial; returns the accepted optimization, prompt and assessment."""
        if not opportunity.techniques:
            return None
        technique = opportunity.techniques[0]

        try:
            candidate = await self.techniques.apply(technique, prompt, context)
        except UnknownTechnique as e:
            logger.warning(f"Skipping {opportunity.type}: {e}")
            return None
        except ExternalCallError as e:
            logger.warning(f"Skipping {opportunity.type}: technique {technique} failed: {e}")
            return None

        trial = self.aggregator.assess(candidate, context)
        gain = trial.score - current.score
        if gain <= self.config.acceptance_threshold:
            logger.debug(
                f"Rejected {technique} for {opportunity.type}: gain {gain:.4f} "
                f"<= {self.config.acceptance_threshold}"
            )
            return None

        excerpt = self.config.excerpt_length
        optimization = AppliedOptimization(
            type=opportunity.type,
            technique=technique,
            description=opportunity.description,
            original_segment=prompt[:excerpt],
            optimized_segment=candidate[:excerpt],
            improvement=gain,
            cost_impact=self._cost_impact(prompt, candidate, context),
        )
        return optimization, candidate, trial

    def _cost_impact(self, before: str, after: str, context: OptimizationContext) -> float:
        """Input cost delta (USD) of sending ``after`` instead of ``before``."""
        delta = estimate_tokens(after) - estimate_tokens(before)
        cost = self.pricing.calculate_cost(context.ai_provider, None, delta, 0)
        return cost or 0.0


def _coerce_prompt(prompt: Any) -> str:
    if prompt is None:
        return ""
    if not isinstance(prompt, str):
        raise InvalidInput(f"Prompt must be a string, got {type(prompt).__name__}")
    return prompt


def _coerce_context(context: OptimizationContext | Mapping[str, Any] | None) -> OptimizationContext:
    if context is None:
        return OptimizationContext()
    if isinstance(context, OptimizationContext):
        return context
    if not isinstance(context, Mapping):
        raise InvalidInput(f"Context must be a mapping, got {type(context).__name__}")
    # Unknown keys and non-string values count as absent
    fields = {
        key: value
        for key, value in context.items()
        if key in OptimizationContext.model_fields
        and (isinstance(value, str) or (value is None and key != "ai_provider"))
    }
    try:
        return OptimizationContext.model_validate(fields)
    except ValidationError as e:
        raise InvalidInput(f"Invalid optimization context: {e}") from e


def optimize(
    prompt: Any,
    context: OptimizationContext | Mapping[str, Any] | None = None,
    *,
    engine: OptimizationEngine | None = None,
    request_id: str | None = None,
) -> OptimizationResult:
    """Synchronous entry point; runs the engine on a fresh event loop.

    Raises:
        RuntimeError: If called while an event loop is running in this thread;
            use ``await OptimizationEngine.optimize(...)`` there instead
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError(
            "optimize() cannot run inside an event loop; "
            "await OptimizationEngine.optimize(...) instead"
        )
    engine = engine or OptimizationEngine()
    return asyncio.run(engine.optimize(prompt, context, request_id=request_id))
