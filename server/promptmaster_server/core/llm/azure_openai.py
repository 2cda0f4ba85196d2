"""Azure OpenAI backend used for AI-assisted rewrites and routed prompts."""

import time
from typing import Any, Mapping

from openai import AsyncAzureOpenAI

from ..exceptions import ExternalCallError
from ..token_pricing import get_pricing_service
from .provider import GenerationResult, ModelInfo
from .router import ModelConfig, load_model_catalog

PROVIDER = "azure_openai"

# Catalogue providers whose models an Azure OpenAI resource can host
OPENAI_FAMILY = frozenset({"openai", PROVIDER})


class AzureOpenAIBackend:
    """Sends prompts to the chat deployments of one Azure OpenAI resource."""

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        deployment_name: str,
        api_version: str = "2024-12-01-preview",
        catalog: Mapping[str, ModelConfig] | None = None,
    ):
        """
        Args:
            endpoint: Resource URL, e.g. "https://name.openai.azure.com/"
            api_key: Resource API key
            deployment_name: Deployment used when a call names no model
            api_version: Azure OpenAI API version
            catalog: Model catalogue describing hosted models (bundled when None)
        """
        self.endpoint = endpoint
        self.deployment_name = deployment_name
        self.catalog = catalog if catalog is not None else load_model_catalog()
        self.client = AsyncAzureOpenAI(
            azure_endpoint=endpoint,
            api_key=api_key,
            api_version=api_version,
        )

    async def generate(
        self, prompt: str, model: str | None = None, **kwargs: Any
    ) -> GenerationResult:
        """Run ``prompt`` as a single user message.

        Raises:
            ExternalCallError: If the request fails or the response has no usage block
        """
        deployment = model or self.deployment_name
        started = time.perf_counter()
        try:
            response = await self.client.chat.completions.create(
                model=deployment,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
        except Exception as e:
            raise ExternalCallError(f"Azure OpenAI execution failed: {e}") from e

        latency_ms = int((time.perf_counter() - started) * 1000)
        usage = response.usage
        if not usage:
            raise ExternalCallError("Azure OpenAI execution failed: No usage information in response")

        cost = get_pricing_service().calculate_cost(
            PROVIDER, deployment, usage.prompt_tokens, usage.completion_tokens
        )
        return GenerationResult(
            content=response.choices[0].message.content or "",
            tokens_used=usage.total_tokens,
            latency_ms=latency_ms,
            model=deployment,
            provider=PROVIDER,
            tokens_input=usage.prompt_tokens,
            tokens_output=usage.completion_tokens,
            cost_usd=round(cost, 6) if cost is not None else None,
        )

    def get_available_models(self) -> list[ModelInfo]:
        """OpenAI-family catalogue models, plus the default deployment if it is not one of them."""
        hosted = [config for config in self.catalog.values() if config.provider in OPENAI_FAMILY]
        models = [self._model_info(c.model, c.name, c.max_tokens) for c in hosted]
        if all(c.model != self.deployment_name for c in hosted):
            models.insert(0, self._model_info(self.deployment_name, self.deployment_name, None))
        return models

    def _model_info(self, model_id: str, name: str, max_tokens: int | None) -> ModelInfo:
        pricing = get_pricing_service().get_pricing(PROVIDER, model_id)
        input_cost, output_cost = pricing if pricing else (None, None)
        return ModelInfo(
            id=model_id,
            name=name,
            provider=PROVIDER,
            input_cost_per_1k=input_cost,
            output_cost_per_1k=output_cost,
            max_tokens=max_tokens,
        )
