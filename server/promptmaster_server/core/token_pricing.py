"""Token pricing for cost estimates.

Prices are per 1K tokens in USD. The optimizer uses them to estimate how much
an accepted technique changes the input cost of a prompt; backends use them to
report the cost of a generation.
"""

from typing import Dict, Optional, Tuple

# (provider, model) -> (input_per_1k, output_per_1k)
PRICING_TABLE: Dict[Tuple[str, str], Tuple[float, float]] = {
    # OpenAI
    ("openai", "gpt-4"): (0.03, 0.06),
    ("openai", "gpt-4-turbo"): (0.01, 0.03),
    ("openai", "gpt-4o"): (0.005, 0.015),
    ("openai", "gpt-4o-mini"): (0.00015, 0.0006),
    ("openai", "gpt-3.5-turbo"): (0.0015, 0.002),
    # Azure OpenAI (same pricing as OpenAI)
    ("azure_openai", "gpt-4"): (0.03, 0.06),
    ("azure_openai", "gpt-4-turbo"): (0.01, 0.03),
    ("azure_openai", "gpt-4o"): (0.005, 0.015),
    ("azure_openai", "gpt-4o-mini"): (0.00015, 0.0006),
    ("azure_openai", "gpt-35-turbo"): (0.0015, 0.002),
    # Anthropic
    ("anthropic", "claude-3-opus-20240229"): (0.015, 0.075),
    ("anthropic", "claude-3-haiku-20240307"): (0.00025, 0.00125),
    ("anthropic", "claude-3-5-sonnet-20241022"): (0.003, 0.015),
    # Google
    ("google", "gemini-pro"): (0.00025, 0.00075),
    ("google", "gemini-1.5-pro"): (0.00125, 0.00375),
    ("google", "gemini-1.5-flash"): (0.000075, 0.0003),
    # Meta (hosted)
    ("meta", "llama-3-70b"): (0.00059, 0.00079),
}

# Model assumed for cost estimates when only a provider is known
DEFAULT_MODELS: Dict[str, str] = {
    "openai": "gpt-4o",
    "azure_openai": "gpt-4o",
    "anthropic": "claude-3-5-sonnet-20241022",
    "google": "gemini-1.5-pro",
    "meta": "llama-3-70b",
}

# Product aliases that name a model family rather than a provider
_MODEL_ALIASES: Dict[str, Tuple[str, str]] = {
    "gpt4": ("openai", "gpt-4"),
}


def estimate_tokens(text: str) -> int:
    """Rough token count estimation (~4 chars per token)."""
    return len(text) // 4


class TokenPricingService:
    """Looks up prices and calculates costs from token counts."""

    def __init__(self, pricing_table: Optional[Dict[Tuple[str, str], Tuple[float, float]]] = None):
        self.pricing_table = pricing_table or PRICING_TABLE

    def calculate_cost(
        self,
        provider: Optional[str],
        model: Optional[str],
        tokens_in: Optional[int],
        tokens_out: Optional[int],
    ) -> Optional[float]:
        """
        Calculate cost in USD for a given token usage.

        Args:
            provider: Provider name (e.g., "openai", "claude")
            model: Model identifier (provider default when None)
            tokens_in: Input token count (may be negative for a reduction)
            tokens_out: Output token count

        Returns:
            Cost in USD, or None if pricing is not available or inputs invalid
        """
        if not provider or tokens_in is None or tokens_out is None:
            return None

        pricing = self.get_pricing(provider, model)
        if pricing is None:
            return None

        input_cost_per_1k, output_cost_per_1k = pricing
        total_cost = (tokens_in / 1000) * input_cost_per_1k + (tokens_out / 1000) * output_cost_per_1k
        return round(total_cost, 8)

    def get_pricing(self, provider: str, model: Optional[str] = None) -> Optional[Tuple[float, float]]:
        """
        Get pricing for a provider and model.

        Falls back to the provider's default model when ``model`` is None, and
        to the base model (e.g. ``gpt-4`` for ``gpt-4-0613``) when the exact
        model is not listed.

        Returns:
            Tuple of (input_cost_per_1k, output_cost_per_1k) or None if not found
        """
        provider_norm = self._normalize_provider(provider)
        if provider_norm in _MODEL_ALIASES and model is None:
            provider_norm, model = _MODEL_ALIASES[provider_norm]

        model_norm = (model or DEFAULT_MODELS.get(provider_norm, "")).lower().strip()
        if not model_norm:
            return None

        entry = self.pricing_table.get((provider_norm, model_norm))
        if entry is None:
            parts = model_norm.split("-")
            if len(parts) >= 2:
                entry = self.pricing_table.get((provider_norm, "-".join(parts[0:2])))
        return entry

    def _normalize_provider(self, provider: str) -> str:
        """Normalize provider name to match pricing table keys."""
        provider_lower = provider.lower().strip()

        if "azure" in provider_lower:
            return "azure_openai"
        elif "openai" in provider_lower:
            return "openai"
        elif "anthropic" in provider_lower or "claude" in provider_lower:
            return "anthropic"
        elif "google" in provider_lower or "gemini" in provider_lower:
            return "google"
        elif "llama" in provider_lower or "meta" in provider_lower:
            return "meta"

        return provider_lower


_pricing_service: Optional[TokenPricingService] = None


def get_pricing_service() -> TokenPricingService:
    """Get the global token pricing service instance."""
    global _pricing_service
    if _pricing_service is None:
        _pricing_service = TokenPricingService()
    return _pricing_service
