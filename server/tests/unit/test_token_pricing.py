"""Tests for token pricing lookups."""

import pytest

from promptmaster_server.core.token_pricing import (
    TokenPricingService,
    estimate_tokens,
    get_pricing_service,
)


@pytest.fixture
def pricing():
    return TokenPricingService()


class TestCalculateCost:
    def test_known_model(self, pricing):
        cost = pricing.calculate_cost("azure_openai", "gpt-4o", 1000, 500)

        assert cost == pytest.approx(0.0125)

    def test_provider_default_model(self, pricing):
        assert pricing.calculate_cost("openai", None, 1000, 0) == pytest.approx(0.005)

    def test_provider_alias(self, pricing):
        assert pricing.calculate_cost("claude", None, 1000, 0) == pytest.approx(0.003)
        assert pricing.calculate_cost("Gemini", "gemini-pro", 1000, 0) == pytest.approx(0.00025)

    def test_model_family_alias(self, pricing):
        assert pricing.calculate_cost("gpt4", None, 1000, 0) == pytest.approx(0.03)

    def test_negative_delta(self, pricing):
        assert pricing.calculate_cost("openai", "gpt-4o", -400, 0) == pytest.approx(-0.002)

    def test_base_model_fallback(self, pricing):
        assert pricing.get_pricing("openai", "gpt-4-0613") == (0.03, 0.06)

    @pytest.mark.parametrize(
        "provider,model,tokens_in,tokens_out",
        [
            ("mistral", None, 100, 0),
            ("openai", "unknown", 100, 0),
            (None, "gpt-4o", 100, 0),
            ("openai", "gpt-4o", None, 0),
        ],
    )
    def test_unavailable(self, pricing, provider, model, tokens_in, tokens_out):
        assert pricing.calculate_cost(provider, model, tokens_in, tokens_out) is None


def test_estimate_tokens():
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcdefgh") == 2


def test_global_service_is_shared():
    assert get_pricing_service() is get_pricing_service()
