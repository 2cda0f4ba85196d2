"""Unit tests for model catalogue loading and routing."""

import pytest

from promptmaster_server.core.exceptions import ConfigurationError
from promptmaster_server.core.llm.router import (
    ModelPerformance,
    ModelRequirements,
    ModelRouter,
    assess_prompt_complexity,
    load_model_catalog,
)
from tests.fixtures import FailingBackend, FakeBackend, SlowBackend

CODING_PROMPT = "Write code for this programming task."


@pytest.fixture
def router():
    return ModelRouter()


class TestCatalog:
    def test_bundled_catalog(self):
        catalog = load_model_catalog()

        assert list(catalog) == ["gemini", "claude", "gpt4", "llama"]
        assert catalog["claude"].provider == "anthropic"
        assert "coding" in catalog["gemini"].strengths

    def test_catalog_is_read_only(self):
        catalog = load_model_catalog()

        with pytest.raises(TypeError):
            catalog["new"] = catalog["gemini"]

    @pytest.mark.parametrize(
        "content",
        ["models: {}", "models: [broken", "models:\n  bad:\n    name: Missing fields\n"],
    )
    def test_invalid_catalog(self, tmp_path, content):
        path = tmp_path / "models.yaml"
        path.write_text(content)

        with pytest.raises(ConfigurationError):
            load_model_catalog(path)


@pytest.mark.parametrize(
    "prompt,expected",
    [
        ("Sort a list.", "simple"),
        (" ".join(["word"] * 60), "moderate"),
        ("Design the system architecture. " + " ".join(["detail"] * 150), "complex"),
    ],
)
def test_prompt_complexity(prompt, expected):
    assert assess_prompt_complexity(prompt) == expected


class TestSelectModel:
    def test_coding_prompt(self, router):
        selection = router.select_model(CODING_PROMPT)

        assert selection.selected_model.key == "gemini"
        assert [m.key for m in selection.alternatives] == ["gpt4"]
        assert "Google Gemini Pro" in selection.reasoning

    def test_estimates(self, router):
        selection = router.select_model(CODING_PROMPT)
        prompt_tokens = -(-len(CODING_PROMPT) // 4)

        assert selection.expected_performance.token_usage == prompt_tokens + 200
        assert selection.cost_estimate.input_cost == pytest.approx(prompt_tokens * 0.0001)
        assert selection.cost_estimate.output_cost == pytest.approx(200 * 0.0002)
        assert selection.cost_estimate.currency == "USD"

    def test_cost_preference(self, router):
        selection = router.select_model(CODING_PROMPT, ModelRequirements(cost_preference="high"))

        assert selection.selected_model.key == "gpt4"
        assert selection.alternatives == []

    def test_quality_requirement(self, router):
        requirements = ModelRequirements(quality=0.85)
        selection = router.select_model(CODING_PROMPT, requirements)

        assert selection.selected_model.key == "gemini"
        assert "minimum quality requirement of 0.85" in selection.reasoning

    def test_feature_requirement(self, router):
        with pytest.raises(ConfigurationError, match="No AI models found"):
            router.select_model(CODING_PROMPT, ModelRequirements(features=["vision", "local_deployment"]))

    def test_no_matching_strengths(self, router):
        with pytest.raises(ConfigurationError):
            router.select_model("Hello there.")

    def test_history_changes_ranking(self, router):
        for _ in range(3):
            router.record_performance(
                "gemini", ModelPerformance(processing_time_ms=9000, success=False, quality=0.1)
            )

        assert router.select_model(CODING_PROMPT).selected_model.key == "gpt4"


class TestProcessPrompt:
    @pytest.mark.asyncio
    async def test_success_recorded(self, router):
        model = router.catalog["gpt4"]
        backend = FakeBackend("def add(a, b): return a + b")

        result = await router.process_prompt(CODING_PROMPT, model, backend, temperature=0.2)

        assert result.success
        assert result.content.startswith("def add")
        assert backend.calls[0]["model"] == "gpt-4"
        assert backend.calls[0]["temperature"] == 0.2
        assert router.average_performance(model)["success_rate"] == 1.0

    @pytest.mark.asyncio
    async def test_failure_becomes_unsuccessful_result(self, router):
        model = router.catalog["gpt4"]

        await router.process_prompt(CODING_PROMPT, model, FakeBackend())
        result = await router.process_prompt(CODING_PROMPT, model, FailingBackend())

        assert result.success is False
        assert "connection reset" in result.error
        assert router.average_performance(model)["success_rate"] == 0.5

    @pytest.mark.asyncio
    async def test_timeout_becomes_unsuccessful_result(self, router):
        model = router.catalog["llama"]

        result = await router.process_prompt(CODING_PROMPT, model, SlowBackend(delay=5.0), timeout=0.05)

        assert result.success is False
        assert "timed out" in result.error

    @pytest.mark.asyncio
    async def test_response_score_recorded(self, router):
        model = router.catalog["gpt4"]

        await router.process_prompt(CODING_PROMPT, model, FakeBackend("ok"), score_response=lambda text: 0.4)
        await router.process_prompt(CODING_PROMPT, model, FakeBackend("ok"), score_response=lambda text: 1.5)

        assert router.average_performance(model)["quality"] == pytest.approx(0.7)

    @pytest.mark.asyncio
    async def test_unscored_calls_keep_catalogue_quality(self, router):
        model = router.catalog["gpt4"]

        await router.process_prompt(CODING_PROMPT, model, FakeBackend("ok"))

        assert router.average_performance(model)["quality"] == model.quality_score


def test_history_is_bounded():
    router = ModelRouter(history_size=3)
    model = router.catalog["llama"]
    for _ in range(3):
        router.record_performance("llama", ModelPerformance(processing_time_ms=9000, success=False))
    for _ in range(3):
        router.record_performance("llama", ModelPerformance(processing_time_ms=100, success=True))

    assert router.average_performance(model) == {
        "quality": model.quality_score,
        "latency": pytest.approx(100.0),
        "success_rate": 1.0,
    }
