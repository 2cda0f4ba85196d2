"""Deterministic fake AI backends."""

import asyncio
from typing import Any

from promptmaster_server.core.llm.provider import GenerationResult, ModelInfo


class FakeBackend:
    """Backend returning a fixed response."""

    def __init__(self, content: str = "Rewritten prompt", *, success: bool = True, error: str | None = None):
        self.content = content
        self.success = success
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def generate(self, prompt: str, model: str | None = None, **kwargs: Any) -> GenerationResult:
        self.calls.append({"prompt": prompt, "model": model, **kwargs})
        return GenerationResult(
            content=self.content if self.success else "",
            tokens_used=30,
            latency_ms=5,
            model=model or "fake-model",
            provider="fake",
            tokens_input=10,
            tokens_output=20,
            success=self.success,
            error=self.error,
        )

    def get_available_models(self) -> list[ModelInfo]:
        return [
            ModelInfo(
                id="fake-model",
                name="Fake Model",
                provider="fake",
                input_cost_per_1k=None,
                output_cost_per_1k=None,
                max_tokens=4096,
            )
        ]


class SlowBackend(FakeBackend):
    """Backend that never answers within a short deadline."""

    def __init__(self, delay: float = 5.0):
        super().__init__()
        self.delay = delay

    async def generate(self, prompt: str, model: str | None = None, **kwargs: Any) -> GenerationResult:
        await asyncio.sleep(self.delay)
        return await super().generate(prompt, model, **kwargs)


class FailingBackend(FakeBackend):
    """Backend whose calls raise."""

    async def generate(self, prompt: str, model: str | None = None, **kwargs: Any) -> GenerationResult:
        raise RuntimeError("connection reset")

