"""AI backend protocol and data models."""

import asyncio
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from ..exceptions import ExternalCallError, ExternalCallTimeout


@dataclass
class GenerationResult:
    """Result from sending a prompt to an AI backend."""

    content: str
    tokens_used: int
    latency_ms: int
    model: str
    provider: str
    tokens_input: int = 0
    tokens_output: int = 0
    cost_usd: Optional[float] = None
    success: bool = True
    error: Optional[str] = None


@dataclass
class ModelInfo:
    """Information about a model offered by a backend."""

    id: str  # "gpt-4o"
    name: str  # "GPT-4o"
    provider: str  # "azure_openai"
    input_cost_per_1k: Optional[float]
    output_cost_per_1k: Optional[float]
    max_tokens: Optional[int]  # None when the deployment is not catalogued


class AIBackend(Protocol):
    """Protocol for AI backends used by AI-assisted techniques and routing."""

    async def generate(
        self, prompt: str, model: str | None = None, **kwargs: Any
    ) -> GenerationResult:
        """Send a prompt to the backend.

        Args:
            prompt: The prompt text
            model: Model ID to use (backend default when None)
            **kwargs: Backend-specific options (temperature, max_tokens, ...)

        Returns:
            GenerationResult with content and usage metrics

        Raises:
            ExternalCallError: If the call fails
        """
        ...

    def get_available_models(self) -> list[ModelInfo]:
        """Get list of models this backend can serve."""
        ...


async def generate_with_timeout(
    backend: AIBackend,
    prompt: str,
    *,
    timeout: float | None,
    model: str | None = None,
    **kwargs: Any,
) -> GenerationResult:
    """Call ``backend.generate`` with a deadline (None waits indefinitely).

    Cancellation of the calling task propagates unchanged.

    Raises:
        ExternalCallTimeout: If the call exceeds ``timeout`` seconds
        ExternalCallError: If the backend fails or reports an unsuccessful result
    """
    try:
        result = await asyncio.wait_for(
            backend.generate(prompt, model=model, **kwargs), timeout=timeout
        )
    except asyncio.TimeoutError as e:
        raise ExternalCallTimeout("AI backend call", timeout) from e
    except ExternalCallError:
        raise
    except Exception as e:
        raise ExternalCallError(f"AI backend call failed: {e}") from e

    if not result.success:
        raise ExternalCallError(f"AI backend call failed: {result.error or 'unknown error'}")
    return result
