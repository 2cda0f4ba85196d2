"""AI backend abstractions, implementations and model routing."""

from .provider import AIBackend, GenerationResult, ModelInfo, generate_with_timeout
from .azure_openai import AzureOpenAIBackend
from .registry import BackendRegistry
from .router import ModelConfig, ModelRequirements, ModelRouter, ModelSelection, load_model_catalog

__all__ = [
    "AIBackend",
    "GenerationResult",
    "ModelInfo",
    "generate_with_timeout",
    "AzureOpenAIBackend",
    "BackendRegistry",
    "ModelConfig",
    "ModelRequirements",
    "ModelRouter",
    "ModelSelection",
    "load_model_catalog",
]
