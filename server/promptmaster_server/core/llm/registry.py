"""Backend registry built from application settings."""

from typing import cast

from ...config import Settings, get_settings
from ..exceptions import ConfigurationError
from .azure_openai import AzureOpenAIBackend
from .provider import AIBackend, ModelInfo
from .router import load_model_catalog


class BackendRegistry:
    """Creates and caches the AI backends configured in settings."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._cached_backends: dict[str, AIBackend] = {}

    def _initialize_backends(self) -> None:
        """Initialize all configured backends (lazy initialization)."""
        if self._cached_backends:
            return

        if self._settings.azure_openai_endpoint and self._settings.azure_openai_api_key:
            self._cached_backends["azure_openai"] = AzureOpenAIBackend(
                endpoint=self._settings.azure_openai_endpoint,
                api_key=self._settings.azure_openai_api_key,
                deployment_name=self._settings.azure_openai_deployment_name,
                catalog=load_model_catalog(self._settings.models_path),
            )

    def has_backends(self) -> bool:
        self._initialize_backends()
        return bool(self._cached_backends)

    def get_backend(self, name: str | None = None) -> AIBackend:
        """Get a configured backend.

        Args:
            name: Backend name (e.g., "azure_openai"); first configured when None

        Returns:
            AIBackend instance

        Raises:
            ConfigurationError: If no matching backend is configured
        """
        self._initialize_backends()

        if not self._cached_backends:
            raise ConfigurationError("No AI backends configured")

        if name is None:
            return cast(AIBackend, next(iter(self._cached_backends.values())))

        if name not in self._cached_backends:
            raise ConfigurationError(
                f"Backend '{name}' is not configured. "
                f"Available backends: {list(self._cached_backends.keys())}"
            )
        return cast(AIBackend, self._cached_backends[name])

    def get_all_models(self) -> list[ModelInfo]:
        """Get all models across configured backends."""
        self._initialize_backends()

        all_models: list[ModelInfo] = []
        for backend in self._cached_backends.values():
            all_models.extend(backend.get_available_models())
        return all_models
