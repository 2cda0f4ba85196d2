"""Exception hierarchy for the PromptMaster core."""


class PromptMasterError(Exception):
    """Base class for all PromptMaster errors."""


class UnknownTechnique(PromptMasterError):
    """Raised when a technique name is not registered."""

    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        self.available = available or []
        message = f"Unknown technique: {name}"
        if self.available:
            message += f". Available techniques: {', '.join(self.available)}"
        super().__init__(message)


class AssessmentFailure(PromptMasterError):
    """An assessor raised while scoring a dimension."""

    def __init__(self, dimension: str, cause: Exception | str):
        self.dimension = dimension
        self.cause = cause
        super().__init__(f"{dimension} assessment failed: {cause}")


class ExternalCallError(PromptMasterError):
    """An AI-backed call failed or could not be made."""


class ExternalCallTimeout(ExternalCallError):
    """An AI-backed call exceeded its deadline."""

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"{operation} timed out after {timeout:g}s")


class InvalidInput(PromptMasterError):
    """Input that cannot be interpreted as a prompt."""


class ConfigurationError(PromptMasterError):
    """Configuration data is missing or invalid."""


class TemplateNotFound(PromptMasterError):
    """Requested prompt template does not exist."""


class TemplateExists(PromptMasterError):
    """A prompt template with the same id is already registered."""


class RenderError(PromptMasterError):
    """A prompt template could not be built."""


class StorageError(PromptMasterError):
    """A result store operation failed."""


class ResultNotFound(StorageError):
    """No optimization result is stored under the requested id."""
