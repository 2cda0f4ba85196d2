"""Core business logic"""

from .exceptions import (
    AssessmentFailure,
    ConfigurationError,
    ExternalCallError,
    ExternalCallTimeout,
    InvalidInput,
    PromptMasterError,
    RenderError,
    ResultNotFound,
    StorageError,
    TemplateExists,
    TemplateNotFound,
    UnknownTechnique,
)
from .prompt_builder import BuildOptions, BuiltPrompt, PromptBuilder, PromptTemplate, TemplateCatalog
from .result_store import InMemoryResultStore, ResultStore, SQLResultStore

__all__ = [
    "PromptBuilder",
    "PromptTemplate",
    "TemplateCatalog",
    "BuildOptions",
    "BuiltPrompt",
    "ResultStore",
    "InMemoryResultStore",
    "SQLResultStore",
    "PromptMasterError",
    "UnknownTechnique",
    "AssessmentFailure",
    "ExternalCallError",
    "ExternalCallTimeout",
    "InvalidInput",
    "ConfigurationError",
    "TemplateNotFound",
    "TemplateExists",
    "RenderError",
    "StorageError",
    "ResultNotFound",
]
