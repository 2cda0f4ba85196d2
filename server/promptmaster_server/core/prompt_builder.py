"""Segment-based prompt templates and the builder that fills them in."""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from ..config import Settings, get_settings
from ..data import read_text
from .exceptions import ConfigurationError, RenderError, TemplateExists, TemplateNotFound

logger = logging.getLogger(__name__)

SegmentType = Literal["text", "variable", "instruction", "example"]
OutputFormat = Literal["text", "json", "markdown"]


class PromptSegment(BaseModel):
    """One piece of a template; ``content`` is the variable name for variables."""

    model_config = ConfigDict(frozen=True)

    type: SegmentType
    content: str
    description: Optional[str] = None
    default_value: Optional[str] = None
    options: Optional[tuple[str, ...]] = None
    optional: bool = False


class TemplateParameter(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: Optional[str] = None
    default_value: Optional[str] = None
    options: Optional[tuple[str, ...]] = None
    required: bool = True


def derive_parameters(segments: Iterable[PromptSegment]) -> tuple[TemplateParameter, ...]:
    """Build the parameter list from a template's variable segments."""
    return tuple(
        TemplateParameter(
            name=segment.content,
            description=segment.description,
            default_value=segment.default_value,
            options=segment.options,
            required=not segment.optional,
        )
        for segment in segments
        if segment.type == "variable"
    )


class PromptTemplate(BaseModel):
    """A reusable prompt made of text, variable, instruction and example segments."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    segments: tuple[PromptSegment, ...]
    category: str = "general"
    tags: tuple[str, ...] = ()
    created_by: str = "system"
    version: int = 1
    output_format: Optional[OutputFormat] = None
    parameters: tuple[TemplateParameter, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _derive_parameters(cls, data: Any) -> Any:
        # Parameters always mirror the variable segments
        if isinstance(data, dict) and "segments" in data:
            segments = [
                s if isinstance(s, PromptSegment) else PromptSegment.model_validate(s)
                for s in data["segments"]
            ]
            data = {**data, "segments": segments, "parameters": derive_parameters(segments)}
        return data


class BuildOptions(BaseModel):
    validate_variables: bool = False
    apply_defaults: bool = False
    strict_mode: bool = False


class BuiltPrompt(BaseModel):
    """Result of building a prompt from a template."""

    prompt: str
    variables_used: dict[str, str]
    missing_variables: list[str]
    template_id: str
    version: int
    output_format: Optional[OutputFormat] = None


class TemplateCatalog:
    """Immutable mapping of template id to template.

    ``add`` and ``update`` return new catalogs and leave this one unchanged.
    """

    def __init__(self, templates: Iterable[PromptTemplate] = ()):
        entries: dict[str, PromptTemplate] = {}
        for template in templates:
            if template.id in entries:
                raise TemplateExists(f"Template with ID {template.id} already exists.")
            entries[template.id] = template
        self._templates: Mapping[str, PromptTemplate] = MappingProxyType(entries)

    @classmethod
    def from_yaml_text(cls, text: str, source: str = "templates.yaml") -> "TemplateCatalog":
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"YAML parse error in {source}: {e}") from e

        entries = data.get("templates") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise ConfigurationError(f"{source} must define a 'templates' list")

        try:
            templates = [PromptTemplate.model_validate(entry) for entry in entries]
        except ValidationError as e:
            raise ConfigurationError(f"Invalid template in {source}: {e}") from e
        try:
            return cls(templates)
        except TemplateExists as e:
            raise ConfigurationError(f"{source}: {e}") from e

    @classmethod
    def load(cls, path: str | Path | None = None) -> "TemplateCatalog":
        """Load templates from ``path`` or the bundled defaults."""
        if path is None:
            return cls.from_yaml_text(read_text("templates.yaml"))
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read templates {path}: {e}") from e
        return cls.from_yaml_text(text, str(path))

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def ids(self) -> list[str]:
        return list(self._templates)

    def list_templates(self) -> list[PromptTemplate]:
        return list(self._templates.values())

    def get(self, template_id: str) -> PromptTemplate:
        try:
            return self._templates[template_id]
        except KeyError:
            raise TemplateNotFound(f"Template with ID {template_id} not found.") from None

    def add(self, template: PromptTemplate) -> "TemplateCatalog":
        if template.id in self._templates:
            raise TemplateExists(f"Template with ID {template.id} already exists.")
        return TemplateCatalog([*self._templates.values(), template])

    def update(self, template_id: str, **changes: Any) -> "TemplateCatalog":
        """
        Return a catalog with one template changed.

        The version is incremented and parameters are re-derived from the
        (possibly new) segments. The id cannot be changed.
        """
        existing = self.get(template_id)
        changes.pop("id", None)
        changes.pop("parameters", None)
        data = existing.model_dump(exclude={"parameters"})
        data.update(changes)
        data["version"] = existing.version + 1
        try:
            updated = PromptTemplate.model_validate(data)
        except ValidationError as e:
            raise RenderError(f"Invalid update for template {template_id}: {e}") from e
        return TemplateCatalog(
            updated if template.id == template_id else template
            for template in self._templates.values()
        )


class PromptBuilder:
    """Builds prompt strings from catalog templates."""

    def __init__(self, catalog: TemplateCatalog | None = None):
        self.catalog = catalog if catalog is not None else TemplateCatalog.load()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "PromptBuilder":
        settings = settings or get_settings()
        return cls(TemplateCatalog.load(settings.templates_path))

    def build(
        self,
        template_id: str,
        variables: Mapping[str, str] | None = None,
        options: BuildOptions | None = None,
    ) -> BuiltPrompt:
        """
        Build a prompt from a template and variable values.

        Missing required variables are rendered as ``[MISSING_NAME]``
        placeholders, unless strict mode is on, in which case they are
        collected in ``missing_variables`` and left out of the prompt.

        Args:
            template_id: ID of the template to use
            variables: Variable name -> value
            options: Build options

        Returns:
            BuiltPrompt with the prompt text and variable bookkeeping

        Raises:
            TemplateNotFound: If the template does not exist
            RenderError: If ``validate_variables`` is set and variables are missing
        """
        template = self.catalog.get(template_id)
        variables = variables or {}
        options = options or BuildOptions()

        parts: list[str] = []
        variables_used: dict[str, str] = {}
        missing: list[str] = []

        for segment in template.segments:
            if segment.type == "text":
                parts.append(segment.content)
            elif segment.type == "variable":
                value = variables.get(segment.content) or None
                if value is None and options.apply_defaults:
                    value = segment.default_value

                if value is not None:
                    parts.append(value)
                    variables_used[segment.content] = value
                elif segment.optional:
                    if options.strict_mode:
                        logger.warning(
                            f"Optional variable '{segment.content}' not provided for template '{template_id}'"
                        )
                elif options.strict_mode:
                    missing.append(segment.content)
                else:
                    parts.append(f"[MISSING_{segment.content.upper()}]")
            else:
                parts.append(f"\n<!-- {segment.type.upper()}: {segment.description or segment.content} -->\n")
                if segment.type == "example":
                    parts.append(f"{segment.content}\n")

        if options.validate_variables and missing:
            raise RenderError(
                f"Missing required variables: {', '.join(missing)} for template '{template_id}'"
            )

        return BuiltPrompt(
            prompt="".join(parts),
            variables_used=variables_used,
            missing_variables=missing,
            template_id=template.id,
            version=template.version,
            output_format=template.output_format,
        )
