"""Prompt enhancement techniques.

Each technique takes a prompt and its optimization context and returns a new
prompt. All techniques except ``ai_rewrite`` are pure string transformations;
every technique returns a blank prompt unchanged.
"""

import inspect
import logging
import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Awaitable, Callable, Mapping, Union

from ..exceptions import ExternalCallError, UnknownTechnique
from ..llm.provider import AIBackend, generate_with_timeout
from ..llm.router import assess_prompt_complexity
from .types import OptimizationContext

logger = logging.getLogger(__name__)

TechniqueFunc = Callable[[str, OptimizationContext], Union[str, Awaitable[str]]]


class TechniqueKind(str, Enum):
    """Registered technique names."""

    ROLE_BASED_ENHANCEMENT = "role_based_enhancement"
    CLARITY_ENHANCEMENT = "clarity_enhancement"
    ADD_EXAMPLES = "add_examples"
    PARAMETER_SPECIFICATION = "parameter_specification"
    BACKGROUND_CONTEXT = "background_context"
    DOMAIN_SPECIFICS = "domain_specifics"
    CHAIN_OF_THOUGHT = "chain_of_thought"
    OUTPUT_SPECIFICATION = "output_specification"
    AI_REWRITE = "ai_rewrite"


@dataclass(frozen=True)
class TechniqueInfo:
    kind: TechniqueKind
    name: str
    description: str
    func: TechniqueFunc


CHAIN_TEMPLATES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "simple": (
            "Step 1: Analyze the request",
            "Step 2: Identify key requirements",
            "Step 3: Provide the solution",
        ),
        "moderate": (
            "Step 1: Understand the problem and requirements",
            "Step 2: Break down into manageable components",
            "Step 3: Consider relevant factors and constraints",
            "Step 4: Develop and present the solution",
        ),
        "complex": (
            "Phase 1: Problem Analysis",
            "  - Understand the core requirements",
            "  - Identify constraints and dependencies",
            "  - Research relevant background information",
            "",
            "Phase 2: Solution Development",
            "  - Generate multiple potential approaches",
            "  - Evaluate pros and cons of each approach",
            "  - Select and refine the optimal solution",
            "",
            "Phase 3: Implementation and Validation",
            "  - Present the solution clearly",
            "  - Include relevant examples and evidence",
            "  - Provide next steps or recommendations",
        ),
    }
)


def _blank(prompt: str) -> bool:
    return not prompt or not prompt.strip()


def _field(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def role_based_enhancement(prompt: str, context: OptimizationContext) -> str:
    if _blank(prompt):
        return prompt
    domain = _field(context.domain) or "general"
    return f"You are an expert {domain} assistant. {prompt}"


def clarity_enhancement(prompt: str, context: OptimizationContext) -> str:
    if _blank(prompt):
        return prompt
    return f"Ensure maximum clarity: {prompt}"


def add_examples(prompt: str, context: OptimizationContext) -> str:
    if _blank(prompt):
        return prompt
    return (
        f"{prompt}\n\n"
        "Include a concrete example, such as a sample input and the expected output."
    )


def parameter_specification(prompt: str, context: OptimizationContext) -> str:
    if _blank(prompt):
        return prompt
    lines = ["Requirements:", "- The response must address every part of the request."]
    level = _field(context.user_level)
    if level:
        lines.append(f"- Match the level of detail to the reader's expertise ({level}).")
    return f"{prompt}\n\n" + "\n".join(lines)


def background_context(prompt: str, context: OptimizationContext) -> str:
    if _blank(prompt):
        return prompt
    domain = _field(context.domain)
    level = _field(context.user_level) or "intermediate"
    if domain:
        background = (
            f"Background: This request relates to the {domain} domain and is intended "
            f"for a reader at the {level} level."
        )
    else:
        background = f"Background: This request is intended for a reader at the {level} level."
    return f"{background}\n\n{prompt}"


def domain_specifics(prompt: str, context: OptimizationContext) -> str:
    domain = _field(context.domain)
    if _blank(prompt) or not domain:
        return prompt
    return f"{prompt}\n\nUse {domain} terminology and conventions where relevant."


def chain_of_thought(prompt: str, context: OptimizationContext) -> str:
    if _blank(prompt):
        return prompt
    steps = CHAIN_TEMPLATES[assess_prompt_complexity(prompt)]
    return f"{prompt}\n\nPlease approach this step by step:\n\n" + "\n".join(steps)


def output_specification(prompt: str, context: OptimizationContext) -> str:
    if _blank(prompt):
        return prompt
    output_format = _field(context.output_format) or "markdown"
    return f"{prompt}\n\nFormat: {output_format}"


REWRITE_INSTRUCTIONS = """You are an expert prompt engineer.

Rewrite the prompt below so that it is clear, specific and well structured.

Rules:
1. Preserve the original intent and any {{ variables }} exactly as they appear
2. Define the role, the task and the expected output format
3. State what must be done and what to avoid
4. Keep it under 500 words

Output ONLY the rewritten prompt, no explanations."""


class TechniqueRegistry:
    """Dispatch table from technique name to implementation."""

    def __init__(
        self,
        backend: AIBackend | None = None,
        *,
        model: str | None = None,
        timeout: float = 30.0,
    ):
        """
        Initialize the registry.

        Args:
            backend: AI backend used by ``ai_rewrite`` (the technique fails
                with ExternalCallError when None)
            model: Model passed to the backend (backend default when None)
            timeout: Deadline in seconds for a single AI call
        """
        self.backend = backend
        self.model = model
        self.timeout = timeout

        techniques = [
            TechniqueInfo(
                TechniqueKind.ROLE_BASED_ENHANCEMENT,
                "Role-Based Prompting",
                "Define specific expertise and perspective",
                role_based_enhancement,
            ),
            TechniqueInfo(
                TechniqueKind.CLARITY_ENHANCEMENT,
                "Clarity Enhancement",
                "Ask for a maximally clear response",
                clarity_enhancement,
            ),
            TechniqueInfo(
                TechniqueKind.ADD_EXAMPLES,
                "Few-Shot Examples",
                "Ask for a concrete example of input and output",
                add_examples,
            ),
            TechniqueInfo(
                TechniqueKind.PARAMETER_SPECIFICATION,
                "Parameter Specification",
                "List explicit requirements for the response",
                parameter_specification,
            ),
            TechniqueInfo(
                TechniqueKind.BACKGROUND_CONTEXT,
                "Context Injection",
                "Add relevant background and the reader's expertise level",
                background_context,
            ),
            TechniqueInfo(
                TechniqueKind.DOMAIN_SPECIFICS,
                "Domain Specifics",
                "Ask for domain terminology and conventions",
                domain_specifics,
            ),
            TechniqueInfo(
                TechniqueKind.CHAIN_OF_THOUGHT,
                "Chain of Thought",
                "Break complex tasks into logical steps",
                chain_of_thought,
            ),
            TechniqueInfo(
                TechniqueKind.OUTPUT_SPECIFICATION,
                "Output Specification",
                "Define the exact output format",
                output_specification,
            ),
            TechniqueInfo(
                TechniqueKind.AI_REWRITE,
                "AI Rewrite",
                "Let an AI model rewrite the prompt",
                self._ai_rewrite,
            ),
        ]
        self._techniques: Mapping[str, TechniqueInfo] = MappingProxyType(
            {info.kind.value: info for info in techniques}
        )

        missing = [kind.value for kind in TechniqueKind if kind.value not in self._techniques]
        if missing:
            raise RuntimeError(f"Techniques without implementation: {', '.join(missing)}")

    def names(self) -> list[str]:
        return list(self._techniques)

    def get(self, name: str) -> TechniqueInfo:
        try:
            return self._techniques[name]
        except KeyError:
            raise UnknownTechnique(name, self.names()) from None

    async def apply(self, name: str, prompt: str, context: OptimizationContext) -> str:
        """
        Apply a technique to a prompt.

        Raises:
            UnknownTechnique: If ``name`` is not registered
            ExternalCallError: If an AI-assisted technique fails or times out
        """
        result = self.get(name).func(prompt, context)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _ai_rewrite(self, prompt: str, context: OptimizationContext) -> str:
        if _blank(prompt):
            return prompt
        if self.backend is None:
            raise ExternalCallError("No AI backend configured for ai_rewrite")

        full_prompt = f"""{REWRITE_INSTRUCTIONS}

Original prompt:

{prompt}

Rewritten prompt:"""

        response = await generate_with_timeout(
            self.backend,
            full_prompt,
            timeout=self.timeout,
            model=self.model,
            temperature=0.3,
            max_tokens=2000,
        )

        # Strip markdown code fences around the answer
        rewritten = response.content.strip()
        rewritten = re.sub(r"^```(?:markdown|text)?\n", "", rewritten)
        rewritten = re.sub(r"\n```$", "", rewritten)
        rewritten = rewritten.strip()

        if not rewritten:
            logger.warning("AI rewrite returned empty content, keeping the prompt")
            return prompt
        return rewritten
