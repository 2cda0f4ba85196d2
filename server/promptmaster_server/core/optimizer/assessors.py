"""Heuristic dimension assessors.

Each assessor checks a fixed list of boolean indicators and scores the prompt
as the fraction of indicators that hold. Every failed indicator contributes
exactly one issue and one suggestion, so the output is fully determined by the
prompt text and context.
"""

import re
from types import MappingProxyType
from typing import Any, Callable, Mapping, NamedTuple

from .types import Dimension, DimensionAssessment, OptimizationContext

Assessor = Callable[[str, OptimizationContext], DimensionAssessment]

MAX_PROMPT_WORDS = 500

_ROLE = re.compile(r"\b(you are|act as|assume the role|your role)\b", re.IGNORECASE)
_TASK = re.compile(
    r"\b(create|generate|write|develop|build|draft|design|summari[sz]e|explain"
    r"|analy[sz]e|describe|list)\b",
    re.IGNORECASE,
)
_OBJECTIVE = re.compile(r"\b(so that|in order to|to achieve|goal|purpose|objective)\b", re.IGNORECASE)
_AUDIENCE = re.compile(r"\b(for|target|intended for|audience|readers?)\b", re.IGNORECASE)

_DETAILS = re.compile(r"\b(details?|detailed|specifics?|specific|requirements?)\b", re.IGNORECASE)
_EXAMPLES = re.compile(r"\b(examples?|for instance|such as)\b|\be\.g\.", re.IGNORECASE)
_CONSTRAINTS = re.compile(r"\b(must|should|requir\w*|limit\w*|at least|at most)\b", re.IGNORECASE)

_SECTIONS = re.compile(
    r"^\s*#+\s+\w+|^\s*(?:[-*•]|\d+[.)])\s+\S|\b\w+:\s",
    re.IGNORECASE | re.MULTILINE,
)
_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")

_NEGATIVE = re.compile(r"\b(do not|don't|avoid|exclude|never|without)\b", re.IGNORECASE)
_POSITIVE = re.compile(r"\b(must|should|only|always|ensure)\b", re.IGNORECASE)

_FORMAT = re.compile(
    r"\b(format|output|structure)\s*:|\b(json|markdown|yaml|csv|table|bullet points?|numbered list)\b",
    re.IGNORECASE,
)
_LENGTH = re.compile(
    r"\b(length|words|sentences|paragraphs|characters)\s*:"
    r"|\b\d+\s*(words|sentences|paragraphs|characters|bullet points|items)\b"
    r"|\b(under|at most|no more than|maximum of|up to)\s+\d+",
    re.IGNORECASE,
)


class _Indicator(NamedTuple):
    passed: bool
    issue: str
    suggestion: str


def _build(dimension: Dimension, indicators: list[_Indicator]) -> DimensionAssessment:
    passed = sum(1 for indicator in indicators if indicator.passed)
    failed = [indicator for indicator in indicators if not indicator.passed]
    return DimensionAssessment(
        dimension=dimension,
        score=passed / len(indicators),
        issues=[indicator.issue for indicator in failed],
        suggestions=[indicator.suggestion for indicator in failed],
    )


def _text_field(value: Any) -> str | None:
    """Return a usable context string, or None when absent or malformed."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _mentions(prompt: str, term: str | None) -> bool:
    if not term:
        return False
    return re.search(rf"\b{re.escape(term)}\b", prompt, re.IGNORECASE) is not None


def _is_blank(prompt: str) -> bool:
    return not prompt or not prompt.strip()


def _search(pattern: re.Pattern[str], prompt: str) -> bool:
    return not _is_blank(prompt) and pattern.search(prompt) is not None


def assess_clarity(prompt: str, context: OptimizationContext) -> DimensionAssessment:
    return _build(
        Dimension.CLARITY,
        [
            _Indicator(
                _search(_ROLE, prompt),
                "No clear role or expertise definition",
                'Add a role definition like "You are a [expert role]"',
            ),
            _Indicator(
                _search(_TASK, prompt),
                "Task not clearly specified",
                "Clearly state what you want created or accomplished",
            ),
            _Indicator(
                _search(_OBJECTIVE, prompt),
                "Objective of the task is not stated",
                'Explain why the output is needed, e.g. "so that ..." or "in order to ..."',
            ),
            _Indicator(
                _search(_AUDIENCE, prompt),
                "Intended audience is not defined",
                'State who the output is for, e.g. "for new team members"',
            ),
        ],
    )


def assess_specificity(prompt: str, context: OptimizationContext) -> DimensionAssessment:
    return _build(
        Dimension.SPECIFICITY,
        [
            _Indicator(
                _search(_DETAILS, prompt),
                "Lack of specific details",
                "Provide more specific requirements and details.",
            ),
            _Indicator(
                _search(_EXAMPLES, prompt),
                "No examples provided",
                "Include an example of the expected input or output.",
            ),
            _Indicator(
                _search(_CONSTRAINTS, prompt),
                "No requirements or limits defined",
                "Define the requirements and limits the response has to respect.",
            ),
        ],
    )


def assess_structure(prompt: str, context: OptimizationContext) -> DimensionAssessment:
    blank = _is_blank(prompt)
    text = "" if blank else prompt.strip()
    sentences = [s for s in _SENTENCE_BREAK.split(text) if s.strip()]
    paragraphs = [p for p in _PARAGRAPH_BREAK.split(text) if p.strip()]
    word_count = len(text.split())
    return _build(
        Dimension.STRUCTURE,
        [
            _Indicator(
                _search(_SECTIONS, prompt),
                "Poor prompt structure",
                "Use clear sections or bullet points for better readability.",
            ),
            _Indicator(
                len(sentences) > 1 or len(paragraphs) > 1,
                "Prompt is a single undivided statement",
                "Break the request into several sentences or paragraphs that build on each other.",
            ),
            _Indicator(
                0 < word_count <= MAX_PROMPT_WORDS,
                f"Prompt length is outside the recommended range (1-{MAX_PROMPT_WORDS} words)",
                f"Keep the prompt between 1 and {MAX_PROMPT_WORDS} words and remove redundant text.",
            ),
        ],
    )


def assess_context_adequacy(prompt: str, context: OptimizationContext) -> DimensionAssessment:
    domain = _text_field(getattr(context, "domain", None))
    user_level = _text_field(getattr(context, "user_level", None))

    if domain:
        background_hint = f"Consider adding relevant background for the '{domain}' domain."
    else:
        background_hint = "Name the domain or subject area the request belongs to."
    if user_level:
        level_hint = f"Mention the intended expertise level ('{user_level}') so the response matches it."
    else:
        level_hint = "State the expertise level the response should be written for."

    return _build(
        Dimension.CONTEXT_ADEQUACY,
        [
            _Indicator(
                not _is_blank(prompt) and _mentions(prompt, domain),
                "Insufficient background context",
                background_hint,
            ),
            _Indicator(
                not _is_blank(prompt) and _mentions(prompt, user_level),
                "Prompt is not aligned with the user's expertise level",
                level_hint,
            ),
        ],
    )


def assess_constraint_clarity(prompt: str, context: OptimizationContext) -> DimensionAssessment:
    return _build(
        Dimension.CONSTRAINT_CLARITY,
        [
            _Indicator(
                _search(_NEGATIVE, prompt),
                "No statement of what to avoid",
                "State what the AI should avoid or exclude.",
            ),
            _Indicator(
                _search(_POSITIVE, prompt),
                "Ambiguous constraints",
                "Clearly state what the AI must or should do.",
            ),
        ],
    )


def assess_output_specification(prompt: str, context: OptimizationContext) -> DimensionAssessment:
    return _build(
        Dimension.OUTPUT_SPECIFICATION,
        [
            _Indicator(
                _search(_FORMAT, prompt),
                "Output format not specified",
                "Define the desired output format (e.g., JSON, markdown, bullet points).",
            ),
            _Indicator(
                _search(_LENGTH, prompt),
                "Output length not specified",
                'Specify the expected length, e.g. "Length: 200 words".',
            ),
        ],
    )


ASSESSORS: Mapping[Dimension, Assessor] = MappingProxyType(
    {
        Dimension.CLARITY: assess_clarity,
        Dimension.SPECIFICITY: assess_specificity,
        Dimension.STRUCTURE: assess_structure,
        Dimension.CONTEXT_ADEQUACY: assess_context_adequacy,
        Dimension.CONSTRAINT_CLARITY: assess_constraint_clarity,
        Dimension.OUTPUT_SPECIFICATION: assess_output_specification,
    }
)

_unassessed = set(Dimension) - set(ASSESSORS)
if _unassessed:
    raise RuntimeError(f"No assessor registered for: {sorted(d.value for d in _unassessed)}")
