"""Unit tests for the dimension assessors."""

import pytest

from promptmaster_server.core.optimizer.assessors import (
    ASSESSORS,
    MAX_PROMPT_WORDS,
    assess_clarity,
    assess_constraint_clarity,
    assess_context_adequacy,
    assess_output_specification,
    assess_specificity,
    assess_structure,
)
from promptmaster_server.core.optimizer.types import Dimension, OptimizationContext


@pytest.fixture
def context():
    return OptimizationContext()


class TestEmptyPrompt:
    """An empty prompt fails every indicator."""

    @pytest.mark.parametrize("prompt", ["", "   \n\t "])
    def test_every_dimension_scores_zero(self, prompt, context):
        for dimension, assessor in ASSESSORS.items():
            assessment = assessor(prompt, context)
            assert assessment.dimension == dimension
            assert assessment.score == 0.0

    def test_full_issue_list(self, context):
        issue_counts = {d: len(a("", context).issues) for d, a in ASSESSORS.items()}
        assert issue_counts == {
            Dimension.CLARITY: 4,
            Dimension.SPECIFICITY: 3,
            Dimension.STRUCTURE: 3,
            Dimension.CONTEXT_ADEQUACY: 2,
            Dimension.CONSTRAINT_CLARITY: 2,
            Dimension.OUTPUT_SPECIFICATION: 2,
        }


def test_registry_covers_every_dimension():
    assert set(ASSESSORS) == set(Dimension)


class TestClarity:
    def test_role_and_task(self, context):
        assessment = assess_clarity("You are a tutor. Explain fractions.", context)

        assert assessment.score == 0.5
        assert "No clear role or expertise definition" not in assessment.issues
        assert "Objective of the task is not stated" in assessment.issues

    def test_all_indicators(self, context):
        prompt = "You are a teacher. Explain fractions for students so that they can pass the exam."
        assessment = assess_clarity(prompt, context)

        assert assessment.score == 1.0
        assert assessment.issues == []
        assert assessment.suggestions == []

    def test_missing_role_suggests_role_definition(self, context):
        assessment = assess_clarity("Write something.", context)

        assert assessment.score == 0.25
        assert 'Add a role definition like "You are a [expert role]"' in assessment.suggestions


class TestSpecificity:
    def test_all_indicators(self, context):
        prompt = "Provide specific details, for example a table. It must fit on one page."
        assert assess_specificity(prompt, context).score == 1.0

    def test_examples_only(self, context):
        assessment = assess_specificity("Name fruits such as apples.", context)

        assert assessment.score == pytest.approx(1 / 3)
        assert assessment.issues == ["Lack of specific details", "No requirements or limits defined"]


class TestStructure:
    def test_sections_and_paragraphs(self, context):
        prompt = "## Task\n- Summarize the article\n\nKeep it friendly."
        assert assess_structure(prompt, context).score == 1.0

    def test_single_statement(self, context):
        assessment = assess_structure("Write something", context)

        assert assessment.score == pytest.approx(1 / 3)
        assert "Poor prompt structure" in assessment.issues
        assert "Prompt is a single undivided statement" in assessment.issues

    def test_overlong_prompt(self, context):
        prompt = "Summary: " + " ".join(["word."] * MAX_PROMPT_WORDS)
        assessment = assess_structure(prompt, context)

        assert assessment.score == pytest.approx(2 / 3)
        assert any("recommended range" in issue for issue in assessment.issues)


class TestContextAdequacy:
    def test_domain_and_level_mentioned(self):
        context = OptimizationContext(domain="finance", user_level="expert")
        prompt = "As an expert in finance, review the report."

        assert assess_context_adequacy(prompt, context).score == 1.0

    def test_word_boundary_match(self):
        context = OptimizationContext(domain="art", user_level=None)
        assessment = assess_context_adequacy("Start the party.", context)

        assert assessment.score == 0.0

    def test_suggestions_name_the_context(self):
        context = OptimizationContext(domain="marketing", user_level="beginner")
        assessment = assess_context_adequacy("Write a slogan.", context)

        assert "Consider adding relevant background for the 'marketing' domain." in assessment.suggestions
        assert any("'beginner'" in suggestion for suggestion in assessment.suggestions)

    def test_malformed_context_counts_as_absent(self):
        context = OptimizationContext.model_construct(domain=123, user_level=["expert"])
        assessment = assess_context_adequacy("123 expert", context)

        assert assessment.score == 0.0
        assert len(assessment.issues) == 2


class TestConstraintClarity:
    def test_positive_and_negative(self, context):
        prompt = "Do not guess. You must cite sources."
        assert assess_constraint_clarity(prompt, context).score == 1.0

    def test_positive_only(self, context):
        assessment = assess_constraint_clarity("Always cite sources.", context)

        assert assessment.score == 0.5
        assert assessment.issues == ["No statement of what to avoid"]


class TestOutputSpecification:
    def test_format_and_length(self, context):
        prompt = "Format: JSON. Length: 100 words."
        assert assess_output_specification(prompt, context).score == 1.0

    def test_length_only(self, context):
        assessment = assess_output_specification("Answer in under 50 words.", context)

        assert assessment.score == 0.5
        assert assessment.issues == ["Output format not specified"]


@pytest.mark.parametrize(
    "prompt",
    [
        "",
        "Write something.",
        "You are an expert. Create a detailed report with the following requirements: "
        "must include X. Format: JSON.",
    ],
)
def test_one_suggestion_per_issue(prompt, context):
    for assessor in ASSESSORS.values():
        assessment = assessor(prompt, context)
        assert len(assessment.issues) == len(assessment.suggestions)
        assert assessor(prompt, context) == assessment
