"""Shared fixtures for the maturity diagnostic tests."""

import pytest

from maturity_diagnostic.config import reset_config
from maturity_diagnostic.schema import (
    BehavioralQuestion,
    ContextOption,
    ContextQuestion,
    OperationalContextSection,
    QuestionnaireSchema,
    StructuralMaturitySection,
)

LABELS = {0: "Not in place", 1: "Ad hoc", 2: "Consistent", 3: "Embedded"}


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts and ends with the default configuration."""
    reset_config()
    yield
    reset_config()


def _context_question(question_id: str) -> ContextQuestion:
    return ContextQuestion(
        id=question_id,
        prompt=f"{question_id}?",
        options=[ContextOption(label=f"Level {i}", score=i) for i in range(1, 5)],
    )


def _behavioral_question(question_id: str, dimension: str) -> BehavioralQuestion:
    return BehavioralQuestion(
        id=question_id,
        dimension=dimension,
        prompt=f"{question_id}?",
        help_text="",
        scoring_labels=LABELS,
    )


@pytest.fixture
def small_questionnaire() -> QuestionnaireSchema:
    """Three dimensions with two questions each, plus the five context factors."""
    return QuestionnaireSchema(
        operational_context=OperationalContextSection(
            questions=[
                _context_question(qid)
                for qid in ("teamSize", "productComplexity", "aiUsage",
                            "releaseFrequency", "toolingFragmentation")
            ],
        ),
        structural_maturity=StructuralMaturitySection(
            dimensions=["Governance", "Distribution", "Documentation"],
            behavioral_questions=[
                _behavioral_question("gov_1", "Governance"),
                _behavioral_question("gov_2", "Governance"),
                _behavioral_question("dist_1", "Distribution"),
                _behavioral_question("dist_2", "Distribution"),
                _behavioral_question("doc_1", "Documentation"),
                _behavioral_question("doc_2", "Documentation"),
            ],
        ),
    )


@pytest.fixture
def full_maturity_answers() -> dict[str, int]:
    """Every behavioral question in the small questionnaire answered at 3."""
    return {qid: 3 for qid in ("gov_1", "gov_2", "dist_1", "dist_2", "doc_1", "doc_2")}
