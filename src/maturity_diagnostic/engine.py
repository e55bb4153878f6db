"""Maturity Diagnostic engine.

Assembles the report model from the two answer maps:

1. Dimension aggregation (behavioral answers)
2. Operational pressure (context answers)
3. Composite indices and gaps
4. Risk classification

The computation is a pure function of its inputs. Callers own the answer
state and pass it in on every recomputation.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .aggregator import compute_dimension_scores
from .explainer import (
    adequacy_status,
    generate_guidance,
    generate_strengths,
    generate_summary,
    generate_weaknesses,
)
from .indices import compute_adequacy_gap, compute_dimension_gaps, compute_ssi
from .normalizer import normalize_one_four_to_hundred
from .pressure import compute_operational_pressure, resolve_context_levels
from .questionnaire import get_default_questionnaire
from .risk_classifier import RiskContext, classify_risks
from .schema import (
    AdequacyStatus,
    ContextSnapshot,
    DiagnosticState,
    QuestionnaireSchema,
    RankedDimension,
    ReportModel,
)

logger = logging.getLogger(__name__)

TOTAL_STEPS = 3
CONTEXT_STEP = 1
MATURITY_STEP = 2
RESULTS_STEP = 3


def compute_report(
    context_responses: Optional[Mapping[str, Any]],
    maturity_responses: Optional[Mapping[str, Any]],
    questionnaire: QuestionnaireSchema,
) -> ReportModel:
    """Compute the full report model.

    Both answer maps may be partial or empty; missing answers degrade to
    defaults (OPI from minimum levels, unanswered dimensions at 0).

    Args:
        context_responses: Context question id -> 1-4 level
        maturity_responses: Behavioral question id -> 0-3 score
        questionnaire: Questionnaire the answers belong to

    Returns:
        Immutable ReportModel
    """
    context_responses = context_responses or {}
    maturity_responses = maturity_responses or {}

    dimension_scores = compute_dimension_scores(maturity_responses, questionnaire)
    operational_pressure = compute_operational_pressure(context_responses)
    opi = operational_pressure.opi
    ssi = compute_ssi(dimension_scores)
    adequacy_gap = compute_adequacy_gap(ssi, opi)
    dimension_gaps = compute_dimension_gaps(dimension_scores, opi)

    raw_levels = resolve_context_levels(context_responses)
    governance = dimension_scores.get("governance")
    distribution = dimension_scores.get("distribution")

    risks = classify_risks(
        dimension_gaps,
        RiskContext(
            team_size=raw_levels["teamSize"],
            ai_usage=raw_levels["aiUsage"],
            governance_avg=governance.avg if governance else 0.0,
            distribution_avg=distribution.avg if distribution else 0.0,
        ),
    )

    context = ContextSnapshot(
        raw=raw_levels,
        normalized100={
            factor: normalize_one_four_to_hundred(raw)
            for factor, raw in raw_levels.items()
        },
    )

    logger.debug(
        "Report computed: SSI=%.2f OPI=%.2f gap=%.2f flags=%d",
        ssi, opi, adequacy_gap, len(risks.flags),
    )

    return ReportModel(
        context=context,
        operational_pressure=operational_pressure,
        dimension_scores=dimension_scores,
        ssi=ssi,
        adequacy_gap=adequacy_gap,
        dimension_gaps=dimension_gaps,
        risks=risks,
    )


@dataclass(frozen=True)
class DiagnosticReport:
    """A report model together with its narrative output."""
    report: ReportModel
    summary: str
    strengths: list[RankedDimension]
    weaknesses: list[RankedDimension]
    guidance: list[str]
    status: AdequacyStatus

    @property
    def risks(self) -> list[str]:
        return list(self.report.risks.flags)


class DiagnosticEngine:
    """Binds a questionnaire and computes reports from answer state.

    Example:
        engine = DiagnosticEngine()
        result = engine.build_report(state)
        print(result.summary)
    """

    def __init__(self, questionnaire: Optional[QuestionnaireSchema] = None):
        """Initialize with a questionnaire (defaults to the bundled one)."""
        self.questionnaire = questionnaire or get_default_questionnaire()

    def compute(self, state: DiagnosticState) -> ReportModel:
        """Compute the report model for an answer state."""
        return compute_report(state.context_responses, state.responses, self.questionnaire)

    def build_report(self, state: DiagnosticState) -> DiagnosticReport:
        """Compute the report model and all narrative output."""
        report = self.compute(state)
        return DiagnosticReport(
            report=report,
            summary=generate_summary(report),
            strengths=generate_strengths(report),
            weaknesses=generate_weaknesses(report),
            guidance=generate_guidance(report),
            status=adequacy_status(report.adequacy_gap),
        )

    def missing_questions(self, state: DiagnosticState, step: int) -> list[str]:
        """Ids of unanswered questions for a wizard step.

        Step 1 checks the context questions, step 2 the behavioral
        questions; the results step has nothing to answer.
        """
        if step == CONTEXT_STEP:
            return [
                q.id for q in self.questionnaire.operational_context.questions
                if q.id not in state.context_responses
            ]
        if step == MATURITY_STEP:
            return [
                q.id for q in self.questionnaire.structural_maturity.behavioral_questions
                if q.id not in state.responses
            ]
        return []

    def validate_step(self, state: DiagnosticState, step: int) -> Optional[str]:
        """Return a validation message for a step, or None when complete."""
        missing = self.missing_questions(state, step)
        if not missing:
            return None
        if step == CONTEXT_STEP:
            return f"Please answer all context questions ({len(missing)} left)."
        return f"Please answer all structural maturity questions ({len(missing)} left)."
