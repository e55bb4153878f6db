"""Pydantic models for the Maturity Diagnostic engine.

Input schemas for the questionnaire and the two answer maps, and output
schemas for the derived report, the export payload and saved history.
Field aliases match the camelCase names used by exported JSON files.
"""

import math
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Questionnaire Models
# =============================================================================


class ContextOption(BaseModel):
    """A single answer option for an operational context question."""
    label: str
    score: int = Field(..., ge=1, le=4)


class ContextQuestion(BaseModel):
    """An operational context question with discrete 1-4 options."""
    id: str
    prompt: str
    options: list[ContextOption]
    help_text: Optional[str] = Field(None, alias="helpText")

    class Config:
        populate_by_name = True


class OperationalContextSection(BaseModel):
    """Situational questions that feed the Operational Pressure Index."""
    title: str = "Operational Context"
    description: str = ""
    questions: list[ContextQuestion] = Field(default_factory=list)


class BehavioralQuestion(BaseModel):
    """A structural maturity question scored 0-3 and tagged with a dimension."""
    id: str
    dimension: str
    prompt: str
    help_text: str = Field("", alias="helpText")
    scoring_labels: dict[int, str] = Field(default_factory=dict, alias="scoringLabels")

    class Config:
        populate_by_name = True

    @field_validator("scoring_labels")
    @classmethod
    def check_label_keys(cls, value: dict[int, str]) -> dict[int, str]:
        outside = sorted(k for k in value if k not in (0, 1, 2, 3))
        if outside:
            raise ValueError(f"scoring labels must be keyed 0..3, got {outside}")
        return value


class StructuralMaturitySection(BaseModel):
    """Behavioral questions grouped into named maturity dimensions."""
    title: str = "Structural Maturity"
    description: str = ""
    dimensions: list[str] = Field(default_factory=list)
    behavioral_questions: list[BehavioralQuestion] = Field(
        default_factory=list,
        alias="behavioralQuestions",
    )

    class Config:
        populate_by_name = True


class QuestionnaireSchema(BaseModel):
    """The full questionnaire: operational context plus structural maturity.

    Question ids are unique across both sections and every behavioral
    question references a declared dimension (case-insensitive).
    """
    operational_context: OperationalContextSection = Field(
        default_factory=OperationalContextSection,
        alias="operationalContext",
    )
    structural_maturity: StructuralMaturitySection = Field(
        default_factory=StructuralMaturitySection,
        alias="structuralMaturity",
    )

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def check_invariants(self) -> "QuestionnaireSchema":
        seen: set[str] = set()
        duplicates = []
        for question_id in self.question_ids():
            if question_id in seen:
                duplicates.append(question_id)
            seen.add(question_id)
        if duplicates:
            raise ValueError(f"duplicate question ids: {sorted(set(duplicates))}")

        declared = {d.lower() for d in self.structural_maturity.dimensions}
        unknown = [
            q.id for q in self.structural_maturity.behavioral_questions
            if q.dimension.lower() not in declared
        ]
        if unknown:
            raise ValueError(f"questions reference undeclared dimensions: {unknown}")
        return self

    def question_ids(self) -> list[str]:
        """All question ids in questionnaire order (context first)."""
        ids = [q.id for q in self.operational_context.questions]
        ids.extend(q.id for q in self.structural_maturity.behavioral_questions)
        return ids

    def questions_for_dimension(self, dimension: str) -> list[BehavioralQuestion]:
        """Behavioral questions belonging to a dimension (case-insensitive)."""
        key = dimension.lower()
        return [
            q for q in self.structural_maturity.behavioral_questions
            if q.dimension.lower() == key
        ]


# =============================================================================
# Derived Score Models
# =============================================================================


class FrozenModel(BaseModel):
    """Base for derived output; instances cannot be changed after construction."""

    class Config:
        frozen = True


class DimensionScore(FrozenModel):
    """Aggregated maturity for one dimension."""
    avg: float  # 0-3
    score100: float  # 0-100
    answered: int = 0
    total: int = 0


class PressureFactor(FrozenModel):
    """One factor's share of the Operational Pressure Index."""
    raw: float
    score100: float
    weight: float
    contribution: float


class OperationalPressure(FrozenModel):
    """Operational Pressure Index with a per-factor breakdown."""
    opi: float
    breakdown: dict[str, PressureFactor] = Field(default_factory=dict)


class ContextSnapshot(FrozenModel):
    """Resolved raw context levels and their 0-100 normalizations."""
    raw: dict[str, float] = Field(default_factory=dict)
    normalized100: dict[str, float] = Field(default_factory=dict)


class DimensionRisk(FrozenModel):
    """Gap of a dimension against pressure, and whether it breaches."""
    gap: float
    risk: bool


class RiskAssessment(FrozenModel):
    """Risk classification output."""
    by_dimension: dict[str, DimensionRisk] = Field(default_factory=dict)
    flags: tuple[str, ...] = ()
    has_risk: bool = False


class ReportModel(FrozenModel):
    """Full derived snapshot of one diagnostic computation.

    Immutable; recomputed from the answer maps on every call.
    """
    context: ContextSnapshot
    operational_pressure: OperationalPressure
    dimension_scores: dict[str, DimensionScore] = Field(default_factory=dict)
    ssi: float = 0.0
    adequacy_gap: float = 0.0
    dimension_gaps: dict[str, float] = Field(default_factory=dict)
    risks: RiskAssessment = Field(default_factory=RiskAssessment)

    @property
    def opi(self) -> float:
        return self.operational_pressure.opi


# =============================================================================
# Narrative Models
# =============================================================================


class RankedDimension(BaseModel):
    """A dimension as listed among strengths or weaknesses."""
    dimension: str  # Title-cased for display
    score100: float
    avg: float


class AdequacyStatus(BaseModel):
    """Coarse label for the adequacy gap."""
    label: str
    class_name: str


# =============================================================================
# Export, History and State Models
# =============================================================================


def _require_finite(value: float) -> float:
    if not math.isfinite(value):
        raise ValueError("numeric export fields must be finite")
    return value


class ExportDimensionScore(BaseModel):
    """Dimension score as written to the export payload."""
    avg: float
    score100: float

    @field_validator("avg", "score100")
    @classmethod
    def check_finite(cls, value: float) -> float:
        return _require_finite(value)


class ReportExport(BaseModel):
    """Stable JSON export of a report.

    Serialize with ``model_dump_json(by_alias=True)`` to get the
    downstream key names (``SSI``, ``riskFlags``...).
    """
    timestamp: str
    context_responses: dict[str, Any] = Field(default_factory=dict, alias="contextResponses")
    dimension_scores: dict[str, ExportDimensionScore] = Field(
        default_factory=dict,
        alias="dimensionScores",
    )
    ssi: float = Field(0.0, alias="SSI")
    opi: float = Field(0.0, alias="OPI")
    adequacy_gap: float = Field(0.0, alias="adequacyGap")
    risk_flags: list[str] = Field(default_factory=list, alias="riskFlags")
    guidance_tips: list[str] = Field(default_factory=list, alias="guidanceTips")

    class Config:
        populate_by_name = True

    @field_validator("ssi", "opi", "adequacy_gap")
    @classmethod
    def check_finite(cls, value: float) -> float:
        return _require_finite(value)


class SavedReport(BaseModel):
    """A report snapshot kept in the local history."""
    timestamp: str
    fingerprint: str
    summary: str = ""
    ssi: float = Field(0.0, alias="SSI")
    opi: float = Field(0.0, alias="OPI")
    adequacy_gap: float = Field(0.0, alias="adequacyGap")
    risks: list[str] = Field(default_factory=list)
    guidance: list[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class DiagnosticState(BaseModel):
    """Caller-owned answer state passed into every computation."""
    current_step: int = Field(1, alias="currentStep")
    context_responses: dict[str, Any] = Field(default_factory=dict, alias="contextResponses")
    responses: dict[str, Any] = Field(default_factory=dict)

    class Config:
        populate_by_name = True
