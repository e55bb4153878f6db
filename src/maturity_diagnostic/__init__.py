"""Design system maturity diagnostic.

Scores structural maturity answers against operational pressure and
derives risk flags and guidance.
"""

from .engine import DiagnosticEngine, DiagnosticReport, compute_report
from .explainer import generate_guidance, generate_strengths, generate_summary, generate_weaknesses
from .normalizer import normalize_one_four_to_hundred, normalize_zero_three_to_hundred
from .questionnaire import get_default_questionnaire, load_questionnaire
from .schema import DiagnosticState, QuestionnaireSchema, ReportModel

__version__ = "1.0.0"

__all__ = [
    "DiagnosticEngine",
    "DiagnosticReport",
    "DiagnosticState",
    "QuestionnaireSchema",
    "ReportModel",
    "compute_report",
    "generate_guidance",
    "generate_strengths",
    "generate_summary",
    "generate_weaknesses",
    "get_default_questionnaire",
    "load_questionnaire",
    "normalize_one_four_to_hundred",
    "normalize_zero_three_to_hundred",
]
