"""Risk Classifier.

Flags dimensions that lag operational pressure and two cross-cutting
patterns where scale outruns discipline. Every rule is evaluated; flags
accumulate in rule order.
"""

from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from .config import RiskThresholdsConfig, get_config
from .schema import DimensionRisk, RiskAssessment

ENTROPY_RISK = "Entropy risk (AI velocity > governance)"
DRIFT_RISK = "Drift risk (scale > release discipline)"


@dataclass(frozen=True)
class RiskContext:
    """Read-only inputs for the cross-cutting rules.

    team_size and ai_usage are raw 1-4 context levels; the averages are
    0-3 dimension averages (0 when the dimension is absent).
    """
    team_size: float = 0.0
    ai_usage: float = 0.0
    governance_avg: float = 0.0
    distribution_avg: float = 0.0


@dataclass(frozen=True)
class RiskRule:
    """A flag and the predicate that raises it."""
    flag: str
    predicate: Callable[[RiskContext, RiskThresholdsConfig], bool]


CROSS_CUTTING_RULES: tuple[RiskRule, ...] = (
    RiskRule(
        ENTROPY_RISK,
        lambda ctx, t: (
            ctx.ai_usage >= t.entropy_ai_usage_min
            and ctx.governance_avg < t.entropy_governance_avg_max
        ),
    ),
    RiskRule(
        DRIFT_RISK,
        lambda ctx, t: (
            ctx.team_size >= t.drift_team_size_min
            and ctx.distribution_avg < t.drift_distribution_avg_max
        ),
    ),
)


def dimension_risk_flag(dimension: str, threshold: float) -> str:
    """Flag text for a dimension whose gap breaches the threshold."""
    return f"{dimension} risk (gap < {threshold:g})"


class RiskClassifier:
    """Classifies risk signals from dimension gaps and scale context.

    Configuration:
    - Thresholds can be customized via diagnostic-config.yaml
    """

    def __init__(
        self,
        thresholds: Optional[RiskThresholdsConfig] = None,
        rules: tuple[RiskRule, ...] = CROSS_CUTTING_RULES,
    ):
        self.thresholds = thresholds or get_config().risk_thresholds
        self.rules = rules

    def classify(
        self,
        dimension_gaps: Mapping[str, float],
        context: RiskContext,
    ) -> RiskAssessment:
        """Evaluate all rules and collect flags.

        Args:
            dimension_gaps: Dimension key -> score100 minus OPI
            context: Scale and governance inputs

        Returns:
            RiskAssessment with per-dimension results and ordered flags
        """
        by_dimension = {}
        flags = []

        for dimension, gap in (dimension_gaps or {}).items():
            is_risk = gap < self.thresholds.dimension_gap
            by_dimension[dimension] = DimensionRisk(gap=gap, risk=is_risk)
            if is_risk:
                flags.append(dimension_risk_flag(dimension, self.thresholds.dimension_gap))

        for rule in self.rules:
            if rule.predicate(context, self.thresholds):
                flags.append(rule.flag)

        return RiskAssessment(
            by_dimension=by_dimension,
            flags=tuple(flags),
            has_risk=len(flags) > 0,
        )


def classify_risks(
    dimension_gaps: Mapping[str, float],
    context: RiskContext,
) -> RiskAssessment:
    """Classify risks with the configured thresholds."""
    return RiskClassifier().classify(dimension_gaps, context)
