"""Operational Pressure Calculator.

Turns the operational context answers into the Operational Pressure Index
(OPI): each factor's 1-4 level is normalized to 0-100, weighted, and summed.
"""

import logging
import math
from typing import Any, Mapping, Optional

from .normalizer import CONTEXT_MIN, normalize_one_four_to_hundred
from .schema import OperationalPressure, PressureFactor

logger = logging.getLogger(__name__)


# Factor weights, in breakdown order. Must sum to exactly 1.0.
OPERATIONAL_WEIGHTS: dict[str, float] = {
    "teamSize": 0.25,
    "productComplexity": 0.25,
    "aiUsage": 0.20,
    "releaseFrequency": 0.15,
    "toolingFragmentation": 0.15,
}

# Accepted answer keys per factor, first match wins.
# The oc_* keys come from older questionnaire versions.
CONTEXT_KEY_ALIASES: dict[str, tuple[str, ...]] = {
    "teamSize": ("teamSize", "oc_team_size"),
    "productComplexity": ("productComplexity", "oc_product_complexity"),
    "aiUsage": ("aiUsage", "oc_ai_usage"),
    "releaseFrequency": ("releaseFrequency", "oc_release_frequency"),
    "toolingFragmentation": ("toolingFragmentation", "oc_tooling_fragmentation"),
}

CONTEXT_FACTORS: tuple[str, ...] = tuple(OPERATIONAL_WEIGHTS)

DEFAULT_CONTEXT_LEVEL = float(CONTEXT_MIN)


def resolve_context_value(
    context_responses: Optional[Mapping[str, Any]],
    aliases: tuple[str, ...],
) -> float:
    """Resolve a context level from the first alias present in the answers.

    The value is returned unclamped so the raw level stays visible in the
    report; non-numeric values fall back to the scale minimum.
    """
    context_responses = context_responses or {}
    for key in aliases:
        if key in context_responses:
            try:
                value = float(context_responses[key])
            except (TypeError, ValueError):
                return DEFAULT_CONTEXT_LEVEL
            return value if math.isfinite(value) else DEFAULT_CONTEXT_LEVEL
    return DEFAULT_CONTEXT_LEVEL


def resolve_context_levels(context_responses: Optional[Mapping[str, Any]]) -> dict[str, float]:
    """Resolve the raw level of every context factor."""
    return {
        factor: resolve_context_value(context_responses, CONTEXT_KEY_ALIASES[factor])
        for factor in CONTEXT_FACTORS
    }


def compute_operational_pressure(
    context_responses: Optional[Mapping[str, Any]],
) -> OperationalPressure:
    """Compute the Operational Pressure Index from context responses.

    Args:
        context_responses: Context question id -> 1-4 level (may be partial)

    Returns:
        OperationalPressure with the index and a per-factor breakdown
    """
    breakdown = {}
    opi = 0.0

    for factor, raw in resolve_context_levels(context_responses).items():
        weight = OPERATIONAL_WEIGHTS[factor]
        score100 = normalize_one_four_to_hundred(raw)
        contribution = score100 * weight

        breakdown[factor] = PressureFactor(
            raw=raw,
            score100=score100,
            weight=weight,
            contribution=contribution,
        )
        opi += contribution

    logger.debug("Operational pressure index: %.2f", opi)
    return OperationalPressure(opi=opi, breakdown=breakdown)
