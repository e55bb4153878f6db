"""Composite indices: Structural Strength Index and gaps against pressure."""

from typing import Mapping

from .schema import DimensionScore


def compute_ssi(dimension_scores: Mapping[str, DimensionScore]) -> float:
    """Structural Strength Index: unweighted mean of dimension scores (0-100)."""
    values = list((dimension_scores or {}).values())
    if not values:
        return 0.0
    return sum(d.score100 for d in values) / len(values)


def compute_adequacy_gap(ssi: float, opi: float) -> float:
    """Signed gap; positive means maturity exceeds operational pressure."""
    return float(ssi or 0) - float(opi or 0)


def compute_dimension_gaps(
    dimension_scores: Mapping[str, DimensionScore],
    opi: float,
) -> dict[str, float]:
    """Per-dimension gap of score100 against the OPI."""
    return {
        dimension: score.score100 - float(opi or 0)
        for dimension, score in (dimension_scores or {}).items()
    }
