"""Dimension Aggregator.

Groups behavioral answers by dimension and averages the answered ones.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .normalizer import MATURITY_MAX, MATURITY_MIN, clamp_score, normalize_zero_three_to_hundred
from .schema import DimensionScore, QuestionnaireSchema

logger = logging.getLogger(__name__)


@dataclass
class _DimensionTally:
    """Running totals for one dimension."""
    points: float = 0.0
    answered: int = 0
    total: int = 0


def compute_dimension_scores(
    responses: Optional[Mapping[str, Any]],
    questionnaire: Optional[QuestionnaireSchema],
) -> dict[str, DimensionScore]:
    """Build per-dimension maturity scores from behavioral responses.

    Dimensions are keyed by their lower-cased name, in order of first
    appearance in the question list. A dimension whose questions are all
    unanswered is kept with avg 0.

    Args:
        responses: Behavioral question id -> 0-3 score (may be partial)
        questionnaire: Questionnaire providing the behavioral questions

    Returns:
        Mapping of dimension key to DimensionScore
    """
    responses = responses or {}
    questions = questionnaire.structural_maturity.behavioral_questions if questionnaire else []

    tallies: dict[str, _DimensionTally] = {}
    for question in questions:
        key = (question.dimension or "").lower()
        tally = tallies.setdefault(key, _DimensionTally())
        tally.total += 1

        if question.id in responses:
            tally.points += clamp_score(responses[question.id], MATURITY_MIN, MATURITY_MAX)
            tally.answered += 1

    scores = {}
    for dimension, tally in tallies.items():
        avg = tally.points / tally.answered if tally.answered > 0 else 0.0
        scores[dimension] = DimensionScore(
            avg=avg,
            score100=normalize_zero_three_to_hundred(avg),
            answered=tally.answered,
            total=tally.total,
        )

    logger.debug("Aggregated %d dimensions from %d responses", len(scores), len(responses))
    return scores
