"""Score normalization for the Maturity Diagnostic engine.

Maps the two discrete answer scales onto a common 0-100 scale. Every
function here is total: bad input clamps or falls back to the scale
minimum instead of raising.
"""

import math
from typing import Any

# Answer scales
MATURITY_MIN = 0
MATURITY_MAX = 3
CONTEXT_MIN = 1
CONTEXT_MAX = 4


def clamp_score(value: Any, minimum: float, maximum: float) -> float:
    """Coerce a value to a float and clamp it into [minimum, maximum].

    Non-numeric and non-finite values (None, "abc", NaN, inf) map to
    ``minimum``.
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return float(minimum)
    if not math.isfinite(number):
        return float(minimum)
    return min(float(maximum), max(float(minimum), number))


def normalize_zero_three_to_hundred(score: Any) -> float:
    """Convert a 0-3 maturity score to 0-100."""
    clamped = clamp_score(score, MATURITY_MIN, MATURITY_MAX)
    return (clamped / 3) * 100


def normalize_one_four_to_hundred(score: Any) -> float:
    """Convert a 1-4 context option score to 0-100."""
    clamped = clamp_score(score, CONTEXT_MIN, CONTEXT_MAX)
    return ((clamped - 1) / 3) * 100
