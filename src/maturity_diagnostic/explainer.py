"""Explainer - narrative output for a computed report.

Generates the summary sentence, ranked strengths and weaknesses, and
behavior-focused guidance tips from a ReportModel.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .config import StatusThresholdsConfig, get_config
from .risk_classifier import DRIFT_RISK, ENTROPY_RISK
from .schema import AdequacyStatus, RankedDimension, ReportModel

# Tips raised by cross-cutting risk flags, in flag order
RISK_TIPS: dict[str, tuple[str, ...]] = {
    ENTROPY_RISK: (
        "Add a contribution RFC template + review gate so AI-assisted changes are triaged "
        "with clear owners and decision criteria.",
        "Create a weekly governance check-in that reviews incoming system changes, "
        "exceptions, and follow-up actions.",
    ),
    DRIFT_RISK: (
        "Publish system releases on a fixed cadence with release notes and a lightweight "
        "migration checklist for consuming teams.",
        "Track package adoption and breakages after each release so distribution issues "
        "are visible within one sprint.",
    ),
}

# Tips for known dimensions when they rank among the weakest, in output order
DIMENSION_TIPS: dict[str, str] = {
    "governance": (
        "Define who approves token/component changes and add a simple intake form so "
        "requests follow one visible path."
    ),
    "distribution": (
        "Set up one repeatable publish workflow (version, notes, package release) and "
        "treat failed releases as a tracked incident."
    ),
    "documentation": (
        "Update docs in the same pull request as component changes, including examples "
        "for loading, empty, and error states."
    ),
    "components": (
        "Standardize component API patterns (states, variants, naming) and add a pre-merge "
        "check for accessibility basics."
    ),
    "foundations": (
        "Move core style values into shared tokens and add a lint/review check to reduce "
        "hard-coded color and spacing values."
    ),
    "adoption": (
        "Set a quarterly adoption target for two high-traffic flows and review progress "
        "with concrete usage metrics."
    ),
}

FALLBACK_TIP = (
    "Pick one low-scoring behavior per dimension and run a 2-week improvement sprint "
    "with a clear owner and observable success signal."
)

RANKED_COUNT = 2


def to_title(key: str) -> str:
    """Upper-case the first character of a dimension key."""
    if not key:
        return ""
    return key[0].upper() + key[1:]


def format_score(value: float) -> str:
    """Format a score with one decimal, rounding halves away from zero.

    Rounding uses the exact binary value, so 6.25 gives "6.3" and -0.25
    gives "-0.3".
    """
    number = float(value)
    if not math.isfinite(number):
        return str(number)
    sign = "-" if number < 0 else ""
    rounded = Decimal(abs(number)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{sign}{rounded}"


def format_level(value: float) -> str:
    """Format a raw context level, dropping a trailing .0."""
    number = float(value)
    return str(int(number)) if number.is_integer() else str(number)


def _sorted_dimensions(report: ReportModel) -> list[RankedDimension]:
    # sorted() is stable, so equal scores keep insertion order
    ranked = [
        RankedDimension(dimension=dimension, score100=score.score100, avg=score.avg)
        for dimension, score in report.dimension_scores.items()
    ]
    return sorted(ranked, key=lambda d: d.score100, reverse=True)


def _relationship(gap: float) -> str:
    if gap >= 10:
        return "tends to sit above current operational pressure"
    if gap >= 0:
        return "is slightly above current operational pressure"
    if gap >= -10:
        return "is slightly below current operational pressure"
    return "may indicate a notable gap to current operational pressure"


def generate_summary(report: ReportModel) -> str:
    """Generate a short summary paragraph about alignment and context pressure."""
    ssi = report.ssi
    opi = report.opi
    gap = report.adequacy_gap
    raw = report.context.raw

    team_size = raw.get("teamSize") or 1
    ai_usage = raw.get("aiUsage") or 1

    return (
        f"Current maturity signals (SSI {format_score(ssi)}) {_relationship(gap)} "
        f"(OPI {format_score(opi)}, AG {format_score(gap)}). "
        f"With team size level {format_level(team_size)} and AI usage level "
        f"{format_level(ai_usage)}, this tends to indicate where practice consistency "
        f"may need reinforcement as delivery pace changes."
    )


def generate_strengths(report: ReportModel) -> list[RankedDimension]:
    """Return the top two dimensions by score."""
    return [
        RankedDimension(dimension=to_title(d.dimension), score100=d.score100, avg=d.avg)
        for d in _sorted_dimensions(report)[:RANKED_COUNT]
    ]


def generate_weaknesses(report: ReportModel) -> list[RankedDimension]:
    """Return the bottom two dimensions by score, weakest first.

    With fewer than four dimensions this can overlap with the strengths.
    """
    ranked = _sorted_dimensions(report)
    ranked.reverse()
    return [
        RankedDimension(dimension=to_title(d.dimension), score100=d.score100, avg=d.avg)
        for d in ranked[:RANKED_COUNT]
    ]


def generate_guidance(report: ReportModel) -> list[str]:
    """Generate actionable guidance tips from risks and the weakest dimensions.

    Order: risk-flag tips, then weakness tips in DIMENSION_TIPS order, then
    the fallback if nothing matched. Duplicates are dropped.
    """
    tips = []
    flags = report.risks.flags
    weakest_keys = {d.dimension.lower() for d in generate_weaknesses(report)}

    for flag, flag_tips in RISK_TIPS.items():
        if flag in flags:
            tips.extend(flag_tips)

    for dimension, tip in DIMENSION_TIPS.items():
        if dimension in weakest_keys:
            tips.append(tip)

    if not tips:
        tips.append(FALLBACK_TIP)

    return list(dict.fromkeys(tips))


def adequacy_status(
    gap: float,
    thresholds: Optional[StatusThresholdsConfig] = None,
) -> AdequacyStatus:
    """Label the adequacy gap as Underbuilt, Balanced or Overbuilt."""
    thresholds = thresholds or get_config().status_thresholds
    if gap < thresholds.underbuilt_below:
        return AdequacyStatus(label="Underbuilt", class_name="underbuilt")
    if gap > thresholds.overbuilt_above:
        return AdequacyStatus(label="Overbuilt", class_name="overbuilt")
    return AdequacyStatus(label="Balanced", class_name="balanced")


def build_copy_summary(report: ReportModel, summary: str) -> str:
    """Plain-text summary suitable for pasting elsewhere."""
    lines = [
        summary,
        "",
        f"SSI: {format_score(report.ssi)}",
        f"OPI: {format_score(report.opi)}",
        f"Adequacy Gap: {format_score(report.adequacy_gap)}",
    ]
    return "\n".join(lines)
