"""Questionnaire loading.

The default design system questionnaire ships with the package as YAML.
Custom questionnaires can be loaded from YAML or JSON files using either
camelCase or snake_case keys.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError

from .schema import QuestionnaireSchema

logger = logging.getLogger(__name__)

DEFAULT_QUESTIONNAIRE_PATH = Path(__file__).parent / "data" / "questionnaire.yaml"


class QuestionnaireLoadError(Exception):
    """Raised when a questionnaire file cannot be read or validated."""


# Cached default questionnaire
_default_questionnaire: Optional[QuestionnaireSchema] = None


def load_questionnaire(path: Union[str, Path]) -> QuestionnaireSchema:
    """Load and validate a questionnaire file.

    Args:
        path: Path to a .yaml/.yml or .json questionnaire

    Returns:
        The validated QuestionnaireSchema

    Raises:
        QuestionnaireLoadError: If the file is unreadable, unparsable or
            violates the questionnaire invariants.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise QuestionnaireLoadError(f"Cannot read questionnaire {path}: {e}") from e

    try:
        questionnaire = QuestionnaireSchema.model_validate(data or {})
    except ValidationError as e:
        raise QuestionnaireLoadError(f"Invalid questionnaire {path}: {e}") from e

    logger.debug(
        "Loaded questionnaire %s (%d context, %d behavioral questions)",
        path,
        len(questionnaire.operational_context.questions),
        len(questionnaire.structural_maturity.behavioral_questions),
    )
    return questionnaire


def get_default_questionnaire() -> QuestionnaireSchema:
    """Get the bundled questionnaire, loading it on first use."""
    global _default_questionnaire
    if _default_questionnaire is None:
        _default_questionnaire = load_questionnaire(DEFAULT_QUESTIONNAIRE_PATH)
    return _default_questionnaire


def validate_questionnaire(path: Union[str, Path]) -> tuple[bool, list[str]]:
    """Validate a questionnaire file.

    Returns:
        Tuple of (is_valid, issues)
    """
    issues = []
    try:
        questionnaire = load_questionnaire(path)
    except QuestionnaireLoadError as e:
        return False, [str(e)]

    if not questionnaire.operational_context.questions:
        issues.append("No operational context questions defined")
    if not questionnaire.structural_maturity.behavioral_questions:
        issues.append("No behavioral questions defined")

    referenced = {q.dimension.lower() for q in questionnaire.structural_maturity.behavioral_questions}
    for dimension in questionnaire.structural_maturity.dimensions:
        if dimension.lower() not in referenced:
            issues.append(f"Dimension '{dimension}' has no questions and will not be scored")

    return len(issues) == 0, issues
