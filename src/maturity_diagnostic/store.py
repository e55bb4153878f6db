"""Local persistence for answer state and saved report history.

Both stores rewrite a whole JSON file on every save (last write wins).
Missing or unreadable files fall back to empty defaults.
"""

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml
from pydantic import TypeAdapter, ValidationError

from .config import get_config
from .engine import TOTAL_STEPS
from .export import iso_timestamp
from .schema import DiagnosticState, ReportModel, SavedReport

logger = logging.getLogger(__name__)

_saved_reports_adapter = TypeAdapter(list[SavedReport])


class AnswersFileError(Exception):
    """Raised when an answers file cannot be read or parsed."""


def load_answers_file(path: Union[str, Path]) -> DiagnosticState:
    """Load answers from a JSON or YAML file.

    The file holds ``contextResponses`` and ``responses`` (snake_case
    ``context_responses`` is also accepted). An exported report can be
    used too; it only carries context answers.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise AnswersFileError(f"Cannot read answers file {path}: {e}") from e

    if not isinstance(data, dict):
        raise AnswersFileError(f"Answers file {path} must contain a mapping")

    try:
        return DiagnosticState.model_validate(
            {
                "context_responses": data.get("contextResponses", data.get("context_responses")) or {},
                "responses": data.get("responses") or {},
            }
        )
    except ValidationError as e:
        raise AnswersFileError(f"Invalid answers file {path}: {e}") from e


def _format_answer(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _fingerprint_section(answers: Mapping[str, Any]) -> str:
    return "|".join(f"{key}:{_format_answer(answers[key])}" for key in sorted(answers))


def state_fingerprint(state: DiagnosticState) -> str:
    """Stable fingerprint of the answers in a state (step is ignored)."""
    return (
        f"{_fingerprint_section(state.context_responses)}"
        f"::{_fingerprint_section(state.responses)}"
    )


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


class StateStore:
    """Persists the in-progress answer state to a JSON file."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path or get_config().storage.state_path).expanduser()

    def load(self) -> DiagnosticState:
        """Restore saved state, or a fresh state if none is usable."""
        if not self.path.exists():
            return DiagnosticState()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            state = DiagnosticState.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Discarding unreadable state file %s: %s", self.path, e)
            return DiagnosticState()

        if not 1 <= state.current_step <= TOTAL_STEPS:
            state.current_step = 1
        return state

    def save(self, state: DiagnosticState) -> None:
        """Write the state, replacing whatever was stored."""
        _write_json(self.path, state.model_dump(by_alias=True))

    def clear(self) -> DiagnosticState:
        """Reset to a fresh state and persist it."""
        state = DiagnosticState()
        self.save(state)
        return state


class ReportHistory:
    """Most-recent-first list of saved report snapshots."""

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        max_reports: Optional[int] = None,
    ):
        cfg = get_config()
        self.path = Path(path or cfg.storage.history_path).expanduser()
        self.max_reports = max_reports if max_reports is not None else cfg.history.max_saved_reports

    def load(self) -> list[SavedReport]:
        """Load saved reports.

        An unreadable file yields an empty history; malformed entries are
        skipped and the rest are kept.
        """
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Discarding unreadable report history %s: %s", self.path, e)
            return []

        if not isinstance(data, list):
            logger.warning("Discarding report history %s: expected a list", self.path)
            return []

        reports = []
        for index, entry in enumerate(data):
            try:
                reports.append(SavedReport.model_validate(entry))
            except ValidationError as e:
                logger.warning("Skipping malformed saved report %d in %s: %s", index, self.path, e)
        return reports

    def save_snapshot(
        self,
        report: ReportModel,
        summary: str,
        guidance: list[str],
        fingerprint: str,
        timestamp: Optional[str] = None,
    ) -> list[SavedReport]:
        """Prepend a snapshot unless the newest one has the same answers.

        Returns:
            The history after saving, newest first
        """
        reports = self.load()
        if reports and reports[0].fingerprint == fingerprint:
            return reports

        record = SavedReport(
            timestamp=timestamp or iso_timestamp(),
            fingerprint=fingerprint,
            summary=summary,
            ssi=report.ssi,
            opi=report.opi,
            adequacy_gap=report.adequacy_gap,
            risks=list(report.risks.flags),
            guidance=list(guidance),
        )

        reports = [record, *reports][:self.max_reports]
        _write_json(self.path, _saved_reports_adapter.dump_python(reports, by_alias=True))
        logger.info("Saved report snapshot to %s (%d kept)", self.path, len(reports))
        return reports
