"""Report export.

Builds the stable JSON payload consumed by downstream tools and writes
it to disk.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .schema import ExportDimensionScore, ReportExport, ReportModel

logger = logging.getLogger(__name__)

EXPORT_FILE_PREFIX = "ds-maturity-report"


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_export_payload(
    report: ReportModel,
    guidance: list[str],
    context_responses: Optional[Mapping[str, Any]] = None,
    timestamp: Optional[str] = None,
) -> ReportExport:
    """Build the export payload for a report.

    Args:
        report: Computed report model
        guidance: Guidance tips generated for the report
        context_responses: Raw context answers, copied verbatim
        timestamp: Override for the export time (ISO-8601)

    Returns:
        ReportExport ready for ``model_dump_json(by_alias=True)``
    """
    return ReportExport(
        timestamp=timestamp or iso_timestamp(),
        context_responses=dict(context_responses or {}),
        dimension_scores={
            dimension: ExportDimensionScore(avg=score.avg, score100=score.score100)
            for dimension, score in report.dimension_scores.items()
        },
        ssi=report.ssi,
        opi=report.opi,
        adequacy_gap=report.adequacy_gap,
        risk_flags=list(report.risks.flags),
        guidance_tips=list(guidance),
    )


def export_to_json(payload: ReportExport) -> str:
    """Serialize an export payload with its public key names."""
    return payload.model_dump_json(by_alias=True, indent=2)


def parse_export(data: Union[str, bytes]) -> ReportExport:
    """Parse a previously exported payload."""
    return ReportExport.model_validate_json(data)


def export_filename(timestamp: str) -> str:
    """File name for an export, e.g. ds-maturity-report-2026-01-02T03-04-05-000Z.json."""
    stamp = timestamp.replace(":", "-").replace(".", "-")
    return f"{EXPORT_FILE_PREFIX}-{stamp}.json"


def write_export(payload: ReportExport, out_path: Optional[Union[str, Path]] = None) -> Path:
    """Write an export payload to a file.

    Args:
        payload: Export payload
        out_path: Destination file, or a directory to place a
            timestamped file in. Defaults to the current directory.

    Returns:
        Path of the written file
    """
    path = Path(out_path) if out_path else Path.cwd()
    if path.is_dir():
        path = path / export_filename(payload.timestamp)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(export_to_json(payload))

    logger.info("Report exported to %s", path)
    return path
