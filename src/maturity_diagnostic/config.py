"""Centralized configuration management for the maturity diagnostic."""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MATURITY_DIAGNOSTIC_CONFIG"
USER_CONFIG_DIR = Path.home() / ".config" / "maturity-diagnostic"


class RiskThresholdsConfig(BaseModel):
    """Thresholds for the risk classifier.

    The per-dimension rule fires when a dimension's gap against
    operational pressure drops below ``dimension_gap``.
    """
    dimension_gap: float = Field(
        -15.0,
        description="Flag a dimension when score100 - OPI is below this value"
    )
    entropy_ai_usage_min: float = Field(
        3.0,
        description="AI usage level (1-4) at which entropy risk is considered"
    )
    entropy_governance_avg_max: float = Field(
        2.0,
        description="Governance average (0-3) below which entropy risk fires"
    )
    drift_team_size_min: float = Field(
        3.0,
        description="Team size level (1-4) at which drift risk is considered"
    )
    drift_distribution_avg_max: float = Field(
        2.0,
        description="Distribution average (0-3) below which drift risk fires"
    )


class StatusThresholdsConfig(BaseModel):
    """Bands for the Underbuilt / Balanced / Overbuilt status label."""
    underbuilt_below: float = Field(
        -10.0,
        description="Adequacy gap below this is Underbuilt"
    )
    overbuilt_above: float = Field(
        10.0,
        description="Adequacy gap above this is Overbuilt"
    )


class HistoryConfig(BaseModel):
    """Saved report history settings."""
    max_saved_reports: int = Field(
        25,
        description="Number of report snapshots kept in history"
    )


class StorageConfig(BaseModel):
    """Where answer state and report history are persisted."""
    state_path: str = Field(
        str(USER_CONFIG_DIR / "state.json"),
        description="JSON file holding the in-progress answers"
    )
    history_path: str = Field(
        str(USER_CONFIG_DIR / "reports.json"),
        description="JSON file holding saved report snapshots"
    )


class DiagnosticConfig(BaseModel):
    """Complete configuration for the maturity diagnostic."""
    risk_thresholds: RiskThresholdsConfig = Field(default_factory=RiskThresholdsConfig)
    status_thresholds: StatusThresholdsConfig = Field(default_factory=StatusThresholdsConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


LOCAL_CONFIG_NAMES = ("diagnostic-config.yaml", "diagnostic-config.yml")

CONFIG_HEADER = f"""# Maturity Diagnostic Configuration
#
# Risk and status thresholds, history size and storage locations.
# Operational pressure weights are fixed and cannot be set here.
#
# Searched in order: ${CONFIG_ENV_VAR}, ./{LOCAL_CONFIG_NAMES[0]},
# ./{LOCAL_CONFIG_NAMES[1]}, ~/.config/maturity-diagnostic/config.yaml

"""

# Active configuration, created on first use
_config: Optional[DiagnosticConfig] = None


def get_config() -> DiagnosticConfig:
    """Return the active configuration, creating the defaults on first use."""
    global _config
    if _config is None:
        _config = DiagnosticConfig()
    return _config


def load_config(path: Optional[Path] = None) -> DiagnosticConfig:
    """Load a YAML configuration and make it the active one.

    Args:
        path: Configuration file. When omitted, the first file found by
            ``find_config_file`` is used, or the defaults if there is none.

    Returns:
        The now-active DiagnosticConfig.
    """
    global _config
    path = path or find_config_file()
    if path is None:
        _config = DiagnosticConfig()
        return _config

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    _config = DiagnosticConfig.model_validate(data)
    logger.info("Loaded configuration from %s", path)
    return _config


def reset_config() -> None:
    """Drop the active configuration; the next ``get_config`` returns defaults."""
    global _config
    _config = None


def config_search_paths() -> list[Path]:
    """Candidate configuration files, highest priority first."""
    paths = []
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        paths.append(Path(env_path))
    paths.extend(Path(name) for name in LOCAL_CONFIG_NAMES)
    paths.append(USER_CONFIG_DIR / "config.yaml")
    return paths


def find_config_file() -> Optional[Path]:
    """Return the first existing file from ``config_search_paths``, if any."""
    return next((path for path in config_search_paths() if path.is_file()), None)


def render_config(config: DiagnosticConfig) -> str:
    """Render a configuration as YAML, commenting each setting with its description."""
    lines = []
    for section_name in type(config).model_fields:
        section = getattr(config, section_name)
        summary = (type(section).__doc__ or "").strip().splitlines()
        if summary:
            lines.append(f"# {summary[0]}")
        lines.append(f"{section_name}:")
        for field_name, field in type(section).model_fields.items():
            if field.description:
                lines.append(f"  # {field.description}")
            entry = yaml.safe_dump({field_name: getattr(section, field_name)}, allow_unicode=True)
            lines.append(f"  {entry.strip()}")
        lines.append("")
    return "\n".join(lines)


def save_default_config(path: Path) -> None:
    """Write the default configuration, with comments, to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(CONFIG_HEADER + render_config(DiagnosticConfig()))
