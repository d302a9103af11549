"""Configuration loading and validation."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator


class PaceThresholds(BaseModel):
    """Pace classification floors, as deltas of progress minus expected progress."""

    model_config = {"frozen": True}

    on_track_floor: float = Field(
        default=-0.05, le=0, description="Smallest delta still classified as on track"
    )
    at_risk_floor: float = Field(
        default=-0.20, le=0, description="Smallest delta still classified as at risk"
    )

    @model_validator(mode="after")
    def validate_ordering(self) -> "PaceThresholds":
        """Validate that the at-risk floor sits at or below the on-track floor."""
        if self.at_risk_floor > self.on_track_floor:
            msg = (
                f"at_risk_floor ({self.at_risk_floor}) must not exceed "
                f"on_track_floor ({self.on_track_floor})"
            )
            raise ValueError(msg)
        return self


DEFAULT_PACE_THRESHOLDS = PaceThresholds()


class AnalyticsConfig(BaseModel):
    """Analytics aggregation configuration."""

    streak_lookback_days: int = Field(
        default=90, ge=1, description="Maximum days walked back when counting a streak"
    )
    min_weeks: float = Field(
        default=1.0, gt=0, description="Floor for the week count used in velocity"
    )


class ReportConfig(BaseModel):
    """Report configuration section."""

    title: str = "OKR Progress"
    show_quarters: bool = True


class Config(BaseModel):
    """Root configuration model."""

    year: int | None = Field(default=None, ge=1970, le=9999)
    pace: PaceThresholds = Field(default_factory=PaceThresholds)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)


def load_config(path: Path) -> Config:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Validated Config object.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValidationError: If the config is invalid.
    """
    if not path.exists():
        msg = f"Config file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open() as f:
        raw_config: dict[str, Any] | None = yaml.safe_load(f)

    return Config.model_validate(raw_config or {})
