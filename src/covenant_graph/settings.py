"""Application settings via Pydantic BaseSettings.

All configuration uses the CVG_ environment variable prefix.
Centralized here to keep engine thresholds out of call sites.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class EngineSettings(BaseSettings):
    """Thresholds and limits of the temporal causality engine."""

    model_config = {"env_prefix": "CVG_ENGINE_"}

    # Chain detection
    min_chain_length: int = Field(default=2, ge=1)

    # Facility prediction
    prediction_horizon_days: int = 180
    min_match_confidence: float = Field(default=30.0, ge=0, le=100)

    # Intervention thresholds
    outreach_confidence_threshold: float = 50.0
    waiver_preparation_window_days: float = 30.0
    escalation_deadline_days: float = 7.0

    # Analytics
    top_patterns_limit: int = Field(default=10, ge=1)
    highest_risk_limit: int = Field(default=5, ge=1)


class PatternLibrarySettings(BaseSettings):
    """Where extra causal patterns are loaded from at startup."""

    model_config = {"env_prefix": "CVG_PATTERNS_"}

    # JSON file holding a list of CausalPattern objects; None = empty library
    path: Path | None = None


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "CVG_"}

    app_name: str = "covenant-graph"
    debug: bool = False
    log_level: str = "INFO"

    engine: EngineSettings = Field(default_factory=EngineSettings)
    patterns: PatternLibrarySettings = Field(default_factory=PatternLibrarySettings)
