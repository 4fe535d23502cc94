"""Typed runtime settings for analysis, planning, and collaborator adapters.

Defaults live in the dataclasses below. Every value can be overridden with a
``MOTIONSYNC_*`` environment variable, optionally loaded from a local ``.env``
file. ``get_settings()`` returns the cached settings and ``reload_settings()``
rebuilds them from the current environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True)
class EnvelopeSettings:
    """Windowing used by the loudness envelope."""

    window_seconds: float = 0.08


@dataclass(frozen=True)
class ThresholdSettings:
    """Percentile rule used to derive the talk/silence hysteresis pair."""

    floor_percentile: float = 10.0
    peak_percentile: float = 95.0
    talk_ratio: float = 0.5
    silence_ratio: float = 0.2
    min_talk_level: float = 0.02
    min_silence_level: float = 0.01
    min_dynamic_range_db: float = 6.0
    min_threshold_gap_db: float = 3.0


@dataclass(frozen=True)
class PlannerSettings:
    """Numeric tolerance used when comparing clip coverage to a target."""

    coverage_tolerance_seconds: float = 1e-6


@dataclass(frozen=True)
class AudioReadSettings:
    """Retry policy for the audio decode adapter."""

    max_retries: int = 3
    retry_delay_seconds: float = 1.0


@dataclass(frozen=True)
class OutputSettings:
    """Where the CLI writes exported plans when no explicit path is given."""

    folder: Path = Path("./motionsync/output")


@dataclass(frozen=True)
class AppConfig:
    """Complete settings tree."""

    envelope: EnvelopeSettings = field(default_factory=EnvelopeSettings)
    thresholds: ThresholdSettings = field(default_factory=ThresholdSettings)
    planner: PlannerSettings = field(default_factory=PlannerSettings)
    audio_read: AudioReadSettings = field(default_factory=AudioReadSettings)
    output: OutputSettings = field(default_factory=OutputSettings)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as err:
        raise ValueError(f"{name} must be a number, got {raw!r}.") from err


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as err:
        raise ValueError(f"{name} must be an integer, got {raw!r}.") from err


def _validate(settings: AppConfig) -> None:
    """Rejects settings the engine cannot run with."""
    if settings.envelope.window_seconds <= 0.0:
        raise ValueError("MOTIONSYNC_ENVELOPE_WINDOW_MS must be positive.")
    thresholds = settings.thresholds
    for name, value in (
        ("MOTIONSYNC_FLOOR_PERCENTILE", thresholds.floor_percentile),
        ("MOTIONSYNC_PEAK_PERCENTILE", thresholds.peak_percentile),
    ):
        if not 0.0 <= value <= 100.0:
            raise ValueError(f"{name} must be within [0, 100].")
    if thresholds.floor_percentile > thresholds.peak_percentile:
        raise ValueError(
            "MOTIONSYNC_FLOOR_PERCENTILE cannot exceed MOTIONSYNC_PEAK_PERCENTILE."
        )
    if not 0.0 <= thresholds.silence_ratio < thresholds.talk_ratio <= 1.0:
        raise ValueError(
            "Threshold ratios must satisfy 0 <= silence_ratio < talk_ratio <= 1."
        )
    if thresholds.min_talk_level <= thresholds.min_silence_level:
        raise ValueError(
            "MOTIONSYNC_MIN_TALK_LEVEL must exceed MOTIONSYNC_MIN_SILENCE_LEVEL."
        )
    if thresholds.min_dynamic_range_db < 0.0:
        raise ValueError("MOTIONSYNC_MIN_DYNAMIC_RANGE_DB cannot be negative.")
    if thresholds.min_threshold_gap_db <= 0.0:
        raise ValueError("MOTIONSYNC_MIN_THRESHOLD_GAP_DB must be positive.")
    if settings.planner.coverage_tolerance_seconds < 0.0:
        raise ValueError("MOTIONSYNC_COVERAGE_TOLERANCE cannot be negative.")
    if settings.audio_read.max_retries < 1:
        raise ValueError("MOTIONSYNC_AUDIO_READ_RETRIES must be at least 1.")


def _build_settings() -> AppConfig:
    load_dotenv()
    defaults = AppConfig()
    settings = AppConfig(
        envelope=EnvelopeSettings(
            window_seconds=_env_float(
                "MOTIONSYNC_ENVELOPE_WINDOW_MS",
                defaults.envelope.window_seconds * 1000.0,
            )
            / 1000.0,
        ),
        thresholds=ThresholdSettings(
            floor_percentile=_env_float(
                "MOTIONSYNC_FLOOR_PERCENTILE", defaults.thresholds.floor_percentile
            ),
            peak_percentile=_env_float(
                "MOTIONSYNC_PEAK_PERCENTILE", defaults.thresholds.peak_percentile
            ),
            talk_ratio=_env_float(
                "MOTIONSYNC_TALK_RATIO", defaults.thresholds.talk_ratio
            ),
            silence_ratio=_env_float(
                "MOTIONSYNC_SILENCE_RATIO", defaults.thresholds.silence_ratio
            ),
            min_talk_level=_env_float(
                "MOTIONSYNC_MIN_TALK_LEVEL", defaults.thresholds.min_talk_level
            ),
            min_silence_level=_env_float(
                "MOTIONSYNC_MIN_SILENCE_LEVEL", defaults.thresholds.min_silence_level
            ),
            min_dynamic_range_db=_env_float(
                "MOTIONSYNC_MIN_DYNAMIC_RANGE_DB",
                defaults.thresholds.min_dynamic_range_db,
            ),
            min_threshold_gap_db=_env_float(
                "MOTIONSYNC_MIN_THRESHOLD_GAP_DB",
                defaults.thresholds.min_threshold_gap_db,
            ),
        ),
        planner=PlannerSettings(
            coverage_tolerance_seconds=_env_float(
                "MOTIONSYNC_COVERAGE_TOLERANCE",
                defaults.planner.coverage_tolerance_seconds,
            ),
        ),
        audio_read=AudioReadSettings(
            max_retries=_env_int(
                "MOTIONSYNC_AUDIO_READ_RETRIES", defaults.audio_read.max_retries
            ),
            retry_delay_seconds=_env_float(
                "MOTIONSYNC_AUDIO_READ_RETRY_DELAY",
                defaults.audio_read.retry_delay_seconds,
            ),
        ),
        output=OutputSettings(
            folder=Path(os.getenv("MOTIONSYNC_OUTPUT_DIR", str(defaults.output.folder))),
        ),
    )
    _validate(settings)
    return settings


_SETTINGS: AppConfig | None = None


def reload_settings() -> AppConfig:
    """Rebuilds settings from the current environment."""
    global _SETTINGS
    _SETTINGS = _build_settings()
    return _SETTINGS


def get_settings() -> AppConfig:
    """Returns the cached settings, building them on first use."""
    if _SETTINGS is None:
        return reload_settings()
    return _SETTINGS
