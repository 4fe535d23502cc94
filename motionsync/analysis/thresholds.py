"""Percentile rule deriving the talk/silence hysteresis pair from an envelope."""

from __future__ import annotations

from dataclasses import dataclass

import librosa
import numpy as np

from motionsync.config import ThresholdSettings
from motionsync.domain import SegmentKind


def _to_db(value: float, ref: float = 1.0) -> float:
    return float(librosa.amplitude_to_db(np.asarray(value), ref=ref, top_db=None))


@dataclass(frozen=True)
class ThresholdPair:
    """Hysteresis thresholds in linear RMS units.

    ``steady`` is set when the envelope has too little dynamic range to hold
    both talk and silence; every window then takes that single state.
    """

    talk: float
    silence: float
    steady: SegmentKind | None = None

    def __post_init__(self) -> None:
        if not self.talk > self.silence:
            raise ValueError("talk threshold must exceed silence threshold.")
        if self.steady is not None:
            object.__setattr__(self, "steady", SegmentKind(self.steady))

    @property
    def talk_db(self) -> float:
        return _to_db(self.talk)

    @property
    def silence_db(self) -> float:
        return _to_db(self.silence)


def dynamic_range_db(floor: float, peak: float) -> float:
    """Ratio of peak to floor loudness in dB; 0 when both are silent."""
    return max(0.0, _to_db(peak, ref=floor))


def derive_thresholds(rms: np.ndarray, settings: ThresholdSettings) -> ThresholdPair:
    """Derives talk/silence thresholds from the loudness distribution.

    ``floor`` and ``peak`` are the configured low and high percentiles of the
    envelope. Both thresholds sit at fixed fractions of the floor-to-peak span
    and never drop below the absolute minimum levels. The silence threshold
    is kept at least ``min_threshold_gap_db`` below the talk threshold.

    When peak and floor are closer than ``min_dynamic_range_db`` the
    recording is one steady state: talk if its floor reaches
    ``min_talk_level``, idle otherwise.

    Arguments:
        rms (np.ndarray): Envelope values.
        settings (ThresholdSettings): Percentiles, ratios, and minimum levels.

    Returns:
        ThresholdPair: Thresholds with ``talk > silence``.
    """
    if rms.size == 0:
        return ThresholdPair(
            talk=settings.min_talk_level, silence=settings.min_silence_level
        )
    floor = float(np.percentile(rms, settings.floor_percentile))
    peak = float(np.percentile(rms, settings.peak_percentile))
    span = max(0.0, peak - floor)

    talk = max(floor + settings.talk_ratio * span, settings.min_talk_level)
    silence = max(floor + settings.silence_ratio * span, settings.min_silence_level)
    gap_factor = 10.0 ** (-settings.min_threshold_gap_db / 20.0)
    silence = min(silence, talk * gap_factor)

    steady: SegmentKind | None = None
    if dynamic_range_db(floor, peak) < settings.min_dynamic_range_db:
        steady = (
            SegmentKind.TALK if floor >= settings.min_talk_level else SegmentKind.IDLE
        )
    return ThresholdPair(talk=talk, silence=silence, steady=steady)
