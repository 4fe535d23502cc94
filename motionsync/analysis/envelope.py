"""Framewise RMS loudness envelope over non-overlapping windows."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from motionsync.domain import DecodedAudio
from motionsync.utils.logger import get_logger

logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class LoudnessEnvelope:
    """One RMS value per window, with window bounds in samples."""

    rms: np.ndarray
    frame_start_samples: np.ndarray
    frame_end_samples: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        if self.rms.ndim != 1:
            raise ValueError("Envelope rms must be 1-D.")
        if not (
            self.rms.size == self.frame_start_samples.size == self.frame_end_samples.size
        ):
            raise ValueError("Envelope rms and frame bounds must have equal length.")

    def __len__(self) -> int:
        return int(self.rms.size)

    @property
    def is_empty(self) -> bool:
        return self.rms.size == 0

    @property
    def frame_start_seconds(self) -> np.ndarray:
        return self.frame_start_samples / self.sample_rate

    @property
    def frame_end_seconds(self) -> np.ndarray:
        return self.frame_end_samples / self.sample_rate

    @property
    def frame_duration_seconds(self) -> np.ndarray:
        return (self.frame_end_samples - self.frame_start_samples) / self.sample_rate


def window_size_samples(sample_rate: int, window_seconds: float) -> int:
    """Number of samples in one envelope window, never below one."""
    if window_seconds <= 0.0:
        raise ValueError("window_seconds must be positive.")
    return max(1, int(round(window_seconds * sample_rate)))


def compute_envelope(audio: DecodedAudio, *, window_seconds: float) -> LoudnessEnvelope:
    """Computes the loudness envelope of a decoded buffer.

    Channels are combined by mean power before windowing, so each value is
    the RMS over every sample of every channel in the window. The trailing
    partial window is kept with its true length.

    Args:
        audio: Decoded samples.
        window_seconds: Nominal window length in seconds.

    Returns:
        The envelope; empty when the buffer has no samples.
    """
    window = window_size_samples(audio.sample_rate, window_seconds)
    power = audio.power()
    total = int(power.size)
    if total == 0:
        empty_bounds = np.zeros(0, dtype=np.int64)
        return LoudnessEnvelope(
            rms=np.zeros(0, dtype=np.float64),
            frame_start_samples=empty_bounds,
            frame_end_samples=empty_bounds.copy(),
            sample_rate=audio.sample_rate,
        )

    starts = np.arange(0, total, window, dtype=np.int64)
    ends = np.minimum(starts + window, total)
    # Sum per window with reduceat so the short tail window keeps its own mean.
    sums = np.add.reduceat(power, starts)
    rms = np.sqrt(sums / (ends - starts))

    logger.debug(
        "Computed envelope: %d windows of %d samples (%d total samples).",
        rms.size,
        window,
        total,
    )
    return LoudnessEnvelope(
        rms=rms,
        frame_start_samples=starts,
        frame_end_samples=ends,
        sample_rate=audio.sample_rate,
    )
