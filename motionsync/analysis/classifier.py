"""Hysteresis talk/idle classification and segment assembly."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from motionsync.analysis.envelope import LoudnessEnvelope, compute_envelope
from motionsync.analysis.thresholds import ThresholdPair, derive_thresholds
from motionsync.config import AppConfig, get_settings
from motionsync.domain import DecodedAudio, Segment, SegmentKind
from motionsync.utils.logger import get_logger

logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """Classified segments together with the thresholds that produced them."""

    segments: tuple[Segment, ...]
    talk_threshold: float
    silence_threshold: float
    duration: float
    envelope: LoudnessEnvelope | None = None
    steady_kind: SegmentKind | None = None

    @property
    def is_empty(self) -> bool:
        return not self.segments

    @property
    def talk_segments(self) -> tuple[Segment, ...]:
        return tuple(seg for seg in self.segments if seg.kind is SegmentKind.TALK)

    @property
    def thresholds(self) -> ThresholdPair:
        return ThresholdPair(
            talk=self.talk_threshold,
            silence=self.silence_threshold,
            steady=self.steady_kind,
        )


def label_frames(
    rms: Sequence[float] | np.ndarray,
    *,
    talk_threshold: float,
    silence_threshold: float,
) -> list[SegmentKind]:
    """Labels every envelope window with a two-state hysteresis machine.

    The machine starts idle, enters talk only when loudness reaches
    ``talk_threshold``, and returns to idle only when loudness falls below
    ``silence_threshold``. Values between the two thresholds keep the
    current state.
    """
    if talk_threshold <= silence_threshold:
        raise ValueError("talk_threshold must be greater than silence_threshold.")
    state = SegmentKind.IDLE
    labels: list[SegmentKind] = []
    for value in rms:
        loudness = float(value)
        if state is SegmentKind.IDLE and loudness >= talk_threshold:
            state = SegmentKind.TALK
        elif state is SegmentKind.TALK and loudness < silence_threshold:
            state = SegmentKind.IDLE
        labels.append(state)
    return labels


def build_segments(
    envelope: LoudnessEnvelope, labels: Sequence[SegmentKind]
) -> list[Segment]:
    """Merges runs of equal labels into contiguous segments.

    Bounds are taken from the window sample offsets, so segments tile
    ``[0, duration)`` exactly.
    """
    if len(labels) != len(envelope):
        raise ValueError("labels and envelope must have identical length.")
    if not labels:
        return []

    runs: list[tuple[SegmentKind, int, int]] = []
    for index, label in enumerate(labels):
        start = int(envelope.frame_start_samples[index])
        end = int(envelope.frame_end_samples[index])
        if runs and runs[-1][0] is label:
            runs[-1] = (label, runs[-1][1], end)
        else:
            runs.append((label, start, end))

    rate = envelope.sample_rate
    return [
        Segment(
            id=f"segment-{index}",
            kind=kind,
            start=start / rate,
            duration=(end - start) / rate,
        )
        for index, (kind, start, end) in enumerate(runs)
    ]


def analyze(audio: DecodedAudio, settings: AppConfig | None = None) -> AnalysisResult:
    """Classifies a decoded buffer into alternating idle and talk segments.

    Arguments:
        audio (DecodedAudio): Decoded samples, borrowed read-only.
        settings (AppConfig | None): Overrides the global settings.

    Returns:
        AnalysisResult: Segments, thresholds, and the underlying envelope.
            Zero-length audio yields an empty segment list.
    """
    settings = settings or get_settings()
    envelope = compute_envelope(audio, window_seconds=settings.envelope.window_seconds)
    thresholds = derive_thresholds(envelope.rms, settings.thresholds)

    if envelope.is_empty:
        logger.info("Audio buffer is empty; no segments to classify.")
        return AnalysisResult(
            segments=(),
            talk_threshold=thresholds.talk,
            silence_threshold=thresholds.silence,
            duration=0.0,
            envelope=envelope,
        )

    if thresholds.steady is not None:
        logger.info(
            "Loudness range is below %.1f dB; treating the recording as %s.",
            settings.thresholds.min_dynamic_range_db,
            thresholds.steady,
        )
        labels = [thresholds.steady] * len(envelope)
    else:
        labels = label_frames(
            envelope.rms,
            talk_threshold=thresholds.talk,
            silence_threshold=thresholds.silence,
        )
    segments = build_segments(envelope, labels)
    talk_count = sum(1 for segment in segments if segment.kind is SegmentKind.TALK)
    logger.info(
        "Classified %.2fs of audio into %d segments (%d talk); "
        "talk threshold %.1f dBFS, silence threshold %.1f dBFS.",
        audio.duration,
        len(segments),
        talk_count,
        thresholds.talk_db,
        thresholds.silence_db,
    )
    return AnalysisResult(
        segments=tuple(segments),
        talk_threshold=thresholds.talk,
        silence_threshold=thresholds.silence,
        duration=audio.duration,
        envelope=envelope,
        steady_kind=thresholds.steady,
    )
