"""Re-times the original audio onto the planned video timeline."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from motionsync.domain import DecodedAudio, TalkTiming
from motionsync.errors import ShortfallTruncation
from motionsync.utils.logger import get_logger

logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class RealignmentReport:
    """Realigned audio plus every talk slice that had to be truncated."""

    audio: DecodedAudio
    truncations: tuple[ShortfallTruncation, ...] = ()


def _to_frames(seconds: float, sample_rate: int) -> int:
    return max(0, int(round(seconds * sample_rate)))


def realign_with_report(
    audio: DecodedAudio,
    talk_timings: Sequence[TalkTiming],
    total_duration: float,
) -> RealignmentReport:
    """Builds a silent buffer of ``total_duration`` and copies talk slices in.

    Each slice ``[audio_start, audio_start + audio_duration)`` lands at
    ``video_start``. A slice never writes past its ``video_end`` or the end
    of the output; anything cut off is reported as a truncation. Idle audio
    is dropped.

    Arguments:
        audio (DecodedAudio): Original decoded buffer, read-only.
        talk_timings (Sequence[TalkTiming]): Timings from the plan.
        total_duration (float): Planned video duration in seconds.

    Returns:
        RealignmentReport: The new buffer and any truncations.
    """
    if total_duration < 0.0:
        raise ValueError("total_duration cannot be negative.")
    rate = audio.sample_rate
    output = audio.silence_like(_to_frames(total_duration, rate))
    output_frames = int(output.shape[0])
    truncations: list[ShortfallTruncation] = []

    for timing in talk_timings:
        source_start = min(_to_frames(timing.audio_start, rate), audio.frame_count)
        requested = min(
            _to_frames(timing.audio_duration, rate), audio.frame_count - source_start
        )
        target_start = min(_to_frames(timing.video_start, rate), output_frames)
        # Window length is rounded once so it matches a same-length slice.
        window_frames = _to_frames(timing.video_duration, rate)
        target_limit = min(target_start + window_frames, output_frames)
        written = max(0, min(requested, target_limit - target_start))

        output[target_start : target_start + written] = audio.samples[
            source_start : source_start + written
        ]
        if written < requested:
            truncation = ShortfallTruncation(
                segment_id=timing.segment_id,
                requested_frames=requested,
                written_frames=written,
            )
            truncations.append(truncation)
            logger.warning(
                "%s: talk audio truncated by %d frames to fit its video window.",
                timing.segment_id,
                truncation.dropped_frames,
            )

    realigned = DecodedAudio(samples=output, sample_rate=rate)
    logger.info(
        "Realigned %d talk slices into %.2fs of audio (%d truncated).",
        len(talk_timings),
        realigned.duration,
        len(truncations),
    )
    return RealignmentReport(audio=realigned, truncations=tuple(truncations))


def realign(
    audio: DecodedAudio,
    talk_timings: Sequence[TalkTiming],
    total_duration: float,
) -> DecodedAudio:
    """Returns the realigned buffer; truncations are logged only."""
    return realign_with_report(audio, talk_timings, total_duration).audio
