"""Timeline planning: clip placements and talk timings for a segment list.

Segments are walked left to right with two cursors. The video cursor is the
sum of every placed clip duration; the audio cursor is the start of the
current segment. Video time is authoritative: each segment is placed at the
video cursor, so clip surplus pushes every later segment back and the offset
is never recovered.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from motionsync.config import AppConfig, get_settings
from motionsync.domain import (
    ClipInventory,
    MotionCategory,
    MotionClip,
    Placement,
    Segment,
    SegmentKind,
    TalkTiming,
    TimelinePlan,
    validate_segment_sequence,
)
from motionsync.planning.clip_selector import ClipSelector
from motionsync.utils.logger import get_logger

logger: logging.Logger = get_logger(__name__)


class TimelinePlanner:
    """Builds one plan from a segment list and an inventory snapshot."""

    def __init__(self, inventory: ClipInventory, *, tolerance: float = 1e-6) -> None:
        self.selector = ClipSelector(inventory, tolerance=tolerance)
        self._placements: list[Placement] = []
        self._talk_timings: list[TalkTiming] = []
        self._video_cursor = 0.0

    def _append(self, clips: Iterable[MotionClip]) -> None:
        for clip in clips:
            self._placements.append(Placement(clip=clip, start=self._video_cursor))
            self._video_cursor += clip.duration

    def _plan_idle(self, segment: Segment) -> None:
        clips = self.selector.cover(
            MotionCategory.IDLE, segment.duration, segment_id=segment.id
        )
        self._append(clips)

    def _plan_talk(self, segment: Segment) -> None:
        intro = self.selector.pick_single(
            MotionCategory.IDLE_TO_SPEECH, segment_id=segment.id
        )
        outro = self.selector.pick_single(
            MotionCategory.SPEECH_TO_IDLE, segment_id=segment.id
        )
        loop_target = max(0.0, segment.duration - intro.duration - outro.duration)
        _, loops = self.selector.cover_speech(loop_target, segment_id=segment.id)

        video_start = self._video_cursor
        self._append([intro, *loops, outro])
        timing = TalkTiming(
            segment_id=segment.id,
            video_start=video_start,
            video_end=self._video_cursor,
            audio_start=segment.start,
            audio_duration=segment.duration,
        )
        self._talk_timings.append(timing)
        logger.debug(
            "%s: audio %.3fs+%.3fs -> video %.3fs..%.3fs (drift %+.3fs).",
            segment.id,
            timing.audio_start,
            timing.audio_duration,
            timing.video_start,
            timing.video_end,
            timing.drift,
        )

    def build(self, segments: Sequence[Segment]) -> TimelinePlan:
        """Plans every segment in order.

        Raises:
            MissingCategoryError: On the first category with no clips; no
                partial plan is returned.
        """
        self._placements = []
        self._talk_timings = []
        self._video_cursor = 0.0
        for segment in segments:
            if segment.kind is SegmentKind.TALK:
                self._plan_talk(segment)
            else:
                self._plan_idle(segment)
        return TimelinePlan(
            placements=tuple(self._placements),
            talk_timings=tuple(self._talk_timings),
            total_duration=self._video_cursor,
        )


def plan(
    segments: Sequence[Segment],
    clips: Iterable[MotionClip] | ClipInventory,
    settings: AppConfig | None = None,
) -> TimelinePlan:
    """Schedules clips for a classified segment list.

    Arguments:
        segments (Sequence[Segment]): Ordered, contiguous segments.
        clips (Iterable[MotionClip] | ClipInventory): Available clips. A
            snapshot is taken before planning starts.
        settings (AppConfig | None): Overrides the global settings.

    Returns:
        TimelinePlan: Gapless placements, talk timings, and total duration.
            An empty segment list yields an empty plan.

    Raises:
        MissingCategoryError: If a required category has no clips.
        ValueError: If the segments are not ordered and contiguous.
    """
    settings = settings or get_settings()
    segments = tuple(segments)
    validate_segment_sequence(segments, tolerance=settings.envelope.window_seconds)
    inventory = clips if isinstance(clips, ClipInventory) else ClipInventory(clips)
    if not segments:
        logger.info("No segments to schedule; returning an empty plan.")
        return TimelinePlan()

    planner = TimelinePlanner(
        inventory, tolerance=settings.planner.coverage_tolerance_seconds
    )
    result = planner.build(segments)
    audio_duration = segments[-1].end
    logger.info(
        "Planned %d placements for %d segments: %.2fs of video for %.2fs of audio "
        "(final talk drift %+.2fs).",
        len(result.placements),
        len(segments),
        result.total_duration,
        audio_duration,
        result.final_drift,
    )
    return result
