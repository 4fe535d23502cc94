"""Domain data structures for audio, segments, clips, and timeline plans."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any

import numpy as np


@dataclass(frozen=True)
class DecodedAudio:
    """Decoded PCM samples owned by the caller.

    ``samples`` is either 1-D (mono) or 2-D ``(frames, channels)``, which is
    the layout soundfile and ``librosa.load(..., mono=False).T`` produce.
    The stored array is a read-only view of the caller's buffer.
    """

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        if int(self.sample_rate) <= 0:
            raise ValueError("DecodedAudio sample_rate must be positive.")
        data = np.asarray(self.samples)
        if data.ndim not in (1, 2):
            raise ValueError("DecodedAudio samples must be 1-D or 2-D (frames, channels).")
        if data.ndim == 2 and data.shape[1] == 0:
            raise ValueError("DecodedAudio must have at least one channel.")
        view = data.view()
        view.flags.writeable = False
        object.__setattr__(self, "samples", view)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @property
    def frame_count(self) -> int:
        return int(self.samples.shape[0])

    @property
    def channels(self) -> int:
        return 1 if self.samples.ndim == 1 else int(self.samples.shape[1])

    @property
    def duration(self) -> float:
        return self.frame_count / self.sample_rate

    def power(self) -> np.ndarray:
        """Returns per-frame signal power, the mean squared sample over channels.

        Squaring before combining keeps channels in opposite phase from
        cancelling out.
        """
        squared = np.square(self.samples.astype(np.float64, copy=False))
        if squared.ndim == 1:
            return squared
        return squared.mean(axis=1)

    def silence_like(self, frame_count: int) -> np.ndarray:
        """Returns a zeroed, writable buffer with this audio's layout and dtype."""
        shape: tuple[int, ...] = (int(frame_count),)
        if self.samples.ndim == 2:
            shape = (int(frame_count), self.channels)
        return np.zeros(shape, dtype=self.samples.dtype)


class SegmentKind(StrEnum):
    """Whether sound is present over an interval."""

    IDLE = "idle"
    TALK = "talk"


@dataclass(frozen=True)
class Segment:
    """A classified interval of the recording, in seconds."""

    id: str
    kind: SegmentKind
    start: float
    duration: float

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Segment id must be a non-empty string.")
        if not (math.isfinite(self.start) and math.isfinite(self.duration)):
            raise ValueError("Segment start and duration must be finite.")
        if self.start < 0.0:
            raise ValueError("Segment start cannot be negative.")
        if self.duration <= 0.0:
            raise ValueError("Segment duration must be positive.")
        object.__setattr__(self, "kind", SegmentKind(self.kind))

    @property
    def end(self) -> float:
        return self.start + self.duration


class SpeechLoopSize(StrEnum):
    """Size attribute of the speech-loop variant."""

    LARGE = "large"
    SMALL = "small"


class MotionCategory(StrEnum):
    """Semantic role of a clip in the lip-sync sequence."""

    IDLE = "idle"
    IDLE_TO_SPEECH = "idleToSpeech"
    SPEECH_LOOP_LARGE = "speechLoopLarge"
    SPEECH_LOOP_SMALL = "speechLoopSmall"
    SPEECH_TO_IDLE = "speechToIdle"

    @classmethod
    def speech_loop(cls, size: SpeechLoopSize | str) -> MotionCategory:
        """Returns the speech-loop category carrying the given size."""
        if SpeechLoopSize(size) is SpeechLoopSize.LARGE:
            return cls.SPEECH_LOOP_LARGE
        return cls.SPEECH_LOOP_SMALL

    @property
    def loop_size(self) -> SpeechLoopSize | None:
        """Size of a speech-loop category, ``None`` for every other role."""
        return _LOOP_SIZES.get(self)

    @property
    def is_speech_loop(self) -> bool:
        return self in _LOOP_SIZES

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_LOOP_SIZES: dict[MotionCategory, SpeechLoopSize] = {
    MotionCategory.SPEECH_LOOP_LARGE: SpeechLoopSize.LARGE,
    MotionCategory.SPEECH_LOOP_SMALL: SpeechLoopSize.SMALL,
}

_CATEGORY_LABELS: dict[MotionCategory, str] = {
    MotionCategory.IDLE: "idle",
    MotionCategory.IDLE_TO_SPEECH: "idle to speech",
    MotionCategory.SPEECH_LOOP_LARGE: "speech loop (large)",
    MotionCategory.SPEECH_LOOP_SMALL: "speech loop (small)",
    MotionCategory.SPEECH_TO_IDLE: "speech to idle",
}


@dataclass(frozen=True)
class MotionClip:
    """A fixed-length clip tagged with its motion category.

    ``handle`` is an opaque reference to the clip bytes owned by the caller.
    The engine passes it through to placements and never reads it.
    """

    id: str
    category: MotionCategory
    duration: float
    handle: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("MotionClip id must be a non-empty string.")
        if not math.isfinite(self.duration) or self.duration <= 0.0:
            raise ValueError(f"MotionClip {self.id} duration must be positive.")
        object.__setattr__(self, "category", MotionCategory(self.category))

    def with_category(self, category: MotionCategory | str) -> MotionClip:
        """Returns a copy re-tagged with another category."""
        return replace(self, category=MotionCategory(category))


class ClipInventory:
    """Immutable snapshot of the clips available to one planning run."""

    def __init__(self, clips: Iterable[MotionClip]) -> None:
        self._clips: tuple[MotionClip, ...] = tuple(clips)
        by_category: dict[MotionCategory, list[MotionClip]] = {}
        for clip in self._clips:
            by_category.setdefault(clip.category, []).append(clip)
        self._by_category = {
            category: tuple(items) for category, items in by_category.items()
        }

    def __len__(self) -> int:
        return len(self._clips)

    def __iter__(self):
        return iter(self._clips)

    def of(self, category: MotionCategory | str) -> tuple[MotionClip, ...]:
        """Clips of one category, in caller order."""
        return self._by_category.get(MotionCategory(category), ())

    def has(self, category: MotionCategory | str) -> bool:
        return bool(self.of(category))


@dataclass(frozen=True)
class Placement:
    """A clip scheduled at a video-domain start time."""

    clip: MotionClip
    start: float

    @property
    def duration(self) -> float:
        return self.clip.duration

    @property
    def end(self) -> float:
        return self.start + self.clip.duration


@dataclass(frozen=True)
class TalkTiming:
    """Audio and video windows of one talk segment."""

    segment_id: str
    video_start: float
    video_end: float
    audio_start: float
    audio_duration: float

    @property
    def video_duration(self) -> float:
        return self.video_end - self.video_start

    @property
    def drift(self) -> float:
        """Offset of the video window relative to the original audio."""
        return self.video_start - self.audio_start


@dataclass(frozen=True)
class TimelinePlan:
    """Ordered, gapless clip placements plus per-talk timing records."""

    placements: tuple[Placement, ...] = ()
    talk_timings: tuple[TalkTiming, ...] = ()
    total_duration: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.placements

    @property
    def final_drift(self) -> float:
        if not self.talk_timings:
            return 0.0
        return self.talk_timings[-1].drift

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable form for display."""
        return {
            "total_duration": self.total_duration,
            "placements": [
                {
                    "clip_id": placement.clip.id,
                    "category": str(placement.clip.category),
                    "start": placement.start,
                    "duration": placement.duration,
                }
                for placement in self.placements
            ],
            "talk_timings": [
                {
                    "segment_id": timing.segment_id,
                    "video_start": timing.video_start,
                    "video_end": timing.video_end,
                    "audio_start": timing.audio_start,
                    "audio_duration": timing.audio_duration,
                }
                for timing in self.talk_timings
            ],
        }


def validate_segment_sequence(
    segments: Sequence[Segment], *, tolerance: float
) -> None:
    """Checks ordering, contiguity, and kind alternation of a segment list.

    Raises:
        ValueError: If the list breaks any of those invariants.
    """
    if not segments:
        return
    if abs(segments[0].start) > tolerance:
        raise ValueError("Segment list must start at 0 seconds.")
    for previous, current in zip(segments, segments[1:]):
        if abs(previous.end - current.start) > tolerance:
            raise ValueError(
                f"Segments {previous.id} and {current.id} are not contiguous."
            )
        if previous.kind is current.kind:
            raise ValueError(
                f"Adjacent segments {previous.id} and {current.id} share kind "
                f"'{current.kind}'."
            )
