"""Error kinds raised or reported by the timeline alignment engine."""

from __future__ import annotations

from dataclasses import dataclass


class MotionSyncError(Exception):
    """Base class for engine failures."""


class MissingCategoryError(MotionSyncError):
    """No clip is registered for a category the segment sequence requires."""

    def __init__(self, category: str, *, segment_id: str | None = None) -> None:
        self.category = str(category)
        self.segment_id = segment_id
        message = f"No clip registered for motion category '{self.category}'"
        if segment_id is not None:
            message += f" (required by {segment_id})"
        super().__init__(message + ".")


@dataclass(frozen=True, slots=True)
class ShortfallTruncation:
    """A talk slice that did not fit its video window during realignment."""

    segment_id: str
    requested_frames: int
    written_frames: int

    @property
    def dropped_frames(self) -> int:
        return self.requested_frames - self.written_frames
