"""Deterministic clip selection for a motion category and a target duration."""

from __future__ import annotations

import logging
import math

from motionsync.domain import ClipInventory, MotionCategory, MotionClip, SpeechLoopSize
from motionsync.errors import MissingCategoryError
from motionsync.utils.logger import get_logger

logger: logging.Logger = get_logger(__name__)


class ClipSelector:
    """Picks clips from an inventory snapshot.

    Every choice is a pure function of the inventory order and clip
    durations, so identical inputs always yield identical selections.
    """

    def __init__(self, inventory: ClipInventory, *, tolerance: float = 1e-6) -> None:
        if tolerance < 0.0:
            raise ValueError("tolerance cannot be negative.")
        self.inventory = inventory
        self.tolerance = tolerance

    def _require(
        self, category: MotionCategory, segment_id: str | None
    ) -> tuple[MotionClip, ...]:
        clips = self.inventory.of(category)
        if not clips:
            raise MissingCategoryError(category, segment_id=segment_id)
        return clips

    @staticmethod
    def _by_length(clips: tuple[MotionClip, ...]) -> list[MotionClip]:
        """Shortest first; equal durations keep inventory order."""
        ranked = sorted(enumerate(clips), key=lambda item: (item[1].duration, item[0]))
        return [clip for _, clip in ranked]

    def pick_single(
        self, category: MotionCategory, *, segment_id: str | None = None
    ) -> MotionClip:
        """Returns the shortest clip of a category."""
        return self._by_length(self._require(category, segment_id))[0]

    def cover(
        self,
        category: MotionCategory,
        target_duration: float,
        *,
        segment_id: str | None = None,
    ) -> list[MotionClip]:
        """Returns the fewest clips whose durations sum to at least the target.

        The clip count is fixed by the longest clip of the category. Each slot
        then takes the shortest clip that still lets the remaining slots reach
        the target with the longest clip, which keeps surplus low without
        adding clips. At least one clip is always returned.

        Raises:
            MissingCategoryError: If the category has no clips.
        """
        ranked = self._by_length(self._require(category, segment_id))
        longest = ranked[-1].duration
        tolerance = self.tolerance
        if target_duration <= tolerance:
            count = 1
        else:
            count = max(1, math.ceil((target_duration - tolerance) / longest))

        chosen: list[MotionClip] = []
        remaining = target_duration
        for slot in range(count):
            slots_after = count - slot - 1
            need = remaining - slots_after * longest
            pick = next(
                (clip for clip in ranked if clip.duration >= need - tolerance),
                ranked[-1],
            )
            chosen.append(pick)
            remaining -= pick.duration
        return chosen

    def speech_loop_size(self, target_duration: float) -> SpeechLoopSize | None:
        """Chooses the speech-loop size for a talk segment.

        Small loops serve utterances that fit in a single small loop; large
        loops serve utterances that need extending beyond one. When only one
        size is registered it serves both. ``None`` means no speech loop of
        either size exists.
        """
        small = self.inventory.of(MotionCategory.SPEECH_LOOP_SMALL)
        large = self.inventory.of(MotionCategory.SPEECH_LOOP_LARGE)
        if not small and not large:
            return None
        if not large:
            return SpeechLoopSize.SMALL
        if not small:
            return SpeechLoopSize.LARGE
        longest_small = max(clip.duration for clip in small)
        if target_duration <= longest_small + self.tolerance:
            return SpeechLoopSize.SMALL
        return SpeechLoopSize.LARGE

    def cover_speech(
        self, target_duration: float, *, segment_id: str | None = None
    ) -> tuple[SpeechLoopSize, list[MotionClip]]:
        """Covers a talk duration with speech loops of one size.

        Raises:
            MissingCategoryError: If no speech loop of either size exists.
        """
        size = self.speech_loop_size(target_duration)
        if size is None:
            raise MissingCategoryError(
                MotionCategory.SPEECH_LOOP_SMALL, segment_id=segment_id
            )
        category = MotionCategory.speech_loop(size)
        clips = self.cover(category, target_duration, segment_id=segment_id)
        logger.debug(
            "Covering %.3fs of speech with %d %s clip(s).",
            target_duration,
            len(clips),
            category,
        )
        return size, clips
