"""Behavior tests for timeline planning and drift accumulation."""

from __future__ import annotations

import json

import pytest

from motionsync import analyze, plan
from motionsync.config import AppConfig, EnvelopeSettings
from motionsync.domain import (
    ClipInventory,
    MotionCategory,
    MotionClip,
    Segment,
    SegmentKind,
    TimelinePlan,
)
from motionsync.errors import MissingCategoryError

IDLE = SegmentKind.IDLE
TALK = SegmentKind.TALK


def _segments(*pieces: tuple[SegmentKind, float]) -> list[Segment]:
    segments: list[Segment] = []
    cursor = 0.0
    for index, (kind, duration) in enumerate(pieces):
        segments.append(Segment(f"segment-{index}", kind, cursor, duration))
        cursor += duration
    return segments


def _assert_gapless(timeline: TimelinePlan) -> None:
    assert timeline.placements[0].start == 0.0
    for previous, current in zip(timeline.placements, timeline.placements[1:]):
        assert previous.start + previous.duration == current.start
    assert timeline.total_duration == timeline.placements[-1].end
    assert timeline.total_duration == pytest.approx(
        sum(placement.duration for placement in timeline.placements)
    )


def test_scenario_plan_for_idle_talk_idle(scenario_clips) -> None:
    """Idle 1s, talk 1s, idle 1s with the reference clip set."""
    segments = _segments((IDLE, 1.0), (TALK, 1.0), (IDLE, 1.0))

    timeline = plan(segments, scenario_clips)

    assert [placement.clip.id for placement in timeline.placements] == [
        "idle-a",
        "idle-a",
        "intro-a",
        "loop-small-a",
        "outro-a",
        "idle-a",
        "idle-a",
    ]
    assert len(timeline.talk_timings) == 1
    timing = timeline.talk_timings[0]
    assert timing.segment_id == "segment-1"
    assert timing.audio_start == 1.0
    assert timing.audio_duration == 1.0
    assert timing.video_start == pytest.approx(1.0)
    assert timing.video_end - timing.video_start == pytest.approx(1.0)
    assert timing.video_end - timing.video_start >= 1.0 - 1e-9
    assert timeline.total_duration == pytest.approx(3.0)
    _assert_gapless(timeline)


def test_scenario_plan_from_analyzed_audio(make_audio, scenario_clips) -> None:
    """The analyzed three-second recording plans one talk timing at 1s."""
    settings = AppConfig(envelope=EnvelopeSettings(window_seconds=0.1))
    audio = make_audio([(1.0, 0.0), (1.0, 0.5), (1.0, 0.0)])

    analysis = analyze(audio, settings=settings)
    timeline = plan(analysis.segments, scenario_clips, settings=settings)

    assert len(timeline.talk_timings) == 1
    timing = timeline.talk_timings[0]
    assert timing.audio_start == 1.0
    assert timing.audio_duration == 1.0
    idle_before = [p for p in timeline.placements if p.end <= timing.video_start + 1e-9]
    assert timing.video_start == pytest.approx(sum(p.duration for p in idle_before))
    assert timing.video_end - timing.video_start >= timing.audio_duration - 1e-9


def test_missing_speech_to_idle_fails_without_partial_plan(scenario_clips) -> None:
    clips = [
        clip for clip in scenario_clips if clip.category is not MotionCategory.SPEECH_TO_IDLE
    ]
    segments = _segments((IDLE, 1.0), (TALK, 1.0), (IDLE, 1.0))

    with pytest.raises(MissingCategoryError) as excinfo:
        plan(segments, clips)

    assert excinfo.value.category == "speechToIdle"
    assert excinfo.value.segment_id == "segment-1"


def test_missing_idle_clip_fails_on_first_idle_segment(scenario_clips) -> None:
    clips = [clip for clip in scenario_clips if clip.category is not MotionCategory.IDLE]

    with pytest.raises(MissingCategoryError) as excinfo:
        plan(_segments((IDLE, 1.0), (TALK, 1.0)), clips)

    assert excinfo.value.category == "idle"


def test_idle_clips_are_not_required_without_idle_segments(scenario_clips) -> None:
    clips = [clip for clip in scenario_clips if clip.category is not MotionCategory.IDLE]

    timeline = plan(_segments((TALK, 1.0)), clips)

    assert [p.clip.category for p in timeline.placements] == [
        MotionCategory.IDLE_TO_SPEECH,
        MotionCategory.SPEECH_LOOP_SMALL,
        MotionCategory.SPEECH_TO_IDLE,
    ]
    assert timeline.total_duration == pytest.approx(timeline.talk_timings[-1].video_end)


def test_empty_segment_list_yields_empty_plan(scenario_clips) -> None:
    timeline = plan([], scenario_clips)

    assert timeline.is_empty
    assert timeline.talk_timings == ()
    assert timeline.total_duration == 0.0


def test_recording_without_talk_uses_only_idle_clips(scenario_clips) -> None:
    timeline = plan(_segments((IDLE, 2.2)), scenario_clips)

    assert timeline.talk_timings == ()
    assert {p.clip.category for p in timeline.placements} == {MotionCategory.IDLE}
    assert timeline.total_duration == pytest.approx(2.5)
    _assert_gapless(timeline)


def test_short_talk_segment_still_gets_a_full_loop(scenario_clips) -> None:
    """A talk burst shorter than any clip rounds up instead of truncating."""
    timeline = plan(_segments((IDLE, 0.5), (TALK, 0.05), (IDLE, 0.5)), scenario_clips)

    loops = [p for p in timeline.placements if p.clip.category.is_speech_loop]
    assert len(loops) == 1
    timing = timeline.talk_timings[0]
    assert timing.video_end - timing.video_start == pytest.approx(1.0)


def test_drift_accumulates_and_is_never_recovered() -> None:
    """Surplus video pushes every later talk segment back."""
    clips = [
        MotionClip("idle", MotionCategory.IDLE, 0.7),
        MotionClip("in", MotionCategory.IDLE_TO_SPEECH, 0.25),
        MotionClip("loop", MotionCategory.SPEECH_LOOP_SMALL, 0.5),
        MotionClip("out", MotionCategory.SPEECH_TO_IDLE, 0.25),
    ]
    segments = _segments(
        (IDLE, 0.5), (TALK, 0.6), (IDLE, 0.5), (TALK, 0.6), (IDLE, 0.5), (TALK, 0.6)
    )

    timeline = plan(segments, clips)

    drifts = [timing.drift for timing in timeline.talk_timings]
    assert drifts == sorted(drifts)
    assert drifts[0] == pytest.approx(0.2)
    assert drifts[-1] > drifts[0]
    for timing, talk in zip(timeline.talk_timings, segments[1::2]):
        assert timing.audio_start == talk.start
        assert timing.video_start >= timing.audio_start
    assert timeline.final_drift == pytest.approx(drifts[-1])
    _assert_gapless(timeline)


def test_talk_video_window_matches_its_placements(scenario_clips) -> None:
    """videoEnd - videoStart equals the durations placed for that segment."""
    timeline = plan(_segments((IDLE, 1.0), (TALK, 2.3), (IDLE, 0.4)), scenario_clips)

    timing = timeline.talk_timings[0]
    inside = [
        p
        for p in timeline.placements
        if timing.video_start - 1e-9 <= p.start < timing.video_end - 1e-9
    ]
    assert inside[0].clip.category is MotionCategory.IDLE_TO_SPEECH
    assert inside[-1].clip.category is MotionCategory.SPEECH_TO_IDLE
    assert timing.video_duration == pytest.approx(sum(p.duration for p in inside))
    assert timing.video_duration >= timing.audio_duration


def test_long_talk_prefers_large_loops_when_available(scenario_clips) -> None:
    clips = [*scenario_clips, MotionClip("loop-large", MotionCategory.SPEECH_LOOP_LARGE, 1.2)]

    timeline = plan(_segments((TALK, 3.0)), clips)

    loops = [p.clip for p in timeline.placements if p.clip.category.is_speech_loop]
    assert {clip.category for clip in loops} == {MotionCategory.SPEECH_LOOP_LARGE}


def test_plan_is_deterministic(scenario_clips) -> None:
    segments = _segments((IDLE, 0.7), (TALK, 1.9), (IDLE, 0.3), (TALK, 0.4))

    first = plan(segments, scenario_clips)
    second = plan(segments, ClipInventory(scenario_clips))

    assert first == second
    assert json.dumps(first.to_dict()) == json.dumps(second.to_dict())


def test_plan_rejects_non_contiguous_segments(scenario_clips) -> None:
    segments = [
        Segment("segment-0", IDLE, 0.0, 1.0),
        Segment("segment-1", TALK, 1.5, 1.0),
    ]

    with pytest.raises(ValueError, match="contiguous"):
        plan(segments, scenario_clips)


def test_plan_rejects_adjacent_segments_of_same_kind(scenario_clips) -> None:
    segments = [
        Segment("segment-0", IDLE, 0.0, 1.0),
        Segment("segment-1", IDLE, 1.0, 1.0),
    ]

    with pytest.raises(ValueError, match="share kind"):
        plan(segments, scenario_clips)


def test_plan_snapshots_the_clip_list(scenario_clips) -> None:
    """Editing the caller's list after planning does not touch the plan."""
    clips = list(scenario_clips)
    timeline = plan(_segments((IDLE, 1.0)), clips)

    clips[0] = clips[0].with_category(MotionCategory.SPEECH_TO_IDLE)

    assert timeline.placements[0].clip.category is MotionCategory.IDLE
