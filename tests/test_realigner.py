"""Behavior tests for re-timing audio onto the video timeline."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from motionsync import analyze, plan, realign, realign_with_report
from motionsync.config import AppConfig, EnvelopeSettings
from motionsync.domain import DecodedAudio, TalkTiming


def _noise(seconds: float, sample_rate: int = 1_000, channels: int = 1) -> DecodedAudio:
    rng = np.random.default_rng(11)
    frames = int(round(seconds * sample_rate))
    shape = (frames,) if channels == 1 else (frames, channels)
    return DecodedAudio(rng.uniform(-1.0, 1.0, size=shape).astype(np.float32), sample_rate)


def test_output_length_matches_total_duration() -> None:
    audio = _noise(2.0)

    output = realign(audio, [], 3.25)

    assert output.frame_count == 3250
    assert output.sample_rate == audio.sample_rate
    assert output.duration == pytest.approx(3.25)
    assert not output.samples.any()


def test_talk_slice_is_copied_to_its_video_start() -> None:
    """Copied samples are identical to the source; everything else is silent."""
    audio = _noise(3.0)
    timing = TalkTiming(
        segment_id="segment-1",
        video_start=1.7,
        video_end=2.3,
        audio_start=1.0,
        audio_duration=0.5,
    )

    output = realign(audio, [timing], 3.0)

    np.testing.assert_array_equal(output.samples[1700:2200], audio.samples[1000:1500])
    assert not output.samples[:1700].any()
    assert not output.samples[2200:].any()


def test_short_video_window_truncates_and_reports(caplog) -> None:
    """The slice stops at video_end and the shortfall is reported."""
    audio = _noise(3.0)
    timing = TalkTiming(
        segment_id="segment-1",
        video_start=1.0,
        video_end=1.3,
        audio_start=0.5,
        audio_duration=0.5,
    )

    with caplog.at_level(logging.WARNING):
        report = realign_with_report(audio, [timing], 3.0)

    samples = report.audio.samples
    np.testing.assert_array_equal(samples[1000:1300], audio.samples[500:800])
    assert not samples[1300:].any()
    assert len(report.truncations) == 1
    truncation = report.truncations[0]
    assert truncation.segment_id == "segment-1"
    assert truncation.requested_frames == 500
    assert truncation.written_frames == 300
    assert truncation.dropped_frames == 200
    assert "truncated" in caplog.text


def test_window_matching_audio_length_is_not_truncated_at_fractional_frames(
    caplog,
) -> None:
    """A video window as long as its audio holds the whole slice."""
    audio = _noise(3.0)
    timing = TalkTiming(
        segment_id="segment-1",
        video_start=1.0006,
        video_end=1.2012,
        audio_start=0.5,
        audio_duration=0.2006,
    )

    with caplog.at_level(logging.WARNING):
        report = realign_with_report(audio, [timing], 3.0)

    assert report.truncations == ()
    assert "truncated" not in caplog.text
    np.testing.assert_array_equal(report.audio.samples[1001:1202], audio.samples[500:701])


def test_slice_never_writes_past_the_output_end() -> None:
    audio = _noise(2.0)
    timing = TalkTiming("segment-1", 1.8, 2.5, 0.0, 0.7)

    report = realign_with_report(audio, [timing], 2.0)

    assert report.audio.frame_count == 2000
    np.testing.assert_array_equal(report.audio.samples[1800:], audio.samples[:200])
    assert report.truncations[0].written_frames == 200


def test_multichannel_layout_and_dtype_are_preserved() -> None:
    audio = _noise(1.0, channels=2)
    timing = TalkTiming("segment-0", 0.2, 0.6, 0.1, 0.4)

    output = realign(audio, [timing], 1.5)

    assert output.samples.shape == (1500, 2)
    assert output.samples.dtype == np.float32
    np.testing.assert_array_equal(output.samples[200:600], audio.samples[100:500])


def test_negative_total_duration_is_rejected() -> None:
    with pytest.raises(ValueError, match="total_duration"):
        realign(_noise(1.0), [], -1.0)


def test_realign_after_planning_keeps_talk_and_drops_idle(make_audio, scenario_clips) -> None:
    """Analyze, plan, and realign: talk audio moves, idle audio becomes silence."""
    settings = AppConfig(envelope=EnvelopeSettings(window_seconds=0.1))
    audio = make_audio(
        [(1.0, 0.01), (1.0, 0.5), (1.0, 0.01), (0.6, 0.4), (1.0, 0.01)],
        sample_rate=8_000,
    )

    analysis = analyze(audio, settings=settings)
    timeline = plan(analysis.segments, scenario_clips, settings=settings)
    report = realign_with_report(audio, timeline.talk_timings, timeline.total_duration)

    rate = audio.sample_rate
    output = report.audio.samples
    assert report.audio.frame_count == int(round(timeline.total_duration * rate))
    assert report.truncations == ()
    covered = np.zeros(report.audio.frame_count, dtype=bool)
    for timing in timeline.talk_timings:
        source = int(round(timing.audio_start * rate))
        target = int(round(timing.video_start * rate))
        length = int(round(timing.audio_duration * rate))
        np.testing.assert_array_equal(
            output[target : target + length], audio.samples[source : source + length]
        )
        covered[target : target + length] = True
    assert not output[~covered].any()
