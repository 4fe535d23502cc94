import logging
import sys
from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import motionsync.config as config  # noqa: E402
from motionsync.domain import DecodedAudio, MotionCategory, MotionClip  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_settings(monkeypatch: pytest.MonkeyPatch):
    """Keeps global settings independent of the developer environment."""
    for name in list(config.os.environ):
        if name.startswith("MOTIONSYNC_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "load_dotenv", lambda *args, **kwargs: False)
    config.reload_settings()
    yield
    for name in list(config.os.environ):
        if name.startswith("MOTIONSYNC_"):
            monkeypatch.delenv(name, raising=False)
    config.reload_settings()


@pytest.fixture(autouse=True)
def _silence_halo(monkeypatch):
    """Replace Halo spinners with a no-op context manager for tests."""

    class _DummyHalo:
        def __init__(self, *args, **kwargs):
            self.text = kwargs.get("text")

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

    monkeypatch.setattr("motionsync.utils.timeline_utils.Halo", _DummyHalo, raising=False)


@pytest.fixture
def caplog_info(caplog):
    caplog.set_level(logging.INFO)
    return caplog


@pytest.fixture
def make_audio() -> Callable[..., DecodedAudio]:
    """Builds piecewise-constant audio from (seconds, level) pieces."""

    def _make_audio(
        pieces: list[tuple[float, float]], *, sample_rate: int = 16_000
    ) -> DecodedAudio:
        chunks = [
            np.full(int(round(seconds * sample_rate)), level, dtype=np.float64)
            for seconds, level in pieces
        ]
        samples = np.concatenate(chunks) if chunks else np.zeros(0, dtype=np.float64)
        return DecodedAudio(samples=samples, sample_rate=sample_rate)

    return _make_audio


@pytest.fixture
def scenario_clips() -> list[MotionClip]:
    """One clip per role: idle 0.5s, transitions 0.3s, small loop 0.4s."""
    return [
        MotionClip("idle-a", MotionCategory.IDLE, 0.5),
        MotionClip("intro-a", MotionCategory.IDLE_TO_SPEECH, 0.3),
        MotionClip("loop-small-a", MotionCategory.SPEECH_LOOP_SMALL, 0.4),
        MotionClip("outro-a", MotionCategory.SPEECH_TO_IDLE, 0.3),
    ]
