"""Envelope analysis and talk/idle segmentation."""

from .classifier import AnalysisResult, analyze, build_segments, label_frames
from .envelope import LoudnessEnvelope, compute_envelope
from .thresholds import ThresholdPair, derive_thresholds

__all__ = [
    "AnalysisResult",
    "LoudnessEnvelope",
    "ThresholdPair",
    "analyze",
    "build_segments",
    "compute_envelope",
    "derive_thresholds",
    "label_frames",
]
