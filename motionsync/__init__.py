"""Timeline alignment engine: talk/idle segmentation, clip planning, audio realignment."""

from .analysis import AnalysisResult, analyze
from .domain import (
    ClipInventory,
    DecodedAudio,
    MotionCategory,
    MotionClip,
    Placement,
    Segment,
    SegmentKind,
    SpeechLoopSize,
    TalkTiming,
    TimelinePlan,
)
from .errors import MissingCategoryError, MotionSyncError, ShortfallTruncation
from .planning import plan
from .realign import RealignmentReport, realign, realign_with_report

__all__ = [
    "AnalysisResult",
    "ClipInventory",
    "DecodedAudio",
    "MissingCategoryError",
    "MotionCategory",
    "MotionClip",
    "MotionSyncError",
    "Placement",
    "RealignmentReport",
    "Segment",
    "SegmentKind",
    "ShortfallTruncation",
    "SpeechLoopSize",
    "TalkTiming",
    "TimelinePlan",
    "analyze",
    "plan",
    "realign",
    "realign_with_report",
]
