"""Audio realignment onto the planned video timeline."""

from .realigner import RealignmentReport, realign, realign_with_report

__all__ = ["RealignmentReport", "realign", "realign_with_report"]
