"""Clip selection and timeline planning."""

from .clip_selector import ClipSelector
from .planner import TimelinePlanner, plan

__all__ = ["ClipSelector", "TimelinePlanner", "plan"]
