"""
Timeline display and export helpers.

This module turns analysis results and timeline plans into rows for the
terminal or for CSV/JSON files handed to whatever renders them.

Functions:
    - format_seconds: Formats a duration the way the plan tables show it.
    - segment_rows: Tabulates classified segments.
    - placement_rows: Tabulates clip placements.
    - talk_rows: Tabulates talk timings with their drift.
    - print_plan: Prints the segment, placement, and talk tables.
    - save_plan_to_csv: Saves the placement table to a CSV file.
    - save_plan_to_json: Saves the plan in its display form.
"""

import csv
import json
import logging
from collections.abc import Sequence
from pathlib import Path

from colored import attr, bg, fg
from halo import Halo

from motionsync.domain import Segment, TimelinePlan
from motionsync.utils.logger import get_logger

logger: logging.Logger = get_logger(__name__)


def format_seconds(value: float) -> str:
    """
    Returns seconds with two decimals and an ``s`` suffix.

    Arguments:
        value (float): Duration in seconds.

    Returns:
        str: Formatted duration, e.g. ``1.25s``.
    """
    return f"{value:.2f}s"


def segment_rows(segments: Sequence[Segment]) -> list[tuple[str, str, str]]:
    """Rows of (kind, start, duration)."""
    return [
        (str(seg.kind), format_seconds(seg.start), format_seconds(seg.duration))
        for seg in segments
    ]


def placement_rows(plan: TimelinePlan) -> list[tuple[str, str, str, str]]:
    """Rows of (start, category label, clip id, duration)."""
    return [
        (
            format_seconds(placement.start),
            placement.clip.category.label,
            placement.clip.id,
            format_seconds(placement.duration),
        )
        for placement in plan.placements
    ]


def talk_rows(plan: TimelinePlan) -> list[tuple[str, str, str, str, str]]:
    """Rows of (segment id, audio start, audio duration, video window, drift)."""
    return [
        (
            timing.segment_id,
            format_seconds(timing.audio_start),
            format_seconds(timing.audio_duration),
            f"{format_seconds(timing.video_start)} - {format_seconds(timing.video_end)}",
            f"{timing.drift:+.2f}s",
        )
        for timing in plan.talk_timings
    ]


def color_txt(string: str, fg_color: str, bg_color: str, padding: int = 0) -> str:
    """
    Colorizes a string.

    Arguments:
        string (str): String to be colorized.
        fg_color (str): Foreground color.
        bg_color (str): Background color.
        padding (int): Minimum width.

    Returns:
        str: Colorized string.
    """
    if padding:
        string = string.ljust(padding)
    return f"{fg(fg_color)}{bg(bg_color)}{string}{attr('reset')}"


def _print_table(
    title: str, headers: Sequence[str], rows: Sequence[Sequence[str]], color: str
) -> None:
    widths = [
        max([len(header)] + [len(str(row[index])) for row in rows])
        for index, header in enumerate(headers)
    ]
    print(color_txt(title, "black", color))
    print(" ".join(color_txt(h, "black", "white", w) for h, w in zip(headers, widths)))
    for row in rows:
        print(" ".join(str(cell).ljust(width) for cell, width in zip(row, widths)))
    print()


def print_plan(segments: Sequence[Segment], plan: TimelinePlan) -> None:
    """
    Prints segments, placements, and talk timings as three tables.

    Arguments:
        segments (Sequence[Segment]): Classified segments.
        plan (TimelinePlan): Plan built from those segments.
    """
    logger.info(msg=f"Printing plan with {len(plan.placements)} placements.")
    _print_table(
        f"Segments ({len(segments)})",
        ("Kind", "Start", "Duration"),
        segment_rows(segments),
        "yellow",
    )
    _print_table(
        f"Placements (total {format_seconds(plan.total_duration)})",
        ("Start", "Motion", "Clip", "Duration"),
        placement_rows(plan),
        "green",
    )
    if plan.talk_timings:
        _print_table(
            "Talk timings",
            ("Segment", "Audio start", "Audio length", "Video window", "Drift"),
            talk_rows(plan),
            "blue",
        )


def save_plan_to_csv(plan: TimelinePlan, file_name: str) -> str:
    """
    Saves the placement table to a CSV file.

    Arguments:
        plan (TimelinePlan): The plan to save.
        file_name (str): Target path.

    Returns:
        str: The path to the saved CSV file.
    """
    path = Path(file_name)
    path.parent.mkdir(parents=True, exist_ok=True)
    logger.info(msg="Starting to save plan to CSV.")
    with Halo(text=f"Saving plan to {path}", spinner="dots", text_color="green"):
        with open(path, mode="w", newline="", encoding="utf-8") as file:
            writer = csv.writer(file)
            writer.writerow(["Start (s)", "Category", "Clip", "Duration (s)"])
            for placement in plan.placements:
                row = [
                    round(placement.start, 3),
                    str(placement.clip.category),
                    placement.clip.id,
                    round(placement.duration, 3),
                ]
                writer.writerow(row)
                logger.debug(msg=f"Written row: {row}")
    logger.info(msg=f"Plan successfully saved to {path}")
    return str(path)


def save_plan_to_json(plan: TimelinePlan, file_name: str) -> str:
    """
    Saves the plan's display form as JSON.

    Returns:
        str: The path to the saved JSON file.
    """
    path = Path(file_name)
    path.parent.mkdir(parents=True, exist_ok=True)
    with Halo(text=f"Saving plan to {path}", spinner="dots", text_color="green"):
        path.write_text(json.dumps(plan.to_dict(), indent=2), encoding="utf-8")
    logger.info(msg=f"Plan successfully saved to {path}")
    return str(path)
