"""
motionsync command-line entry point.

Decodes an audio file, classifies it into talk and idle segments, plans a
motion clip timeline from the clips given on the command line, and optionally
writes the realigned audio and the plan for the encoding step.

Usage:
    motionsync --audio voice.wav \\
        --clip idle:2.0:idle.mp4 --clip idleToSpeech:0.4:in.mp4 \\
        --clip speechLoopSmall:0.8:loop.mp4 --clip speechToIdle:0.4:out.mp4 \\
        --aligned-output aligned.wav --plan-json plan.json
"""

import argparse
import logging
import sys
import time
from dataclasses import replace
from pathlib import Path

from motionsync.analysis import analyze
from motionsync.config import EnvelopeSettings, get_settings
from motionsync.domain import MotionCategory, MotionClip
from motionsync.errors import MissingCategoryError
from motionsync.planning import plan
from motionsync.realign import realign_with_report
from motionsync.utils import (
    configure_logging,
    display_elapsed_time,
    get_logger,
    print_plan,
    read_audio_file,
    save_plan_to_csv,
    save_plan_to_json,
    write_wav,
)

logger: logging.Logger = get_logger("motionsync")


def parse_clip_spec(spec: str, index: int) -> MotionClip:
    """
    Parses ``CATEGORY:DURATION[:PATH]`` into a clip.

    Arguments:
        spec (str): Clip specification from the command line.
        index (int): Position on the command line, used for unnamed clips.

    Returns:
        MotionClip: The clip; ``handle`` holds the path when given.

    Raises:
        argparse.ArgumentTypeError: If the category or duration is invalid.
    """
    parts = spec.split(":", 2)
    if len(parts) < 2:
        raise argparse.ArgumentTypeError(
            f"Clip '{spec}' must look like CATEGORY:DURATION[:PATH]."
        )
    try:
        category = MotionCategory(parts[0].strip())
    except ValueError as err:
        choices = ", ".join(str(item) for item in MotionCategory)
        raise argparse.ArgumentTypeError(
            f"Unknown motion category '{parts[0]}' (expected one of {choices})."
        ) from err
    try:
        duration = float(parts[1])
    except ValueError as err:
        raise argparse.ArgumentTypeError(
            f"Clip '{spec}' has an invalid duration '{parts[1]}'."
        ) from err
    if duration <= 0.0:
        raise argparse.ArgumentTypeError(f"Clip '{spec}' must have a positive duration.")
    path = parts[2] if len(parts) == 3 and parts[2] else None
    clip_id = Path(path).stem if path else f"{category}-{index}"
    return MotionClip(id=clip_id, category=category, duration=duration, handle=path)


def resolve_output_path(file_name: str, folder: Path) -> str:
    """Places bare file names inside the configured output folder."""
    path = Path(file_name)
    if path.parent == Path("."):
        return str(folder / path)
    return str(path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="motionsync",
        description="Plan lip-synced motion clips for an audio recording",
    )
    parser.add_argument("--audio", required=True, help="Path to the audio file")
    parser.add_argument(
        "--clip",
        action="append",
        default=[],
        metavar="CATEGORY:DURATION[:PATH]",
        help="Available motion clip; repeat for every clip",
    )
    parser.add_argument(
        "--window-ms",
        type=float,
        help="Envelope window in milliseconds (default from settings)",
    )
    parser.add_argument("--aligned-output", help="Write the realigned audio to this WAV")
    parser.add_argument("--plan-csv", help="Save the placement table as CSV")
    parser.add_argument("--plan-json", help="Save the plan as JSON")
    parser.add_argument("--log-level", help="Logging level, overrides LOG_LEVEL")
    return parser


def main(argv: list[str] | None = None) -> None:
    """
    Main function to handle the command line interface logic.
    """
    parser = build_parser()
    args: argparse.Namespace = parser.parse_args(argv)
    if args.log_level:
        configure_logging(args.log_level)

    try:
        clips = [parse_clip_spec(spec, index) for index, spec in enumerate(args.clip)]
    except argparse.ArgumentTypeError as err:
        parser.error(str(err))

    settings = get_settings()
    if args.window_ms is not None:
        if args.window_ms <= 0:
            parser.error("--window-ms must be positive.")
        settings = replace(
            settings, envelope=EnvelopeSettings(window_seconds=args.window_ms / 1000.0)
        )

    start_time = time.time()
    try:
        audio = read_audio_file(args.audio)
    except IOError as err:
        logger.error(msg=f"Could not decode {args.audio}: {err}")
        sys.exit(1)

    analysis = analyze(audio, settings=settings)
    try:
        timeline = plan(analysis.segments, clips, settings=settings)
    except MissingCategoryError as err:
        logger.error(msg=f"{err} Add a clip with --clip {err.category}:DURATION[:PATH].")
        sys.exit(1)

    print_plan(analysis.segments, timeline)

    if args.aligned_output:
        report = realign_with_report(audio, timeline.talk_timings, timeline.total_duration)
        write_wav(
            report.audio, resolve_output_path(args.aligned_output, settings.output.folder)
        )
    if args.plan_csv:
        save_plan_to_csv(
            timeline, resolve_output_path(args.plan_csv, settings.output.folder)
        )
    if args.plan_json:
        save_plan_to_json(
            timeline, resolve_output_path(args.plan_json, settings.output.folder)
        )

    logger.info(
        msg=f"Planning completed in {display_elapsed_time(time.time() - start_time)}"
    )


if __name__ == "__main__":
    main()
