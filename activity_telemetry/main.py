"""Command-line entry point: normalise an activity file or a Strava activity."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import STRAVA_ACCESS_TOKEN
from .errors import TelemetryError
from .export import activity_to_gpx, activity_to_json, trackpoints_frame
from .models import Activity
from .stats import format_average_pace, format_distance, format_duration, format_elevation
from .strava_client import ActivityDetailAPI
from .uploads import load_activity_file

LOGGER = logging.getLogger(__name__)

OUTPUT_FORMATS = ("json", "gpx", "csv", "summary")


def _setup_logging(level: str) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=getattr(logging, level),
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.getLogger().setLevel(getattr(logging, level))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="activity-telemetry",
        description="Normalise a TCX file or a Strava activity into one activity model",
    )
    parser.add_argument(
        "--output-format",
        default="summary",
        choices=OUTPUT_FORMATS,
        help="Output representation (default: summary)",
    )
    parser.add_argument(
        "--output-file",
        help="Write output to this path instead of stdout",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python logging level",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    file_cmd = sub.add_parser("file", help="Load a local .tcx activity file")
    file_cmd.add_argument("path", help="Path to the .tcx file")

    strava_cmd = sub.add_parser("strava", help="Fetch an activity from the Strava API")
    strava_cmd.add_argument("activity_id", type=int, help="Strava activity ID")
    strava_cmd.add_argument(
        "--access-token",
        default=None,
        help="Bearer token (default: STRAVA_ACCESS_TOKEN environment variable)",
    )
    strava_cmd.add_argument(
        "--no-laps", action="store_true", help="Skip the laps endpoint"
    )
    strava_cmd.add_argument(
        "--no-streams", action="store_true", help="Skip the streams endpoint"
    )
    return parser


def _summary(activity: Activity) -> str:
    lines: List[str] = [
        f"{activity.name} ({activity.sport_type}, source={activity.source.value})",
        f"  distance:  {format_distance(activity.distance)}",
        f"  moving:    {format_duration(activity.moving_time)}",
        f"  elevation: {format_elevation(activity.total_elevation_gain)}",
        f"  avg pace:  {format_average_pace(activity)}",
        f"  laps: {len(activity.laps)}  trackpoints: {len(activity.trackpoints)}",
    ]
    for lap in activity.laps:
        lines.append(
            f"    lap {lap.lap_index}: {format_distance(lap.distance)} "
            f"in {format_duration(lap.elapsed_time)} "
            f"[{lap.start_index}..{lap.end_index}]"
        )
    return "\n".join(lines)


def render(activity: Activity, output_format: str) -> str:
    if output_format == "json":
        return activity_to_json(activity, indent=2)
    if output_format == "gpx":
        return activity_to_gpx(activity)
    if output_format == "csv":
        return trackpoints_frame(activity).to_csv()
    return _summary(activity)


def _load(args: argparse.Namespace) -> Activity:
    if args.command == "file":
        return load_activity_file(args.path)
    token = args.access_token or STRAVA_ACCESS_TOKEN
    if not token:
        raise TelemetryError(
            "No Strava access token; pass --access-token or set STRAVA_ACCESS_TOKEN"
        )
    api = ActivityDetailAPI(token)
    return api.get_activity(
        args.activity_id,
        include_laps=not args.no_laps,
        include_streams=not args.no_streams,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.log_level)

    try:
        activity = _load(args)
    except TelemetryError as exc:
        LOGGER.error("Failed to load activity: %s", exc)
        return 1

    output = render(activity, args.output_format)
    if args.output_file:
        output_path = Path(args.output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(output)
        LOGGER.info("Output written to %s", output_path)
    else:
        sys.stdout.write(output)
        if not output.endswith("\n"):
            sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
