#!/usr/bin/env python3
"""CLI tool for building line paths and quoting fares offline.

Usage:
    # Build a line from segments and show its stations and fare
    python -m subway.cli path --segment Gangnam:Yeoksam:10:5 --segment Yeoksam:Seolleung:7:4

    # Remove a station after building
    python -m subway.cli path --segment A:B:10:5 --segment B:C:7:4 --remove B

    # Quote a fare for a distance
    python -m subway.cli fare --distance 15 --age 10
"""

import argparse
import sys
from collections.abc import Sequence
from dataclasses import dataclass

from fastapi import HTTPException

from subway.core.auth import ANONYMOUS_AGE, get_rider_age_from_token
from subway.core.config import settings
from subway.core.logging import configure_logging
from subway.core.telemetry import configure_tracing, shutdown_tracer_provider
from subway.helpers.line_path import LinePath, SegmentPathError, SplitPolicy
from subway.models.subway import Line, Segment, Station
from subway.services.fare_service import FareCalculator


@dataclass(frozen=True)
class SegmentSpec:
    """Parsed --segment argument."""

    up: str
    down: str
    distance: int
    duration: int


def parse_segment(value: str) -> SegmentSpec:
    """
    Parse an UP:DOWN:DISTANCE:DURATION argument.

    Args:
        value: Raw argument

    Returns:
        Parsed segment

    Raises:
        argparse.ArgumentTypeError: If the value is malformed
    """
    parts = value.split(":")
    if len(parts) != 4 or not parts[0] or not parts[1]:  # noqa: PLR2004
        msg = f"expected UP:DOWN:DISTANCE:DURATION, got '{value}'"
        raise argparse.ArgumentTypeError(msg)
    try:
        distance, duration = int(parts[2]), int(parts[3])
    except ValueError as e:
        msg = f"distance and duration must be integers in '{value}'"
        raise argparse.ArgumentTypeError(msg) from e
    if distance <= 0 or duration < 0:
        msg = f"distance must be positive and duration non-negative in '{value}'"
        raise argparse.ArgumentTypeError(msg)
    return SegmentSpec(up=parts[0], down=parts[1], distance=distance, duration=duration)


def non_negative_int(value: str) -> int:
    """Parse an integer argument that must be zero or more."""
    try:
        number = int(value)
    except ValueError as e:
        msg = f"expected an integer, got '{value}'"
        raise argparse.ArgumentTypeError(msg) from e
    if number < 0:
        msg = f"must not be negative, got {number}"
        raise argparse.ArgumentTypeError(msg)
    return number


def resolve_rider_age(args: argparse.Namespace) -> int:
    """Rider age from --age, else from --token, else anonymous."""
    if args.age is not None:
        return args.age
    return get_rider_age_from_token(args.token)


def cmd_path(args: argparse.Namespace) -> int:
    """
    Build a line from --segment arguments and print its stations and fare.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    line = Line(name=args.name, additional_fare=args.surcharge)
    stations: dict[str, Station] = {}

    def station(name: str) -> Station:
        return stations.setdefault(name, Station(name=name))

    path = LinePath(line.segments, split_policy=SplitPolicy(args.split_policy))
    try:
        for spec in args.segment:
            path.add_segment(
                Segment(
                    line=line,
                    up_station=station(spec.up),
                    down_station=station(spec.down),
                    distance=spec.distance,
                    duration=spec.duration,
                )
            )
        for name in args.remove:
            if name not in stations:
                print(f"❌ Error: unknown station '{name}'", file=sys.stderr)
                return 1
            path.remove_station(stations[name])
        rider_age = resolve_rider_age(args)
    except SegmentPathError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1
    except HTTPException as e:
        print(f"❌ Error: {e.detail}", file=sys.stderr)
        return 1
    except ValueError as e:
        # Missing AUTH_JWT_SECRET when a token is given
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    quote = FareCalculator(path).quote(rider_age)

    print(f"Line:      {line.name}")
    print(f"Stations:  {' -> '.join(it.name for it in path.get_stations())}")
    print(f"Distance:  {quote.distance} km")
    print(f"Duration:  {quote.duration} min")
    print(f"Surcharge: {quote.surcharge}")
    print(f"Fare:      {quote.fare}")
    return 0


def cmd_fare(args: argparse.Namespace) -> int:
    """
    Print the fare for a distance.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if args.distance <= 0:
        print("❌ Error: distance must be positive", file=sys.stderr)
        return 1
    try:
        rider_age = resolve_rider_age(args)
    except HTTPException as e:
        print(f"❌ Error: {e.detail}", file=sys.stderr)
        return 1
    except ValueError as e:
        # Missing AUTH_JWT_SECRET when a token is given
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    line = Line(name="fare", additional_fare=args.surcharge)
    stations = (Station(name="from"), Station(name="to"))
    segment = Segment(
        line=line, up_station=stations[0], down_station=stations[1], distance=args.distance, duration=0
    )
    fare = FareCalculator(LinePath([segment])).get_total_fare(args.distance, rider_age)

    print(f"Fare: {fare}")
    return 0


def _add_rider_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--surcharge",
        type=non_negative_int,
        default=0,
        help="Line additional fare (default: 0)",
    )
    rider = parser.add_mutually_exclusive_group()
    rider.add_argument(
        "--age",
        type=int,
        default=None,
        help=f"Rider age (default: anonymous, {ANONYMOUS_AGE})",
    )
    rider.add_argument(
        "--token",
        type=str,
        default=None,
        help="Rider access token carrying an 'age' claim",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Subway line path and fare CLI tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Stations, totals and fare of a two-segment line
  python -m subway.cli path --segment A:B:10:5 --segment B:C:7:4

  # Split an existing segment, keeping the remaining distance
  python -m subway.cli path --segment A:C:10:6 --segment A:B:4:2 --split-policy subtract

  # Youth fare for 15 km
  python -m subway.cli fare --distance 15 --age 15
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # path command
    path_parser = subparsers.add_parser(
        "path",
        help="Build a line from segments and show its stations and fare",
        description="Insert segments in the given order, apply removals, then print the result.",
    )
    path_parser.add_argument(
        "--segment",
        type=parse_segment,
        action="append",
        required=True,
        metavar="UP:DOWN:DISTANCE:DURATION",
        help="Segment to insert (repeatable)",
    )
    path_parser.add_argument(
        "--remove",
        action="append",
        default=[],
        metavar="STATION",
        help="Station to remove after all segments are inserted (repeatable)",
    )
    path_parser.add_argument(
        "--name",
        type=str,
        default="cli-line",
        help="Line name (default: cli-line)",
    )
    path_parser.add_argument(
        "--split-policy",
        choices=[policy.value for policy in SplitPolicy],
        default=settings.SEGMENT_SPLIT_POLICY,
        help=f"How split segments keep distance/duration (default: {settings.SEGMENT_SPLIT_POLICY})",
    )
    _add_rider_arguments(path_parser)

    # fare command
    fare_parser = subparsers.add_parser(
        "fare",
        help="Quote the fare for a distance",
        description="Print the fare for a journey of the given distance.",
    )
    fare_parser.add_argument(
        "--distance",
        type=int,
        required=True,
        help="Journey distance in km",
    )
    _add_rider_arguments(fare_parser)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI tool.

    Args:
        argv: Arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(log_level=settings.LOG_LEVEL)
    configure_tracing()

    command_handlers = {
        "path": cmd_path,
        "fare": cmd_fare,
    }

    try:
        if handler := command_handlers.get(args.command):
            return handler(args)
    finally:
        shutdown_tracer_provider()

    print(f"❌ Unknown command: {args.command}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
