"""Factories for in-memory lines, stations and segments."""

from subway.models.subway import Line, Segment, Station


def make_line(name: str = "Line 2", *, additional_fare: int = 0) -> Line:
    """Create an unsaved line."""
    return Line(name=name, color="bg-green-600", additional_fare=additional_fare)


def make_stations(*names: str) -> dict[str, Station]:
    """Create unsaved stations keyed by name."""
    return {name: Station(name=name) for name in names}


def make_segment(line: Line, up: Station, down: Station, distance: int, duration: int) -> Segment:
    """Create a segment that is not yet registered on `line`."""
    return Segment(line=line, up_station=up, down_station=down, distance=distance, duration=duration)


def station_names(stations: list[Station]) -> list[str]:
    """Names of `stations`, in order."""
    return [station.name for station in stations]
