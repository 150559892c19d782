"""
Single-path maintenance for the segments of one subway line.

A line stores its segments as an unordered collection of directed edges.
LinePath reconstructs the station order from that collection on every read
and keeps it a single simple path when segments are inserted or stations
removed. The segment list is mutated in place, so when it is an ORM
relationship collection the session picks up every change.

Not thread-safe: callers serialize mutations of the same line (see
LineService, which holds a row lock for the duration of an edit).
"""

from __future__ import annotations

import uuid
from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

from subway.models.subway import Segment

if TYPE_CHECKING:
    from subway.models.subway import Line, Station

logger = structlog.get_logger(__name__)


class SplitPolicy(StrEnum):
    """How an existing segment's distance/duration change when a new segment splits it."""

    OVERWRITE = "overwrite"  # take the new segment's values
    SUBTRACT = "subtract"  # keep the remainder (old - new)


class SegmentPathError(ValueError):
    """Base class for rejected path edits. Raised before any mutation."""


class DuplicateSegmentError(SegmentPathError):
    """Both endpoints of the proposed segment are already on the path."""

    def __init__(self) -> None:
        super().__init__("This segment is already registered.")


class DisconnectedSegmentError(SegmentPathError):
    """Neither endpoint of the proposed segment is on the (non-empty) path."""

    def __init__(self) -> None:
        super().__init__("This segment cannot be registered: it does not connect to the line.")


class MinimumSegmentError(SegmentPathError):
    """Removal attempted on a path holding one segment or fewer."""

    def __init__(self) -> None:
        super().__init__("A line must keep at least one segment.")


class InvalidSegmentError(SegmentPathError):
    """The proposed segment cannot form part of a simple path."""


def _same_station(a: Station, b: Station) -> bool:
    return a.id == b.id


class LinePath:
    """Ordered view over, and validated mutations of, one line's segments."""

    def __init__(
        self,
        segments: list[Segment],
        *,
        split_policy: SplitPolicy = SplitPolicy.OVERWRITE,
    ) -> None:
        """
        Wrap a segment collection.

        Args:
            segments: The line's segments. Mutated in place.
            split_policy: Distance/duration rule applied when a new segment splits an existing one
        """
        self.segments = segments
        self.split_policy = split_policy

    def __len__(self) -> int:
        return len(self.segments)

    # ==================== Reads ====================

    def get_stations(self) -> list[Station]:
        """
        Return the stations in travel order, head to tail.

        Returns:
            Ordered stations; empty when there are no segments

        Example:
            Segments B→C and A→B (in any order) give [A, B, C].
        """
        if not self.segments:
            return []

        station = self._find_head()
        stations = [station]
        # A simple path over n segments visits n + 1 stations
        for _ in range(len(self.segments)):
            next_segment = self._segment_starting_at(station)
            if next_segment is None:
                break
            station = next_segment.down_station
            stations.append(station)

        return stations

    def contains(self, station: Station) -> bool:
        """Whether `station` lies on the path."""
        return any(_same_station(it, station) for it in self.get_stations())

    @property
    def total_distance(self) -> int:
        """Sum of all segment distances."""
        return sum(segment.distance for segment in self.segments)

    @property
    def total_duration(self) -> int:
        """Sum of all segment durations."""
        return sum(segment.duration for segment in self.segments)

    @property
    def lines(self) -> list[Line]:
        """Distinct lines owning the segments, in first-seen order."""
        seen: dict[uuid.UUID, Line] = {}
        for segment in self.segments:
            seen.setdefault(segment.line.id, segment.line)
        return list(seen.values())

    # ==================== Mutations ====================

    def add_segment(self, segment: Segment) -> None:
        """
        Insert a segment, splitting an existing one when they share an endpoint.

        If the new segment starts where an existing one starts, the existing segment
        is shortened to start at the new segment's downstream station (and
        symmetrically for a shared downstream station). A new segment attached to
        the head or tail simply extends the path.

        Args:
            segment: Segment to insert

        Raises:
            InvalidSegmentError: Self-loop on an empty path, or a split the SUBTRACT policy cannot apply
            DuplicateSegmentError: Both endpoints are already on the path
            DisconnectedSegmentError: Neither endpoint is on a non-empty path
        """
        stations = self.get_stations()
        up_exists = any(_same_station(it, segment.up_station) for it in stations)
        down_exists = any(_same_station(it, segment.down_station) for it in stations)

        if up_exists and down_exists:
            raise DuplicateSegmentError
        if self.segments and not up_exists and not down_exists:
            raise DisconnectedSegmentError
        if _same_station(segment.up_station, segment.down_station):
            msg = "Upstream and downstream stations must differ."
            raise InvalidSegmentError(msg)

        if up_exists:
            if existing := self._segment_starting_at(segment.up_station):
                distance, duration = self._split_remainder(existing, segment)
                existing.update_up_station(segment.down_station, distance, duration)

        if down_exists:
            if existing := self._segment_ending_at(segment.down_station):
                distance, duration = self._split_remainder(existing, segment)
                existing.update_down_station(segment.up_station, distance, duration)

        self.segments.append(segment)
        logger.debug(
            "segment_added",
            up_station_id=str(segment.up_station.id),
            down_station_id=str(segment.down_station.id),
            distance=segment.distance,
            segment_count=len(self.segments),
        )

    def remove_station(self, station: Station) -> None:
        """
        Remove a station from the path.

        An interior station's two segments are merged into one spanning its
        neighbours (distances and durations summed). An end station simply loses
        its single segment. A station not on the path is ignored.

        Args:
            station: Station to remove

        Raises:
            MinimumSegmentError: The path holds one segment or fewer
        """
        if len(self.segments) <= 1:
            raise MinimumSegmentError

        outgoing = self._segment_starting_at(station)
        incoming = self._segment_ending_at(station)

        if outgoing is not None and incoming is not None:
            self.segments.append(
                Segment(
                    line=outgoing.line,
                    up_station=incoming.up_station,
                    down_station=outgoing.down_station,
                    distance=outgoing.distance + incoming.distance,
                    duration=outgoing.duration + incoming.duration,
                )
            )

        if outgoing is not None:
            self.segments.remove(outgoing)
        if incoming is not None:
            self.segments.remove(incoming)

        if outgoing is None and incoming is None:
            logger.debug("station_not_on_path", station_id=str(station.id))
            return

        logger.debug(
            "station_removed",
            station_id=str(station.id),
            merged=outgoing is not None and incoming is not None,
            segment_count=len(self.segments),
        )

    # ==================== Internals ====================

    def _find_head(self) -> Station:
        station = self.segments[0].up_station
        for _ in range(len(self.segments)):
            previous = self._segment_ending_at(station)
            if previous is None:
                break
            station = previous.up_station
        return station

    def _segment_starting_at(self, station: Station) -> Segment | None:
        return next((it for it in self.segments if _same_station(it.up_station, station)), None)

    def _segment_ending_at(self, station: Station) -> Segment | None:
        return next((it for it in self.segments if _same_station(it.down_station, station)), None)

    def _split_remainder(self, existing: Segment, new: Segment) -> tuple[int, int]:
        """Distance/duration the existing segment keeps after `new` splits it."""
        if self.split_policy is SplitPolicy.OVERWRITE:
            return new.distance, new.duration

        if new.distance >= existing.distance:
            msg = (
                f"New segment distance {new.distance} must be shorter than the "
                f"segment it splits ({existing.distance})."
            )
            raise InvalidSegmentError(msg)
        if new.duration > existing.duration:
            msg = (
                f"New segment duration {new.duration} must not exceed the "
                f"segment it splits ({existing.duration})."
            )
            raise InvalidSegmentError(msg)
        return existing.distance - new.distance, existing.duration - new.duration
