"""Subway line, station and segment models."""

import uuid

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from subway.models.base import BaseModel


class Station(BaseModel):
    """Subway station. Only its id is used to compare stations on a path."""

    __tablename__ = "stations"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        """String representation of the station."""
        return f"<Station(id={self.id}, name={self.name})>"


class Line(BaseModel):
    """Subway line (e.g., Line 2, Shinbundang Line)."""

    __tablename__ = "lines"

    name: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    color: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="",
    )
    additional_fare: Mapped[int] = mapped_column(
        Integer,  # Surcharge added once per journey touching this line
        nullable=False,
        default=0,
    )

    # Unordered; LinePath derives the station order and is the only writer.
    # Not back-populated, so a new Segment stays off this list until added.
    segments: Mapped[list["Segment"]] = relationship(
        cascade="all, delete-orphan",
        overlaps="line",
    )

    __table_args__ = (CheckConstraint("additional_fare >= 0", name="ck_lines_additional_fare_non_negative"),)

    def __repr__(self) -> str:
        """String representation of the line."""
        return f"<Line(id={self.id}, name={self.name}, additional_fare={self.additional_fare})>"


class Segment(BaseModel):
    """Directed edge between two adjacent stations on a line."""

    __tablename__ = "segments"

    line_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("lines.id", ondelete="CASCADE"),
        nullable=False,
    )
    up_station_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("stations.id", ondelete="CASCADE"),
        nullable=False,
    )
    down_station_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("stations.id", ondelete="CASCADE"),
        nullable=False,
    )
    distance: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    duration: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    # Relationships
    line: Mapped[Line] = relationship(overlaps="segments")
    up_station: Mapped[Station] = relationship(foreign_keys=[up_station_id])
    down_station: Mapped[Station] = relationship(foreign_keys=[down_station_id])

    __table_args__ = (
        CheckConstraint("distance > 0", name="ck_segments_distance_positive"),
        CheckConstraint("duration >= 0", name="ck_segments_duration_non_negative"),
        Index("ix_segments_line", "line_id"),
        Index("ix_segments_up_station", "up_station_id"),
        Index("ix_segments_down_station", "down_station_id"),
    )

    def update_up_station(self, station: Station, distance: int, duration: int) -> None:
        """Move the upstream endpoint to `station` and record the new distance/duration."""
        self.up_station = station
        self.distance = distance
        self.duration = duration

    def update_down_station(self, station: Station, distance: int, duration: int) -> None:
        """Move the downstream endpoint to `station` and record the new distance/duration."""
        self.down_station = station
        self.distance = distance
        self.duration = duration

    def __repr__(self) -> str:
        """String representation of the segment."""
        return (
            f"<Segment(id={self.id}, up={self.up_station_id}, down={self.down_station_id}, "
            f"distance={self.distance}, duration={self.duration})>"
        )
