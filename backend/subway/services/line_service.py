"""Line management service.

Owns the unit of work around LinePath edits: the line row is locked with
SELECT ... FOR UPDATE before its segments are changed, so concurrent edits
to the same line are serialized by the database.
"""

import uuid

import structlog
from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from subway.core.auth import ANONYMOUS_AGE
from subway.core.config import settings
from subway.core.telemetry import get_current_trace_id, service_span
from subway.helpers.line_path import LinePath, SegmentPathError, SplitPolicy
from subway.models.subway import Line, Segment, Station
from subway.schemas.lines import (
    CreateLineRequest,
    FareResponse,
    LinePathResponse,
    SegmentRequest,
    StationResponse,
)
from subway.services.fare_service import FareCalculator

logger = structlog.get_logger(__name__)

TRACE_ID_HEADER = "X-Trace-Id"


def _rejected(event: str, line_id: uuid.UUID, error: SegmentPathError) -> HTTPException:
    """Log a rejected edit and build the 400 for it, tagged with the active trace id."""
    trace_id = get_current_trace_id()
    logger.info(event, line_id=str(line_id), reason=str(error), trace_id=trace_id)
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=str(error),
        headers={TRACE_ID_HEADER: trace_id} if trace_id else None,
    )


class LineService:
    """Service for managing a line's segments and quoting its fare."""

    def __init__(self, db: AsyncSession, *, split_policy: SplitPolicy | None = None) -> None:
        """
        Initialize the line service.

        Args:
            db: Database session
            split_policy: Split rule for inserted segments (defaults to SEGMENT_SPLIT_POLICY)
        """
        self.db = db
        self.split_policy = split_policy or SplitPolicy(settings.SEGMENT_SPLIT_POLICY)

    def _path(self, line: Line) -> LinePath:
        return LinePath(line.segments, split_policy=self.split_policy)

    async def get_line(self, line_id: uuid.UUID, *, for_update: bool = False) -> Line:
        """
        Get a line with its segments and their stations.

        Args:
            line_id: Line UUID
            for_update: Lock the line row until the transaction ends

        Returns:
            Line object

        Raises:
            HTTPException: 404 if line not found
        """
        query = (
            select(Line)
            .where(Line.id == line_id)
            .options(
                selectinload(Line.segments).selectinload(Segment.line),
                selectinload(Line.segments).selectinload(Segment.up_station),
                selectinload(Line.segments).selectinload(Segment.down_station),
            )
        )
        if for_update:
            query = query.with_for_update()

        result = await self.db.execute(query)

        if not (line := result.scalar_one_or_none()):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Line not found.",
            )

        return line

    async def _get_station(self, station_id: uuid.UUID) -> Station:
        if not (station := await self.db.get(Station, station_id)):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Station {station_id} not found.",
            )
        return station

    async def create_line(self, request: CreateLineRequest) -> Line:
        """
        Create a line together with its first segment.

        Args:
            request: Line creation request

        Returns:
            Created line

        Raises:
            HTTPException: 404 if either station does not exist
        """
        up_station = await self._get_station(request.up_station_id)
        down_station = await self._get_station(request.down_station_id)

        line = Line(name=request.name, color=request.color, additional_fare=request.additional_fare)
        self._path(line).add_segment(
            Segment(
                line=line,
                up_station=up_station,
                down_station=down_station,
                distance=request.distance,
                duration=request.duration,
            )
        )

        self.db.add(line)
        await self.db.commit()

        logger.info("line_created", line_id=str(line.id), name=line.name)
        return line

    async def add_segment(self, line_id: uuid.UUID, request: SegmentRequest) -> Line:
        """
        Add a segment to a line.

        Args:
            line_id: Line UUID
            request: Segment to add

        Returns:
            Updated line

        Raises:
            HTTPException: 404 if line or station not found, 400 if the segment is rejected
        """
        with service_span("line.add_segment", "line-service", line_id=str(line_id)):
            line = await self.get_line(line_id, for_update=True)
            up_station = await self._get_station(request.up_station_id)
            down_station = await self._get_station(request.down_station_id)

            segment = Segment(
                line=line,
                up_station=up_station,
                down_station=down_station,
                distance=request.distance,
                duration=request.duration,
            )
            try:
                self._path(line).add_segment(segment)
            except SegmentPathError as e:
                await self.db.rollback()
                raise _rejected("segment_rejected", line_id, e) from e

            await self.db.commit()
            return line

    async def remove_station(self, line_id: uuid.UUID, station_id: uuid.UUID) -> Line:
        """
        Remove a station from a line, merging its neighbouring segments.

        Args:
            line_id: Line UUID
            station_id: Station UUID

        Returns:
            Updated line

        Raises:
            HTTPException: 404 if line or station not found, 400 if the line would lose its last segment
        """
        with service_span("line.remove_station", "line-service", line_id=str(line_id)):
            line = await self.get_line(line_id, for_update=True)
            station = await self._get_station(station_id)

            try:
                self._path(line).remove_station(station)
            except SegmentPathError as e:
                await self.db.rollback()
                raise _rejected("station_removal_rejected", line_id, e) from e

            await self.db.commit()
            return line

    async def get_path(self, line_id: uuid.UUID) -> LinePathResponse:
        """
        Get a line's stations in travel order.

        Args:
            line_id: Line UUID

        Returns:
            Ordered stations with total distance and duration
        """
        line = await self.get_line(line_id)
        path = self._path(line)
        return LinePathResponse(
            line_id=line.id,
            name=line.name,
            stations=[StationResponse.model_validate(station) for station in path.get_stations()],
            total_distance=path.total_distance,
            total_duration=path.total_duration,
        )

    async def get_fare(self, line_id: uuid.UUID, *, rider_age: int = ANONYMOUS_AGE) -> FareResponse:
        """
        Quote the fare for travelling the whole line.

        Args:
            line_id: Line UUID
            rider_age: Rider age from the authentication context

        Returns:
            Fare quote
        """
        line = await self.get_line(line_id)
        quote = FareCalculator(self._path(line)).quote(rider_age)
        return FareResponse(
            line_id=line.id,
            distance=quote.distance,
            duration=quote.duration,
            surcharge=quote.surcharge,
            fare=quote.fare,
            rider_age=quote.rider_age,
        )
