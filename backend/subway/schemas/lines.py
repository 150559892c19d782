"""Pydantic schemas for line and segment management."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SegmentRequest(BaseModel):
    """Request to add a segment to a line."""

    up_station_id: UUID
    down_station_id: UUID
    distance: int = Field(..., gt=0, description="Distance in km")
    duration: int = Field(..., ge=0, description="Travel time in minutes")

    @model_validator(mode="after")
    def validate_distinct_stations(self) -> "SegmentRequest":
        """Reject segments that start and end at the same station."""
        if self.up_station_id == self.down_station_id:
            msg = "up_station_id and down_station_id must differ"
            raise ValueError(msg)
        return self


class CreateLineRequest(SegmentRequest):
    """Request to create a line together with its first segment."""

    name: str = Field(..., min_length=1, max_length=255)
    color: str = Field(default="", max_length=50)
    additional_fare: int = Field(default=0, ge=0)


class StationResponse(BaseModel):
    """Station on a line."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str


class LinePathResponse(BaseModel):
    """Ordered stations of a line with its totals."""

    line_id: UUID
    name: str
    stations: list[StationResponse]
    total_distance: int
    total_duration: int


class FareResponse(BaseModel):
    """Fare for travelling a whole line."""

    line_id: UUID
    distance: int
    duration: int
    surcharge: int
    fare: int
    rider_age: int = Field(..., description="Rider age, -1 when not authenticated")
