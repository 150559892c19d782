"""Tests for line schemas."""

import uuid

import pytest
from pydantic import ValidationError
from subway.schemas.lines import CreateLineRequest, SegmentRequest, StationResponse
from subway.models.subway import Station


class TestSegmentRequest:
    """Tests for SegmentRequest validation."""

    def test_valid(self) -> None:
        """Should accept a positive distance and non-negative duration."""
        request = SegmentRequest(up_station_id=uuid.uuid4(), down_station_id=uuid.uuid4(), distance=10, duration=0)

        assert request.distance == 10
        assert request.duration == 0

    @pytest.mark.parametrize(("distance", "duration"), [(0, 5), (-1, 5), (10, -1)])
    def test_invalid_measurements(self, distance: int, duration: int) -> None:
        """Should reject non-positive distance and negative duration."""
        with pytest.raises(ValidationError):
            SegmentRequest(
                up_station_id=uuid.uuid4(), down_station_id=uuid.uuid4(), distance=distance, duration=duration
            )

    def test_same_station_rejected(self) -> None:
        """Should reject a segment that starts and ends at the same station."""
        station_id = uuid.uuid4()

        with pytest.raises(ValidationError, match="must differ"):
            SegmentRequest(up_station_id=station_id, down_station_id=station_id, distance=10, duration=5)


class TestCreateLineRequest:
    """Tests for CreateLineRequest validation."""

    def test_defaults(self) -> None:
        """Should default color and surcharge."""
        request = CreateLineRequest(
            name="Line 2", up_station_id=uuid.uuid4(), down_station_id=uuid.uuid4(), distance=10, duration=5
        )

        assert request.color == ""
        assert request.additional_fare == 0

    def test_negative_surcharge_rejected(self) -> None:
        """Should reject a negative additional fare."""
        with pytest.raises(ValidationError):
            CreateLineRequest(
                name="Line 2",
                additional_fare=-100,
                up_station_id=uuid.uuid4(),
                down_station_id=uuid.uuid4(),
                distance=10,
                duration=5,
            )

    def test_empty_name_rejected(self) -> None:
        """Should reject an empty line name."""
        with pytest.raises(ValidationError):
            CreateLineRequest(name="", up_station_id=uuid.uuid4(), down_station_id=uuid.uuid4(), distance=1, duration=1)


def test_station_response_from_model() -> None:
    """Should build a response straight from a Station model."""
    station = Station(name="Gangnam")

    response = StationResponse.model_validate(station)

    assert response.id == station.id
    assert response.name == "Gangnam"
