"""Pytest configuration and fixtures."""

import os

# Settings are read on import, so the test environment is set up first
os.environ["DEBUG"] = "true"
os.environ["SECRET_AUTH_JWT"] = "test-secret-with-enough-entropy-for-hs256"
os.environ["OTEL_ENABLED"] = "false"
os.environ["SEGMENT_SPLIT_POLICY"] = "overwrite"

import pytest
from subway.helpers.line_path import LinePath
from subway.models.subway import Line, Station

from tests.fixtures.otel import otel_enabled_provider, reset_tracer_provider  # noqa: F401
from tests.helpers.factories import make_line, make_segment, make_stations


@pytest.fixture
def line() -> Line:
    """Line without surcharge."""
    return make_line()


@pytest.fixture
def stations() -> dict[str, Station]:
    """Stations A to E."""
    return make_stations("A", "B", "C", "D", "E")


@pytest.fixture
def abc_path(line: Line, stations: dict[str, Station]) -> LinePath:
    """Path A -> B (10 km, 5 min) -> C (7 km, 4 min)."""
    path = LinePath(line.segments)
    path.add_segment(make_segment(line, stations["A"], stations["B"], 10, 5))
    path.add_segment(make_segment(line, stations["B"], stations["C"], 7, 4))
    return path
