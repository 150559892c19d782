"""Database models for the subway path service."""

from subway.models.base import Base, BaseModel
from subway.models.subway import Line, Segment, Station

__all__ = [
    # Base
    "Base",
    "BaseModel",
    # Subway models
    "Line",
    "Segment",
    "Station",
]
