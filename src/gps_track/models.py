"""Pydantic domain models for geographic points and GPS samples."""

import math
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LatLon(BaseModel):
    """A WGS84 geographic coordinate in decimal degrees."""
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


class LocalCoordinate(BaseModel):
    """A planar map coordinate (meters) derived from a georeferencing."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class TrackPoint(BaseModel):
    """A geographic point with optional attributes such as time.

    Absent optional values are None. NaN elevation or hDOP, as produced by
    tools that use NaN as "no value", is normalized to None so that an absent
    value always compares equal to another absent value.

    The local coordinate is derived from the position and the active
    georeferencing. Neither it nor the name takes part in equality.
    """
    model_config = ConfigDict(frozen=True)

    position: LatLon
    timestamp: Optional[datetime] = None
    elevation: Optional[float] = None
    hdop: Optional[float] = None
    name: Optional[str] = None
    local_coordinate: Optional[LocalCoordinate] = None

    @field_validator("elevation", "hdop", mode="before")
    @classmethod
    def nan_means_absent(cls, v):
        if isinstance(v, float) and math.isnan(v):
            return None
        return v

    @field_validator("elevation")
    @classmethod
    def elevation_must_be_finite(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and math.isinf(v):
            raise ValueError(f"Elevation must be finite, got {v}")
        return v

    @field_validator("hdop")
    @classmethod
    def hdop_must_be_non_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and (math.isinf(v) or v < 0):
            raise ValueError(f"hDOP must be a finite non-negative number, got {v}")
        return v

    @field_validator("timestamp")
    @classmethod
    def timestamp_in_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is None:
            return v
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @classmethod
    def at(cls, lat: float, lon: float, **kwargs) -> "TrackPoint":
        return cls(position=LatLon(lat=lat, lon=lon), **kwargs)

    def with_local_coordinate(self, local: Optional[LocalCoordinate]) -> "TrackPoint":
        return self.model_copy(update={"local_coordinate": local})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TrackPoint):
            return NotImplemented
        return _point_key(self) == _point_key(other)

    def __hash__(self) -> int:
        return hash(_point_key(self))


def _point_key(point: TrackPoint) -> tuple:
    return (point.position, point.timestamp, point.elevation, point.hdop)
