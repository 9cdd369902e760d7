"""Geographic to local map coordinate transforms."""

import math
from typing import TYPE_CHECKING, Iterable, Protocol, runtime_checkable

import numpy as np

from ..models import LatLon, LocalCoordinate, TrackPoint

if TYPE_CHECKING:
    from .track import Track

GEOGRAPHIC_CRS_SPEC = "+proj=latlong +datum=WGS84"

# WGS84 semi-major axis, used as the sphere radius
EARTH_RADIUS_M = 6_378_137.0


@runtime_checkable
class Georeferencing(Protocol):
    """What a Track needs from a map's georeferencing."""

    def to_local(self, position: LatLon) -> LocalCoordinate:
        ...

    def to_geographic(self, local: LocalCoordinate) -> LatLon:
        ...

    def crs_spec(self) -> str:
        ...


class OrthographicGeoreferencing:
    """Orthographic projection about a center point.

    Local coordinate system:
    - x: east (meters at the center, times scale)
    - y: north (meters at the center, times scale)
    - origin at the center point
    """

    def __init__(self, center: LatLon, scale: float = 1.0):
        if scale <= 0:
            raise ValueError(f"Scale must be positive, got {scale}")
        self.center = center
        self.scale = scale

        self._lat0 = math.radians(center.lat)
        self._lon0 = math.radians(center.lon)
        self._sin_lat0 = math.sin(self._lat0)
        self._cos_lat0 = math.cos(self._lat0)
        self._factor = EARTH_RADIUS_M * scale

    @classmethod
    def centered_on(cls, track: "Track", scale: float = 1.0) -> "OrthographicGeoreferencing":
        """Center the projection on the track's average position."""
        return cls(track.calc_average_position(), scale=scale)

    def crs_spec(self) -> str:
        spec = (
            f"+proj=ortho +lat_0={self.center.lat!r} +lon_0={self.center.lon!r} "
            "+datum=WGS84 +units=m"
        )
        if self.scale != 1.0:
            spec += f" +k_0={self.scale!r}"
        return spec

    def to_local(self, position: LatLon) -> LocalCoordinate:
        lat = math.radians(position.lat)
        dlon = math.radians(position.lon) - self._lon0
        cos_lat = math.cos(lat)
        x = self._factor * cos_lat * math.sin(dlon)
        y = self._factor * (
            self._cos_lat0 * math.sin(lat) - self._sin_lat0 * cos_lat * math.cos(dlon)
        )
        return LocalCoordinate(x=x, y=y)

    def to_local_array(
        self, lats: np.ndarray, lons: np.ndarray
    ) -> tuple[np.ndarray, np.ndarray]:
        """Convert arrays of lat/lon to local x, y."""
        lat = np.radians(lats)
        dlon = np.radians(lons) - self._lon0
        cos_lat = np.cos(lat)
        x = self._factor * cos_lat * np.sin(dlon)
        y = self._factor * (
            self._cos_lat0 * np.sin(lat) - self._sin_lat0 * cos_lat * np.cos(dlon)
        )
        return x, y

    def to_geographic(self, local: LocalCoordinate) -> LatLon:
        x = local.x / self._factor
        y = local.y / self._factor
        rho = math.hypot(x, y)
        if rho == 0.0:
            return self.center
        # Clamp rounding noise; rho > 1 lies outside the visible hemisphere
        c = math.asin(min(rho, 1.0))
        sin_c = math.sin(c)
        cos_c = math.cos(c)
        lat = math.asin(cos_c * self._sin_lat0 + y * sin_c * self._cos_lat0 / rho)
        lon = self._lon0 + math.atan2(
            x * sin_c, rho * self._cos_lat0 * cos_c - y * self._sin_lat0 * sin_c
        )
        lon_deg = (math.degrees(lon) + 180.0) % 360.0 - 180.0
        return LatLon(lat=math.degrees(lat), lon=lon_deg)

    def __repr__(self) -> str:
        return f"OrthographicGeoreferencing(center={self.center!r}, scale={self.scale!r})"


def project_points(
    georeferencing: Georeferencing, points: Iterable[TrackPoint]
) -> list[TrackPoint]:
    """Return copies of the points with local coordinates derived from their positions.

    Uses the adapter's vectorized transform when it has one.
    """
    points = list(points)
    if not points:
        return []

    to_local_array = getattr(georeferencing, "to_local_array", None)
    if to_local_array is None:
        return [p.with_local_coordinate(georeferencing.to_local(p.position)) for p in points]

    lats = np.fromiter((p.position.lat for p in points), dtype=float, count=len(points))
    lons = np.fromiter((p.position.lon for p in points), dtype=float, count=len(points))
    xs, ys = to_local_array(lats, lons)
    return [
        p.with_local_coordinate(LocalCoordinate(x=float(x), y=float(y)))
        for p, x, y in zip(points, xs, ys)
    ]
