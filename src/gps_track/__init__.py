"""GPS tracks and waypoints with GPX import/export."""

from .core.georef import GEOGRAPHIC_CRS_SPEC, Georeferencing, OrthographicGeoreferencing
from .core.gpx import GpxDecodeError, MalformedDocumentError, MissingCoordinateError
from .core.models import GpxOptions
from .core.track import Track
from .models import LatLon, LocalCoordinate, TrackPoint

__all__ = [
    "GEOGRAPHIC_CRS_SPEC",
    "Georeferencing",
    "GpxDecodeError",
    "GpxOptions",
    "LatLon",
    "LocalCoordinate",
    "MalformedDocumentError",
    "MissingCoordinateError",
    "OrthographicGeoreferencing",
    "Track",
    "TrackPoint",
]
