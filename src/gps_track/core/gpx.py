"""GPX 1.1 decoding and encoding.

Decoding is strict about point locations and lenient about everything else:
a point without usable lat/lon rejects the whole document, while a malformed
ele, time, hdop or name is dropped and decoding continues.
"""

import logging
import re
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, Union

import gpxpy.gpx
import numpy as np
from gpxpy.gpx import GPXException
from gpxpy.gpxfield import parse_time

from ..models import LatLon, TrackPoint
from .models import GpxOptions

if TYPE_CHECKING:
    from .track import Track

logger = logging.getLogger(__name__)


class GpxDecodeError(ValueError):
    """The data cannot be decoded as a GPX track."""


class MalformedDocumentError(GpxDecodeError):
    """The XML is not well-formed or is not a GPX document."""


class MissingCoordinateError(GpxDecodeError):
    """A point element lacks a parseable lat or lon attribute."""


def _local_name(tag) -> str:
    # Comments and processing instructions have non-string tags
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


# xsd:decimal, which rules out exponents, nan, inf and digit separators
DECIMAL_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)")


def _parse_float(text: Optional[str]) -> Optional[float]:
    if text is None:
        return None
    text = text.strip()
    if not DECIMAL_RE.fullmatch(text):
        return None
    return float(text)


def _parse_position(element: ET.Element) -> Optional[LatLon]:
    lat = _parse_float(element.get("lat"))
    lon = _parse_float(element.get("lon"))
    if lat is None or lon is None:
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        return None
    return LatLon(lat=lat, lon=lon)


def _parse_timestamp(text: Optional[str]) -> Optional[datetime]:
    if not text or not text.strip():
        return None
    try:
        value = parse_time(text.strip())
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    except (GPXException, ValueError, OverflowError):
        return None


def _read_point(element: ET.Element, options: GpxOptions) -> Optional[TrackPoint]:
    kind = _local_name(element.tag)
    position = _parse_position(element)
    if position is None:
        message = (
            f"<{kind}> has no usable location "
            f"(lat={element.get('lat')!r}, lon={element.get('lon')!r})"
        )
        if options.skip_unlocated_points:
            logger.warning("Skipping point: %s", message)
            return None
        raise MissingCoordinateError(message)

    children: dict[str, Optional[str]] = {}
    for child in element:
        children.setdefault(_local_name(child.tag), child.text)

    elevation = _parse_float(children.get("ele"))
    if elevation is None and children.get("ele") is not None:
        logger.debug("Ignoring malformed <ele> %r", children["ele"])

    hdop = _parse_float(children.get("hdop"))
    if hdop is not None and hdop < 0:
        hdop = None
    if hdop is None and children.get("hdop") is not None:
        logger.debug("Ignoring malformed <hdop> %r", children["hdop"])

    timestamp = _parse_timestamp(children.get("time"))
    if timestamp is None and children.get("time") is not None:
        logger.debug("Ignoring malformed <time> %r", children["time"])

    return TrackPoint(
        position=position,
        timestamp=timestamp,
        elevation=elevation,
        hdop=hdop,
        name=children.get("name") or None,
    )


def _read_segment(element: ET.Element, point_tag: str, track: "Track", options: GpxOptions) -> None:
    track.finish_current_segment()
    for child in element:
        if _local_name(child.tag) != point_tag:
            continue
        point = _read_point(child, options)
        if point is not None:
            track.append_track_point(point)
    track.finish_current_segment()


def decode_gpx(
    data: Union[bytes, str],
    track: "Track",
    options: Optional[GpxOptions] = None,
) -> "Track":
    """Decode a GPX document, appending its waypoints and segments to track.

    Every trkseg and every rte becomes one segment; empty ones are dropped.
    Unknown elements are ignored.

    Raises:
        MalformedDocumentError: If the data is not a well-formed GPX document.
        MissingCoordinateError: If a point has no usable lat/lon and
            options.skip_unlocated_points is off.
    """
    options = options or GpxOptions()
    try:
        root = ET.fromstring(data)
    except (ET.ParseError, LookupError, ValueError) as e:
        raise MalformedDocumentError(f"Invalid GPX XML: {e}") from e

    if _local_name(root.tag) != "gpx":
        raise MalformedDocumentError(
            f"Root element is <{_local_name(root.tag)}>, expected <gpx>"
        )

    for element in root:
        kind = _local_name(element.tag)
        if kind == "wpt":
            point = _read_point(element, options)
            if point is not None:
                track.append_waypoint(point)
        elif kind == "trk":
            for child in element:
                if _local_name(child.tag) == "trkseg":
                    _read_segment(child, "trkpt", track, options)
        elif kind == "rte":
            _read_segment(element, "rtept", track, options)

    return track


def _format_float(value: Optional[float]) -> Optional[str]:
    # gpxpy writes strings as given; its own float formatting truncates
    # anything whose repr uses an exponent to ten decimals
    if value is None:
        return None
    return np.format_float_positional(value, unique=True, trim="-")


def _fill_point(gpx_point, point: TrackPoint):
    gpx_point.latitude = _format_float(point.position.lat)
    gpx_point.longitude = _format_float(point.position.lon)
    gpx_point.elevation = _format_float(point.elevation)
    gpx_point.time = point.timestamp
    gpx_point.horizontal_dilution = _format_float(point.hdop)
    gpx_point.name = point.name
    return gpx_point


def encode_gpx(track: "Track", options: Optional[GpxOptions] = None) -> str:
    """Encode a track as a GPX 1.1 document.

    Waypoints come first, then a single trk with one trkseg per segment.
    Absent optional values are omitted.
    """
    options = options or GpxOptions()
    gpx = gpxpy.gpx.GPX()
    gpx.creator = options.creator

    for waypoint in track.waypoints:
        gpx.waypoints.append(_fill_point(gpxpy.gpx.GPXWaypoint(), waypoint))

    gpx_track = gpxpy.gpx.GPXTrack()
    for segment in track.segments:
        gpx_segment = gpxpy.gpx.GPXTrackSegment()
        for point in segment:
            gpx_segment.points.append(_fill_point(gpxpy.gpx.GPXTrackPoint(), point))
        gpx_track.segments.append(gpx_segment)
    gpx.tracks.append(gpx_track)

    return gpx.to_xml(version="1.1")
