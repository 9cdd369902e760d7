"""Track storage: segments of track points plus waypoints."""

import io
import logging
import os
import tempfile
from pathlib import Path
from typing import IO, Optional, Union

from ..models import LatLon, TrackPoint
from .georef import GEOGRAPHIC_CRS_SPEC, Georeferencing, project_points
from .gpx import GpxDecodeError, decode_gpx, encode_gpx
from .models import GpxOptions

logger = logging.getLogger(__name__)


class Track:
    """Stores track segments and waypoints, e.g. taken from a GPS device.

    Point positions are geographic WGS84 coordinates. When a georeferencing
    is set, every stored point also carries its local map coordinate.

    Tracks compare by content (waypoints and segments) and copies never share
    mutable state.
    """

    def __init__(self, georeferencing: Optional[Georeferencing] = None):
        self.georeferencing = georeferencing
        self._segments: list[list[TrackPoint]] = []
        self._waypoints: list[TrackPoint] = []
        self._segment_open = True

    # Content

    @property
    def segments(self) -> tuple[tuple[TrackPoint, ...], ...]:
        return tuple(tuple(segment) for segment in self._segments)

    @property
    def waypoints(self) -> tuple[TrackPoint, ...]:
        return tuple(self._waypoints)

    @property
    def segment_open(self) -> bool:
        """True when the next track point starts a new segment."""
        return self._segment_open

    @property
    def is_empty(self) -> bool:
        return not self._segments and not self._waypoints

    def clear(self) -> None:
        """Delete all points and waypoints. The georeferencing is kept."""
        self._segments = []
        self._waypoints = []
        self._segment_open = True

    def _localized(self, point: TrackPoint) -> TrackPoint:
        if self.georeferencing is None:
            return point
        return point.with_local_coordinate(self.georeferencing.to_local(point.position))

    def append_track_point(self, point: TrackPoint) -> None:
        """Append a point to the current segment, or start a new one."""
        point = self._localized(point)
        if self._segment_open:
            self._segments.append([point])
            self._segment_open = False
        else:
            self._segments[-1].append(point)

    def finish_current_segment(self) -> None:
        """Make the next appended track point start a new segment."""
        self._segment_open = True

    def append_waypoint(self, point: TrackPoint, name: Optional[str] = None) -> None:
        if name is not None:
            point = point.model_copy(update={"name": name})
        self._waypoints.append(self._localized(point))

    # Getters

    def get_num_segments(self) -> int:
        return len(self._segments)

    def get_segment_point_count(self, segment_number: int) -> int:
        return len(self._segment(segment_number))

    def get_segment_point(self, segment_number: int, point_number: int) -> TrackPoint:
        segment = self._segment(segment_number)
        if not 0 <= point_number < len(segment):
            raise IndexError(
                f"Point {point_number} out of range for segment {segment_number} "
                f"with {len(segment)} points"
            )
        return segment[point_number]

    def get_num_waypoints(self) -> int:
        return len(self._waypoints)

    def get_waypoint(self, number: int) -> TrackPoint:
        if not 0 <= number < len(self._waypoints):
            raise IndexError(
                f"Waypoint {number} out of range, track has {len(self._waypoints)} waypoints"
            )
        return self._waypoints[number]

    def get_waypoint_name(self, number: int) -> Optional[str]:
        return self.get_waypoint(number).name

    def _segment(self, segment_number: int) -> list[TrackPoint]:
        if not 0 <= segment_number < len(self._segments):
            raise IndexError(
                f"Segment {segment_number} out of range, track has {len(self._segments)} segments"
            )
        return self._segments[segment_number]

    def calc_average_position(self) -> LatLon:
        """Average the coordinates of all track points and waypoints.

        Raises:
            ValueError: If the track is empty.
        """
        points = [p for segment in self._segments for p in segment] + self._waypoints
        if not points:
            raise ValueError("Cannot average the position of an empty track")
        lat = sum(p.position.lat for p in points) / len(points)
        lon = sum(p.position.lon for p in points) / len(points)
        return LatLon(lat=lat, lon=lon)

    # Georeferencing

    def crs_spec(self) -> str:
        """Return the CRS specification (PROJ format) of the local coordinates."""
        if self.georeferencing is None:
            return GEOGRAPHIC_CRS_SPEC
        return self.georeferencing.crs_spec()

    def change_map_georeferencing(self, georeferencing: Optional[Georeferencing]) -> None:
        """Replace the georeferencing and recompute all local coordinates.

        Positions are not touched. Passing None drops the local coordinates.
        """
        self.georeferencing = georeferencing
        if georeferencing is None:
            self._segments = [
                [p.with_local_coordinate(None) for p in segment] for segment in self._segments
            ]
            self._waypoints = [p.with_local_coordinate(None) for p in self._waypoints]
            return

        self._segments = [project_points(georeferencing, segment) for segment in self._segments]
        self._waypoints = project_points(georeferencing, self._waypoints)

    # Loading and saving

    def load_from(self, path: Union[str, Path], options: Optional[GpxOptions] = None) -> bool:
        """Replace the content with the GPX file at path.

        Returns False, leaving the track unchanged, if the file cannot be
        read or decoded.
        """
        path = Path(path)
        if path.suffix.lower() != ".gpx":
            logger.warning("Unsupported track file type: %s", path)
            return False
        try:
            with open(path, "rb") as f:
                loaded = self.load_gpx_from(f, options)
        except OSError as e:
            logger.warning("Cannot read track file %s: %s", path, e)
            return False
        if loaded:
            logger.info("Track loaded from %s", path)
        return loaded

    def load_gpx_from(self, stream: IO, options: Optional[GpxOptions] = None) -> bool:
        """Replace the content with GPX data read from an open stream.

        The stream may be binary or text. On failure the track is unchanged.
        """
        options = options or GpxOptions()
        scratch = Track(self.georeferencing if options.project_points else None)
        try:
            decode_gpx(stream.read(), scratch, options)
        except (GpxDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot load GPX data: %s", e)
            return False

        self._segments = scratch._segments
        self._waypoints = scratch._waypoints
        self._segment_open = True
        return True

    def save_to(self, path: Union[str, Path], options: Optional[GpxOptions] = None) -> bool:
        """Save the track as a GPX file.

        The data is written to a temporary file next to path which then
        replaces path, so a failed save never leaves a partial file.
        """
        path = Path(path)
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
            )
        except OSError as e:
            logger.warning("Cannot save track to %s: %s", path, e)
            return False

        try:
            with os.fdopen(fd, "wb") as f:
                if not self.save_gpx_to(f, options):
                    raise OSError("GPX data could not be written")
            os.replace(tmp_name, path)
        except OSError as e:
            logger.warning("Cannot save track to %s: %s", path, e)
            Path(tmp_name).unlink(missing_ok=True)
            return False

        logger.info("Track saved to %s", path)
        return True

    def save_gpx_to(self, stream: IO, options: Optional[GpxOptions] = None) -> bool:
        """Write the track as GPX data to an open text or binary stream."""
        xml = encode_gpx(self, options)
        try:
            if isinstance(stream, io.TextIOBase):
                stream.write(xml)
            else:
                stream.write(xml.encode("utf-8"))
            stream.flush()
        except OSError as e:
            logger.warning("Cannot write GPX data: %s", e)
            return False
        return True

    # Value semantics

    def copy(self) -> "Track":
        # Points are immutable, so copying the containers is a deep copy
        other = Track(self.georeferencing)
        other._segments = [list(segment) for segment in self._segments]
        other._waypoints = list(self._waypoints)
        other._segment_open = self._segment_open
        return other

    def __copy__(self) -> "Track":
        return self.copy()

    def __deepcopy__(self, memo) -> "Track":
        return self.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Track):
            return NotImplemented
        return (
            self._waypoints == other._waypoints
            and [w.name for w in self._waypoints] == [w.name for w in other._waypoints]
            and self._segments == other._segments
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"Track(segments={len(self._segments)}, "
            f"points={sum(len(s) for s in self._segments)}, "
            f"waypoints={len(self._waypoints)})"
        )
