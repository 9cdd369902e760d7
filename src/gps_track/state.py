"""Session state for the gps-track MCP server.

Holds the current track and the map georeferencing its points are projected
into.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from gps_track.core.georef import OrthographicGeoreferencing
from gps_track.core.track import Track
from gps_track.models import LatLon


class GeoreferencingSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    center_lat: float = Field(default=0.0, ge=-90, le=90)
    center_lon: float = Field(default=0.0, ge=-180, le=180)
    scale: float = Field(default=1.0, gt=0)
    is_set: bool = False

    def build(self) -> Optional[OrthographicGeoreferencing]:
        if not self.is_set:
            return None
        return OrthographicGeoreferencing(
            LatLon(lat=self.center_lat, lon=self.center_lon), scale=self.scale
        )


class SessionState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    track: Track = Field(default_factory=Track)
    track_path: Optional[str] = None
    georeferencing: GeoreferencingSettings = Field(default_factory=GeoreferencingSettings)

    def summary(self) -> dict:
        track = self.track
        return {
            "track": {
                "path": self.track_path,
                "segments": track.get_num_segments(),
                "segment_points": [
                    track.get_segment_point_count(i) for i in range(track.get_num_segments())
                ],
                "waypoints": track.get_num_waypoints(),
                "average_position": (
                    track.calc_average_position().model_dump() if not track.is_empty else None
                ),
            },
            "georeferencing": {
                "set": self.georeferencing.is_set,
                "center_lat": self.georeferencing.center_lat,
                "center_lon": self.georeferencing.center_lon,
                "scale": self.georeferencing.scale,
            } if self.georeferencing.is_set else {"set": False},
            "crs": track.crs_spec(),
        }


# Global session state, one per MCP server process
state = SessionState()
