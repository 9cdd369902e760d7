"""Georeferencing tools: set_georeferencing, center_georeferencing_on_track, remove_georeferencing."""

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import ValidationError

from ..state import state, GeoreferencingSettings
from ._prereqs import require_state


def _apply(settings: GeoreferencingSettings) -> str:
    state.georeferencing = settings
    state.track.change_map_georeferencing(settings.build())
    return state.track.crs_spec()


def register_georeferencing_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def set_georeferencing(lat: float, lon: float, scale: float = 1.0) -> str:
        """Georeference the map with an orthographic projection about (lat, lon).

        All track points and waypoints are reprojected into the new local
        coordinate system. Geographic positions are not changed.

        Args:
            lat: Projection center latitude (degrees).
            lon: Projection center longitude (degrees).
            scale: Local units per meter at the center (default 1.0).
        """
        try:
            settings = GeoreferencingSettings(
                center_lat=lat, center_lon=lon, scale=scale, is_set=True
            )
        except ValidationError as e:
            return f"Error: Invalid georeferencing: {e.errors()[0]['msg']}"

        crs = _apply(settings)
        return f"Georeferencing set: {crs}"

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def center_georeferencing_on_track(scale: float = 1.0) -> str:
        """Georeference the map about the average position of the current track.

        **Requires:** load_track first.
        """
        try:
            require_state(state, track=True)
        except ValueError as e:
            return f"Error: {e}"

        center = state.track.calc_average_position()
        try:
            settings = GeoreferencingSettings(
                center_lat=center.lat, center_lon=center.lon, scale=scale, is_set=True
            )
        except ValidationError as e:
            return f"Error: Invalid georeferencing: {e.errors()[0]['msg']}"

        crs = _apply(settings)
        return (
            f"Georeferencing centered on track at lat={center.lat:.6f}, "
            f"lon={center.lon:.6f}: {crs}"
        )

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def remove_georeferencing() -> str:
        """Drop the map georeferencing. Points keep only geographic coordinates."""
        crs = _apply(GeoreferencingSettings())
        return f"Georeferencing removed: {crs}"
